"""Vector index backends."""

from pathlib import Path

from docseek.errors import ConfigurationError
from docseek.indexes.flat_index import BruteForceIndex
from docseek.indexes.hnsw_index import HnswVectorIndex

_BACKENDS = {
    "hnsw": HnswVectorIndex,
    "flat": BruteForceIndex,
}


def open_index(
    backend: str,
    path: Path | str,
    dim: int,
    **params,
) -> HnswVectorIndex | BruteForceIndex:
    """Open (or create) a vector index with the named backend.

    Args:
        backend: "hnsw" or "flat"
        path: Index file location
        dim: Vector dimension
        **params: Backend parameters (m, ef_construction, ef_search, capacity)
    """
    try:
        cls = _BACKENDS[backend]
    except KeyError:
        raise ConfigurationError(
            f"unknown index backend {backend!r} (choose from {sorted(_BACKENDS)})"
        ) from None
    return cls.open_or_create(path, dim, **params)


__all__ = ["BruteForceIndex", "HnswVectorIndex", "open_index"]
