"""HNSW vector index backed by hnswlib."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

import hnswlib
import numpy as np

from docseek.errors import ConfigurationError
from docseek.indexes.base import as_vector

logger = logging.getLogger(__name__)


class HnswVectorIndex:
    """Append-only approximate nearest-neighbour index.

    Uses L2 distance; with L2-normalised embeddings this ranks exactly like
    cosine similarity. Labels are insertion ordinals, so the id returned by
    `add` is always the size of the index before the call.
    """

    DEFAULT_CAPACITY = 10_000

    def __init__(
        self,
        path: Path | str,
        dim: int,
        m: int = 16,
        ef_construction: int = 200,
        ef_search: int = 64,
        capacity: int = DEFAULT_CAPACITY,
    ):
        if dim < 1:
            raise ValueError(f"index dimension must be >= 1, got {dim}")
        self.path = Path(path)
        self._dim = dim
        self.m = m
        self.ef_construction = ef_construction
        self.ef_search = ef_search
        self.capacity = capacity
        self._index: hnswlib.Index | None = None

    @classmethod
    def open_or_create(cls, path: Path | str, dim: int, **params) -> "HnswVectorIndex":
        """Open the index saved at `path`, or create an empty one."""
        index = cls(path, dim, **params)
        index.load()
        return index

    @property
    def dim(self) -> int:
        return self._dim

    @property
    def index(self) -> hnswlib.Index:
        """The underlying hnswlib index, loaded on first access."""
        if self._index is None:
            self.load()
        return self._index

    def load(self) -> None:
        """Restore from `path` if it exists, otherwise start empty."""
        index = hnswlib.Index(space="l2", dim=self._dim)
        if self.path.exists():
            try:
                index.load_index(str(self.path), max_elements=0)
            except RuntimeError as e:
                raise ConfigurationError(f"cannot load index file {self.path}: {e}") from e
            logger.debug(f"Loaded {index.get_current_count()} vectors from {self.path}")
        else:
            index.init_index(
                max_elements=self.capacity,
                ef_construction=self.ef_construction,
                M=self.m,
            )
        index.set_ef(self.ef_search)
        self._index = index

    def size(self) -> int:
        return self.index.get_current_count()

    def add(self, vector: Sequence[float]) -> int:
        """Append a vector and return its id.

        Raises:
            DimensionMismatch: If the vector length differs from `dim`
        """
        arr = as_vector(vector, self._dim, where="index.add")
        index = self.index
        next_id = index.get_current_count()
        if next_id >= index.get_max_elements():
            new_capacity = max(1, index.get_max_elements()) * 2
            logger.debug(f"Growing index capacity to {new_capacity}")
            index.resize_index(new_capacity)
        index.add_items(arr.reshape(1, -1), np.array([next_id]))
        return next_id

    def search(self, query: Sequence[float], k: int) -> list[int]:
        """Return at most `k` ids ordered nearest first.

        Raises:
            DimensionMismatch: If the query length differs from `dim`
        """
        arr = as_vector(query, self._dim, where="index.search")
        index = self.index
        count = index.get_current_count()
        k = min(k, count)
        if k <= 0:
            return []
        index.set_ef(max(self.ef_search, k))
        labels, _ = index.knn_query(arr.reshape(1, -1), k=k)
        return [int(label) for label in labels[0]]

    def save(self) -> None:
        """Write the index to `path` (atomically replacing any old file)."""
        if self._index is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        self._index.save_index(str(tmp_path))
        os.replace(tmp_path, self.path)

    def reset(self) -> None:
        """Drop every vector and delete the saved file."""
        if self.path.exists():
            self.path.unlink()
        self._index = None
        self.load()
