"""Protocol for append-only vector indexes."""

from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class VectorIndex(Protocol):
    """Protocol for an append-only nearest-neighbour index.

    The id of a vector is its insertion ordinal: `add` returns the current
    `size()` and is the only place ids are assigned. Additions are durable
    only after `save()`.
    """

    @property
    def dim(self) -> int:
        """Return the configured vector dimension."""
        ...

    def add(self, vector: Sequence[float]) -> int:
        """Append a vector and return its id."""
        ...

    def search(self, query: Sequence[float], k: int) -> list[int]:
        """Return at most k ids, nearest first."""
        ...

    def save(self) -> None:
        """Persist the index to its path."""
        ...

    def load(self) -> None:
        """Restore the index from its path, or start empty."""
        ...

    def size(self) -> int:
        """Return the number of stored vectors."""
        ...
