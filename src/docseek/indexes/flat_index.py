"""Exact linear-scan vector index, a drop-in stand-in for HNSW."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Sequence

import numpy as np

from docseek.errors import DimensionMismatch
from docseek.indexes.base import as_vector


class BruteForceIndex:
    """Linear-scan index with the same contract as `HnswVectorIndex`.

    Search is exact, with ties broken by id. Persisted as a single `.npy`
    matrix whose row number is the vector id.
    """

    def __init__(self, path: Path | str, dim: int, **_params):
        self.path = Path(path)
        self._dim = dim
        self._vectors = np.zeros((0, dim), dtype=np.float32)

    @classmethod
    def open_or_create(cls, path: Path | str, dim: int, **params) -> "BruteForceIndex":
        index = cls(path, dim, **params)
        index.load()
        return index

    @property
    def dim(self) -> int:
        return self._dim

    def load(self) -> None:
        if not self.path.exists():
            self._vectors = np.zeros((0, self._dim), dtype=np.float32)
            return
        with open(self.path, "rb") as f:
            vectors = np.load(f)
        if vectors.ndim != 2 or vectors.shape[1] != self._dim:
            raise DimensionMismatch(
                self._dim, vectors.shape[-1], where=f"index file {self.path}"
            )
        self._vectors = vectors.astype(np.float32)

    def size(self) -> int:
        return int(self._vectors.shape[0])

    def add(self, vector: Sequence[float]) -> int:
        arr = as_vector(vector, self._dim, where="index.add")
        next_id = self.size()
        self._vectors = np.vstack([self._vectors, arr.reshape(1, -1)])
        return next_id

    def search(self, query: Sequence[float], k: int) -> list[int]:
        arr = as_vector(query, self._dim, where="index.search")
        if k <= 0 or self.size() == 0:
            return []
        distances = np.sum((self._vectors - arr) ** 2, axis=1)
        order = np.argsort(distances, kind="stable")
        return [int(i) for i in order[:k]]

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        with open(tmp_path, "wb") as f:
            np.save(f, self._vectors)
        os.replace(tmp_path, self.path)

    def reset(self) -> None:
        if self.path.exists():
            self.path.unlink()
        self._vectors = np.zeros((0, self._dim), dtype=np.float32)
