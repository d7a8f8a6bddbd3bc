"""Shared helpers for vector index backends."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from docseek.errors import DimensionMismatch


def as_vector(vector: Sequence[float], dim: int, where: str = "index") -> np.ndarray:
    """Convert to a 1-D float32 array of length `dim`.

    Raises:
        DimensionMismatch: If the vector has the wrong length
    """
    arr = np.asarray(vector, dtype=np.float32).reshape(-1)
    if arr.shape[0] != dim:
        raise DimensionMismatch(dim, arr.shape[0], where=where)
    return arr
