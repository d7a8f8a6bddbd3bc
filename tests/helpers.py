from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Iterator

import numpy as np

from docseek.errors import EmbeddingError
from docseek.models import Chunk


class HashEmbedder:
    """Deterministic bag-of-words embedder for tests."""

    def __init__(self, dimension: int = 16, fail_on: str | None = None, crash_on: str | None = None):
        self._dimension = dimension
        self.fail_on = fail_on
        self.crash_on = crash_on
        self.calls = 0

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return "hash-test"

    def embed(self, texts: list[str]) -> np.ndarray:
        return np.stack([self.embed_one(t) for t in texts])

    def embed_one(self, text: str) -> np.ndarray:
        self.calls += 1
        if self.fail_on is not None and self.fail_on in text:
            raise EmbeddingError(f"cannot embed text containing {self.fail_on!r}")
        if self.crash_on is not None and self.crash_on in text:
            raise RuntimeError(f"embedding backend crashed on {self.crash_on!r}")
        vec = np.zeros(self._dimension, dtype=np.float32)
        for word in text.lower().split():
            digest = hashlib.sha256(word.encode("utf-8")).digest()
            vec[digest[0] % self._dimension] += 1.0
        if not vec.any():
            vec[0] = 1.0
        return vec / np.linalg.norm(vec)


class ScriptedGenerator:
    """Yields a fixed output in small pieces and records how much was consumed."""

    def __init__(self, output: str, piece_size: int = 3, error: Exception | None = None):
        self.output = output
        self.piece_size = piece_size
        self.error = error
        self.prompts: list[str] = []
        self.pieces_yielded = 0

    @property
    def model_name(self) -> str:
        return "scripted-test"

    def generate(self, prompt: str) -> Iterator[str]:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        for i in range(0, len(self.output), self.piece_size):
            self.pieces_yielded += 1
            yield self.output[i:i + self.piece_size]


class DictStore:
    """In-memory chunk lookup that counts `get` calls."""

    def __init__(self, chunks: list[Chunk] | None = None):
        self.chunks = {c.id: c for c in chunks or []}
        self.lookups: list[int] = []

    def get(self, chunk_id: int) -> Chunk:
        from docseek.errors import NotFound

        self.lookups.append(chunk_id)
        if chunk_id not in self.chunks:
            raise NotFound(chunk_id)
        return self.chunks[chunk_id]


def write_lines(path: Path, count: int, prefix: str = "line") -> bytes:
    data = "".join(f"{prefix} {i}\n" for i in range(1, count + 1)).encode("utf-8")
    path.write_bytes(data)
    return data
