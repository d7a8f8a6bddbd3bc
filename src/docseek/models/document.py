"""Core data models for chunks, plans and hits."""

from dataclasses import dataclass, field, replace
from typing import Optional


@dataclass(frozen=True)
class FileMetadata:
    """Metadata for a discovered file."""

    path: str
    size_bytes: int
    extension: str


@dataclass
class Document:
    """A file found by an ingester, ready to be chunked."""

    metadata: FileMetadata

    @property
    def path(self) -> str:
        return self.metadata.path


@dataclass(frozen=True)
class Chunk:
    """One contiguous line range of one file.

    `ls` and `le` are 1-based and inclusive. `[byte_start, byte_end)` spans
    exactly lines `ls..le` of the file as it was when chunked. `id` is -1
    until the indexer assigns the id returned by the vector index.
    """

    id: int
    file: str
    ls: int
    le: int
    byte_start: int
    byte_end: int

    def with_id(self, chunk_id: int) -> "Chunk":
        return replace(self, id=chunk_id)

    @property
    def line_count(self) -> int:
        return self.le - self.ls + 1


@dataclass
class ChunkWithText:
    """Chunker output: a chunk location plus its decoded text."""

    chunk: Chunk
    text: str


@dataclass
class Plan:
    """A conservative, structured reading of a natural-language query.

    An all-empty plan is valid and accepts every candidate.
    `time_from`/`time_to` are carried but not enforced by the filter stage.
    """

    filters: list[str] = field(default_factory=list)
    regex: list[str] = field(default_factory=list)
    time_from: Optional[str] = None
    time_to: Optional[str] = None

    @classmethod
    def empty(cls) -> "Plan":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not (self.filters or self.regex or self.time_from or self.time_to)

    def to_dict(self) -> dict:
        return {
            "filters": list(self.filters),
            "regex": list(self.regex),
            "time_from": self.time_from,
            "time_to": self.time_to,
        }


@dataclass
class Hit:
    """A candidate that passed every plan filter, ready for display."""

    id: int
    file: str
    ls: int
    le: int
    snippet: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "file": self.file,
            "ls": self.ls,
            "le": self.le,
            "snippet": self.snippet,
        }
