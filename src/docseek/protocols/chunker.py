"""Protocol for text chunking strategies."""

from typing import Protocol, runtime_checkable

from docseek.models import ChunkWithText


@runtime_checkable
class ChunkingStrategy(Protocol):
    """Protocol for text chunking strategies.

    A strategy works on raw bytes so that every chunk can carry exact byte
    offsets back into the file.
    """

    def chunk(self, data: bytes, file_path: str) -> list[ChunkWithText]:
        """Split file content into chunks with location metadata."""
        ...
