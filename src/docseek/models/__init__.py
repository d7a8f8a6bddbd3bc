"""Data models for docseek."""

from docseek.models.document import (
    Chunk,
    ChunkWithText,
    Document,
    FileMetadata,
    Hit,
    Plan,
)

__all__ = ["Chunk", "ChunkWithText", "Document", "FileMetadata", "Hit", "Plan"]
