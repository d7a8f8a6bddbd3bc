"""Chunking strategies for docseek."""

from docseek.chunkers.line_chunker import LineWindowChunker, line_offsets

__all__ = ["LineWindowChunker", "line_offsets"]
