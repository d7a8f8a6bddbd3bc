"""Sliding line-window chunking strategy."""

import logging
from pathlib import Path

from docseek.errors import ConfigurationError
from docseek.models import Chunk, ChunkWithText

logger = logging.getLogger(__name__)


def line_offsets(data: bytes) -> list[int]:
    """Return the byte offset of the start of every line, plus an end sentinel.

    The result has one entry per line followed by `len(data)`, so line `n`
    (1-based) spans `[offsets[n - 1], offsets[n])`. A trailing newline does
    not open an extra empty line, and empty data has no lines at all.
    """
    offsets = [0]
    start = data.find(b"\n")
    while start != -1:
        offsets.append(start + 1)
        start = data.find(b"\n", start + 1)
    if offsets[-1] != len(data):
        offsets.append(len(data))
    return offsets


class LineWindowChunker:
    """Default chunking: fixed windows of lines sharing `overlap` lines.

    Windows never split a line, so each chunk's byte range can be re-read
    from disk at query time:
    - The first window starts at line 1
    - Each next window starts `overlap` lines before the previous one ended
    - The window that reaches the last line is the final one
    """

    DEFAULT_WINDOW_SIZE = 150
    DEFAULT_OVERLAP = 20

    def __init__(self, window_size: int = DEFAULT_WINDOW_SIZE, overlap: int = DEFAULT_OVERLAP):
        if window_size < 1:
            raise ConfigurationError(f"chunk window size must be >= 1, got {window_size}")
        if overlap < 0:
            raise ConfigurationError(f"chunk overlap must be >= 0, got {overlap}")
        if overlap >= window_size:
            raise ConfigurationError(
                f"chunk overlap ({overlap}) must be smaller than window size ({window_size})"
            )
        self.window_size = window_size
        self.overlap = overlap

    def chunk(self, data: bytes, file_path: str) -> list[ChunkWithText]:
        """Split file content into overlapping line windows.

        Args:
            data: Raw file content
            file_path: Path recorded on every chunk

        Returns:
            Chunks ordered by start line; empty for zero-byte content
        """
        offsets = line_offsets(data)
        n_lines = len(offsets) - 1
        chunks: list[ChunkWithText] = []

        start = 0  # 0-based index of the window's first line
        while start < n_lines:
            ls = start + 1
            le = min(n_lines, start + self.window_size)
            b0, b1 = offsets[ls - 1], offsets[le]
            chunks.append(
                ChunkWithText(
                    chunk=Chunk(
                        id=-1,
                        file=file_path,
                        ls=ls,
                        le=le,
                        byte_start=b0,
                        byte_end=b1,
                    ),
                    text=data[b0:b1].decode("utf-8", errors="replace"),
                )
            )

            if le == n_lines:
                break

            next_start = max(0, le - self.overlap)
            if next_start <= start:
                raise ConfigurationError(
                    f"chunking of {file_path} does not advance past line {ls} "
                    f"(window={self.window_size}, overlap={self.overlap})"
                )
            start = next_start

        return chunks

    def chunk_file(self, path: str | Path) -> list[ChunkWithText]:
        """Chunk a single named file.

        Raises:
            OSError: If the file cannot be read
        """
        path = Path(path)
        data = path.read_bytes()
        return self.chunk(data, str(path))

    def chunk_folder(self, root: str | Path) -> list[ChunkWithText]:
        """Chunk every text file under a folder, skipping unreadable files."""
        from docseek.ingesters import FolderIngester

        chunks: list[ChunkWithText] = []
        for doc in FolderIngester().ingest(Path(root)):
            try:
                chunks.extend(self.chunk_file(doc.path))
            except OSError as e:
                logger.warning(f"Skipping unreadable file {doc.path}: {e}")
        return chunks
