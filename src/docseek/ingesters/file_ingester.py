"""Ingester for a single named file."""

from pathlib import Path
from typing import Iterator

from docseek.models import Document, FileMetadata


class FileIngester:
    """Ingester for one explicitly named file.

    The file is yielded whatever its extension: naming it is taken as the
    caller's decision to treat it as text.
    """

    source_type = "file"

    def can_handle(self, source: Path) -> bool:
        """Check if this is an existing regular file."""
        return source.is_file()

    def ingest(self, source: Path) -> Iterator[Document]:
        """Yield the file as a single document.

        Raises:
            OSError: If the file cannot be stat'ed
        """
        full_path = source.resolve()
        yield Document(
            metadata=FileMetadata(
                path=str(full_path),
                size_bytes=full_path.stat().st_size,
                extension=full_path.suffix.lower(),
            )
        )
