"""Ingester for local folders."""

import logging
import os
from pathlib import Path
from typing import Iterator

from docseek.models import Document, FileMetadata
from docseek.utils.binary import is_binary_extension

logger = logging.getLogger(__name__)


class FolderIngester:
    """Ingester for local filesystem folders."""

    source_type = "folder"

    def can_handle(self, source: Path) -> bool:
        """Check if this is an existing directory."""
        return source.is_dir()

    def ingest(self, source: Path) -> Iterator[Document]:
        """Yield documents from a folder recursively.

        Every regular file whose extension is not on the binary denylist is
        yielded, in a stable (sorted) order. Paths are absolute so chunks
        can be re-read from any working directory.

        Args:
            source: Path to the folder

        Yields:
            Document objects for each text file in the folder
        """
        root_path = source.resolve()
        for root, dirs, files in os.walk(root_path):
            dirs.sort()
            for filename in sorted(files):
                full_path = Path(root) / filename

                if is_binary_extension(full_path):
                    continue
                if not full_path.is_file():
                    continue

                try:
                    size = full_path.stat().st_size
                except OSError as e:
                    logger.warning(f"Skipping {full_path}: {e}")
                    continue

                yield Document(
                    metadata=FileMetadata(
                        path=str(full_path),
                        size_bytes=size,
                        extension=full_path.suffix.lower(),
                    )
                )
