"""Input source handlers (ingesters) for docseek."""

from pathlib import Path
from typing import Optional

from docseek.ingesters.file_ingester import FileIngester
from docseek.ingesters.folder_ingester import FolderIngester
from docseek.protocols import Ingester

# Registry of available ingesters
_INGESTERS: list[Ingester] = [
    FileIngester(),
    FolderIngester(),
]


def get_ingester(source: Path | str) -> Optional[Ingester]:
    """Find an ingester that can handle the given source.

    Args:
        source: Path to the input source (folder or single file)

    Returns:
        An Ingester instance that can handle the source, or None
    """
    source_path = Path(source)
    for ingester in _INGESTERS:
        if ingester.can_handle(source_path):
            return ingester
    return None


def register_ingester(ingester: Ingester) -> None:
    """Register a custom ingester (for plugins/extensions).

    Args:
        ingester: An object implementing the Ingester protocol
    """
    _INGESTERS.append(ingester)


__all__ = ["get_ingester", "register_ingester", "FileIngester", "FolderIngester"]
