"""Protocol for input source handlers."""

from pathlib import Path
from typing import Iterator, Protocol, runtime_checkable

from docseek.models import Document


@runtime_checkable
class Ingester(Protocol):
    """Protocol for input source handlers.

    Implementations discover the files under a source (a folder, a single
    file). Uses structural subtyping - no inheritance required.
    """

    @property
    def source_type(self) -> str:
        """Return identifier for this source type (e.g., 'file', 'folder')."""
        ...

    def can_handle(self, source: Path) -> bool:
        """Check if this ingester can process the given source."""
        ...

    def ingest(self, source: Path) -> Iterator[Document]:
        """Yield one document per file to chunk."""
        ...
