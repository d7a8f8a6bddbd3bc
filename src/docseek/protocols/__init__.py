"""Protocol definitions for extensible components."""

from docseek.protocols.chunker import ChunkingStrategy
from docseek.protocols.embedder import EmbeddingProvider
from docseek.protocols.generator import TextGenerator
from docseek.protocols.ingester import Ingester
from docseek.protocols.vector_index import VectorIndex

__all__ = [
    "Ingester",
    "EmbeddingProvider",
    "ChunkingStrategy",
    "TextGenerator",
    "VectorIndex",
]
