"""SentenceTransformer-based embedding provider."""

import numpy as np
from sentence_transformers import SentenceTransformer

from docseek.backend import ModelBackend, get_backend
from docseek.errors import EmbeddingError


class SentenceTransformerEmbedder:
    """Embedding provider using sentence-transformers library.

    Uses all-MiniLM-L6-v2 by default - a fast, lightweight model
    that produces good quality embeddings for semantic search.
    """

    DEFAULT_MODEL = "all-MiniLM-L6-v2"

    def __init__(self, model_name: str | None = None, backend: ModelBackend | None = None):
        """Initialize the embedder.

        Args:
            model_name: Name of the sentence-transformers model to use.
                       Defaults to all-MiniLM-L6-v2.
            backend: Model backend that owns the weights. The process-wide
                     backend is used when omitted; it must be acquired
                     before the model is first accessed.
        """
        self._model_name = model_name or self.DEFAULT_MODEL
        self._backend = backend or get_backend()

    @property
    def model(self) -> SentenceTransformer:
        """Lazy-load the model on first access."""
        if not self._backend.active:
            raise RuntimeError("model backend is not acquired")
        try:
            return self._backend.load(
                f"embed:{self._model_name}",
                lambda: SentenceTransformer(self._model_name),
            )
        except Exception as e:
            raise EmbeddingError(f"cannot load embedding model {self._model_name}: {e}") from e

    @property
    def dimension(self) -> int:
        """Return the embedding dimension."""
        return self.model.get_sentence_embedding_dimension()

    @property
    def model_name(self) -> str:
        """Return identifier for the model used."""
        return self._model_name

    def embed(self, texts: list[str]) -> np.ndarray:
        """Generate embeddings for a batch of texts.

        Args:
            texts: List of text strings to embed

        Returns:
            numpy array of shape (len(texts), embedding_dim)

        Raises:
            EmbeddingError: If encoding fails or yields a degenerate vector
        """
        if not texts:
            return np.zeros((0, self.dimension), dtype=np.float32)

        try:
            embeddings = self.model.encode(
                texts,
                convert_to_numpy=True,
                normalize_embeddings=True,  # For cosine similarity
                show_progress_bar=False,
            )
        except EmbeddingError:
            raise
        except Exception as e:
            raise EmbeddingError(f"embedding failed: {e}") from e

        embeddings = np.asarray(embeddings, dtype=np.float32)
        norms = np.linalg.norm(embeddings, axis=1)
        if not np.all(np.isfinite(embeddings)) or np.any(norms == 0):
            raise EmbeddingError("embedding model returned a zero or non-finite vector")
        return embeddings

    def embed_one(self, text: str) -> np.ndarray:
        """Generate the embedding for a single text."""
        return self.embed([text])[0]
