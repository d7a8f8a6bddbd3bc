"""Exception hierarchy for docseek."""


class DocseekError(Exception):
    """Base class for all docseek errors."""


class ConfigurationError(DocseekError):
    """Invalid configuration: fatal for the current operation."""


class DimensionMismatch(ConfigurationError):
    """A vector's length differs from the index's configured dimension."""

    def __init__(self, expected: int, actual: int, where: str = "index"):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"{where}: dimension mismatch (expected {expected}, got {actual})"
        )


class PlanError(ConfigurationError):
    """A plan cannot be turned into a filter (e.g. invalid regex)."""


class NotFound(DocseekError, KeyError):
    """No chunk is stored under the requested id."""

    def __init__(self, chunk_id: int):
        self.chunk_id = chunk_id
        super().__init__(f"chunk id not found: {chunk_id}")

    def __str__(self) -> str:
        return self.args[0]


class EmbeddingError(DocseekError):
    """The embedding service could not process its input."""


class GenerationError(DocseekError):
    """The generation service failed to produce text."""
