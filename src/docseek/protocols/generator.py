"""Protocol for text generation services."""

from typing import Iterator, Protocol, runtime_checkable


@runtime_checkable
class TextGenerator(Protocol):
    """Protocol for deterministic, incremental text generation.

    `generate` yields decoded text pieces as they are produced. The same
    prompt must always yield the same text (greedy decoding). Consumers may
    stop iterating early; generation then stops too.
    """

    @property
    def model_name(self) -> str:
        """Return identifier for the model used."""
        ...

    def generate(self, prompt: str) -> Iterator[str]:
        """Yield decoded text pieces for the prompt."""
        ...
