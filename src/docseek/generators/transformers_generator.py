"""Greedy token-by-token text generation with transformers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

import torch
from transformers import AutoModelForCausalLM, AutoTokenizer

from docseek.backend import ModelBackend, get_backend
from docseek.errors import GenerationError

logger = logging.getLogger(__name__)


@dataclass
class GeneratorConfig:
    model: str = "HuggingFaceTB/SmolLM2-360M-Instruct"
    max_new_tokens: int = 256


class TransformersGenerator:
    """Local causal LM, decoded greedily (temperature zero).

    Each step feeds the previous token back with the key/value cache and
    yields the newly decoded text. Generation stops at end-of-sequence,
    after `max_new_tokens`, or as soon as the caller stops iterating.
    """

    def __init__(self, config: GeneratorConfig | None = None, backend: ModelBackend | None = None):
        self.config = config or GeneratorConfig()
        self._backend = backend or get_backend()

    @property
    def model_name(self) -> str:
        return self.config.model

    def _load(self):
        if not self._backend.active:
            raise RuntimeError("model backend is not acquired")

        def loader():
            tokenizer = AutoTokenizer.from_pretrained(self.config.model)
            model = AutoModelForCausalLM.from_pretrained(self.config.model)
            model.eval()
            return tokenizer, model

        try:
            return self._backend.load(f"generate:{self.config.model}", loader)
        except Exception as e:
            raise GenerationError(f"cannot load planner model {self.config.model}: {e}") from e

    def generate(self, prompt: str) -> Iterator[str]:
        """Yield decoded text pieces for the prompt.

        Raises:
            GenerationError: If the model cannot be loaded or run
        """
        tokenizer, model = self._load()
        input_ids = tokenizer(prompt, return_tensors="pt")["input_ids"]
        eos_id = tokenizer.eos_token_id

        past = None
        generated: list[int] = []
        emitted = ""
        for _ in range(self.config.max_new_tokens):
            try:
                with torch.no_grad():
                    out = model(input_ids=input_ids, past_key_values=past, use_cache=True)
            except Exception as e:
                raise GenerationError(f"decoding failed: {e}") from e
            past = out.past_key_values
            next_id = int(torch.argmax(out.logits[0, -1]))
            if next_id == eos_id:
                break

            generated.append(next_id)
            # Decode the whole suffix so multi-token characters come out whole
            text = tokenizer.decode(generated, skip_special_tokens=True)
            piece = text[len(emitted):]
            emitted = text
            if piece:
                yield piece
            input_ids = torch.tensor([[next_id]])
        else:
            logger.debug(f"Generation budget of {self.config.max_new_tokens} tokens exhausted")
