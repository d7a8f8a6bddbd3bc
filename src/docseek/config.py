"""Configuration for docseek."""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from docseek.errors import ConfigurationError

ENV_PREFIX = "DOCSEEK_"


@dataclass
class Settings:
    """Runtime settings. Every field can be set from `DOCSEEK_<FIELD>`."""

    sqlite_path: Path = Path("./index/chunks.sqlite")
    index_path: Path = Path("./index/vectors.hnsw")
    index_backend: str = "hnsw"
    embed_model: str = "all-MiniLM-L6-v2"
    instruct_model: str = "HuggingFaceTB/SmolLM2-360M-Instruct"

    chunk_size: int = 150
    chunk_overlap: int = 20
    k: int = 80
    max_hits: int = 20

    # HNSW graph parameters
    hnsw_m: int = 16
    ef_construction: int = 200
    ef_search: int = 64
    index_capacity: int = 10_000

    max_new_tokens: int = 256
    context_lines: int = 5
    context_max_bytes: int = 1200
    save_every: int = 500

    def validate(self) -> "Settings":
        if self.chunk_size < 1:
            raise ConfigurationError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if not 0 <= self.chunk_overlap < self.chunk_size:
            raise ConfigurationError(
                f"chunk_overlap must be in [0, chunk_size), got {self.chunk_overlap}"
            )
        for name in ("k", "max_hits", "hnsw_m", "ef_construction", "ef_search",
                     "index_capacity", "max_new_tokens"):
            if getattr(self, name) < 1:
                raise ConfigurationError(f"{name} must be >= 1, got {getattr(self, name)}")
        if self.context_lines < 0 or self.context_max_bytes < 0:
            raise ConfigurationError("context settings must be non-negative")
        return self

    def index_params(self) -> dict[str, int]:
        """Keyword arguments for `docseek.indexes.open_index`."""
        return {
            "m": self.hnsw_m,
            "ef_construction": self.ef_construction,
            "ef_search": self.ef_search,
            "capacity": self.index_capacity,
        }


def _coerce(field: dataclasses.Field, raw: Any) -> Any:
    if raw is None:
        return None
    if field.type in (int, "int"):
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise ConfigurationError(f"{field.name} must be an integer, got {raw!r}") from None
    if field.type in (Path, "Path"):
        return Path(raw)
    return str(raw)


def load_settings(env: dict[str, str] | None = None, **overrides: Any) -> Settings:
    """Build settings from defaults, environment, then explicit overrides.

    Overrides whose value is None are ignored, so CLI arguments can be
    passed straight through.
    """
    env = os.environ if env is None else env
    values: dict[str, Any] = {}
    for field in dataclasses.fields(Settings):
        env_key = ENV_PREFIX + field.name.upper()
        if env_key in env:
            values[field.name] = _coerce(field, env[env_key])
        if overrides.get(field.name) is not None:
            values[field.name] = _coerce(field, overrides[field.name])

    unknown = set(overrides) - {f.name for f in dataclasses.fields(Settings)}
    if unknown:
        raise ConfigurationError(f"unknown settings: {sorted(unknown)}")

    return Settings(**values).validate()
