"""Process-wide model backend handle.

Model weights are expensive to load and are shared by every embedder and
generator in the process. `ModelBackend` owns them: the first `acquire()`
initialises torch, models are loaded once per key through `load()`, and
the last `release()` drops them.
"""

from __future__ import annotations

import gc
import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Iterator

logger = logging.getLogger(__name__)


class ModelBackend:
    """Reference-counted owner of loaded models."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._refs = 0
        self._models: dict[str, Any] = {}

    @property
    def refcount(self) -> int:
        return self._refs

    @property
    def active(self) -> bool:
        return self._refs > 0

    def acquire(self) -> "ModelBackend":
        with self._lock:
            if self._refs == 0:
                self._initialize()
            self._refs += 1
        return self

    def release(self) -> None:
        with self._lock:
            if self._refs == 0:
                raise RuntimeError("model backend released more times than acquired")
            self._refs -= 1
            if self._refs == 0:
                self._shutdown()

    def load(self, key: str, loader: Callable[[], Any]) -> Any:
        """Return the model cached under `key`, calling `loader` on first use."""
        with self._lock:
            if self._refs == 0:
                raise RuntimeError("model backend is not acquired")
            if key not in self._models:
                logger.info(f"Loading model {key}...")
                self._models[key] = loader()
            return self._models[key]

    def _initialize(self) -> None:
        import torch

        torch.set_grad_enabled(False)
        logger.debug("Model backend initialized")

    def _shutdown(self) -> None:
        self._models.clear()
        gc.collect()
        logger.debug("Model backend released")


_BACKEND = ModelBackend()


def get_backend() -> ModelBackend:
    """Return the process-wide backend (not acquired)."""
    return _BACKEND


@contextmanager
def model_backend() -> Iterator[ModelBackend]:
    """Hold the process-wide backend for the duration of a block."""
    backend = _BACKEND.acquire()
    try:
        yield backend
    finally:
        backend.release()
