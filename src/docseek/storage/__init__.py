"""Chunk metadata storage."""

from docseek.storage.store import MetadataStore

__all__ = ["MetadataStore"]
