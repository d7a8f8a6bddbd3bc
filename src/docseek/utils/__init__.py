"""Utility functions for docseek."""

from docseek.utils.binary import BINARY_EXTENSIONS, is_binary_extension

__all__ = ["BINARY_EXTENSIONS", "is_binary_extension"]
