"""Binary file detection by extension."""

from pathlib import Path

# Extensions never treated as text. Everything else is indexed as text,
# whatever its actual content.
BINARY_EXTENSIONS = frozenset({
    # Images
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".webp", ".tif", ".tiff",
    # Documents
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".odt", ".ods",
    # Archives
    ".zip", ".tar", ".gz", ".rar", ".7z", ".bz2", ".xz",
    # Executables
    ".exe", ".dll", ".so", ".dylib", ".bin",
    # Media
    ".mp3", ".mp4", ".avi", ".mov", ".wav", ".ogg", ".flac", ".mkv", ".webm",
    # Compiled
    ".pyc", ".pyo", ".class", ".o", ".obj", ".wasm",
    # Fonts
    ".ttf", ".otf", ".woff", ".woff2", ".eot",
    # Index artifacts
    ".db", ".sqlite", ".sqlite3", ".sqlite-journal", ".sqlite-wal", ".hnsw", ".npy",
})


def is_binary_extension(path: str | Path) -> bool:
    """Check if file extension indicates binary content (case-insensitive)."""
    return Path(path).suffix.lower() in BINARY_EXTENSIONS
