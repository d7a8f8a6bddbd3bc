"""SQLite-backed chunk metadata store."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from docseek.errors import NotFound
from docseek.models import Chunk
from docseek.storage.schema import SCHEMA


class MetadataStore:
    """Durable mapping from chunk id to chunk location.

    Rows are correlated with the vector index only by id. Every write is
    committed immediately. Not safe for concurrent writers.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        if str(path) != ":memory:":
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self._conn: sqlite3.Connection = sqlite3.connect(
            str(path), check_same_thread=False
        )
        self._conn.row_factory = sqlite3.Row
        self.ensure_schema()

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for a committed unit of work."""
        conn = self._conn
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def ensure_schema(self) -> None:
        """Create schema if not exists. Safe to call on every open."""
        with self.connection() as conn:
            conn.executescript(SCHEMA)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "MetadataStore":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def upsert(self, chunk: Chunk) -> None:
        """Insert a chunk, or overwrite every field of the row with its id."""
        if chunk.id < 0:
            raise ValueError(f"chunk has no id assigned: {chunk}")
        with self.connection() as conn:
            conn.execute(
                """INSERT INTO chunks (id, file, ls, le, byte_start, byte_end)
                   VALUES (?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                     file=excluded.file, ls=excluded.ls, le=excluded.le,
                     byte_start=excluded.byte_start, byte_end=excluded.byte_end""",
                (
                    chunk.id,
                    chunk.file,
                    chunk.ls,
                    chunk.le,
                    chunk.byte_start,
                    chunk.byte_end,
                ),
            )

    def get(self, chunk_id: int) -> Chunk:
        """Return the chunk stored under `chunk_id`.

        Raises:
            NotFound: If no row has that id
        """
        row = self._conn.execute(
            "SELECT id, file, ls, le, byte_start, byte_end FROM chunks WHERE id = ?",
            (int(chunk_id),),
        ).fetchone()
        if row is None:
            raise NotFound(chunk_id)
        return Chunk(**dict(row))

    def count(self, min_id: int = 0) -> int:
        """Count rows, optionally only those with id >= `min_id`."""
        return self._conn.execute(
            "SELECT COUNT(*) FROM chunks WHERE id >= ?", (min_id,)
        ).fetchone()[0]

    def max_id(self) -> Optional[int]:
        """Return the highest stored id, or None when the store is empty."""
        return self._conn.execute("SELECT MAX(id) FROM chunks").fetchone()[0]

    def has_file(self, file: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM chunks WHERE file = ? LIMIT 1", (file,)
        ).fetchone()
        return row is not None

    def files(self) -> list[str]:
        """List the distinct files that have chunks."""
        cursor = self._conn.execute("SELECT DISTINCT file FROM chunks ORDER BY file")
        return [row["file"] for row in cursor]

    def delete_from(self, min_id: int) -> int:
        """Delete rows with id >= `min_id`; return how many were removed."""
        with self.connection() as conn:
            cursor = conn.execute("DELETE FROM chunks WHERE id >= ?", (min_id,))
        return cursor.rowcount

    def delete_file(self, file: str) -> int:
        """Delete every row of one file; return how many were removed."""
        with self.connection() as conn:
            cursor = conn.execute("DELETE FROM chunks WHERE file = ?", (file,))
        return cursor.rowcount

    def clear(self) -> None:
        """Delete every chunk row and metadata entry."""
        with self.connection() as conn:
            conn.execute("DELETE FROM chunks")
            conn.execute("DELETE FROM metadata")

    def set_metadata(self, key: str, value: str) -> None:
        """Store a metadata key-value pair."""
        with self.connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO metadata (key, value) VALUES (?, ?)",
                (key, value),
            )

    def delete_metadata(self, key: str) -> None:
        with self.connection() as conn:
            conn.execute("DELETE FROM metadata WHERE key = ?", (key,))

    def get_metadata(self, key: str) -> Optional[str]:
        """Retrieve a metadata value by key."""
        row = self._conn.execute(
            "SELECT value FROM metadata WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else None
