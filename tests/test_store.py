from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from docseek.errors import DocseekError, NotFound
from docseek.models import Chunk
from docseek.storage import MetadataStore


def make_chunk(chunk_id: int, file: str = "/data/a.txt", ls: int = 1) -> Chunk:
    return Chunk(id=chunk_id, file=file, ls=ls, le=ls + 3, byte_start=ls * 10, byte_end=ls * 10 + 40)


class MetadataStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "nested" / "chunks.sqlite"
        self.store = MetadataStore(self.path)

    def tearDown(self) -> None:
        self.store.close()
        self.tmp.cleanup()

    def test_upsert_then_get_round_trips(self) -> None:
        chunk = make_chunk(0)
        self.store.upsert(chunk)
        self.assertEqual(self.store.get(0), chunk)

    def test_upsert_overwrites_every_field(self) -> None:
        self.store.upsert(make_chunk(3, file="/data/old.txt", ls=1))
        replacement = make_chunk(3, file="/data/new.txt", ls=9)
        self.store.upsert(replacement)

        self.assertEqual(self.store.get(3), replacement)
        self.assertEqual(self.store.count(), 1)

    def test_missing_id_raises_not_found(self) -> None:
        with self.assertRaises(NotFound) as ctx:
            self.store.get(42)
        self.assertEqual(ctx.exception.chunk_id, 42)
        self.assertIsInstance(ctx.exception, DocseekError)
        self.assertIsInstance(ctx.exception, KeyError)

    def test_chunk_without_id_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            self.store.upsert(make_chunk(-1))

    def test_ensure_schema_is_idempotent_and_data_survives_reopen(self) -> None:
        self.store.upsert(make_chunk(0))
        self.store.ensure_schema()
        self.store.ensure_schema()
        self.store.close()

        with MetadataStore(self.path) as reopened:
            self.assertEqual(reopened.get(0), make_chunk(0))
        self.store = MetadataStore(self.path)

    def test_counts_and_files(self) -> None:
        self.assertIsNone(self.store.max_id())
        for i, file in enumerate(["/b.txt", "/a.txt", "/b.txt"]):
            self.store.upsert(make_chunk(i, file=file))

        self.assertEqual(self.store.count(), 3)
        self.assertEqual(self.store.count(min_id=2), 1)
        self.assertEqual(self.store.max_id(), 2)
        self.assertEqual(self.store.files(), ["/a.txt", "/b.txt"])
        self.assertTrue(self.store.has_file("/a.txt"))
        self.assertFalse(self.store.has_file("/c.txt"))

    def test_metadata_and_clear(self) -> None:
        self.store.set_metadata("dimension", "384")
        self.store.upsert(make_chunk(0))
        self.assertEqual(self.store.get_metadata("dimension"), "384")
        self.assertIsNone(self.store.get_metadata("missing"))

        self.store.clear()

        self.assertEqual(self.store.count(), 0)
        self.assertIsNone(self.store.get_metadata("dimension"))

    def test_delete_from_and_delete_file(self) -> None:
        for i, file in enumerate(["/a.txt", "/b.txt", "/a.txt", "/c.txt"]):
            self.store.upsert(make_chunk(i, file=file))

        self.assertEqual(self.store.delete_from(3), 1)
        self.assertEqual(self.store.delete_file("/a.txt"), 2)
        self.assertEqual(self.store.delete_file("/missing.txt"), 0)

        self.assertEqual(self.store.files(), ["/b.txt"])
        self.assertEqual(self.store.max_id(), 1)

    def test_delete_metadata(self) -> None:
        self.store.set_metadata("pending_file", "/a.txt")
        self.store.delete_metadata("pending_file")
        self.store.delete_metadata("never_set")
        self.assertIsNone(self.store.get_metadata("pending_file"))


if __name__ == "__main__":
    unittest.main()
