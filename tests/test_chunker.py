from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from docseek.chunkers import LineWindowChunker, line_offsets
from docseek.errors import ConfigurationError
from docseek.protocols import ChunkingStrategy

from helpers import write_lines


class LineOffsetsTests(unittest.TestCase):
    def test_trailing_newline_does_not_add_a_line(self) -> None:
        self.assertEqual(line_offsets(b"a\nbb\n"), [0, 2, 5])

    def test_last_line_without_newline_gets_sentinel(self) -> None:
        self.assertEqual(line_offsets(b"a\nbb"), [0, 2, 4])

    def test_empty_data_has_no_lines(self) -> None:
        self.assertEqual(line_offsets(b""), [0])

    def test_blank_lines_are_lines(self) -> None:
        self.assertEqual(line_offsets(b"\n\n"), [0, 1, 2])


class LineWindowChunkerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmp = tempfile.TemporaryDirectory()
        self.root = Path(self.tmp.name)

    def tearDown(self) -> None:
        self.tmp.cleanup()

    def test_ten_line_file_window_four_overlap_one(self) -> None:
        path = self.root / "ten.txt"
        data = write_lines(path, 10)
        offsets = line_offsets(data)

        chunks = LineWindowChunker(window_size=4, overlap=1).chunk_file(path)

        self.assertEqual([(c.chunk.ls, c.chunk.le) for c in chunks], [(1, 4), (4, 7), (7, 10)])
        for c in chunks:
            self.assertEqual(c.chunk.byte_start, offsets[c.chunk.ls - 1])
            self.assertEqual(c.chunk.byte_end, offsets[c.chunk.le])
            self.assertEqual(c.chunk.id, -1)
        self.assertEqual(chunks[-1].chunk.le, 10)
        self.assertEqual(chunks[-1].chunk.byte_end, len(data))
        self.assertEqual(chunks[0].text, "line 1\nline 2\nline 3\nline 4\n")

    def test_chunks_cover_every_line_and_match_bytes(self) -> None:
        for n_lines in (1, 2, 7, 31, 150, 151, 400):
            for window, overlap in ((1, 0), (3, 2), (5, 0), (10, 3), (150, 20)):
                with self.subTest(n_lines=n_lines, window=window, overlap=overlap):
                    data = "".join(f"row-{i} é\n" for i in range(n_lines)).encode("utf-8")
                    chunks = LineWindowChunker(window, overlap).chunk(data, "f.txt")

                    self.assertGreaterEqual(len(chunks), 1)
                    self.assertEqual(chunks[0].chunk.ls, 1)
                    self.assertEqual(chunks[-1].chunk.le, n_lines)
                    covered = set()
                    for c in chunks:
                        covered.update(range(c.chunk.ls, c.chunk.le + 1))
                        raw = data[c.chunk.byte_start:c.chunk.byte_end]
                        self.assertEqual(raw.decode("utf-8"), c.text)
                        self.assertEqual(raw.count(b"\n"), c.chunk.line_count)
                    self.assertEqual(covered, set(range(1, n_lines + 1)))

    def test_consecutive_overlap_is_bounded(self) -> None:
        data = b"x\n" * 97
        for window, overlap in ((10, 0), (10, 4), (10, 9), (25, 20)):
            chunks = LineWindowChunker(window, overlap).chunk(data, "f.txt")
            for prev, nxt in zip(chunks, chunks[1:]):
                shared = prev.chunk.le - nxt.chunk.ls + 1
                self.assertGreaterEqual(shared, 0)
                self.assertLessEqual(shared, overlap)
                self.assertLess(prev.chunk.ls, nxt.chunk.ls)

    def test_no_trailing_newline_keeps_last_line(self) -> None:
        data = b"alpha\nbeta\ngamma"
        chunks = LineWindowChunker(2, 0).chunk(data, "f.txt")
        self.assertEqual([(c.chunk.ls, c.chunk.le) for c in chunks], [(1, 2), (3, 3)])
        self.assertEqual(chunks[-1].text, "gamma")
        self.assertEqual(chunks[-1].chunk.byte_end, len(data))

    def test_zero_byte_file_yields_no_chunks(self) -> None:
        path = self.root / "empty.txt"
        path.write_bytes(b"")
        self.assertEqual(LineWindowChunker(4, 1).chunk_file(path), [])

    def test_window_larger_than_file_is_single_chunk(self) -> None:
        chunks = LineWindowChunker(150, 20).chunk(b"a\nb\nc\n", "f.txt")
        self.assertEqual(len(chunks), 1)
        self.assertEqual((chunks[0].chunk.ls, chunks[0].chunk.le), (1, 3))

    def test_overlap_not_smaller_than_window_is_rejected(self) -> None:
        for window, overlap in ((4, 4), (4, 5), (0, 0), (3, -1)):
            with self.subTest(window=window, overlap=overlap):
                with self.assertRaises(ConfigurationError):
                    LineWindowChunker(window, overlap)

    def test_satisfies_chunking_protocol(self) -> None:
        self.assertIsInstance(LineWindowChunker(), ChunkingStrategy)

    def test_missing_named_file_is_an_error(self) -> None:
        with self.assertRaises(OSError):
            LineWindowChunker(4, 1).chunk_file(self.root / "missing.txt")

    def test_chunk_folder_skips_binary_extensions(self) -> None:
        write_lines(self.root / "notes.md", 3)
        (self.root / "sub").mkdir()
        write_lines(self.root / "sub" / "app.log", 5)
        (self.root / "photo.PNG").write_bytes(b"\x89PNG\r\n")

        chunks = LineWindowChunker(4, 1).chunk_folder(self.root)

        files = sorted({Path(c.chunk.file).name for c in chunks})
        self.assertEqual(files, ["app.log", "notes.md"])


if __name__ == "__main__":
    unittest.main()
