from __future__ import annotations

import unittest
from pathlib import Path

from docseek.config import Settings, load_settings
from docseek.errors import ConfigurationError


class LoadSettingsTests(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = load_settings(env={})
        self.assertEqual(settings, Settings())
        self.assertEqual(settings.chunk_size, 150)
        self.assertEqual(settings.chunk_overlap, 20)
        self.assertEqual(settings.k, 80)
        self.assertEqual(settings.max_hits, 20)

    def test_environment_is_read_and_coerced(self) -> None:
        settings = load_settings(
            env={
                "DOCSEEK_K": "12",
                "DOCSEEK_SQLITE_PATH": "/tmp/meta.sqlite",
                "DOCSEEK_INDEX_BACKEND": "flat",
                "UNRELATED": "x",
            }
        )
        self.assertEqual(settings.k, 12)
        self.assertEqual(settings.sqlite_path, Path("/tmp/meta.sqlite"))
        self.assertEqual(settings.index_backend, "flat")

    def test_overrides_beat_environment_unless_none(self) -> None:
        env = {"DOCSEEK_K": "12", "DOCSEEK_MAX_HITS": "7"}
        settings = load_settings(env=env, k=3, max_hits=None)
        self.assertEqual(settings.k, 3)
        self.assertEqual(settings.max_hits, 7)

    def test_rejects_bad_values(self) -> None:
        cases = [
            ({"DOCSEEK_K": "many"}, {}),
            ({}, {"k": 0}),
            ({}, {"chunk_size": 10, "chunk_overlap": 10}),
            ({}, {"chunk_overlap": -1}),
            ({}, {"context_lines": -1}),
            ({}, {"no_such_setting": 1}),
        ]
        for env, overrides in cases:
            with self.subTest(env=env, overrides=overrides):
                with self.assertRaises(ConfigurationError):
                    load_settings(env=env, **overrides)

    def test_index_params(self) -> None:
        settings = load_settings(env={}, hnsw_m=8, ef_search=32)
        self.assertEqual(
            settings.index_params(),
            {"m": 8, "ef_construction": 200, "ef_search": 32, "capacity": 10_000},
        )


if __name__ == "__main__":
    unittest.main()
