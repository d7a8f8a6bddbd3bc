from __future__ import annotations

import unittest

from docseek.backend import ModelBackend


class ModelBackendTests(unittest.TestCase):
    def test_load_requires_acquire(self) -> None:
        backend = ModelBackend()
        with self.assertRaises(RuntimeError):
            backend.load("embed:x", object)

    def test_release_without_acquire_fails(self) -> None:
        with self.assertRaises(RuntimeError):
            ModelBackend().release()

    def test_models_are_cached_until_last_release(self) -> None:
        backend = ModelBackend()
        loads = []

        def loader():
            loads.append(1)
            return object()

        backend.acquire()
        backend.acquire()
        first = backend.load("embed:x", loader)
        self.assertIs(backend.load("embed:x", loader), first)
        self.assertEqual(len(loads), 1)

        backend.release()
        self.assertTrue(backend.active)
        self.assertIs(backend.load("embed:x", loader), first)

        backend.release()
        self.assertFalse(backend.active)
        self.assertEqual(backend.refcount, 0)

        backend.acquire()
        self.assertIsNot(backend.load("embed:x", loader), first)
        self.assertEqual(len(loads), 2)
        backend.release()


if __name__ == "__main__":
    unittest.main()
