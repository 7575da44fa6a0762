"""
Tests for the per-sweep inventory cache.
"""
import logging
import threading
import unittest

from .inventory_cache import SweepInventoryCache
from ..errors import ExecutionError
from ..schema.models import VirtualDrive


class CountingLoader:
    def __init__(self, vds=None, error=None):
        self.vds = vds if vds is not None else [VirtualDrive("wwn-0xaa", "HDD")]
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.vds)


class TestSweepInventoryCache(unittest.TestCase):
    """Test cases for SweepInventoryCache."""

    def setUp(self):
        self.cache = SweepInventoryCache()
        self.loader = CountingLoader()

    def test_no_sweep_always_loads(self):
        self.cache.get_or_load(self.loader)
        self.cache.get_or_load(self.loader)
        self.assertEqual(self.loader.calls, 2)
        self.assertEqual(self.cache.loads, 0)
        self.assertIsNone(self.cache.sweep_id)

    def test_one_load_per_sweep(self):
        self.cache.start_sweep("s1")
        first = self.cache.get_or_load(self.loader)
        second = self.cache.get_or_load(self.loader)

        self.assertEqual(first, second)
        self.assertEqual(self.loader.calls, 1)
        self.assertEqual(self.cache.loads, 1)
        self.assertEqual(self.cache.hits, 1)
        self.assertEqual(first, [VirtualDrive("wwn-0xaa", "HDD")])

    def test_new_sweep_invalidates(self):
        self.cache.start_sweep("s1")
        self.cache.get_or_load(self.loader)
        self.cache.start_sweep("s2")
        self.cache.get_or_load(self.loader)
        self.assertEqual(self.loader.calls, 2)
        self.assertEqual(self.cache.sweep_id, "s2")

    def test_failures_are_not_cached(self):
        failing = CountingLoader(error=ExecutionError("storcli exited with status 1", returncode=1))
        self.cache.start_sweep("s1")
        for _ in range(2):
            with self.assertRaises(ExecutionError):
                self.cache.get_or_load(failing)
        self.assertEqual(failing.calls, 2)

        self.assertEqual(len(self.cache.get_or_load(self.loader)), 1)

    def test_returned_list_is_a_copy(self):
        self.cache.start_sweep("s1")
        self.cache.get_or_load(self.loader).clear()
        self.assertEqual(len(self.cache.get_or_load(self.loader)), 1)

    def test_concurrent_callers_share_one_load(self):
        self.cache.start_sweep("s1")
        threads = [threading.Thread(target=self.cache.get_or_load, args=(self.loader,)) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(self.loader.calls, 1)


if __name__ == '__main__':
    logging.basicConfig(level=logging.ERROR)
    unittest.main()
