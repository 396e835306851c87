#!/usr/bin/env python3
import os
import sys
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from app.cache import TTLCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestTTLCache(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.cache = TTLCache(max_size=2, clock=self.clock)

    def test_value_expires(self):
        self.cache.set('cli_1', 't-abc', ttl_seconds=60)
        self.assertEqual(self.cache.get('cli_1'), 't-abc')
        self.clock.now += 60
        self.assertIsNone(self.cache.get('cli_1'))

    def test_non_positive_ttl_is_not_stored(self):
        self.cache.set('cli_1', 't-abc', ttl_seconds=0)
        self.assertIsNone(self.cache.get('cli_1'))

    def test_evicts_soonest_deadline_when_full(self):
        self.cache.set('a', 1, ttl_seconds=10)
        self.cache.set('b', 2, ttl_seconds=100)
        self.cache.set('c', 3, ttl_seconds=50)
        self.assertIsNone(self.cache.get('a'))
        self.assertEqual(self.cache.get('b'), 2)
        self.assertEqual(self.cache.get('c'), 3)

    def test_clear(self):
        self.cache.set('a', 1, ttl_seconds=10)
        self.cache.clear()
        self.assertIsNone(self.cache.get('a'))


if __name__ == '__main__':
    unittest.main()
