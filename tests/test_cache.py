import time
import unittest
import sys
import os

# Add the parent directory to Python path so we can import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.cache import CacheEntry, CacheManager


class TestCacheEntry(unittest.TestCase):
    """Tests for CacheEntry dataclass"""

    def test_age_calculation(self):
        """Should calculate age correctly"""
        entry = CacheEntry(data=[], timestamp=time.time() - 100, size_bytes=0, ttl=60)
        self.assertAlmostEqual(entry.age(), 100, delta=1)

    def test_is_stale(self):
        """Should return True when age exceeds TTL"""
        self.assertTrue(CacheEntry(data=[], timestamp=time.time() - 100, size_bytes=0, ttl=50).is_stale())
        self.assertFalse(CacheEntry(data=[], timestamp=time.time() - 100, size_bytes=0, ttl=200).is_stale())

    def test_is_fresh(self):
        """Should return True when age is within TTL"""
        self.assertTrue(CacheEntry(data=[], timestamp=time.time() - 10, size_bytes=0, ttl=50).is_fresh())
        self.assertFalse(CacheEntry(data=[], timestamp=time.time() - 10, size_bytes=0, ttl=5).is_fresh())


class TestCacheManager(unittest.TestCase):
    """Tests for CacheManager"""

    def setUp(self):
        self.cache = CacheManager(default_ttl=60)

    def test_set_uses_default_ttl(self):
        """Should fall back to the manager's default TTL"""
        self.cache.set('key', 'value')
        self.assertEqual(self.cache.get('key').ttl, 60)

    def test_set_estimates_size(self):
        """Should estimate size when none is given"""
        self.cache.set('key', [['a', 'b']])
        self.assertGreater(self.cache.get('key').size_bytes, 0)

    def test_get_fresh_returns_data(self):
        """Should return data while within TTL"""
        self.cache.set('key', 'value', ttl=100)
        self.assertEqual(self.cache.get_fresh('key'), 'value')

    def test_get_fresh_ignores_stale_entry(self):
        """Should return None once the entry has expired"""
        self.cache.set('key', 'value', ttl=10)
        self.cache.get('key').timestamp = time.time() - 20
        self.assertIsNone(self.cache.get_fresh('key'))

    def test_get_fresh_missing_key(self):
        """Should return None for keys never cached"""
        self.assertIsNone(self.cache.get_fresh('nope'))

    def test_invalidate_single_key(self):
        """Should remove only the named key"""
        self.cache.set('a', 1)
        self.cache.set('b', 2)
        self.cache.invalidate('a')
        self.assertFalse(self.cache.has('a'))
        self.assertTrue(self.cache.has('b'))

    def test_invalidate_all(self):
        """Should remove everything when no key is given"""
        self.cache.set('a', 1)
        self.cache.set('b', 2)
        self.cache.invalidate()
        self.assertEqual(self.cache.keys(), [])

    def test_describe(self):
        """Should report ttl and expiry per key"""
        self.cache.set('a', 1, ttl=100)
        details = self.cache.describe()
        self.assertEqual(details['a']['ttl_seconds'], 100)
        self.assertLessEqual(details['a']['expires_in'], 100)


if __name__ == '__main__':
    unittest.main()
