"""Tests for the in-memory processing registry."""
import unittest

from catatuang.utils.processing_registry import ProcessingRegistry


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestProcessingRegistry(unittest.TestCase):
    """Test ProcessingRegistry functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.clock = FakeClock()
        self.registry = ProcessingRegistry(ttl_seconds=60, clock=self.clock)

    def test_acquire_once(self):
        self.assertTrue(self.registry.try_acquire(1, "file-a"))
        self.assertFalse(self.registry.try_acquire(1, "file-a"))
        self.assertTrue(self.registry.is_processing(1, "file-a"))

    def test_chat_isolation(self):
        self.registry.try_acquire(1, "file-a")

        self.assertTrue(self.registry.try_acquire(2, "file-a"))
        self.assertFalse(self.registry.is_processing(3, "file-a"))

    def test_key_types_are_normalized(self):
        self.registry.try_acquire(1, 99)
        self.assertTrue(self.registry.is_processing("1", "99"))

    def test_entries_expire(self):
        self.registry.try_acquire(1, "file-a")

        self.clock.now += 59
        self.assertTrue(self.registry.is_processing(1, "file-a"))

        self.clock.now += 1
        self.assertFalse(self.registry.is_processing(1, "file-a"))
        self.assertTrue(self.registry.try_acquire(1, "file-a"))

    def test_release(self):
        self.registry.try_acquire(1, "file-a")
        self.registry.release(1, "file-a")

        self.assertFalse(self.registry.is_processing(1, "file-a"))
        # Releasing an unknown item is a no-op
        self.registry.release(1, "file-b")

    def test_clear(self):
        self.registry.try_acquire(1, "a")
        self.registry.try_acquire(1, "b")
        self.registry.try_acquire(2, "a")

        self.assertEqual(self.registry.clear(1), 2)
        self.assertEqual(len(self.registry), 1)
        self.assertEqual(self.registry.clear(), 1)
        self.assertEqual(len(self.registry), 0)


if __name__ == "__main__":
    unittest.main()
