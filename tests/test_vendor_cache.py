"""Tests for vendor cache."""
import unittest
import tempfile
import shutil
from pathlib import Path

from catatuang.llm.vendor_cache import VendorCache


class TestVendorCache(unittest.TestCase):
    """Test VendorCache functionality."""
    
    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = Path(tempfile.mkdtemp())
        self.cache = VendorCache(cache_dir=self.test_dir)
    
    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.test_dir, ignore_errors=True)
    
    def test_add_and_lookup(self):
        self.cache.add_mapping(12345, "nasi padang", "Makanan & Minuman")
        
        self.assertEqual(self.cache.lookup(12345, "nasi padang"), "Makanan & Minuman")
    
    def test_fuzzy_match(self):
        self.cache.add_mapping(12345, "nasi padang", "Makanan & Minuman")
        
        # Slight typo should still match
        self.assertEqual(self.cache.lookup(12345, "nasi padnag"), "Makanan & Minuman")
        self.assertIsNone(self.cache.lookup(12345, "bensin"))
    
    def test_short_words_do_not_collide(self):
        self.cache.add_mapping(1, "bus", "Transportasi")
        
        self.assertIsNone(self.cache.lookup(1, "jus"))
        self.assertIsNone(self.cache.lookup(1, "gas"))
        self.assertIsNone(self.cache.lookup(1, "tas"))
    
    def test_closest_mapping_wins(self):
        self.cache.add_mapping(1, "es teh manis", "Makanan & Minuman")
        self.cache.add_mapping(1, "es teh tawar", "Belanja")
        
        self.assertEqual(self.cache.lookup(1, "es teh maniss"), "Makanan & Minuman")
    
    def test_chat_isolation(self):
        self.cache.add_mapping("chat1", "parkir", "Transportasi")
        
        self.assertIsNone(self.cache.lookup("chat2", "parkir"))
    
    def test_existing_mapping_not_overwritten(self):
        self.cache.add_mapping(1, "kopi", "Makanan & Minuman")
        self.cache.add_mapping(1, "kopi", "Hiburan")
        
        self.assertEqual(self.cache.get_all_mappings(1), {"kopi": "Makanan & Minuman"})
    
    def test_normalize_description(self):
        normalized1 = self.cache._normalize_description("  Nasi   PADANG  ")
        normalized2 = self.cache._normalize_description("nasi padang")
        
        self.assertEqual(normalized1, normalized2)
    
    def test_empty_description(self):
        self.cache.add_mapping(1, "   ", "Lainnya")
        
        self.assertIsNone(self.cache.lookup(1, ""))
        self.assertEqual(self.cache.get_all_mappings(1), {})


if __name__ == "__main__":
    unittest.main()
