"""Description-to-category memory per chat."""
import json
from pathlib import Path
from typing import Optional, Dict, Union
import Levenshtein

from catatuang.utils.logger import get_logger, get_app_dir

logger = get_logger()

ChatId = Union[int, str]


class VendorCache:
    """Remembers which category a chat uses for a description, with fuzzy matching."""
    
    def __init__(self, fuzzy_ratio: float = 0.85, cache_dir: Optional[Path] = None):
        """
        Initialize vendor cache.
        
        Args:
            fuzzy_ratio: Minimum Levenshtein similarity ratio (0..1) for fuzzy match.
                Relative, so short words like "bus" and "jus" stay apart
            cache_dir: Directory for per-chat JSON files (defaults to app dir)
        """
        self.fuzzy_ratio = fuzzy_ratio
        self.cache_dir = cache_dir or get_app_dir() / "vendors"
        self.cache_dir.mkdir(parents=True, exist_ok=True)
    
    def lookup(self, chat_id: ChatId, description: str) -> Optional[str]:
        """
        Look up category for a description.
        
        Args:
            chat_id: Chat identifier
            description: Transaction description, e.g. "nasi padang"
            
        Returns:
            Category name or None if not found
        """
        mappings = self._load_mappings(chat_id)
        normalized = self._normalize_description(description)
        if not normalized:
            return None
        
        if normalized in mappings:
            logger.debug(f"Exact description match: {description} -> {mappings[normalized]}")
            return mappings[normalized]
        
        best_match, best_ratio = None, 0.0
        for cached in mappings:
            ratio = Levenshtein.ratio(normalized, cached)
            if ratio > best_ratio:
                best_match, best_ratio = cached, ratio
        
        if best_match is not None and best_ratio >= self.fuzzy_ratio:
            category = mappings[best_match]
            logger.debug(
                f"Fuzzy description match: {description} -> {best_match} "
                f"(ratio: {best_ratio:.2f}) -> {category}"
            )
            return category
        
        return None
    
    def add_mapping(self, chat_id: ChatId, description: str, category: str) -> None:
        """Remember a description -> category mapping unless one exists."""
        mappings = self._load_mappings(chat_id)
        normalized = self._normalize_description(description)
        
        if normalized and normalized not in mappings:
            mappings[normalized] = category
            self._save_mappings(chat_id, mappings)
            logger.debug(f"Added description mapping: {description} -> {category}")
    
    def get_all_mappings(self, chat_id: ChatId) -> Dict[str, str]:
        return self._load_mappings(chat_id)
    
    def _cache_file(self, chat_id: ChatId) -> Path:
        return self.cache_dir / f"{chat_id}.json"
    
    def _load_mappings(self, chat_id: ChatId) -> Dict[str, str]:
        """Load mappings from file."""
        cache_file = self._cache_file(chat_id)
        
        if not cache_file.exists():
            return {}
        
        try:
            with open(cache_file, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load vendor cache for {chat_id}: {e}")
            return {}
    
    def _save_mappings(self, chat_id: ChatId, mappings: Dict[str, str]) -> None:
        """Save mappings to file."""
        try:
            with open(self._cache_file(chat_id), "w", encoding="utf-8") as f:
                json.dump(mappings, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"Failed to save vendor cache for {chat_id}: {e}")
    
    @staticmethod
    def _normalize_description(description: str) -> str:
        return " ".join((description or "").lower().split())
