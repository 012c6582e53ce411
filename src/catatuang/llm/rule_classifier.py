"""Keyword-based classification, used when the LLM is unavailable."""
import re
from datetime import date
from pathlib import Path
from typing import Callable, Optional, Union

from .categories import DEFAULT_CATEGORY, load_categories
from .models import Transaction, TransactionType
from .vendor_cache import VendorCache
from catatuang.parsing import AmountNormalizer
from catatuang.utils import get_logger, LLMError, ValidationError

logger = get_logger()

# Words that carry no description value once the amount is gone
FILLER_WORDS = {"rp", "rp.", "rupiah", "sebesar", "seharga", "senilai", "total", "harga", "bayar"}


class RuleClassifier:
    """Assigns categories by keyword lookup in categories.json."""
    
    def __init__(
        self,
        categories_path: Optional[Path] = None,
        vendor_cache: Optional[VendorCache] = None,
        today: Callable[[], date] = date.today
    ):
        self.categories = load_categories(categories_path)
        self.vendor_cache = vendor_cache
        self.today = today
        self.normalizer = AmountNormalizer()
    
    def classify(
        self,
        candidate_text: str,
        transaction_type: TransactionType,
        chat_id: Optional[Union[int, str]] = None
    ) -> Transaction:
        """
        Classify one normalized candidate without calling a model.
        
        Raises:
            ValidationError: If the candidate holds no number at all
        """
        amount = self.normalizer.extract_amount(candidate_text)
        if amount is None:
            numbers = self.normalizer.bare_integers(candidate_text)
            if not numbers:
                raise ValidationError(f"No amount found in '{candidate_text}'")
            amount = max(numbers)
        
        description = self._describe(candidate_text, amount)
        category = self._match_category(description, transaction_type, chat_id)
        
        return Transaction(
            date=self.today(),
            description=description or category,
            amount=amount,
            category=category,
            transaction_type=transaction_type,
            raw_text=candidate_text
        )
    
    def _describe(self, candidate_text: str, amount: int) -> str:
        """Candidate text without the amount and filler words."""
        text = re.sub(rf"(?<!\d){amount}(?!\d)", " ", candidate_text, count=1)
        words = [word for word in text.split() if word.lower() not in FILLER_WORDS]
        return " ".join(words)
    
    def _match_category(
        self,
        description: str,
        transaction_type: TransactionType,
        chat_id: Optional[Union[int, str]]
    ) -> str:
        if self.vendor_cache and chat_id is not None:
            cached = self.vendor_cache.lookup(chat_id, description)
            if cached:
                return cached
        
        lowered = description.lower()
        for category in self.categories.get(transaction_type.value, []):
            for keyword in category.get("keywords", []):
                if re.search(rf"\b{re.escape(keyword)}\b", lowered):
                    logger.debug(f"Keyword '{keyword}' -> {category['name']}")
                    return category["name"]
        
        return DEFAULT_CATEGORY


class FallbackClassifier:
    """Tries the primary classifier and falls back to the secondary on LLM errors."""
    
    def __init__(self, primary, secondary):
        self.primary = primary
        self.secondary = secondary
    
    def classify(
        self,
        candidate_text: str,
        transaction_type: TransactionType,
        chat_id: Optional[Union[int, str]] = None
    ) -> Transaction:
        try:
            return self.primary.classify(candidate_text, transaction_type, chat_id)
        except LLMError as e:
            logger.warning(f"Primary classifier failed for '{candidate_text}': {e}. Using fallback")
            return self.secondary.classify(candidate_text, transaction_type, chat_id)
