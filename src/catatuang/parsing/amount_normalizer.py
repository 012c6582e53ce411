"""Normalization of informal Rupiah amounts ("20rb", "1jt 500rb", "13.000")."""
import re
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional

from catatuang.utils import get_logger

logger = get_logger()


class AmountUnit(Enum):
    """Multiplier implied by the token after a number."""
    THOUSAND = 1_000
    MILLION = 1_000_000
    NONE = 1

    @classmethod
    def from_token(cls, token: Optional[str]) -> "AmountUnit":
        if not token:
            return cls.NONE
        return UNIT_TOKENS.get(token.lower(), cls.NONE)


UNIT_TOKENS = {
    "rb": AmountUnit.THOUSAND,
    "ribu": AmountUnit.THOUSAND,
    "k": AmountUnit.THOUSAND,
    "jt": AmountUnit.MILLION,
    "juta": AmountUnit.MILLION,
    "rupiah": AmountUnit.NONE,
}


@dataclass
class AmountMatch:
    """Amount found in a candidate, and the rule that found it."""
    rule: str
    text: str
    value: int


class AmountNormalizer:
    """Rewrites the amount in a transaction candidate as a plain integer."""
    
    # A number must not continue a longer number ("1.5" inside "21.5")
    _START = r"(?<!\d)(?<!\d[.,])"
    _NUMBER = r"\d+(?:[.,]\d+)?"
    
    COMBINED_PATTERN = re.compile(
        _START + r"(" + _NUMBER + r")\s*(jt|juta)\s+(" + _NUMBER + r")\s*(rb|ribu|k)\b",
        re.IGNORECASE
    )
    # A one or two digit cents tail ("13.000,00") is consumed and dropped
    THOUSANDS_PATTERN = re.compile(
        _START + r"(\d{1,3}(?:[.,]\d{3})+)(?:[.,]\d{1,2}(?!\d))?(?![.,]?\d)"
        r"(?!\s*(?:jt|juta|rb|ribu|k)\b)",
        re.IGNORECASE
    )
    SINGLE_UNIT_PATTERN = re.compile(
        _START + r"(" + _NUMBER + r")\s*(jt|juta|rb|ribu|k|rupiah)\b",
        re.IGNORECASE
    )
    PLAIN_PATTERN = re.compile(r"\d+")
    
    # Smallest value taken as a money amount by extract_amount
    MIN_EXTRACTED_AMOUNT = 1000
    
    def normalize(self, text: str) -> str:
        """
        Replace the amount in a candidate with its integer value.
        
        Rules are tried in order and the first one that matches wins:
        combined units ("1jt 500rb"), thousands grouping ("13.000"),
        single unit ("20rb", "1,5jt"), plain integer (left as is).
        
        Args:
            text: One transaction candidate
            
        Returns:
            Candidate with the amount rewritten, or the input unchanged
            if it has no recognizable amount
        """
        if not text:
            return text or ""
        
        combined = self.COMBINED_PATTERN.search(text)
        if combined:
            value = self._combined_value(combined)
            return text.replace(combined.group(0), str(value), 1)
        
        if self.THOUSANDS_PATTERN.search(text):
            return self.THOUSANDS_PATTERN.sub(lambda m: str(self._grouped_value(m.group(1))), text)
        
        single = self.SINGLE_UNIT_PATTERN.search(text)
        if single:
            value = self._unit_value(single.group(1), single.group(2))
            return text.replace(single.group(0), str(value), 1)
        
        return text
    
    def find_amount(self, text: str) -> Optional[AmountMatch]:
        """
        Find the amount the normalizer would act on.
        
        Args:
            text: One transaction candidate
            
        Returns:
            AmountMatch with the rule name ("combined", "thousands",
            "unit" or "plain"), or None if the text has no digits
        """
        if not text:
            return None
        
        combined = self.COMBINED_PATTERN.search(text)
        if combined:
            return AmountMatch("combined", combined.group(0), self._combined_value(combined))
        
        grouped = self.THOUSANDS_PATTERN.search(text)
        if grouped:
            return AmountMatch("thousands", grouped.group(0), self._grouped_value(grouped.group(1)))
        
        single = self.SINGLE_UNIT_PATTERN.search(text)
        if single:
            return AmountMatch("unit", single.group(0), self._unit_value(single.group(1), single.group(2)))
        
        plain = self.PLAIN_PATTERN.search(text)
        if plain:
            return AmountMatch("plain", plain.group(0), int(plain.group(0)))
        
        return None
    
    def extract_amount(self, text: str) -> Optional[int]:
        """
        Pick the amount out of an already normalized text.
        
        Normalized amounts are at least a thousand Rupiah, so the largest
        bare integer >= 1000 is taken as the amount.
        
        Args:
            text: Normalized candidate
            
        Returns:
            The amount, or None if no integer >= 1000 is present
        """
        numbers = self.bare_integers(text)
        candidates = [n for n in numbers if n >= self.MIN_EXTRACTED_AMOUNT]
        if not candidates:
            return None
        return max(candidates)
    
    def bare_integers(self, text: str) -> List[int]:
        """All runs of digits in the text, in order."""
        if not text:
            return []
        return [int(digits) for digits in self.PLAIN_PATTERN.findall(text)]
    
    def _combined_value(self, match: "re.Match") -> int:
        millions = self._to_float(match.group(1)) * AmountUnit.MILLION.value
        thousands = self._to_float(match.group(3)) * AmountUnit.THOUSAND.value
        return self._round(millions + thousands)
    
    def _unit_value(self, number: str, unit_token: str) -> int:
        unit = AmountUnit.from_token(unit_token)
        return self._round(self._to_float(number) * unit.value)
    
    @staticmethod
    def _grouped_value(token: str) -> int:
        return int(re.sub(r"[.,]", "", token))
    
    @staticmethod
    def _to_float(number: str) -> float:
        return float(number.replace(",", "."))
    
    @staticmethod
    def _round(value: float) -> int:
        """Round half away from zero (Python's round() is half-to-even)."""
        return int(Decimal(repr(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


_default_normalizer = AmountNormalizer()


def normalize_amount(text: str) -> str:
    """Module-level shortcut for AmountNormalizer().normalize()."""
    normalized = _default_normalizer.normalize(text)
    if normalized != text:
        logger.debug(f"Normalized amount: '{text}' -> '{normalized}'")
    return normalized


def extract_amount(text: str) -> Optional[int]:
    """Module-level shortcut for AmountNormalizer().extract_amount()."""
    return _default_normalizer.extract_amount(text)
