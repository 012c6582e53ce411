"""Message splitting and amount normalization."""
from .splitter import split_transactions
from .amount_normalizer import (
    AmountNormalizer,
    AmountMatch,
    AmountUnit,
    normalize_amount,
    extract_amount
)

__all__ = [
    "split_transactions",
    "AmountNormalizer",
    "AmountMatch",
    "AmountUnit",
    "normalize_amount",
    "extract_amount"
]
