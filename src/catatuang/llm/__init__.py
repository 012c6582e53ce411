"""Transaction classification module."""
from .models import Transaction, TransactionType, MonthlyRecap
from .categorizer import LLMCategorizer
from .rule_classifier import RuleClassifier, FallbackClassifier
from .vendor_cache import VendorCache
from .aggregator import Aggregator
from .chat_history import ChatHistory
from .assistant import FinanceAssistant

__all__ = [
    "Transaction",
    "TransactionType",
    "MonthlyRecap",
    "LLMCategorizer",
    "RuleClassifier",
    "FallbackClassifier",
    "VendorCache",
    "Aggregator",
    "ChatHistory",
    "FinanceAssistant"
]
