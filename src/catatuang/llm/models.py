"""Data models for transaction classification."""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Dict, Optional

from catatuang.utils.exceptions import ValidationError


class TransactionType(Enum):
    """Direction of a transaction, as chosen by the chat command."""
    EXPENSE = "pengeluaran"
    INCOME = "pemasukan"

    @classmethod
    def from_command(cls, command: str) -> "TransactionType":
        """Resolve "/keluar", "masuk", "pengeluaran", ... to a type."""
        key = (command or "").strip().lower().lstrip("/")
        if key in ("keluar", cls.EXPENSE.value, "expense"):
            return cls.EXPENSE
        if key in ("masuk", cls.INCOME.value, "income"):
            return cls.INCOME
        raise ValidationError(f"Unknown transaction type: {command!r}")


@dataclass
class Transaction:
    """Classified transaction, one spreadsheet row."""
    date: date
    description: str
    amount: int
    category: str
    transaction_type: TransactionType = TransactionType.EXPENSE
    raw_text: str = ""


@dataclass
class MonthlyRecap:
    """Transaction totals for one month."""
    chat_id: Optional[str]
    year: int
    month: int
    totals: Dict[str, int]  # category -> amount
    transactions: List[Transaction] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.totals.values())
