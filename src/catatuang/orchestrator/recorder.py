"""Recording flow: message -> candidates -> classification -> spreadsheet.

Each candidate of a message is normalized and classified on its own, in
message order. A candidate that cannot be classified is reported back
instead of aborting the batch; everything that succeeded is appended to
the sheet of the transaction type in a single call.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Union

from catatuang.llm.aggregator import Aggregator
from catatuang.llm.models import Transaction, TransactionType, MonthlyRecap
from catatuang.parsing import split_transactions, normalize_amount
from catatuang.sheets.writer import SheetsWriter
from catatuang.utils import get_logger, set_chat_context, CatatUangError, ValidationError
from catatuang.utils.processing_registry import ProcessingRegistry

logger = get_logger()

ChatId = Union[int, str]


@dataclass
class FailedCandidate:
    text: str
    reason: str


@dataclass
class RecordResult:
    recorded: List[Transaction] = field(default_factory=list)
    failed: List[FailedCandidate] = field(default_factory=list)
    duplicate: bool = False

    @property
    def total_amount(self) -> int:
        return sum(txn.amount for txn in self.recorded)

    @property
    def all_failed(self) -> bool:
        return bool(self.failed) and not self.recorded


class TransactionRecorder:
    """Orchestrates the flow: split -> normalize -> classify -> Sheets."""

    def __init__(
        self,
        classifier,
        writer: SheetsWriter,
        registry: Optional[ProcessingRegistry] = None,
        aggregator: Optional[Aggregator] = None
    ):
        """
        Args:
            classifier: Object with classify(text, transaction_type, chat_id)
            writer: Spreadsheet writer
            registry: Drops updates that are delivered twice
            aggregator: Builds monthly recaps
        """
        self.classifier = classifier
        self.writer = writer
        self.registry = registry
        self.aggregator = aggregator or Aggregator()

    @staticmethod
    def prepare(message: str) -> List[str]:
        """Split a message and normalize the amount of every candidate."""
        return [normalize_amount(candidate) for candidate in split_transactions(message)]

    def record(
        self,
        message: str,
        transaction_type: TransactionType,
        spreadsheet_id: str,
        chat_id: Optional[ChatId] = None,
        update_id: Optional[ChatId] = None
    ) -> RecordResult:
        """
        Record every transaction of one message.

        Args:
            message: Text after the /keluar or /masuk command
            transaction_type: Expense or income
            spreadsheet_id: The chat's spreadsheet
            chat_id: Chat identifier
            update_id: Identifier of the incoming update, for duplicate detection

        Returns:
            RecordResult with recorded transactions and failed candidates

        Raises:
            ValidationError: If the message holds no candidate
            SheetsError: If appending to the spreadsheet fails
        """
        set_chat_context(chat_id)
        try:
            candidates = self.prepare(message)
            if not candidates:
                raise ValidationError("Format transaksi tidak valid: pesan kosong")

            acquired = False
            if self.registry is not None and chat_id is not None and update_id is not None:
                if not self.registry.try_acquire(chat_id, update_id):
                    return RecordResult(duplicate=True)
                acquired = True

            try:
                result = self._classify_all(candidates, transaction_type, chat_id)
                if result.recorded:
                    self.writer.append_transactions(
                        spreadsheet_id,
                        result.recorded,
                        self.writer.sheet_name_for(transaction_type)
                    )
            except Exception:
                # Let a redelivered update try again
                if acquired:
                    self.registry.release(chat_id, update_id)
                raise

            logger.info(
                f"Recorded {len(result.recorded)} of {len(candidates)} "
                f"{transaction_type.value} transactions, total {result.total_amount}"
            )
            return result
        finally:
            set_chat_context(None)

    def recap(
        self,
        spreadsheet_id: str,
        transaction_type: TransactionType = TransactionType.EXPENSE,
        month: Optional[int] = None,
        year: Optional[int] = None,
        chat_id: Optional[ChatId] = None
    ) -> MonthlyRecap:
        """Totals per category for one month of one sheet."""
        transactions = self.writer.read_transactions(
            spreadsheet_id,
            self.writer.sheet_name_for(transaction_type),
            transaction_type
        )
        return self.aggregator.aggregate(transactions, chat_id=chat_id, month=month, year=year)

    def _classify_all(
        self,
        candidates: List[str],
        transaction_type: TransactionType,
        chat_id: Optional[ChatId]
    ) -> RecordResult:
        result = RecordResult()

        for candidate in candidates:
            try:
                txn = self.classifier.classify(candidate, transaction_type, chat_id)
            except CatatUangError as e:
                logger.warning(f"Gagal menganalisis transaksi '{candidate}': {e}")
                result.failed.append(FailedCandidate(candidate, str(e)))
                continue
            result.recorded.append(txn)

        return result
