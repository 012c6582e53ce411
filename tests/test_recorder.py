"""Tests for the recording flow."""
import unittest
from datetime import date

from catatuang.llm.models import Transaction, TransactionType
from catatuang.llm.rule_classifier import RuleClassifier
from catatuang.orchestrator import TransactionRecorder
from catatuang.utils.exceptions import SheetsError, ValidationError
from catatuang.utils.processing_registry import ProcessingRegistry

TODAY = date(2025, 6, 28)


class FakeWriter:
    """Records append calls instead of talking to Google Sheets."""

    def __init__(self, fail=False, rows=None):
        self.fail = fail
        self.rows = rows or []
        self.appended = []

    def sheet_name_for(self, transaction_type):
        return "Pemasukan" if transaction_type is TransactionType.INCOME else "Pengeluaran"

    def append_transactions(self, spreadsheet_id, transactions, sheet_name):
        if self.fail:
            raise SheetsError("quota exceeded")
        self.appended.append((spreadsheet_id, list(transactions), sheet_name))
        return len(transactions)

    def read_transactions(self, spreadsheet_id, sheet_name, transaction_type):
        return list(self.rows)


class TestTransactionRecorder(unittest.TestCase):
    """Test TransactionRecorder functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.writer = FakeWriter()
        self.recorder = TransactionRecorder(
            classifier=RuleClassifier(today=lambda: TODAY),
            writer=self.writer
        )

    def test_prepare_splits_and_normalizes(self):
        self.assertEqual(
            self.recorder.prepare("bayar sekolah 1 juta 500 ribu\ntoken listrik 13.000 dan parkir 2rb"),
            ["bayar sekolah 1500000", "token listrik 13000", "parkir 2000"]
        )

    def test_record_keeps_message_order(self):
        result = self.recorder.record(
            "jajan 24rb, parkir 6rb, nonton 35rb",
            TransactionType.EXPENSE,
            "sheet123"
        )

        self.assertEqual([txn.amount for txn in result.recorded], [24000, 6000, 35000])
        self.assertEqual(
            [txn.category for txn in result.recorded],
            ["Makanan & Minuman", "Transportasi", "Hiburan"]
        )
        self.assertEqual(result.total_amount, 65000)
        self.assertEqual(result.failed, [])

        spreadsheet_id, rows, sheet_name = self.writer.appended[0]
        self.assertEqual(spreadsheet_id, "sheet123")
        self.assertEqual(sheet_name, "Pengeluaran")
        self.assertEqual([txn.description for txn in rows], ["jajan", "parkir", "nonton"])

    def test_income_goes_to_income_sheet(self):
        self.recorder.record("gaji 2jt, uang saku 500rb", TransactionType.INCOME, "sheet123")

        self.assertEqual(self.writer.appended[0][2], "Pemasukan")

    def test_partial_failure_is_collected(self):
        result = self.recorder.record("makan 20rb, lupa nominal", TransactionType.EXPENSE, "sheet123")

        self.assertEqual(len(result.recorded), 1)
        self.assertEqual(len(result.failed), 1)
        self.assertEqual(result.failed[0].text, "lupa nominal")
        self.assertFalse(result.all_failed)
        self.assertEqual(len(self.writer.appended[0][1]), 1)

    def test_all_failed_skips_sheet(self):
        result = self.recorder.record("makan siang", TransactionType.EXPENSE, "sheet123")

        self.assertTrue(result.all_failed)
        self.assertEqual(self.writer.appended, [])

    def test_empty_message_raises(self):
        with self.assertRaises(ValidationError):
            self.recorder.record(" \n ", TransactionType.EXPENSE, "sheet123")

    def test_duplicate_update_is_skipped(self):
        recorder = TransactionRecorder(
            classifier=RuleClassifier(today=lambda: TODAY),
            writer=self.writer,
            registry=ProcessingRegistry(ttl_seconds=60)
        )

        first = recorder.record("makan 20rb", TransactionType.EXPENSE, "sheet123", chat_id=1, update_id=99)
        second = recorder.record("makan 20rb", TransactionType.EXPENSE, "sheet123", chat_id=1, update_id=99)

        self.assertFalse(first.duplicate)
        self.assertTrue(second.duplicate)
        self.assertEqual(second.recorded, [])
        self.assertEqual(len(self.writer.appended), 1)

    def test_sheet_failure_releases_update(self):
        registry = ProcessingRegistry(ttl_seconds=60)
        recorder = TransactionRecorder(
            classifier=RuleClassifier(today=lambda: TODAY),
            writer=FakeWriter(fail=True),
            registry=registry
        )

        with self.assertRaises(SheetsError):
            recorder.record("makan 20rb", TransactionType.EXPENSE, "sheet123", chat_id=1, update_id=5)

        self.assertFalse(registry.is_processing(1, 5))

    def test_recap_totals_by_category(self):
        self.writer.rows = [
            Transaction(date(2025, 6, 1), "makan", 20000, "Makanan & Minuman"),
            Transaction(date(2025, 6, 2), "jajan", 5000, "Makanan & Minuman"),
            Transaction(date(2025, 6, 3), "parkir", 2000, "Transportasi"),
            Transaction(date(2025, 5, 30), "bensin", 30000, "Transportasi"),
        ]

        recap = self.recorder.recap("sheet123", month=6, year=2025, chat_id=1)

        self.assertEqual(recap.totals, {"Makanan & Minuman": 25000, "Transportasi": 2000})
        self.assertEqual(recap.total, 27000)
        self.assertEqual(len(recap.transactions), 3)


if __name__ == "__main__":
    unittest.main()
