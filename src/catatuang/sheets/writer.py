"""Google Sheets ledger: append classified transactions and read them back."""
import re
from datetime import date, datetime
from typing import List, Optional

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from catatuang.config.settings import AppSettings
from catatuang.llm.models import Transaction, TransactionType
from catatuang.utils import get_logger, retry_with_backoff, SheetsError
from catatuang.utils.auth import get_credentials

logger = get_logger()

SPREADSHEET_ID_PATTERN = re.compile(r"/spreadsheets/d/([a-zA-Z0-9-_]+)")
BARE_ID_PATTERN = re.compile(r"^[a-zA-Z0-9-_]{20,}$")

READ_DATE_FORMATS = ["%d/%m/%Y", "%Y-%m-%d", "%d-%m-%Y", "%m/%d/%Y"]


def extract_spreadsheet_id(link: str) -> Optional[str]:
    """Spreadsheet ID from a Google Sheets link, or the link itself if it is a bare ID."""
    if not link:
        return None
    match = SPREADSHEET_ID_PATTERN.search(link)
    if match:
        return match.group(1)
    link = link.strip()
    return link if BARE_ID_PATTERN.match(link) else None


class SheetsWriter:
    """Appends ledger rows to the expense and income sheets of a spreadsheet."""

    def __init__(self, settings: AppSettings, credentials=None, service=None):
        """
        Initialize the writer.

        Args:
            settings: Application settings (sheet columns, date format, retry policy)
            credentials: Google credentials, see utils.auth.get_credentials
            service: Pre-built Sheets v4 service, skips discovery
        """
        self.settings = settings
        if service is None:
            if credentials is None:
                raise SheetsError("Either credentials or a Sheets service is required")
            service = build("sheets", "v4", credentials=credentials, cache_discovery=False)
        self.sheets_service = service

        retry = retry_with_backoff(
            max_retries=settings.retry_max_retries,
            initial_delay=settings.retry_initial_delay_seconds,
            backoff_factor=settings.retry_backoff_factor
        )
        self._append_rows = retry(self._append_rows)
        self._get_rows = retry(self._get_rows)

        logger.info("Sheets Writer initialized")

    @classmethod
    def from_config(cls, settings: AppSettings, config) -> "SheetsWriter":
        """Build a writer from deployment configuration."""
        credentials = get_credentials(
            service_account_path=config.service_account_path,
            client_email=config.google_client_email,
            private_key=config.google_private_key,
            oauth_client_secrets=config.oauth_client_secrets,
            oauth_token_path=config.oauth_token_path,
            scopes=settings.google_api_scopes
        )
        return cls(settings, credentials=credentials)

    def sheet_name_for(self, transaction_type: TransactionType) -> str:
        """Sheet that holds rows of the given transaction type."""
        if transaction_type is TransactionType.INCOME:
            return self.settings.income_sheet
        return self.settings.expense_sheet

    def append_transactions(
        self,
        spreadsheet_id: str,
        transactions: List[Transaction],
        sheet_name: str
    ) -> int:
        """
        Append transactions as rows, keeping their order.

        Args:
            spreadsheet_id: Target spreadsheet
            transactions: Classified transactions
            sheet_name: Target sheet, e.g. "Pengeluaran"

        Returns:
            Number of rows appended

        Raises:
            SheetsError: If the API call fails after retries
        """
        if not transactions:
            return 0

        rows = [self._to_row(txn) for txn in transactions]
        range_name = self._range(sheet_name)

        try:
            self._append_rows(spreadsheet_id, range_name, rows)
        except HttpError as e:
            logger.error(f"Failed to append to {range_name}: {e}")
            raise SheetsError(f"Gagal menyimpan ke spreadsheet: {e}")

        logger.info(f"Appended {len(rows)} transactions to sheet '{sheet_name}'")
        return len(rows)

    def read_transactions(
        self,
        spreadsheet_id: str,
        sheet_name: str,
        transaction_type: TransactionType
    ) -> List[Transaction]:
        """
        Read ledger rows back as transactions.

        The header row and rows that cannot be parsed are skipped.
        """
        range_name = self._range(sheet_name)
        try:
            rows = self._get_rows(spreadsheet_id, range_name)
        except HttpError as e:
            logger.error(f"Failed to read {range_name}: {e}")
            raise SheetsError(f"Gagal membaca spreadsheet: {e}")

        transactions = []
        skipped = 0
        for row in rows:
            txn = self._from_row(row, transaction_type)
            if txn is None:
                skipped += 1
                continue
            transactions.append(txn)

        logger.debug(f"Read {len(transactions)} rows from '{sheet_name}', skipped {skipped}")
        return transactions

    def _append_rows(self, spreadsheet_id: str, range_name: str, rows: List[list]) -> None:
        self.sheets_service.spreadsheets().values().append(
            spreadsheetId=spreadsheet_id,
            range=range_name,
            valueInputOption="USER_ENTERED",
            insertDataOption="INSERT_ROWS",
            body={"values": rows}
        ).execute()

    def _get_rows(self, spreadsheet_id: str, range_name: str) -> List[list]:
        result = self.sheets_service.spreadsheets().values().get(
            spreadsheetId=spreadsheet_id,
            range=range_name,
            valueRenderOption="UNFORMATTED_VALUE",
            dateTimeRenderOption="FORMATTED_STRING"
        ).execute()
        return result.get("values", [])

    def _range(self, sheet_name: str) -> str:
        return f"'{sheet_name}'!{self.settings.sheet_columns}"

    def _to_row(self, txn: Transaction) -> list:
        return [
            txn.date.strftime(self.settings.date_format),
            txn.category,
            txn.description,
            txn.amount
        ]

    def _from_row(self, row: list, transaction_type: TransactionType) -> Optional[Transaction]:
        if len(row) < 4:
            return None

        txn_date = self._parse_date(row[0])
        amount = self._parse_amount(row[3])
        if txn_date is None or amount is None:
            return None

        return Transaction(
            date=txn_date,
            description=str(row[2]),
            amount=amount,
            category=str(row[1]),
            transaction_type=transaction_type
        )

    def _parse_date(self, value) -> Optional[date]:
        text = str(value).strip()
        for fmt in [self.settings.date_format] + READ_DATE_FORMATS:
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        return None

    @staticmethod
    def _parse_amount(value) -> Optional[int]:
        """Parse amount from cell value, removing currency symbols and separators."""
        if isinstance(value, bool):
            return None
        if isinstance(value, (int, float)):
            return int(round(value))

        cleaned = re.sub(r"[^\d]", "", str(value))
        return int(cleaned) if cleaned else None
