"""Google Sheets ledger module."""
from .writer import SheetsWriter, extract_spreadsheet_id

__all__ = ["SheetsWriter", "extract_spreadsheet_id"]
