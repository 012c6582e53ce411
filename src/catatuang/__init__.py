"""CatatUang: turn informal Indonesian money messages into spreadsheet rows."""
__version__ = "0.3.0"
