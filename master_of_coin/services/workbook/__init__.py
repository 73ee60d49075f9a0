"""
Workbook Sources Package

Provides the abstract workbook interface and concrete decoders for
uploaded Excel files and Google Sheets.
"""

from master_of_coin.services.workbook.interface import (
    Workbook,
    WorkbookDecodeError,
    WorkbookError,
    WorkbookSource,
    WorkbookSourceNotConfiguredError,
    rows_from_values,
)
from master_of_coin.services.workbook.excel import ExcelWorkbookSource
from master_of_coin.services.workbook.google_sheets import GoogleSheetsWorkbookSource

__all__ = [
    # Interface
    "Workbook",
    "WorkbookSource",
    "rows_from_values",
    # Exceptions
    "WorkbookDecodeError",
    "WorkbookError",
    "WorkbookSourceNotConfiguredError",
    # Implementations
    "ExcelWorkbookSource",
    "GoogleSheetsWorkbookSource",
]
