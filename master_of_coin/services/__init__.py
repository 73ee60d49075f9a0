"""Services package."""

from master_of_coin.services.workbook import (
    ExcelWorkbookSource,
    GoogleSheetsWorkbookSource,
    Workbook,
    WorkbookDecodeError,
    WorkbookError,
    WorkbookSource,
    WorkbookSourceNotConfiguredError,
)

__all__ = [
    "ExcelWorkbookSource",
    "GoogleSheetsWorkbookSource",
    "Workbook",
    "WorkbookDecodeError",
    "WorkbookError",
    "WorkbookSource",
    "WorkbookSourceNotConfiguredError",
]
