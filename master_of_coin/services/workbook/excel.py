"""
Excel Workbook Source

Reads .xlsx / .xlsm workbooks with openpyxl. Cached formula values are
used (data_only) because the sheets carry their own subtotal formulas.
"""

from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from openpyxl import load_workbook

from master_of_coin.config import get_settings
from master_of_coin.services.workbook.interface import (
    Workbook,
    WorkbookDecodeError,
    WorkbookSource,
    rows_from_values,
)


class ExcelWorkbookSource(WorkbookSource):
    """
    Workbook source backed by a file path or uploaded bytes.

    Size and extension are checked against WorkbookSettings before
    openpyxl ever sees the data.
    """

    def __init__(
        self,
        data: Union[bytes, str, Path],
        filename: Optional[str] = None,
    ):
        if isinstance(data, (str, Path)):
            path = Path(data)
            self._filename = filename or path.name
            self._path: Optional[Path] = path
            self._bytes: Optional[bytes] = None
        else:
            self._filename = filename or "upload.xlsx"
            self._path = None
            self._bytes = data
        self._settings = get_settings().workbook

    @property
    def name(self) -> str:
        return self._filename

    def _read_bytes(self) -> bytes:
        if self._bytes is not None:
            return self._bytes
        try:
            return self._path.read_bytes()
        except OSError as e:
            raise WorkbookDecodeError(f"Could not read {self._path}: {e}")

    def _check_limits(self, payload: bytes) -> None:
        extension = Path(self._filename).suffix.lower().lstrip(".")
        if extension not in self._settings.supported_formats_list:
            raise WorkbookDecodeError(
                f"Unsupported workbook type: .{extension}. "
                f"Allowed: {', '.join(self._settings.supported_formats_list)}"
            )
        if len(payload) > self._settings.max_upload_size_bytes:
            raise WorkbookDecodeError(
                f"Workbook is larger than {self._settings.max_upload_size_mb} MB"
            )

    def load(self) -> Workbook:
        """Decode every worksheet into header-keyed rows."""
        payload = self._read_bytes()
        self._check_limits(payload)

        try:
            book = load_workbook(BytesIO(payload), read_only=True, data_only=True)
        except Exception as e:
            raise WorkbookDecodeError(f"Failed to open workbook {self._filename}: {e}")

        try:
            sheets = {
                sheet.title: rows_from_values(sheet.iter_rows(values_only=True))
                for sheet in book.worksheets
            }
        except Exception as e:
            raise WorkbookDecodeError(f"Failed to read workbook {self._filename}: {e}")
        finally:
            book.close()

        return Workbook(source=self._filename, sheets=sheets)
