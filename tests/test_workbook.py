"""
Tests for workbook sources.

Excel workbooks are built in memory with openpyxl; Google Sheets uses
a mocked gspread client. No network access.
"""

from io import BytesIO
from unittest.mock import MagicMock

import gspread
import pytest
from gspread.utils import ValueRenderOption
from openpyxl import Workbook as OpenpyxlWorkbook

from master_of_coin.config import GoogleSheetsSettings
from master_of_coin.normalizer import normalize_sheet
from master_of_coin.services.workbook import (
    ExcelWorkbookSource,
    GoogleSheetsWorkbookSource,
    Workbook,
    WorkbookDecodeError,
    WorkbookSourceNotConfiguredError,
    rows_from_values,
)


def xlsx_bytes(sheets: dict) -> bytes:
    book = OpenpyxlWorkbook()
    book.remove(book.active)
    for title, grid in sheets.items():
        sheet = book.create_sheet(title)
        for row in grid:
            sheet.append(row)
    buffer = BytesIO()
    book.save(buffer)
    return buffer.getvalue()


class TestRowsFromValues:
    """Tests for header-keyed row conversion."""

    def test_header_keyed_rows(self):
        """Test the first row names the columns."""
        rows = rows_from_values([
            ["Section", "Item Name", "Used_Amount"],
            ["Essential !!", "Grocery", 900],
        ])
        assert rows == [{"Section": "Essential !!", "Item Name": "Grocery", "Used_Amount": 900}]

    def test_blank_headers(self):
        """Test blank header cells become __EMPTY, __EMPTY_1, ..."""
        rows = rows_from_values([
            [None, "", "Notes", None],
            ["Grocery", 3000, "weekly", 2800],
        ])
        assert list(rows[0]) == ["__EMPTY", "__EMPTY_1", "Notes", "__EMPTY_2"]
        assert rows[0]["__EMPTY_2"] == 2800

    def test_duplicate_headers(self):
        """Test repeated header names get numeric suffixes."""
        rows = rows_from_values([["Notes", "Notes", "Notes"], ["a", "b", "c"]])
        assert rows == [{"Notes": "a", "Notes_1": "b", "Notes_2": "c"}]

    def test_missing_cells_default(self):
        """Test short rows and None cells take the default."""
        rows = rows_from_values([["A", "B", "C"], ["x", None]])
        assert rows == [{"A": "x", "B": "", "C": ""}]

    def test_custom_default(self):
        """Test the default value can be overridden."""
        rows = rows_from_values([["A", "B"], ["x"]], default=None)
        assert rows == [{"A": "x", "B": None}]

    def test_blank_rows_dropped(self):
        """Test leading and interior blank rows are ignored."""
        rows = rows_from_values([
            [],
            [None, "  "],
            ["A", "B"],
            [None, None],
            ["1", "2"],
        ])
        assert rows == [{"A": "1", "B": "2"}]

    def test_empty_grid(self):
        """Test an empty sheet yields no rows."""
        assert rows_from_values([]) == []
        assert rows_from_values([["Only", "Header"]]) == []


class TestExcelWorkbookSource:
    """Tests for the openpyxl-backed source."""

    def test_load_workbook(self):
        """Test every sheet is decoded in workbook order."""
        payload = xlsx_bytes({
            "Map & Details": [["Pillar", "Meaning"], ["D", "Essential"]],
            "01 2024": [
                ["Section", "Item Name", "Used_Amount"],
                ["Essential !!", "Grocery", 900],
                ["Essential !!", "Vegetable", None],
            ],
        })
        workbook = ExcelWorkbookSource(payload, filename="budget.xlsx").load()

        assert isinstance(workbook, Workbook)
        assert workbook.source == "budget.xlsx"
        assert workbook.sheet_names == ["Map & Details", "01 2024"]
        assert workbook.sheets["01 2024"] == [
            {"Section": "Essential !!", "Item Name": "Grocery", "Used_Amount": 900},
            {"Section": "Essential !!", "Item Name": "Vegetable", "Used_Amount": ""},
        ]

    def test_load_from_path(self, tmp_path):
        """Test a workbook on disk."""
        path = tmp_path / "ledger.xlsx"
        path.write_bytes(xlsx_bytes({"01 2024": [["Item Name"], ["Salary"]]}))
        source = ExcelWorkbookSource(path)
        assert source.name == "ledger.xlsx"
        assert source.load().sheets["01 2024"] == [{"Item Name": "Salary"}]

    def test_missing_file(self, tmp_path):
        """Test an unreadable path is a decode error."""
        with pytest.raises(WorkbookDecodeError):
            ExcelWorkbookSource(tmp_path / "missing.xlsx").load()

    def test_corrupt_bytes(self):
        """Test non-workbook bytes are a decode error."""
        with pytest.raises(WorkbookDecodeError, match="Failed to open"):
            ExcelWorkbookSource(b"definitely not a zip", filename="budget.xlsx").load()

    def test_unsupported_extension(self):
        """Test files outside the allowed formats are rejected."""
        with pytest.raises(WorkbookDecodeError, match="Unsupported workbook type"):
            ExcelWorkbookSource(b"a,b\n1,2", filename="budget.csv").load()


class TestGoogleSheetsWorkbookSource:
    """Tests for the Google Sheets source with a mocked client."""

    @pytest.fixture
    def settings(self, tmp_path):
        credentials = tmp_path / "service-account.json"
        credentials.write_text("{}")
        return GoogleSheetsSettings(
            credentials_path=str(credentials),
            spreadsheet_id="sheet-123",
        )

    @pytest.fixture
    def client(self):
        january = MagicMock(title="01 2024")
        january.get_all_values.return_value = [
            ["Section", "Item Name", "Used_Amount", ""],
            ["Essential !!", "Grocery", "900", ""],
            ["", "", "", ""],
        ]
        legend = MagicMock(title="Map & Details")
        legend.get_all_values.return_value = [["Pillar"], ["D"]]

        client = MagicMock()
        client.open_by_key.return_value.worksheets.return_value = [january, legend]
        return client

    def test_load(self, settings, client):
        """Test worksheets are fetched and keyed by header."""
        source = GoogleSheetsWorkbookSource(settings=settings, client=client)
        workbook = source.load()

        client.open_by_key.assert_called_once_with("sheet-123")
        assert workbook.source == "google-sheets:sheet-123"
        assert workbook.sheet_names == ["01 2024", "Map & Details"]
        assert workbook.sheets["01 2024"] == [
            {"Section": "Essential !!", "Item Name": "Grocery", "Used_Amount": "900", "__EMPTY": ""},
        ]

    def test_values_requested_unformatted(self, settings):
        """Test amounts shown as "1,200" arrive as numbers and survive normalization."""
        january = MagicMock(title="01 2024")
        january.get_all_values.return_value = [["Item Name", "Used_Amount"], ["Grocery", 1200]]
        client = MagicMock()
        client.open_by_key.return_value.worksheets.return_value = [january]

        workbook = GoogleSheetsWorkbookSource(settings=settings, client=client).load()

        january.get_all_values.assert_called_once_with(
            value_render_option=ValueRenderOption.unformatted,
        )
        [record] = normalize_sheet("01 2024", workbook.sheets["01 2024"])
        assert record.amount == 1200

    def test_spreadsheet_not_found(self, settings):
        """Test a missing spreadsheet is a decode error, not retried."""
        client = MagicMock()
        client.open_by_key.side_effect = gspread.SpreadsheetNotFound("sheet-123")
        source = GoogleSheetsWorkbookSource(settings=settings, client=client)

        with pytest.raises(WorkbookDecodeError, match="Spreadsheet not found"):
            source.load()
        assert client.open_by_key.call_count == 1

    def test_not_configured(self, monkeypatch):
        """Test construction fails cleanly without configuration."""
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        with pytest.raises(WorkbookSourceNotConfiguredError):
            GoogleSheetsWorkbookSource()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
