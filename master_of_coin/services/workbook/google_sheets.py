"""
Google Sheets Workbook Source

DESIGN DECISION: The monthly finance workbook often lives in Google
Sheets, where the family edits it. Reading it directly avoids an
export/upload round trip.

TRADEOFFS:
- Each worksheet is one API call (fine for a few dozen month tabs)
- Values are requested unformatted, so "1,200" or "₹1,200.00" on screen
  arrives as the number 1200; empty cells still arrive as ""
"""

from typing import Optional

import gspread
from gspread.utils import ValueRenderOption
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from master_of_coin.config import GoogleSheetsSettings, get_settings
from master_of_coin.services.workbook.interface import (
    Workbook,
    WorkbookDecodeError,
    WorkbookSource,
    WorkbookSourceNotConfiguredError,
    rows_from_values,
)


SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets.readonly",
    "https://www.googleapis.com/auth/drive.readonly",
]


class GoogleSheetsWorkbookSource(WorkbookSource):
    """
    Reads every worksheet of the configured spreadsheet.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(
        self,
        settings: Optional[GoogleSheetsSettings] = None,
        client: Optional[gspread.Client] = None,
    ):
        self._settings = settings or get_settings().google_sheets_or_none
        if self._settings is None:
            raise WorkbookSourceNotConfiguredError(
                "Google Sheets is not configured "
                "(set GOOGLE_SHEETS_CREDENTIALS_PATH and GOOGLE_SHEETS_SPREADSHEET_ID)"
            )
        self._client = client

    @property
    def name(self) -> str:
        return f"google-sheets:{self._settings.spreadsheet_id}"

    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=SCOPES,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise WorkbookDecodeError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise WorkbookDecodeError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    @retry(
        retry=retry_if_not_exception_type((WorkbookDecodeError, gspread.SpreadsheetNotFound)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _fetch_values(self) -> dict[str, list[list]]:
        spreadsheet = self.connect().open_by_key(self._settings.spreadsheet_id)
        return {
            worksheet.title: worksheet.get_all_values(
                value_render_option=ValueRenderOption.unformatted,
            )
            for worksheet in spreadsheet.worksheets()
        }

    def load(self) -> Workbook:
        """Fetch all worksheets and convert them into header-keyed rows."""
        try:
            values = self._fetch_values()
        except WorkbookDecodeError:
            raise
        except gspread.SpreadsheetNotFound:
            raise WorkbookDecodeError(
                f"Spreadsheet not found: {self._settings.spreadsheet_id}"
            )
        except Exception as e:
            raise WorkbookDecodeError(f"Failed to read spreadsheet: {e}")

        return Workbook(
            source=self.name,
            sheets={title: rows_from_values(grid) for title, grid in values.items()},
        )
