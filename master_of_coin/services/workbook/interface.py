"""
Abstract Workbook Source Interface

DESIGN DECISION: Spreadsheet decoding sits behind an interface.
The normalizer only ever sees a Workbook: ordered sheet names, and per
sheet a list of rows mapping column name -> cell value with "" for
missing cells. This allows us to:
1. Read uploaded .xlsx files and Google Sheets the same way
2. Build workbooks by hand in tests
3. Keep spreadsheet libraries out of the core

Decoding is all-or-nothing: a source either returns a complete Workbook
or raises WorkbookDecodeError.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional, Sequence

from pydantic import BaseModel, Field


Row = dict[str, Any]


class Workbook(BaseModel):
    """A decoded workbook, sheets in workbook order."""

    source: str = Field(
        default="workbook",
        description="Where the workbook came from (file name or spreadsheet ID)"
    )
    sheets: dict[str, list[Row]] = Field(default_factory=dict)

    @property
    def sheet_names(self) -> list[str]:
        return list(self.sheets)


class WorkbookSource(ABC):
    """
    Abstract interface for anything that can produce a Workbook.

    Implementations must wrap their library errors in WorkbookDecodeError.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the source."""
        pass

    @abstractmethod
    def load(self) -> Workbook:
        """
        Decode the whole workbook.

        Returns:
            The decoded workbook

        Raises:
            WorkbookDecodeError: If any part of the workbook cannot be read
        """
        pass


class WorkbookError(Exception):
    """Base exception for workbook operations."""
    pass


class WorkbookDecodeError(WorkbookError):
    """The workbook could not be decoded. No partial data is returned."""
    pass


class WorkbookSourceNotConfiguredError(WorkbookError):
    """The requested source has no configuration."""
    pass


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _header_names(header: Sequence[Any], width: int) -> list[str]:
    """
    Column names for a header row.

    Blank headers become __EMPTY, __EMPTY_1, ...; repeated names get
    _1, _2 suffixes.
    """
    names: list[str] = []
    seen: dict[str, int] = {}
    empty_count = 0
    for index in range(width):
        value = header[index] if index < len(header) else None
        if _is_blank(value):
            name = "__EMPTY" if empty_count == 0 else f"__EMPTY_{empty_count}"
            empty_count += 1
        else:
            name = str(value).strip()
            if name in seen:
                seen[name] += 1
                name = f"{name}_{seen[name]}"
            else:
                seen[name] = 0
        names.append(name)
    return names


def rows_from_values(values: Iterable[Sequence[Any]], default: Optional[Any] = "") -> list[Row]:
    """
    Convert a raw cell grid into header-keyed rows.

    The first non-blank row is the header. Fully blank rows are dropped.
    Missing and None cells become `default`.
    """
    grid = [list(row) for row in values]
    grid = [row for row in grid if not all(_is_blank(cell) for cell in row)]
    if not grid:
        return []

    width = max(len(row) for row in grid)
    header = _header_names(grid[0], width)

    rows = []
    for raw in grid[1:]:
        row: Row = {}
        for index, column in enumerate(header):
            value = raw[index] if index < len(raw) else None
            row[column] = default if value is None else value
        rows.append(row)
    return rows
