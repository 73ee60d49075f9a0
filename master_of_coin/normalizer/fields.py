"""
Field Resolution

Column names have drifted across sheet generations. Every logical field
is resolved by trying an ordered list of column names and taking the
first present, non-zero value. All historical variants stay supported.

Cell coercion follows spreadsheet-to-JSON semantics:
- an empty cell ("") is 0
- an absent column (None) or unparseable text is NaN
- 0 and NaN both count as "not present" in a fallback chain
"""

import math
from datetime import date, datetime
from typing import Any, Mapping, Optional, Sequence

from pydantic import BaseModel


# Ordered fallback chains, oldest sheet generation last
LABEL_COLUMNS = ("Section", "Basic Format")
ITEM_COLUMNS = ("Item Name", "__EMPTY")
LENDER_COLUMNS = ("Giver_Name",)
NOTES_COLUMNS = ("Notes", "__EMPTY_4")
EARN_COLUMNS = ("Earn_Amount", "Earn Amount", "Taken_Amount", "Taken Amount")
USED_COLUMNS = ("Used_Amount", "Used Amount", "Paid Amount", "Repayment", "__EMPTY_2")
BUDGET_COLUMNS = ("Budget Amount", "__EMPTY_1")
REPAYMENT_STATUS_COLUMN = "Repayment_Status"


def to_number(value: Any) -> float:
    """
    Coerce a cell to a float.

    Returns NaN when the cell cannot be read as a number.
    """
    if value is None:
        return math.nan
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (date, datetime)):
        return math.nan

    if isinstance(value, (int, float)):
        number = value
    else:
        text = str(value).strip()
        if not text:
            return 0.0
        if "_" in text:
            return math.nan
        number = text

    try:
        return _finite(float(number))
    except (ValueError, OverflowError):
        return math.nan


def _finite(number: float) -> float:
    # "inf", "Infinity" and "1e400" are not amounts
    return number if math.isfinite(number) else math.nan


def is_present(value: float) -> bool:
    """A number counts as present when it is neither 0 nor NaN."""
    return not math.isnan(value) and value != 0


def first_number(row: Mapping[str, Any], columns: Sequence[str]) -> float:
    """First present number among `columns`, else 0."""
    for column in columns:
        number = to_number(row.get(column))
        if is_present(number):
            return number
    return 0.0


def first_positive(*values: float) -> float:
    """First strictly positive value, else 0."""
    for value in values:
        if not math.isnan(value) and value > 0:
            return value
    return 0.0


def _stringify(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def first_text(row: Mapping[str, Any], columns: Sequence[str]) -> str:
    """First non-empty cell among `columns`, as stripped text."""
    for column in columns:
        value = row.get(column)
        if value is None or value == "" or value is False:
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if not is_present(float(value)):
                continue
        return _stringify(value).strip()
    return ""


class ResolvedRow(BaseModel):
    """
    The logical fields of one raw row after fallback resolution.

    repayment_status keeps NaN when the column is absent or unreadable;
    the liability rules distinguish "no status" from "status of 0".
    """

    label: str = ""
    item: str = ""
    lender: str = ""
    notes: str = ""
    earn_amount: float = 0.0
    used_amount: float = 0.0
    budget_amount: float = 0.0
    repayment_status: float = math.nan

    @property
    def has_repayment_status(self) -> bool:
        return not math.isnan(self.repayment_status)

    @property
    def explicit_lender(self) -> Optional[str]:
        if not self.lender or self.lender == "N/A":
            return None
        return self.lender


def resolve_row(row: Mapping[str, Any]) -> ResolvedRow:
    """Resolve every logical field of a raw row."""
    return ResolvedRow(
        label=first_text(row, LABEL_COLUMNS),
        item=first_text(row, ITEM_COLUMNS),
        lender=first_text(row, LENDER_COLUMNS),
        notes=first_text(row, NOTES_COLUMNS),
        earn_amount=first_number(row, EARN_COLUMNS),
        used_amount=first_number(row, USED_COLUMNS),
        budget_amount=first_number(row, BUDGET_COLUMNS),
        repayment_status=to_number(row.get(REPAYMENT_STATUS_COLUMN)),
    )
