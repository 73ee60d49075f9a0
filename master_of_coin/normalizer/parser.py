"""
Workbook Normalizer

Turns raw month sheets into a flat, ordered sequence of Transaction
records.

Sheet admission -> row admission -> field resolution -> classification
-> routing. Routing checks three branches in order and each returns:

REALM 1 - INCOME:
- One income record for the first positive of used/earn/budget
- Plus a synthetic Passive_Saving record when earned > used > 0

GIVER-BRIDGE - LIABILITIES:
- Balance_Sheet rows become one reconciliation adjustment
- Otherwise a new loan (earn) and/or a repayment (used, else status)
- Repayments are mirror entries: pillar D, realm Budget

BUDGET:
- Savings for the known fund items, expense for everything else

IMPORTANT: Normalization never raises for a malformed row.
Every step degrades to a default or a skip.
"""

import calendar
import re
from typing import Any, Iterable, Iterator, Mapping, Optional, Sequence

import structlog

from master_of_coin.models.transaction import (
    Pillar,
    Realm,
    Transaction,
    TransactionKind,
)
from master_of_coin.normalizer.fields import ResolvedRow, first_positive, resolve_row
from master_of_coin.normalizer.lender import extract_lender
from master_of_coin.normalizer.protocol import (
    BORROWED_FUND_ITEM,
    HEADER_REPEAT_MARKER,
    INCOME_ITEM,
    INCOME_LABEL,
    LIABILITY_LABEL,
    PASSIVE_SAVING_ITEM,
    RECONCILIATION_ITEM,
    REPAYMENT_ITEM,
    SAVINGS_ITEMS,
    TOTAL_MARKER,
    lookup_protocol,
)


logger = structlog.get_logger(__name__)

LEGEND_SHEET = "Map & Details"
SENTINEL_CHRONO_KEY = "0000-00"

_MONTH_SHEET_RE = re.compile(r"^\d{2}\s\d{4}$")


# =============================================================================
# SHEET LEVEL
# =============================================================================

def is_data_sheet(sheet_name: str) -> bool:
    """Only "MM YYYY" sheets, or sheets mentioning "month", hold transactions."""
    if sheet_name == LEGEND_SHEET:
        return False
    return bool(_MONTH_SHEET_RE.match(sheet_name)) or "month" in sheet_name.lower()


def _month_tokens(sheet_name: str) -> Optional[tuple[int, int]]:
    parts = sheet_name.split()
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        return None
    return int(parts[0]), int(parts[1])


def chrono_key_for(sheet_name: str) -> str:
    """
    Sortable "YYYY-MM" key for a sheet name.

    Anything that is not "<month> <year>" gets the sentinel key, which
    sorts before every real month.
    """
    tokens = _month_tokens(sheet_name)
    if tokens is None:
        return SENTINEL_CHRONO_KEY
    month, year = tokens
    return f"{year:04d}-{month:02d}"


def format_month(sheet_name: str) -> str:
    """"01 2024" -> "January 2024"; other names come back unchanged."""
    tokens = _month_tokens(sheet_name)
    if tokens is None or not 1 <= tokens[0] <= 12:
        return sheet_name
    month, year = tokens
    return f"{calendar.month_name[month]} {year}"


# =============================================================================
# ROW LEVEL
# =============================================================================

def _is_admissible(row: ResolvedRow) -> bool:
    if not row.item or row.item == HEADER_REPEAT_MARKER:
        return False
    return row.label != TOTAL_MARKER and row.item != TOTAL_MARKER


def _resolve_lender(row: ResolvedRow) -> Optional[str]:
    lender = row.explicit_lender
    if lender is None:
        lender = extract_lender(row.notes, row.item)
    if lender == "N/A":
        return None
    return lender or None


class _RowContext:
    """Per-row values shared by the routing branches."""

    def __init__(self, month: str, chrono_key: str, row: ResolvedRow):
        self.month = month
        self.chrono_key = chrono_key
        self.row = row
        self.lender = _resolve_lender(row)
        self.protocol = lookup_protocol(row.item, row.label)

    def record(self, **fields: Any) -> Transaction:
        fields.setdefault("notes", self.row.notes or None)
        return Transaction(month=self.month, chrono_key=self.chrono_key, **fields)


def _is_income_row(ctx: _RowContext) -> bool:
    row = ctx.row
    return (
        row.label == INCOME_LABEL
        or row.item == INCOME_ITEM
        or ctx.protocol.realm == Realm.INCOME
    )


def _is_liability_row(ctx: _RowContext) -> bool:
    row = ctx.row
    return (
        row.label == LIABILITY_LABEL
        or row.item in (BORROWED_FUND_ITEM, RECONCILIATION_ITEM, REPAYMENT_ITEM)
        or ctx.protocol.realm == Realm.LIABILITIES
        or "Repayment" in row.item
    )


def _income_records(ctx: _RowContext) -> list[Transaction]:
    row = ctx.row
    inflow = first_positive(row.used_amount, row.earn_amount, row.budget_amount)
    if inflow <= 0:
        return []

    records = [ctx.record(
        kind=TransactionKind.INCOME,
        realm=Realm.INCOME,
        pillar=Pillar.NONE,
        item=row.item or INCOME_ITEM,
        amount=inflow,
        classification="Standard Inflow",
        description="Primary income source.",
    )]

    # Rounding-off savings the sheet never logs explicitly
    if row.earn_amount > row.used_amount > 0:
        records.append(ctx.record(
            kind=TransactionKind.SAVINGS,
            realm=Realm.BUDGET,
            pillar=Pillar.B,
            item=PASSIVE_SAVING_ITEM,
            amount=row.earn_amount - row.used_amount,
            notes="OFC rounding difference",
            classification="Passive Saving",
            description="Rounding-off saving from salary.",
        ))

    return records


def _reconciliation_record(ctx: _RowContext) -> list[Transaction]:
    row = ctx.row
    total_owed = row.earn_amount
    total_paid = row.repayment_status if row.has_repayment_status else row.used_amount
    balance = total_owed - total_paid
    if balance < 0:
        logger.debug(
            "reconciliation_skipped",
            month=ctx.month,
            owed=total_owed,
            paid=total_paid,
        )
        return []

    notes = f"Owed: {total_owed:g}, Paid: {total_paid:g}. {row.notes}".strip()
    return [ctx.record(
        kind=TransactionKind.ADJUSTMENT,
        realm=Realm.LIABILITIES,
        pillar=Pillar.NONE,
        item=RECONCILIATION_ITEM,
        amount=balance,
        subtype="reconciliation",
        classification="Reconciliation",
        description="Maintains the Iron Bank status.",
        notes=notes,
    )]


def _liability_records(ctx: _RowContext) -> list[Transaction]:
    row = ctx.row
    if row.item == RECONCILIATION_ITEM:
        return _reconciliation_record(ctx)

    records = []

    # New borrowing (taken amount)
    if row.earn_amount > 0 and row.item != REPAYMENT_ITEM:
        records.append(ctx.record(
            kind=TransactionKind.LIABILITY_IN,
            realm=Realm.LIABILITIES,
            pillar=Pillar.NONE,
            item=row.item or BORROWED_FUND_ITEM,
            lender=ctx.lender,
            amount=row.earn_amount,
            classification="Debt Inflow",
            description="Funds borrowed from external sources.",
        ))

    # Repayment (paid amount); jumps out of the budget total
    repayment = row.used_amount
    if not repayment:
        repayment = row.repayment_status if row.has_repayment_status else 0.0
    if repayment > 0:
        records.append(ctx.record(
            kind=TransactionKind.LIABILITY_REPAY,
            realm=Realm.BUDGET,
            pillar=Pillar.D,
            item=REPAYMENT_ITEM,
            lender=ctx.lender,
            amount=repayment,
            classification="Debt Service",
            description="Execution of liability repayment.",
            is_mirror_entry=True,
        ))

    return records


def _budget_records(ctx: _RowContext) -> list[Transaction]:
    row = ctx.row
    amount = first_positive(row.used_amount, row.earn_amount, row.budget_amount)
    if amount <= 0:
        return []

    kind = TransactionKind.SAVINGS if row.item in SAVINGS_ITEMS else TransactionKind.EXPENSE
    return [ctx.record(
        kind=kind,
        realm=ctx.protocol.realm,
        pillar=ctx.protocol.pillar,
        category=row.label or None,
        item=row.item,
        amount=amount,
        classification=ctx.protocol.classification,
        description=ctx.protocol.description,
    )]


def normalize_row(month: str, chrono_key: str, raw: Mapping[str, Any]) -> list[Transaction]:
    """Normalize one raw row into zero or more records."""
    row = resolve_row(raw)
    if not _is_admissible(row):
        return []

    ctx = _RowContext(month, chrono_key, row)

    if _is_income_row(ctx):
        return _income_records(ctx)
    if _is_liability_row(ctx):
        return _liability_records(ctx)
    return _budget_records(ctx)


# =============================================================================
# WORKBOOK LEVEL
# =============================================================================

def normalize_sheet(sheet_name: str, rows: Iterable[Mapping[str, Any]]) -> list[Transaction]:
    """
    Normalize one sheet.

    Non-month sheets (the legend, scratch tabs) produce nothing.
    """
    if not is_data_sheet(sheet_name):
        logger.debug("sheet_skipped", sheet=sheet_name)
        return []

    chrono_key = chrono_key_for(sheet_name)
    records: list[Transaction] = []
    for raw in rows:
        records.extend(normalize_row(sheet_name, chrono_key, raw))
    return records


def iter_normalized_sheets(
    sheets: Mapping[str, Sequence[Mapping[str, Any]]],
) -> Iterator[tuple[str, Sequence[Mapping[str, Any]], list[Transaction]]]:
    """Yield (sheet_name, rows, records) for every sheet in workbook order."""
    for sheet_name, rows in sheets.items():
        yield sheet_name, rows, normalize_sheet(sheet_name, rows)


def normalize_workbook(sheets: Mapping[str, Sequence[Mapping[str, Any]]]) -> list[Transaction]:
    """Normalize every sheet in workbook order and concatenate the records."""
    records: list[Transaction] = []
    for _, _, sheet_records in iter_normalized_sheets(sheets):
        records.extend(sheet_records)
    return records
