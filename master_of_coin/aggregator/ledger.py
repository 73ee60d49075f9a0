"""
Lender Ledger (Persistence Scan)

Rebuilds every lender's running balance from the full history on every
call. Nothing is cached between calls.

For each month key in ascending order, for each lender:
    residual = max(balance + new_loan - repayment, 0)
and any residual <= 0.01 is clamped to exactly 0.

CRITICAL: The 0.01 tolerance is a business rule ("balance cleared"),
not a numerical accident. Keep the threshold and the clamp exact.
"""

from typing import Iterable, Optional, Sequence

from master_of_coin.models.result import LenderLedgerEntry, LenderStatus
from master_of_coin.models.transaction import Transaction, TransactionKind


CLEARED_TOLERANCE = 0.01


def distinct_lenders(all_data: Iterable[Transaction]) -> list[str]:
    """Lender names in order of first appearance."""
    return list(dict.fromkeys(r.lender for r in all_data if r.lender and r.lender != "N/A"))


def distinct_chrono_keys(records: Iterable[Transaction]) -> list[str]:
    """Distinct month keys, ascending."""
    return sorted({r.chrono_key for r in records})


def clamp_residual(value: float) -> float:
    """Clear anything within the tolerance."""
    return 0.0 if value <= CLEARED_TOLERANCE else value


def status_for(residual: float) -> LenderStatus:
    return LenderStatus.CLEARED if residual <= CLEARED_TOLERANCE else LenderStatus.ACTIVE


class LedgerScan:
    """
    One chronological pass over the history.

    balances holds each lender's running balance after the last scanned
    key; entries holds the ledger for keys inside the window.
    """

    def __init__(self, lenders: Sequence[str]):
        self.lenders = list(lenders)
        self.balances: dict[str, float] = {lender: 0.0 for lender in self.lenders}
        self._entries: dict[str, LenderLedgerEntry] = {}

    @property
    def entries(self) -> list[LenderLedgerEntry]:
        return list(self._entries.values())

    @property
    def total_residual(self) -> float:
        return sum(self.balances.values())

    def run(
        self,
        all_data: Sequence[Transaction],
        keys: Sequence[str],
        window: Optional[set[str]] = None,
    ) -> "LedgerScan":
        """Scan `keys` in order, recording ledger entries for keys in `window`."""
        for key in keys:
            month_rows = [r for r in all_data if r.chrono_key == key]
            in_window = window is not None and key in window
            for lender in self.lenders:
                self._apply(lender, month_rows, in_window)
        return self

    def _apply(self, lender: str, month_rows: list[Transaction], in_window: bool) -> None:
        lender_rows = [r for r in month_rows if r.lender == lender]
        opening = self.balances[lender]
        new_loan = sum(r.amount for r in lender_rows if r.kind == TransactionKind.LIABILITY_IN)
        repayment = sum(r.amount for r in lender_rows if r.kind == TransactionKind.LIABILITY_REPAY)

        residual = clamp_residual(max(opening + new_loan - repayment, 0.0))
        self.balances[lender] = residual

        if not in_window:
            return

        entry = self._entries.get(lender)
        if entry is not None:
            entry.new_loan += new_loan
            entry.repayment += repayment
            entry.residual_amount = residual
            entry.status = status_for(residual)
        elif opening or new_loan or repayment or residual:
            self._entries[lender] = LenderLedgerEntry(
                name=lender,
                opening_balance=opening,
                new_loan=new_loan,
                repayment=repayment,
                residual_amount=residual,
                status=status_for(residual),
            )


def build_lender_ledger(
    selection: Sequence[Transaction],
    all_data: Sequence[Transaction],
) -> tuple[list[LenderLedgerEntry], float]:
    """
    Windowed ledger for the selection plus the total outstanding residual.

    The total is a fresh pass truncated at the selection's latest key,
    so lenders untouched inside the window still count with their
    carried balance. An empty selection falls back to the balances of
    the full, unrestricted scan.
    """
    lenders = distinct_lenders(all_data)
    keys = distinct_chrono_keys(all_data)
    window = {r.chrono_key for r in selection}

    windowed = LedgerScan(lenders).run(all_data, keys, window)

    if not window:
        return windowed.entries, windowed.total_residual

    latest = max(window)
    at_end = LedgerScan(lenders).run(all_data, [k for k in keys if k <= latest])
    return windowed.entries, at_end.total_residual
