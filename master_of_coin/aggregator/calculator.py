"""
Financial Calculation Engine

DESIGN DECISION: Aggregation is a pure function of (selection, all data).
Every call rebuilds totals, the lender ledger and pillar rollups from
scratch, so two calls with the same inputs return identical results.

BRIDGE RULE: Loan repayments are mirror entries.
- They are NOT operating expenses (the budget total)
- They DO count toward their pillar and the lender ledger
- They DO count toward outflow through debt clearance
"""

import math
from typing import Iterable, Sequence

from master_of_coin.aggregator.ledger import build_lender_ledger, distinct_chrono_keys
from master_of_coin.models.result import (
    CalculationResult,
    FundTotals,
    PerformanceRatios,
    PillarLineItem,
    PillarRollup,
    PillarTrendPoint,
)
from master_of_coin.models.transaction import Pillar, Transaction, TransactionKind


ALL_MONTHS = "ALL"


def _sum_amounts(records: Iterable[Transaction]) -> float:
    return sum(r.amount for r in records)


def _of_kind(records: Iterable[Transaction], kind: TransactionKind) -> list[Transaction]:
    return [r for r in records if r.kind == kind]


def _items_total(records: Iterable[Transaction], *items: str) -> float:
    return _sum_amounts(r for r in records if r.item in items)


def clamp(value: float, low: float = 0, high: float = 100) -> float:
    return min(max(value, low), high)


def _score(value: float) -> int:
    # Half-up rounding after the clamp, so results stay in [0, 100].
    # Infinities clamp to a bound; NaN scores 0.
    if math.isnan(value):
        return 0
    return int(math.floor(clamp(value) + 0.5))


def performance_ratios(
    income: float,
    operating_expenses: float,
    savings: float,
    outflow: float,
) -> PerformanceRatios:
    """
    Overall, discipline and savings-execution scores.

    A zero income is treated as 1 so the ratios stay finite.
    """
    base = income or 1
    return PerformanceRatios(
        overall=_score((1 - outflow / base) * 100),
        discipline=_score((1 - operating_expenses / base) * 100),
        savings_execution=_score((savings / base) * 100),
    )


def build_pillar_rollups(selection: Iterable[Transaction]) -> dict[Pillar, PillarRollup]:
    """Pillar totals for expense, savings and repayment records."""
    pillars = {pillar: PillarRollup() for pillar in Pillar}
    for record in selection:
        if not record.counts_toward_pillar:
            continue
        rollup = pillars[record.pillar]
        rollup.total += record.amount
        rollup.items.append(PillarLineItem(
            item=record.item,
            amount=record.amount,
            description=record.description,
            lender=record.lender,
        ))
    return pillars


def calculate_financials(
    selection: Sequence[Transaction],
    all_data: Sequence[Transaction],
) -> CalculationResult:
    """
    Compute the dashboard result for a selection of the history.

    Args:
        selection: Records of the selected month(s)
        all_data: The complete normalized history

    Returns:
        A freshly built CalculationResult
    """
    income = _sum_amounts(_of_kind(selection, TransactionKind.INCOME))
    savings = _sum_amounts(_of_kind(selection, TransactionKind.SAVINGS))
    operating_expenses = _sum_amounts(
        r for r in _of_kind(selection, TransactionKind.EXPENSE) if not r.is_mirror_entry
    )
    debt_clearance = _sum_amounts(_of_kind(selection, TransactionKind.LIABILITY_REPAY))

    outflow = operating_expenses + debt_clearance + savings

    breakdown, total_residual = build_lender_ledger(selection, all_data)

    funds = FundTotals(
        esf=_items_total(selection, "ESF"),
        msf=_items_total(selection, "MSF"),
        ofc=_items_total(selection, "OFC", "Passive_Saving"),
        daily_tea=_items_total(selection, "Daily Tea"),
    )

    return CalculationResult(
        income=income,
        savings=savings,
        expenses=operating_expenses,
        debt_clearance=debt_clearance,
        liability=total_residual,
        liability_breakdown=breakdown,
        net_position=income - outflow,
        pillars=build_pillar_rollups(selection),
        funds=funds,
        performance=performance_ratios(income, operating_expenses, savings, outflow),
    )


def generate_pillar_trends(all_data: Sequence[Transaction]) -> list[PillarTrendPoint]:
    """Per-month pillar sums across the whole history, oldest first."""
    trends = []
    for key in distinct_chrono_keys(all_data):
        month_rows = [r for r in all_data if r.chrono_key == key]
        sums = {pillar: 0.0 for pillar in Pillar}
        for record in month_rows:
            if record.counts_toward_pillar:
                sums[record.pillar] += record.amount
        trends.append(PillarTrendPoint(
            month=month_rows[0].month if month_rows else "Unknown",
            chrono_key=key,
            pillars=sums,
            total=sum(sums.values()),
        ))
    return trends


def available_months(all_data: Iterable[Transaction]) -> list[str]:
    """Distinct display months in chronological order."""
    keys = {r.month: r.chrono_key for r in all_data}
    return sorted(keys, key=lambda month: (keys[month], month))


def select_month(all_data: Sequence[Transaction], month: str = ALL_MONTHS) -> list[Transaction]:
    """All data for "ALL", otherwise the records of one display month."""
    if month == ALL_MONTHS:
        return list(all_data)
    return [r for r in all_data if r.month == month]
