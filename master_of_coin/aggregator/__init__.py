"""Aggregation package."""

from master_of_coin.aggregator.calculator import (
    ALL_MONTHS,
    available_months,
    calculate_financials,
    generate_pillar_trends,
    performance_ratios,
    select_month,
)
from master_of_coin.aggregator.ledger import (
    CLEARED_TOLERANCE,
    LedgerScan,
    build_lender_ledger,
)

__all__ = [
    "ALL_MONTHS",
    "CLEARED_TOLERANCE",
    "LedgerScan",
    "available_months",
    "build_lender_ledger",
    "calculate_financials",
    "generate_pillar_trends",
    "performance_ratios",
    "select_month",
]
