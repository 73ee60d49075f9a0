"""
Aggregation Result Models

These are value objects built fresh on every aggregation call.
They have no identity beyond the call that produced them and are never
persisted. Display code renders them as-is.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from master_of_coin.models.transaction import Pillar


class LenderStatus(str, Enum):
    """Ledger status of a lender within the aggregation window."""
    ACTIVE = "Active"
    CLEARED = "Cleared"


class LenderLedgerEntry(BaseModel):
    """
    One lender's position for the selected window.

    opening_balance is the residual carried in from before the window;
    residual_amount is the balance at the last key the lender was seen.
    """

    name: str
    opening_balance: float = 0.0
    new_loan: float = 0.0
    repayment: float = 0.0
    residual_amount: float = Field(
        default=0.0,
        ge=0,
        description="Outstanding principal, clamped at zero"
    )
    status: LenderStatus = LenderStatus.ACTIVE


class PillarLineItem(BaseModel):
    """A single contribution to a pillar's total."""

    item: str
    amount: float
    description: Optional[str] = None
    lender: Optional[str] = None


class PillarRollup(BaseModel):
    """Running total and contributing items for one pillar."""

    total: float = 0.0
    items: list[PillarLineItem] = Field(default_factory=list)


class FundTotals(BaseModel):
    """Named fund totals looked up by item."""

    esf: float = 0.0
    msf: float = 0.0
    ofc: float = 0.0
    daily_tea: float = 0.0


class PerformanceRatios(BaseModel):
    """Integer scores in [0, 100]."""

    overall: int = Field(ge=0, le=100)
    discipline: int = Field(ge=0, le=100)
    savings_execution: int = Field(ge=0, le=100)


class CalculationResult(BaseModel):
    """
    Everything the dashboard needs for one selection.

    CRITICAL: expenses excludes mirror entries (loan repayments).
    Repayments are reported through debt_clearance, the lender ledger
    and their pillar instead.
    """

    income: float
    savings: float
    expenses: float = Field(
        ...,
        description="Operating expenses, mirror entries excluded"
    )
    debt_clearance: float = Field(
        default=0.0,
        description="Sum of liability repayments in the selection"
    )
    liability: float = Field(
        ...,
        description="Total outstanding residual as of the selection end"
    )
    liability_breakdown: list[LenderLedgerEntry] = Field(default_factory=list)
    net_position: float
    pillars: dict[Pillar, PillarRollup]
    funds: FundTotals
    performance: PerformanceRatios

    @property
    def active_lenders(self) -> list[LenderLedgerEntry]:
        return [e for e in self.liability_breakdown if e.status == LenderStatus.ACTIVE]

    @property
    def cleared_lenders(self) -> list[LenderLedgerEntry]:
        return [e for e in self.liability_breakdown if e.status == LenderStatus.CLEARED]


class PillarTrendPoint(BaseModel):
    """Per-pillar sums for one month of history."""

    month: str
    chrono_key: str
    pillars: dict[Pillar, float]
    total: float
