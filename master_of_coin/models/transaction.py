"""
Canonical Transaction Model for Master of Coin

Every spreadsheet row that survives normalization becomes one or more
Transaction records. Nothing downstream mutates them: the aggregator only
reads, filters and sums.

DESIGN DECISION: Pillar, realm and kind are closed enumerations.
The protocol never grows new pillars at runtime, so a plain str Enum is
enough; there is no class hierarchy behind them.
"""

from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionKind(str, Enum):
    """
    Aggregation bucket a record contributes to.

    Exactly one per record.
    """
    INCOME = "income"
    LIABILITY_IN = "liability_in"        # New borrowing from a lender
    LIABILITY_REPAY = "liability_repay"  # Repayment; always a mirror entry
    EXPENSE = "expense"
    SAVINGS = "savings"
    ADJUSTMENT = "adjustment"            # Balance_Sheet reconciliation


class Pillar(str, Enum):
    """
    Fixed taxonomy tag of the protocol.

    N/A is reserved for income and liability records.
    U means "uncategorized budget item".
    """
    D = "D"
    O = "O"
    B = "B"
    I = "I"
    U = "U"
    NONE = "N/A"


class Realm(str, Enum):
    """Coarse grouping, kept apart from kind on purpose."""
    INCOME = "Income"
    LIABILITIES = "Liabilities"
    BUDGET = "Budget"
    NONE = "N/A"


# =============================================================================
# PROTOCOL MODELS
# =============================================================================

class ProtocolEntry(BaseModel):
    """One row of the static item -> classification table."""
    model_config = ConfigDict(frozen=True)

    pillar: Pillar
    realm: Realm
    classification: str
    description: str


class PillarMetadata(BaseModel):
    """Display metadata for a pillar."""
    model_config = ConfigDict(frozen=True)

    order: int = Field(ge=0)
    tag: Pillar
    header: str
    priority: str = Field(
        ...,
        pattern="^(High|Medium|Systemic|Flexible|N/A)$",
    )


PILLAR_PROTOCOL: dict[Pillar, PillarMetadata] = {
    Pillar.D: PillarMetadata(order=1, tag=Pillar.D, header="Essential !!", priority="High"),
    Pillar.O: PillarMetadata(order=2, tag=Pillar.O, header="Need to Understand !!", priority="Medium"),
    Pillar.B: PillarMetadata(order=3, tag=Pillar.B, header="Remind Me !!", priority="Systemic"),
    Pillar.I: PillarMetadata(order=4, tag=Pillar.I, header="Things Which I do !!", priority="Flexible"),
    Pillar.U: PillarMetadata(order=5, tag=Pillar.U, header="Uncategorized", priority="N/A"),
    Pillar.NONE: PillarMetadata(order=0, tag=Pillar.NONE, header="N/A", priority="N/A"),
}


# =============================================================================
# CORE TRANSACTION MODEL
# =============================================================================

class Transaction(BaseModel):
    """
    A normalized transaction record.

    CRITICAL: amount is never negative. The normalizer skips non-positive
    candidates instead of emitting them.

    chrono_key is "YYYY-MM" for real month sheets and "0000-00" for
    anything else, so it sorts before every valid month.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    month: str = Field(
        ...,
        description="Display month label, as given by the sheet name"
    )
    chrono_key: str = Field(
        ...,
        pattern=r"^\d{4}-\d{2}$",
        description="Sortable year-month key"
    )
    kind: TransactionKind
    pillar: Pillar
    realm: Realm
    item: str = Field(
        ...,
        description="Canonical label for the transaction line"
    )
    amount: float = Field(
        ...,
        ge=0,
        description="Amount in the source's unit, never negative"
    )
    lender: Optional[str] = Field(
        default=None,
        description="Counterparty for liability_in / liability_repay"
    )
    is_mirror_entry: bool = Field(
        default=False,
        description="Repayment excluded from operating expenses"
    )

    # Informational only
    classification: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None
    subtype: Optional[str] = Field(
        default=None,
        pattern="^(budget|spent|reconciliation)$",
    )

    @model_validator(mode='after')
    def validate_protocol(self) -> 'Transaction':
        """Enforce the record-level protocol invariants."""
        if self.is_mirror_entry != (self.kind == TransactionKind.LIABILITY_REPAY):
            raise ValueError("Mirror entries must be exactly the liability repayments")

        if self.kind == TransactionKind.INCOME and self.pillar != Pillar.NONE:
            raise ValueError("Income records cannot carry a pillar")

        return self

    @property
    def counts_toward_pillar(self) -> bool:
        """Expense, savings and repayment records roll up into pillars."""
        return self.pillar != Pillar.NONE and self.kind in (
            TransactionKind.EXPENSE,
            TransactionKind.SAVINGS,
            TransactionKind.LIABILITY_REPAY,
        )
