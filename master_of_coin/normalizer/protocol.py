"""
The DOBI Protocol

Fixed lookup tables that classify spreadsheet rows.

DESIGN DECISION: The protocol is a plain mapping keyed by the canonical
item (or section label) string. The label-text overrides are applied as
a second pass because label text is the more reliable signal in some
sheet generations.
"""

from typing import Optional

from master_of_coin.models.transaction import Pillar, ProtocolEntry, Realm


def _entry(pillar: Pillar, realm: Realm, classification: str, description: str) -> ProtocolEntry:
    return ProtocolEntry(
        pillar=pillar,
        realm=realm,
        classification=classification,
        description=description,
    )


PROTOCOL_MAP: dict[str, ProtocolEntry] = {
    # Realm 1: inflows and liabilities
    "Salary": _entry(Pillar.NONE, Realm.INCOME, "Standard Inflow", "Primary income source."),
    "Borrowed Fund": _entry(Pillar.NONE, Realm.LIABILITIES, "Debt Inflow", "Funds taken from external sources."),
    "Balance_Sheet": _entry(Pillar.NONE, Realm.LIABILITIES, "Reconciliation", "Maintains the Iron Bank status."),
    # D - Essential
    "TIME": _entry(Pillar.D, Realm.BUDGET, "Saving/Fixed", "Monthly rent or survival time-cost."),
    "ESF": _entry(Pillar.D, Realm.BUDGET, "Education Fund", "Education Spending Fund for future fees."),
    "Daily Tea": _entry(Pillar.D, Realm.BUDGET, "Discipline Anchor", "Micro-metric for daily financial consistency."),
    "MSF": _entry(Pillar.D, Realm.BUDGET, "Medical Fund", "Medical Spending Fund for family health."),
    "Loan Repayment": _entry(Pillar.D, Realm.BUDGET, "Debt Service", "Execution of liability repayment."),
    # O - Need to understand
    "Cylinder": _entry(Pillar.O, Realm.BUDGET, "Operational", "Monthly utility (Gas)."),
    "Grocery": _entry(Pillar.O, Realm.BUDGET, "Operational", "Household food and supplies."),
    "Vegetable": _entry(Pillar.O, Realm.BUDGET, "Operational", "Fresh produce spending."),
    "Daily Spending": _entry(Pillar.O, Realm.BUDGET, "Operational", "Variable household daily costs."),
    "Occasionally": _entry(Pillar.O, Realm.BUDGET, "Operational", "Lifestyle optimization (Parties/Dining)."),
    # B - Remind me
    "EMI": _entry(Pillar.B, Realm.BUDGET, "Fixed Obligation", "Equated Monthly Installments."),
    "OFC": _entry(Pillar.B, Realm.BUDGET, "Passive Saving", "The rounding-off saving from Realm 1."),
    "Passive_Saving": _entry(Pillar.B, Realm.BUDGET, "Passive Saving", "The rounding-off saving from Realm 1."),
    "Bills": _entry(Pillar.B, Realm.BUDGET, "Fixed Obligation", "Recurring utility and service bills."),
    # I - Things which I do
    "Travelling": _entry(Pillar.I, Realm.BUDGET, "Lifestyle", "Daily movement and travel charges."),
    "Recharge": _entry(Pillar.I, Realm.BUDGET, "Lifestyle", "Mobile and digital connectivity."),
    "FFF": _entry(Pillar.I, Realm.BUDGET, "Documentation", "Form Filling Fees for administrative needs."),
    "Unpredictable": _entry(Pillar.I, Realm.BUDGET, "Volatile", "Buffer for unexpected spending."),
    "Purchase": _entry(Pillar.I, Realm.BUDGET, "Asset", "Acquisition of personal items or assets."),
}

# Checked in order; the first matching phrase wins
LABEL_OVERRIDES: tuple[tuple[tuple[str, ...], Pillar], ...] = (
    (("essential",), Pillar.D),
    (("need to understand",), Pillar.O),
    (("remind me",), Pillar.B),
    (("things which i do", "things which i did"), Pillar.I),
)

# Budget items booked as savings rather than expenses
SAVINGS_ITEMS = frozenset({"TIME", "ESF", "MSF", "OFC", "Passive_Saving"})

# Section label / item values with routing meaning
INCOME_LABEL = "Income"
INCOME_ITEM = "Salary"
LIABILITY_LABEL = "Liability"
BORROWED_FUND_ITEM = "Borrowed Fund"
RECONCILIATION_ITEM = "Balance_Sheet"
REPAYMENT_ITEM = "Loan Repayment"
PASSIVE_SAVING_ITEM = "Passive_Saving"
TOTAL_MARKER = "Total"
HEADER_REPEAT_MARKER = "Item Name"

UNCATEGORIZED = _entry(Pillar.U, Realm.BUDGET, "Other", "")


def lookup_protocol(item: str, label: str) -> ProtocolEntry:
    """
    Classify a row.

    Table lookup by item, then by label; unknown rows are uncategorized
    budget items. A pillar phrase in the label overrides the table.
    """
    entry = PROTOCOL_MAP.get(item) or PROTOCOL_MAP.get(label) or UNCATEGORIZED

    override = label_override(label)
    if override is not None:
        entry = entry.model_copy(update={"pillar": override, "realm": Realm.BUDGET})

    return entry


def label_override(label: str) -> Optional[Pillar]:
    """Pillar forced by the section label text, if any."""
    lowered = label.lower()
    for phrases, pillar in LABEL_OVERRIDES:
        if any(phrase in lowered for phrase in phrases):
            return pillar
    return None
