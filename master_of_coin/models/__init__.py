"""
Data Models Package

This package contains all Pydantic models used by Master of Coin.
Normalized transactions, aggregation results and audit events all
conform to these schemas.
"""

from master_of_coin.models.transaction import (
    PILLAR_PROTOCOL,
    Pillar,
    PillarMetadata,
    ProtocolEntry,
    Realm,
    Transaction,
    TransactionKind,
)
from master_of_coin.models.result import (
    CalculationResult,
    FundTotals,
    LenderLedgerEntry,
    LenderStatus,
    PerformanceRatios,
    PillarLineItem,
    PillarRollup,
    PillarTrendPoint,
)
from master_of_coin.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "PILLAR_PROTOCOL",
    "Pillar",
    "PillarMetadata",
    "ProtocolEntry",
    "Realm",
    "Transaction",
    "TransactionKind",
    # Result models
    "CalculationResult",
    "FundTotals",
    "LenderLedgerEntry",
    "LenderStatus",
    "PerformanceRatios",
    "PillarLineItem",
    "PillarRollup",
    "PillarTrendPoint",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
