"""
Audit Models for Master of Coin

Every ingest and aggregation is logged as a structured event.
This provides:
1. Traceability of which workbook produced the in-memory dataset
2. Visibility into skipped sheets (legends, notes, scratch tabs)
3. Debugging information when a workbook fails to decode

DESIGN DECISION: Audit events are local structured logs only.
Nothing here is persisted; the core has no storage surface.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Ingest
    WORKBOOK_LOADED = "workbook_loaded"
    WORKBOOK_DECODE_FAILED = "workbook_decode_failed"
    SHEET_SKIPPED = "sheet_skipped"
    SHEET_NORMALIZED = "sheet_normalized"
    INGEST_COMPLETED = "ingest_completed"

    # Aggregation
    AGGREGATION_COMPUTED = "aggregation_computed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every ingest creates a handful of these, tied together by
    correlation_id.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'workbook', 'sheet', 'selection')"
    )
    entity_name: Optional[str] = Field(
        default=None,
        description="Name of the entity (sheet name, workbook source, month)"
    )
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one ingest)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_name": self.entity_name,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.workbook_loaded("budget.xlsx", 14, correlation_id)
        event = AuditEventBuilder.sheet_skipped("Map & Details", correlation_id)
    """

    @staticmethod
    def workbook_loaded(
        source: str,
        sheet_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WORKBOOK_LOADED,
            entity_type="workbook",
            entity_name=source,
            correlation_id=correlation_id,
            description=f"Workbook decoded: {source}",
            details={
                "sheet_count": sheet_count,
            },
        )

    @staticmethod
    def workbook_decode_failed(
        source: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.WORKBOOK_DECODE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="workbook",
            entity_name=source,
            correlation_id=correlation_id,
            description=f"Workbook could not be decoded: {source}",
            error_message=error_message,
        )

    @staticmethod
    def sheet_skipped(
        sheet_name: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SHEET_SKIPPED,
            severity=AuditSeverity.DEBUG,
            entity_type="sheet",
            entity_name=sheet_name,
            correlation_id=correlation_id,
            description=f"Sheet is not a month sheet: {sheet_name}",
        )

    @staticmethod
    def sheet_normalized(
        sheet_name: str,
        row_count: int,
        record_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SHEET_NORMALIZED,
            severity=AuditSeverity.DEBUG,
            entity_type="sheet",
            entity_name=sheet_name,
            correlation_id=correlation_id,
            description=f"Sheet {sheet_name}: {row_count} rows -> {record_count} records",
            details={
                "row_count": row_count,
                "record_count": record_count,
            },
        )

    @staticmethod
    def ingest_completed(
        source: str,
        record_count: int,
        months: list[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INGEST_COMPLETED,
            entity_type="workbook",
            entity_name=source,
            correlation_id=correlation_id,
            description=f"Ingested {record_count} records across {len(months)} months",
            details={
                "record_count": record_count,
                "months": months,
            },
        )

    @staticmethod
    def aggregation_computed(
        month: str,
        record_count: int,
        lender_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.AGGREGATION_COMPUTED,
            severity=AuditSeverity.DEBUG,
            entity_type="selection",
            entity_name=month,
            correlation_id=correlation_id,
            description=f"Aggregated {record_count} records for {month}",
            details={
                "record_count": record_count,
                "lender_count": lender_count,
            },
        )
