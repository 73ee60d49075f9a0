"""
Audit Logger

DESIGN DECISION: Every ingest and aggregation is logged.
This provides:
1. Traceability of which workbook is loaded in memory
2. A record of which sheets were skipped and why
3. The real decode error behind the generic "Parsing failure." notice

The audit logger:
- Is synchronous, like the rest of the core
- Never raises; logging must not break an ingest
- Supports correlation IDs to trace the events of one ingest
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from master_of_coin.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at `level`."""
    logging.basicConfig(format="%(message)s", level=getattr(logging, level.upper(), logging.INFO))


class AuditLogger:
    """
    Central audit logging service.

    Writes structured events to the local log. Keeps the last events
    in memory so the UI can show what happened during an ingest.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("master_of_coin.audit")
        self._history: list[AuditEvent] = []
        self._history_size = history_size

    @property
    def history(self) -> list[AuditEvent]:
        """Most recent events, oldest first."""
        return list(self._history)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._history.append(event)
        if len(self._history) > self._history_size:
            del self._history[: len(self._history) - self._history_size]

    def log_workbook_loaded(
        self,
        source: str,
        sheet_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log a successful workbook decode."""
        self.log(AuditEventBuilder.workbook_loaded(
            source=source,
            sheet_count=sheet_count,
            correlation_id=correlation_id,
        ))

    def log_workbook_decode_failed(
        self,
        source: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a workbook decode failure."""
        self.log(AuditEventBuilder.workbook_decode_failed(
            source=source,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_sheet_skipped(
        self,
        sheet_name: str,
        correlation_id: UUID,
    ) -> None:
        """Log a non-month sheet being skipped."""
        self.log(AuditEventBuilder.sheet_skipped(
            sheet_name=sheet_name,
            correlation_id=correlation_id,
        ))

    def log_sheet_normalized(
        self,
        sheet_name: str,
        row_count: int,
        record_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log how many records a sheet produced."""
        self.log(AuditEventBuilder.sheet_normalized(
            sheet_name=sheet_name,
            row_count=row_count,
            record_count=record_count,
            correlation_id=correlation_id,
        ))

    def log_ingest_completed(
        self,
        source: str,
        record_count: int,
        months: list[str],
        correlation_id: UUID,
    ) -> None:
        """Log dataset replacement after a successful ingest."""
        self.log(AuditEventBuilder.ingest_completed(
            source=source,
            record_count=record_count,
            months=months,
            correlation_id=correlation_id,
        ))

    def log_aggregation_computed(
        self,
        month: str,
        record_count: int,
        lender_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an aggregation call."""
        self.log(AuditEventBuilder.aggregation_computed(
            month=month,
            record_count=record_count,
            lender_count=lender_count,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of an ingest and pass it through every step.
    """
    return uuid4()
