"""
Main Orchestrator for Master of Coin

This module ties the components together and defines the two flows:
1. Ingest (workbook source -> decode -> normalize -> replace "all data")
2. Calculate (month selection -> aggregate over selection + all data)

DESIGN DECISION: The orchestrator enforces the ingest boundary:
- Decoding is all-or-nothing
- A failed ingest leaves the previous dataset untouched
- The caller gets one generic failure notice; the real error is audited
"""

from typing import Optional
from uuid import UUID

from master_of_coin.aggregator import (
    ALL_MONTHS,
    available_months,
    calculate_financials,
    generate_pillar_trends,
    select_month,
)
from master_of_coin.audit import AuditLogger, configure_logging, create_correlation_id
from master_of_coin.config import get_settings
from master_of_coin.models import CalculationResult, PillarTrendPoint, Transaction
from master_of_coin.normalizer import is_data_sheet, iter_normalized_sheets
from master_of_coin.services.workbook import (
    GoogleSheetsWorkbookSource,
    Workbook,
    WorkbookDecodeError,
    WorkbookSource,
    WorkbookSourceNotConfiguredError,
)


PARSING_FAILURE_MESSAGE = "Parsing failure."


class LedgerSession:
    """
    In-memory holder of the normalized history ("all data").

    Aggregation never mutates the dataset; only a successful ingest
    replaces it, in one assignment.
    """

    def __init__(self, audit_logger: Optional[AuditLogger] = None):
        self._audit_logger = audit_logger or AuditLogger()
        self._all_data: tuple[Transaction, ...] = ()
        self._source_name: Optional[str] = None

    @property
    def all_data(self) -> tuple[Transaction, ...]:
        return self._all_data

    @property
    def source_name(self) -> Optional[str]:
        return self._source_name

    @property
    def is_loaded(self) -> bool:
        return bool(self._all_data)

    def _normalize(self, workbook: Workbook, correlation_id: UUID) -> list[Transaction]:
        records: list[Transaction] = []
        for sheet_name, rows, sheet_records in iter_normalized_sheets(workbook.sheets):
            if not is_data_sheet(sheet_name):
                self._audit_logger.log_sheet_skipped(sheet_name, correlation_id)
                continue
            self._audit_logger.log_sheet_normalized(
                sheet_name=sheet_name,
                row_count=len(rows),
                record_count=len(sheet_records),
                correlation_id=correlation_id,
            )
            records.extend(sheet_records)
        return records

    def ingest_workbook(
        self,
        workbook: Workbook,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[bool, str]:
        """
        Normalize an already decoded workbook and replace the dataset.

        Any failure while normalizing is reported like a decode failure;
        the previous dataset is kept.
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            records = self._normalize(workbook, correlation_id)
        except Exception as e:
            self._audit_logger.log_workbook_decode_failed(
                source=workbook.source,
                error_message=f"Normalization failed: {e}",
                correlation_id=correlation_id,
            )
            return False, PARSING_FAILURE_MESSAGE

        self._all_data = tuple(records)
        self._source_name = workbook.source

        months = available_months(records)
        self._audit_logger.log_ingest_completed(
            source=workbook.source,
            record_count=len(records),
            months=months,
            correlation_id=correlation_id,
        )
        return True, f"Loaded {len(records)} records across {len(months)} months."

    def ingest(
        self,
        source: WorkbookSource,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[bool, str]:
        """
        Decode and normalize a workbook source.

        Returns:
            (success, message)

        On failure the message is always the generic parsing notice and
        the previous dataset is kept.
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            workbook = source.load()
        except WorkbookDecodeError as e:
            self._audit_logger.log_workbook_decode_failed(
                source=source.name,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            return False, PARSING_FAILURE_MESSAGE

        self._audit_logger.log_workbook_loaded(
            source=source.name,
            sheet_count=len(workbook.sheet_names),
            correlation_id=correlation_id,
        )
        return self.ingest_workbook(workbook, correlation_id)

    def months(self) -> list[str]:
        """Display months available for selection."""
        return available_months(self._all_data)

    def calculate(self, month: str = ALL_MONTHS) -> Optional[CalculationResult]:
        """
        Aggregate one month (or "ALL") against the full history.

        Returns None when the selection is empty.
        """
        selection = select_month(self._all_data, month)
        if not selection:
            return None

        result = calculate_financials(selection, self._all_data)
        self._audit_logger.log_aggregation_computed(
            month=month,
            record_count=len(selection),
            lender_count=len(result.liability_breakdown),
        )
        return result

    def selection(self, month: str = ALL_MONTHS) -> list[Transaction]:
        """Records of the selected month, for the transaction table."""
        return select_month(self._all_data, month)

    def pillar_trends(self) -> list[PillarTrendPoint]:
        return generate_pillar_trends(self._all_data)


def create_app_components(
    use_google_sheets: bool = True,
) -> tuple[LedgerSession, Optional[GoogleSheetsWorkbookSource]]:
    """
    Factory function to create all application components.

    Args:
        use_google_sheets: Whether to build the Google Sheets source.
                           Ignored when Google Sheets is not configured.

    Returns:
        (session, google_sheets_source)
    """
    configure_logging(get_settings().app.log_level)

    audit_logger = AuditLogger()
    session = LedgerSession(audit_logger)

    sheets_source = None
    if use_google_sheets:
        try:
            sheets_source = GoogleSheetsWorkbookSource()
        except WorkbookSourceNotConfiguredError:
            sheets_source = None

    return session, sheets_source
