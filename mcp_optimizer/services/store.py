"""In-memory report store."""

from __future__ import annotations

import logging

from mcp_optimizer.errors.exceptions import DuplicateReportError
from mcp_optimizer.schemas.audit import AuditRecord

logger = logging.getLogger(__name__)


class ReportStore:
    """
    Maps report ids to audit records for the life of the process.

    Insert-only: records are never replaced or evicted. Access happens
    on the event loop only, so no lock guards the mapping; callers on other threads
    must add one around ``put``.
    """

    def __init__(self) -> None:
        self._records: dict[str, AuditRecord] = {}

    def put(self, record: AuditRecord) -> None:
        """Store a record under its id. Ids are never overwritten."""
        if record.id in self._records:
            raise DuplicateReportError(f"Report {record.id} already stored")
        self._records[record.id] = record
        logger.debug(f"Stored report {record.id} for {record.url}")

    def get(self, report_id: str) -> AuditRecord | None:
        """Return the record for ``report_id``, or None if it was never stored."""
        return self._records.get(report_id)

    def __contains__(self, report_id: object) -> bool:
        return report_id in self._records

    def __len__(self) -> int:
        return len(self._records)
