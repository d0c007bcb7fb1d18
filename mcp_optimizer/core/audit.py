"""Audit orchestration: run the engine, store the record, summarize it."""

from __future__ import annotations

import logging
import math
import time
import uuid
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from mcp_optimizer.core.fixer import derive_fix
from mcp_optimizer.errors.exceptions import EngineError, ValidationError
from mcp_optimizer.schemas.audit import (
    AuditRecord,
    AuditRequest,
    AuditSummary,
    EngineOptions,
    EngineResult,
    FixSuggestion,
    LighthouseResult,
)
from mcp_optimizer.schemas.common import FormFactor
from mcp_optimizer.services.store import ReportStore

logger = logging.getLogger(__name__)

AuditEngine = Callable[[str, EngineOptions], Awaitable[EngineResult]]
FixHeuristic = Callable[[LighthouseResult, bool], FixSuggestion]


def new_report_id() -> str:
    """Millisecond timestamp plus 48 random bits."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:12]}"


def to_percent(score: float | None) -> int | None:
    """Convert a 0-1 score to a whole percentage, rounding half up."""
    if score is None:
        return None
    return math.floor(score * 100 + 0.5)


def engine_options(request: AuditRequest) -> EngineOptions:
    """Map an audit request onto engine options."""
    return EngineOptions(
        emulate_mobile=request.form_factor == FormFactor.MOBILE,
        categories=request.categories or None,
    )


class AuditOrchestrator:
    """
    Single entry point for audits, shared by every transport.

    Two call surfaces differ in failure policy: ``execute`` raises
    ``EngineError`` and stores nothing, while ``run_audit`` always returns a
    stored record, degraded when the engine failed.
    """

    def __init__(
        self,
        engine: AuditEngine,
        store: ReportStore,
        fix_heuristic: FixHeuristic = derive_fix,
    ) -> None:
        self.engine = engine
        self.store = store
        self.fix_heuristic = fix_heuristic

    @staticmethod
    def _require_url(request: AuditRequest) -> str:
        if not request.url:
            raise ValidationError("missing url")
        return request.url

    async def _call_engine(self, url: str, options: EngineOptions) -> EngineResult:
        """Invoke the engine once; both raised and error-shaped failures become EngineError."""
        try:
            result = await self.engine(url, options)
        except EngineError:
            raise
        except Exception as e:
            raise EngineError(str(e)) from e

        if result.error:
            raise EngineError(result.error)
        return result

    def _store(self, url: str, result: EngineResult) -> AuditRecord:
        record = AuditRecord(
            id=new_report_id(),
            url=url,
            fetched_at=datetime.now(UTC),
            lhr=result.lhr,
            report=result.report,
            error=result.error,
        )
        self.store.put(record)
        return record

    async def execute(self, request: AuditRequest) -> AuditRecord:
        """
        Run an audit and store the report.

        Raises:
            ValidationError: If the request has no URL.
            EngineError: If the engine failed; nothing is stored.
        """
        url = self._require_url(request)
        result = await self._call_engine(url, engine_options(request))
        record = self._store(url, result)
        logger.info(f"Audit {record.id} completed for {url}")
        return record

    async def run_audit(self, request: AuditRequest) -> AuditRecord:
        """
        Run an audit, degrading engine failures into a stored error record.

        Raises:
            ValidationError: If the request has no URL. The engine is not called.
        """
        url = self._require_url(request)
        try:
            result = await self._call_engine(url, engine_options(request))
        except EngineError as e:
            logger.warning(f"Audit of {url} failed: {e}")
            message = str(e)
            result = EngineResult(lhr=LighthouseResult(), report={"error": message}, error=message)

        record = self._store(url, result)
        logger.info(f"Audit {record.id} stored for {url} (degraded={record.degraded})")
        return record

    def summarize(self, record: AuditRecord) -> AuditSummary:
        """Headline performance and accessibility percentages for a record."""
        categories = record.lhr.categories
        performance = categories.get("performance")
        accessibility = categories.get("accessibility")
        return AuditSummary(
            report_id=record.id,
            url=record.url,
            fetched_at=record.fetched_at,
            performance=to_percent(performance.score) if performance else None,
            accessibility=to_percent(accessibility.score) if accessibility else None,
        )

    def get_report(self, report_id: str) -> dict[str, Any] | None:
        """Raw report payload for ``report_id``, or None if unknown."""
        record = self.store.get(report_id)
        return record.report if record is not None else None

    def derive_fix(self, record: AuditRecord, only_failures: bool = False) -> FixSuggestion:
        return self.fix_heuristic(record.lhr, only_failures)
