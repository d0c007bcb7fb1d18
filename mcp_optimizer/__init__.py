"""MCP Optimizer - Lighthouse audits over HTTP, SSE and stdio."""

__version__ = "0.1.0"

from mcp_optimizer.core.audit import AuditOrchestrator  # noqa: E402
from mcp_optimizer.schemas.audit import AuditRecord, AuditRequest, AuditSummary  # noqa: E402
from mcp_optimizer.services.store import ReportStore  # noqa: E402

__all__ = [
    "__version__",
    "AuditOrchestrator",
    "AuditRecord",
    "AuditRequest",
    "AuditSummary",
    "ReportStore",
]
