"""Custom exceptions."""

from mcp_optimizer.errors.exceptions import (
    AuditError,
    BrowserLaunchError,
    DuplicateReportError,
    EngineError,
    LighthouseNotFoundError,
    SessionError,
    ValidationError,
)

__all__ = [
    "AuditError",
    "BrowserLaunchError",
    "DuplicateReportError",
    "EngineError",
    "LighthouseNotFoundError",
    "SessionError",
    "ValidationError",
]
