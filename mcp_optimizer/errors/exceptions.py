"""Custom exception classes for the optimizer."""


class AuditError(Exception):
    """Base exception for audit failures."""

    pass


class ValidationError(AuditError):
    """Exception for input validation failures."""

    pass


class EngineError(AuditError):
    """The audit engine raised or returned an error-shaped result."""

    pass


class LighthouseNotFoundError(EngineError):
    """Raised when Lighthouse CLI is not found in PATH."""

    pass


class BrowserLaunchError(EngineError):
    """Raised when the headless browser cannot be started."""

    pass


class SessionError(AuditError):
    """Exception for malformed or undeliverable stream-session messages."""

    pass


class DuplicateReportError(AuditError):
    """Raised when a report id is stored twice."""

    pass
