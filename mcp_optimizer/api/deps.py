"""API dependencies for dependency injection."""

from fastapi import Request

from mcp_optimizer.context import AppContext
from mcp_optimizer.core.audit import AuditOrchestrator
from mcp_optimizer.services.sessions import SessionHub


def get_context(request: Request) -> AppContext:
    """Get the application context attached at startup."""
    return request.app.state.context


def get_orchestrator(request: Request) -> AuditOrchestrator:
    """Get audit orchestrator dependency."""
    return get_context(request).orchestrator


def get_session_hub(request: Request) -> SessionHub:
    """Get stream session hub dependency."""
    return get_context(request).sessions
