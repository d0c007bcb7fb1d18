"""Process-wide application state, built once at startup and passed to every adapter."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from mcp.server.lowlevel import Server

from mcp_optimizer import __version__
from mcp_optimizer.config.settings import Config
from mcp_optimizer.core.audit import AuditEngine, AuditOrchestrator
from mcp_optimizer.core.lighthouse import LighthouseEngine
from mcp_optimizer.core.tools import build_mcp_server
from mcp_optimizer.services.browser import BrowserLauncher
from mcp_optimizer.services.sessions import SessionHub
from mcp_optimizer.services.store import ReportStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    """Everything the transports share: one store, one orchestrator, one session hub."""

    config: Config
    store: ReportStore
    orchestrator: AuditOrchestrator
    sessions: SessionHub
    mcp_server: Server
    launcher: BrowserLauncher | None = None

    async def aclose(self) -> None:
        """Release engine resources."""
        if self.launcher is not None:
            await self.launcher.shutdown()


def build_context(config: Config, engine: AuditEngine | None = None) -> AppContext:
    """
    Wire up the application.

    Without an explicit ``engine`` the Lighthouse CLI engine is used, backed by
    a Playwright browser launcher owned by the context.
    """
    launcher: BrowserLauncher | None = None
    if engine is None:
        launcher = BrowserLauncher(launch_timeout=config.browser_launch_timeout)
        engine = LighthouseEngine(
            launcher,
            command=config.lighthouse_command,
            timeout=config.audit_timeout,
        )

    store = ReportStore()
    orchestrator = AuditOrchestrator(engine=engine, store=store)
    return AppContext(
        config=config,
        store=store,
        orchestrator=orchestrator,
        sessions=SessionHub(),
        mcp_server=build_mcp_server(orchestrator, version=__version__),
        launcher=launcher,
    )
