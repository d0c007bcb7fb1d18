"""FastAPI application, logging setup and transport selection."""

from __future__ import annotations

import logging
import sys
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from mcp_optimizer import __version__
from mcp_optimizer.api import router
from mcp_optimizer.context import AppContext
from mcp_optimizer.transports import run_stdio, stdio_is_piped

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Log to stderr so stdout stays free for the stdio transport."""
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def create_app(context: AppContext) -> FastAPI:
    """Build the HTTP/SSE application around an existing context."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("MCP Optimizer HTTP/SSE transport started")
        try:
            yield
        finally:
            logger.info("Shutting down MCP Optimizer...")
            await context.aclose()

    app = FastAPI(
        title="MCP Optimizer",
        description="Lighthouse audits for agents over HTTP, SSE and stdio",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context
    app.include_router(router)
    return app


async def run_http(context: AppContext) -> None:
    """
    Serve HTTP and SSE until shutdown.

    uvicorn exits the process if the port cannot be bound.
    """
    config = context.config
    logger.info(f"Starting HTTP/SSE transport on {config.host}:{config.port}")
    server = uvicorn.Server(
        uvicorn.Config(
            create_app(context),
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
            log_config=None,
        )
    )
    await server.serve()


async def serve(
    context: AppContext,
    pipes_detected: Callable[[], bool] = stdio_is_piped,
) -> None:
    """
    Run exactly one transport for the life of the process.

    Stdio wins when both standard streams are pipes and the session can be
    established; otherwise the HTTP/SSE listener runs.
    """
    if pipes_detected():
        logger.info("Standard streams are pipes, starting stdio transport")
        if await run_stdio(context.mcp_server):
            await context.aclose()
            return
        logger.warning("Falling back to HTTP/SSE transport")

    await run_http(context)
