"""Stdio transport and the pipe heuristic that selects it."""

from __future__ import annotations

import contextlib
import logging
import sys
from io import TextIOWrapper
from typing import TextIO

import anyio
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

logger = logging.getLogger(__name__)


def stdio_is_piped(stdin: TextIO | None = None, stdout: TextIO | None = None) -> bool:
    """
    True when neither stdin nor stdout is a terminal.

    That is the signal that a parent process, not a person, is driving us.
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    try:
        return not stdin.isatty() and not stdout.isatty()
    except (AttributeError, ValueError):
        # Closed or replaced streams
        return False


async def run_stdio(server: Server, stdout: TextIO | None = None) -> bool:
    """
    Serve one MCP session over stdin/stdout until the peer closes it.

    Free text written to ``sys.stdout`` is sent to stderr while the session
    runs; protocol frames go to the real stdout.

    Returns False if the session could not be established, True once it has
    ended (cleanly or not).
    """
    real_stdout = stdout or sys.stdout
    established = False
    try:
        protocol_out = anyio.wrap_file(TextIOWrapper(real_stdout.buffer, encoding="utf-8"))
        with contextlib.redirect_stdout(sys.stderr):
            async with stdio_server(stdout=protocol_out) as (read_stream, write_stream):
                established = True
                logger.info("Stdio session established")
                await server.run(
                    read_stream,
                    write_stream,
                    server.create_initialization_options(),
                )
    except Exception as e:
        if not established:
            logger.warning(f"Could not establish stdio session: {e}")
            return False
        logger.error(f"Stdio session failed: {e}")
        return True

    logger.info("Stdio session closed by peer")
    return True
