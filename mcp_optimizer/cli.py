"""Command line entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from mcp_optimizer.config.settings import get_config, reset_config
from mcp_optimizer.context import build_context
from mcp_optimizer.main import configure_logging, serve

logger = logging.getLogger(__name__)


def apply_env_args(argv: list[str]) -> list[str]:
    """
    Export bare ``KEY=VALUE`` arguments into the environment.

    Returns the remaining arguments for argparse. A lone ``--`` (as left by
    ``npx``-style launchers) is dropped.
    """
    remaining: list[str] = []
    for arg in argv:
        if arg == "--":
            continue
        if "=" in arg and not arg.startswith("-"):
            key, value = arg.split("=", 1)
            if key:
                os.environ[key] = value
                continue
        remaining.append(arg)
    return remaining


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-optimizer",
        description="Lighthouse audit server for HTTP, SSE and stdio clients",
    )
    parser.add_argument("--port", type=int, help="Listening port (sets PORT)")
    parser.add_argument("--audit-port", type=int, help="Fallback listening port (sets AUDIT_PORT)")
    parser.add_argument("--host", help="Listening address (sets AUDIT_HOST)")
    parser.add_argument("--log-level", help="Logging level (sets LOG_LEVEL)")
    return parser


def apply_args(args: argparse.Namespace) -> None:
    """Translate parsed flags into the environment variables config reads."""
    if args.port is not None:
        os.environ["PORT"] = str(args.port)
    if args.audit_port is not None:
        os.environ["AUDIT_PORT"] = str(args.audit_port)
    if args.host:
        os.environ["AUDIT_HOST"] = args.host
    if args.log_level:
        os.environ["LOG_LEVEL"] = args.log_level


def main(argv: list[str] | None = None) -> None:
    """Parse arguments, pick a transport and serve until done."""
    raw_args = sys.argv[1:] if argv is None else argv
    args = build_parser().parse_args(apply_env_args(raw_args))
    apply_args(args)

    try:
        reset_config()
        config = get_config()
        configure_logging(config.log_level)
        context = build_context(config)
        asyncio.run(serve(context))
    except KeyboardInterrupt:
        logger.info("Interrupted")
    except Exception as e:
        print(f"Failed to start services: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
