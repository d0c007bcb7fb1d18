"""MCP tools exposing the orchestrator to protocol clients."""

from __future__ import annotations

import json
import logging
from typing import Any

from mcp import types
from mcp.server.lowlevel import Server
from pydantic import ValidationError as PydanticValidationError

from mcp_optimizer.core.audit import AuditOrchestrator
from mcp_optimizer.errors.exceptions import AuditError
from mcp_optimizer.schemas.audit import GetReportArguments, RunAuditArguments

logger = logging.getLogger(__name__)

SERVER_NAME = "Lighthouse MCP Server"
RUN_AUDIT_TOOL = "lighthouse_run_audit"
GET_REPORT_TOOL = "lighthouse_get_report"


def _text(text: str) -> types.TextContent:
    return types.TextContent(type="text", text=text)


def _json_text(payload: Any) -> types.TextContent:
    return _text(json.dumps(payload, indent=2))


async def run_audit_tool(
    orchestrator: AuditOrchestrator, arguments: dict[str, Any]
) -> list[types.TextContent]:
    """
    Run an audit and return summary, LHR and report as three text items.

    Failures are reported as a single text item rather than a protocol error.
    """
    try:
        params = RunAuditArguments.model_validate(arguments)
        record = await orchestrator.execute(params.to_request())
    except (PydanticValidationError, AuditError) as e:
        logger.warning(f"{RUN_AUDIT_TOOL} failed: {e}")
        return [_text(f"Lighthouse audit failed: {e}")]

    summary = orchestrator.summarize(record)
    return [
        _json_text(summary.model_dump(mode="json", by_alias=True)),
        _json_text(record.lhr.model_dump(mode="json", by_alias=True)),
        _json_text(record.report),
    ]


async def get_report_tool(
    orchestrator: AuditOrchestrator, arguments: dict[str, Any]
) -> list[types.TextContent]:
    """Return a stored report, or a not-found text item."""
    try:
        params = GetReportArguments.model_validate(arguments)
    except PydanticValidationError as e:
        return [_text(f"Invalid arguments: {e}")]

    report = orchestrator.get_report(params.report_id)
    if report is None:
        return [_text(f"Report not found: {params.report_id}")]
    return [_json_text(report)]


TOOLS = [
    types.Tool(
        name=RUN_AUDIT_TOOL,
        description="Run a Lighthouse audit against a URL and store the report",
        inputSchema=RunAuditArguments.model_json_schema(by_alias=True),
    ),
    types.Tool(
        name=GET_REPORT_TOOL,
        description="Retrieve a previously-run Lighthouse report by reportId",
        inputSchema=GetReportArguments.model_json_schema(by_alias=True),
    ),
]


def build_mcp_server(orchestrator: AuditOrchestrator, version: str | None = None) -> Server:
    """Create the MCP server with the audit tools bound to ``orchestrator``."""
    server: Server = Server(SERVER_NAME, version=version)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return TOOLS

    @server.call_tool()
    async def call_tool(name: str, arguments: dict[str, Any]) -> list[types.TextContent]:
        if name == RUN_AUDIT_TOOL:
            return await run_audit_tool(orchestrator, arguments)
        if name == GET_REPORT_TOOL:
            return await get_report_tool(orchestrator, arguments)
        raise ValueError(f"Unknown tool: {name}")

    return server
