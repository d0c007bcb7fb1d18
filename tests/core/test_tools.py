"""Tests for the MCP tool handlers."""

from __future__ import annotations

import json

import pytest

from mcp_optimizer.context import AppContext
from mcp_optimizer.core.audit import AuditOrchestrator
from mcp_optimizer.core.tools import (
    GET_REPORT_TOOL,
    RUN_AUDIT_TOOL,
    SERVER_NAME,
    TOOLS,
    build_mcp_server,
    get_report_tool,
    run_audit_tool,
)
from mcp_optimizer.services.store import ReportStore


class TestRunAuditTool:
    @pytest.mark.asyncio
    async def test_success_returns_summary_lhr_and_report(self, context: AppContext):
        content = await run_audit_tool(
            context.orchestrator,
            {"url": "https://example.com", "formFactor": "mobile"},
        )

        assert len(content) == 3
        summary = json.loads(content[0].text)
        lhr = json.loads(content[1].text)
        report = json.loads(content[2].text)

        assert summary["url"] == "https://example.com"
        assert summary["performance"] == 87
        assert summary["reportId"] in context.store
        assert lhr["categories"]["performance"]["score"] == 0.873
        assert report["lighthouseVersion"] == "12.2.1"

    @pytest.mark.asyncio
    async def test_engine_failure_is_text_not_exception(self, make_engine):
        engine = make_engine(error=RuntimeError("Chrome exited"))
        orchestrator = AuditOrchestrator(engine=engine, store=ReportStore())

        content = await run_audit_tool(orchestrator, {"url": "https://example.com"})

        assert len(content) == 1
        assert content[0].type == "text"
        assert content[0].text.startswith("Lighthouse audit failed:")
        assert "Chrome exited" in content[0].text
        assert len(orchestrator.store) == 0

    @pytest.mark.asyncio
    async def test_missing_url_is_reported_as_text(self, context: AppContext, stub_engine):
        content = await run_audit_tool(context.orchestrator, {})

        assert content[0].text.startswith("Lighthouse audit failed:")
        assert stub_engine.call_count == 0


class TestGetReportTool:
    @pytest.mark.asyncio
    async def test_returns_stored_report(self, context: AppContext, engine_result):
        summary = json.loads(
            (await run_audit_tool(context.orchestrator, {"url": "https://example.com"}))[0].text
        )

        content = await get_report_tool(context.orchestrator, {"reportId": summary["reportId"]})

        assert json.loads(content[0].text) == engine_result.report

    @pytest.mark.asyncio
    async def test_unknown_id(self, context: AppContext):
        content = await get_report_tool(context.orchestrator, {"reportId": "nope"})
        assert content[0].text == "Report not found: nope"


def test_tool_schemas_use_wire_names():
    schemas = {tool.name: tool.inputSchema for tool in TOOLS}

    assert set(schemas) == {RUN_AUDIT_TOOL, GET_REPORT_TOOL}
    assert "formFactor" in schemas[RUN_AUDIT_TOOL]["properties"]
    assert schemas[RUN_AUDIT_TOOL]["required"] == ["url"]
    assert schemas[GET_REPORT_TOOL]["required"] == ["reportId"]


def test_build_mcp_server(context: AppContext):
    server = build_mcp_server(context.orchestrator, version="9.9.9")
    assert server.name == SERVER_NAME
    assert server.version == "9.9.9"
