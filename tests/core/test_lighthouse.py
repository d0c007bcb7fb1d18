"""Tests for the Lighthouse engine."""

from __future__ import annotations

import json
from contextlib import asynccontextmanager

import pytest

from mcp_optimizer.core import lighthouse
from mcp_optimizer.core.lighthouse import (
    LighthouseEngine,
    build_lighthouse_command,
    parse_lighthouse_output,
)
from mcp_optimizer.errors.exceptions import BrowserLaunchError
from mcp_optimizer.schemas.audit import EngineOptions
from mcp_optimizer.services.browser import BrowserInstance


class FakeLauncher:
    """Launcher double tracking whether the browser was released."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.launched = 0
        self.closed = 0

    @asynccontextmanager
    async def launch(self):
        if self.fail:
            raise BrowserLaunchError("Chromium failed to start: no display")
        self.launched += 1
        try:
            yield BrowserInstance(browser=None, cdp_port=9333)  # type: ignore[arg-type]
        finally:
            self.closed += 1


class TestBuildCommand:
    def test_desktop_defaults(self):
        command = build_lighthouse_command("https://example.com", 9222, EngineOptions())

        assert command[:2] == ["lighthouse", "https://example.com"]
        assert "--port=9222" in command
        assert "--output=json" in command
        assert "--preset=desktop" in command
        assert not any(arg.startswith("--only-categories") for arg in command)

    def test_mobile_and_categories(self):
        options = EngineOptions(emulate_mobile=True, categories=["performance", "seo"])

        command = build_lighthouse_command("https://example.com", 9222, options, "npx-lighthouse")

        assert command[0] == "npx-lighthouse"
        assert "--form-factor=mobile" in command
        assert "--preset=desktop" not in command
        assert "--only-categories=performance,seo" in command


class TestParseOutput:
    def test_extracts_categories_and_audits(self, lighthouse_json):
        result = parse_lighthouse_output(json.dumps(lighthouse_json))

        assert result.error is None
        assert result.lhr.categories["performance"].score == 0.873
        audit = result.lhr.audits["color-contrast"]
        assert audit.score_display_mode == "notApplicable"
        assert result.report == lighthouse_json

    def test_nested_lhr(self, lighthouse_json):
        wrapped = {"lhr": lighthouse_json, "artifacts": {}}

        result = parse_lighthouse_output(json.dumps(wrapped))

        assert result.lhr.categories["accessibility"].score == 0.915
        assert result.report == wrapped

    def test_unknown_fields_survive(self, lighthouse_json):
        result = parse_lighthouse_output(json.dumps(lighthouse_json))
        dumped = result.lhr.model_dump(mode="json", by_alias=True)

        assert dumped["lighthouseVersion"] == "12.2.1"
        assert dumped["audits"]["render-blocking-resources"]["details"]["overallSavingsMs"] == 480


class TestLighthouseEngine:
    @pytest.mark.asyncio
    async def test_success(self, monkeypatch, lighthouse_json):
        launcher = FakeLauncher()
        seen: list[list[str]] = []

        def fake_run(command: list[str], timeout: float) -> str:
            seen.append(command)
            return json.dumps(lighthouse_json)

        monkeypatch.setattr(lighthouse, "_check_lighthouse_available", lambda command: None)
        monkeypatch.setattr(lighthouse, "_run_lighthouse_sync", fake_run)

        engine = LighthouseEngine(launcher)  # type: ignore[arg-type]
        result = await engine("https://example.com", EngineOptions(emulate_mobile=True))

        assert result.error is None
        assert "--port=9333" in seen[0]
        assert launcher.closed == 1

    @pytest.mark.asyncio
    async def test_cli_failure_degrades_and_closes_browser(self, monkeypatch):
        launcher = FakeLauncher()

        def fake_run(command: list[str], timeout: float) -> str:
            raise RuntimeError("Navigation failed: net::ERR_NAME_NOT_RESOLVED")

        monkeypatch.setattr(lighthouse, "_check_lighthouse_available", lambda command: None)
        monkeypatch.setattr(lighthouse, "_run_lighthouse_sync", fake_run)

        engine = LighthouseEngine(launcher)  # type: ignore[arg-type]
        result = await engine("https://example.invalid", EngineOptions())

        assert result.error is not None
        assert "ERR_NAME_NOT_RESOLVED" in result.error
        assert result.report == {"error": result.error}
        assert result.lhr.categories == {}
        assert launcher.launched == 1
        assert launcher.closed == 1

    @pytest.mark.asyncio
    async def test_missing_cli_degrades(self, monkeypatch):
        launcher = FakeLauncher()
        monkeypatch.setattr(lighthouse.shutil, "which", lambda command: None)

        engine = LighthouseEngine(launcher, command="lighthouse")  # type: ignore[arg-type]
        result = await engine("https://example.com", EngineOptions())

        assert result.error is not None
        assert "not found in PATH" in result.error
        assert launcher.launched == 0

    @pytest.mark.asyncio
    async def test_browser_launch_failure_degrades(self, monkeypatch):
        monkeypatch.setattr(lighthouse, "_check_lighthouse_available", lambda command: None)

        engine = LighthouseEngine(FakeLauncher(fail=True))  # type: ignore[arg-type]
        result = await engine("https://example.com", EngineOptions())

        assert result.error == "Chromium failed to start: no display"

    @pytest.mark.asyncio
    async def test_garbage_output_degrades(self, monkeypatch):
        monkeypatch.setattr(lighthouse, "_check_lighthouse_available", lambda command: None)
        monkeypatch.setattr(lighthouse, "_run_lighthouse_sync", lambda command, timeout: "not json")

        engine = LighthouseEngine(FakeLauncher())  # type: ignore[arg-type]
        result = await engine("https://example.com", EngineOptions())

        assert result.error is not None
        assert result.error.startswith("Failed to parse Lighthouse output")
