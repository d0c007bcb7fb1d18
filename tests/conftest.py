"""Pytest fixtures for optimizer tests."""

from __future__ import annotations

import json
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from fastapi.testclient import TestClient

from mcp_optimizer.config.settings import Config, reset_config
from mcp_optimizer.context import AppContext, build_context
from mcp_optimizer.core.lighthouse import parse_lighthouse_output
from mcp_optimizer.main import create_app
from mcp_optimizer.schemas.audit import EngineOptions, EngineResult

FIXTURES = Path(__file__).parent / "fixtures"


class StubEngine:
    """Audit engine double that records calls and returns a canned result or raises."""

    def __init__(self, result: EngineResult | None = None, error: Exception | None = None):
        self.result = result or EngineResult()
        self.error = error
        self.calls: list[tuple[str, EngineOptions]] = []

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def __call__(self, url: str, options: EngineOptions) -> EngineResult:
        self.calls.append((url, options))
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture(autouse=True)
def reset_settings() -> Generator[None]:
    """Reset the config singleton around each test."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def lighthouse_json() -> dict[str, Any]:
    """Raw Lighthouse CLI output."""
    with open(FIXTURES / "lighthouse.json") as f:
        return json.load(f)


@pytest.fixture
def engine_result(lighthouse_json: dict[str, Any]) -> EngineResult:
    return parse_lighthouse_output(json.dumps(lighthouse_json))


@pytest.fixture
def stub_engine(engine_result: EngineResult) -> StubEngine:
    return StubEngine(result=engine_result)


@pytest.fixture
def config() -> Config:
    return Config(
        host="127.0.0.1",
        port=5000,
        lighthouse_command="lighthouse",
        audit_timeout=60.0,
        browser_launch_timeout=5,
        log_level="INFO",
    )


@pytest.fixture
def context(config: Config, stub_engine: StubEngine) -> AppContext:
    return build_context(config, engine=stub_engine)


@pytest.fixture
def client(context: AppContext) -> TestClient:
    """Create a test client for the FastAPI app."""
    return TestClient(create_app(context))


@pytest.fixture
def make_engine() -> type[StubEngine]:
    """The stub engine class, for tests that need a failing or custom engine."""
    return StubEngine
