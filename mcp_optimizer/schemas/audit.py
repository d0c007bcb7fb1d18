"""Audit-related Pydantic schemas."""

from datetime import datetime
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
)
from pydantic.alias_generators import to_camel

from mcp_optimizer.schemas.common import FormFactor


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase wire names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _dedupe(categories: list[str] | None) -> list[str] | None:
    """Drop repeated category names, keeping first-seen order."""
    if categories is None:
        return None
    return list(dict.fromkeys(categories))


# === Lighthouse Models ===


class CategoryResult(CamelModel):
    """A Lighthouse category; score is on a 0-1 scale or absent."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    title: str | None = None
    score: float | None = None


class CheckResult(CamelModel):
    """A single Lighthouse audit (check) result."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    title: str | None = None
    score: float | None = None
    score_display_mode: str | None = None


class LighthouseResult(CamelModel):
    """Structured Lighthouse result (LHR); unknown fields are kept verbatim."""

    model_config = ConfigDict(extra="allow")

    categories: dict[str, CategoryResult] = Field(default_factory=dict)
    audits: dict[str, CheckResult] = Field(default_factory=dict)


# === Engine contract ===


class EngineOptions(BaseModel):
    """Options forwarded to the audit engine."""

    emulate_mobile: bool = False
    categories: list[str] | None = None


class EngineResult(BaseModel):
    """What the audit engine hands back, successful or degraded."""

    lhr: LighthouseResult = Field(default_factory=LighthouseResult)
    report: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None


# === Stored state ===


class AuditRecord(BaseModel):
    """
    One completed audit held by the report store.

    ``lhr`` is the engine's structured result; ``report`` is the raw payload
    returned verbatim by report lookups.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    url: str
    fetched_at: datetime
    lhr: LighthouseResult
    report: dict[str, Any]
    error: str | None = None

    @property
    def degraded(self) -> bool:
        return self.error is not None


# === Response Models ===


class AuditSummary(CamelModel):
    """Headline scores for a stored report, as integer percentages."""

    report_id: str
    url: str
    fetched_at: datetime
    performance: int | None = None
    accessibility: int | None = None

    @model_serializer(mode="wrap")
    def _omit_absent_scores(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        return {key: value for key, value in data.items() if value is not None}


class FixSuggestion(CamelModel):
    """Output of the fix heuristic."""

    suggestion: str
    performance: CategoryResult | None = None
    failures: dict[str, CheckResult] | None = None


class AuditResponse(CamelModel):
    """Body returned by ``POST /audit``."""

    summary: AuditSummary
    fix: FixSuggestion | None = None
    error: str | None = None


# === Request Models ===


class AuditRequest(CamelModel):
    """Request model for the audit endpoint; url presence is checked by the orchestrator."""

    url: str | None = None
    categories: list[str] | None = None
    form_factor: FormFactor = FormFactor.DESKTOP
    only_failures: bool = False

    @field_validator("categories")
    @classmethod
    def _unique_categories(cls, value: list[str] | None) -> list[str] | None:
        return _dedupe(value)


class RunAuditArguments(CamelModel):
    """Arguments of the ``lighthouse_run_audit`` tool."""

    url: str = Field(description="The URL to audit, including protocol (http:// or https://)")
    categories: list[str] | None = Field(
        default=None,
        description="Optional Lighthouse categories to run, e.g. ['performance','accessibility']",
    )
    form_factor: FormFactor | None = Field(default=None, description="Emulated form factor")

    def to_request(self) -> AuditRequest:
        return AuditRequest(
            url=self.url,
            categories=self.categories,
            form_factor=self.form_factor or FormFactor.DESKTOP,
        )


class GetReportArguments(CamelModel):
    """Arguments of the ``lighthouse_get_report`` tool."""

    report_id: str = Field(description="The report id returned by `lighthouse_run_audit`")
