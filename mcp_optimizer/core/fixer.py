"""Fix suggestions derived from a Lighthouse result."""

from __future__ import annotations

from mcp_optimizer.schemas.audit import CheckResult, FixSuggestion, LighthouseResult
from mcp_optimizer.schemas.common import ScoreDisplayMode

DEFAULT_SUGGESTION = "Review performance opportunities and apply targeted fixes"


def _effective_score(check: CheckResult) -> float | None:
    """Score used for failure detection; not-applicable checks count as passing."""
    if check.score_display_mode == ScoreDisplayMode.NOT_APPLICABLE.value:
        return 1.0
    return check.score


def failing_checks(lhr: LighthouseResult) -> dict[str, CheckResult]:
    """Checks whose effective score is a number below 1."""
    failures: dict[str, CheckResult] = {}
    for check_id, check in lhr.audits.items():
        score = _effective_score(check)
        if score is not None and score < 1:
            failures[check_id] = check
    return failures


def derive_fix(lhr: LighthouseResult, only_failures: bool = False) -> FixSuggestion:
    """
    Build a fix suggestion for a Lighthouse result.

    Args:
        lhr: The structured Lighthouse result
        only_failures: Also return the failing checks

    Returns:
        FixSuggestion with the performance category (or None) and, when
        requested, the failing checks keyed by audit id.
    """
    return FixSuggestion(
        suggestion=DEFAULT_SUGGESTION,
        performance=lhr.categories.get("performance"),
        failures=failing_checks(lhr) if only_failures else None,
    )
