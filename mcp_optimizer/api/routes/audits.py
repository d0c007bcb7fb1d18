"""One-shot HTTP audit endpoint."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from mcp_optimizer.api.deps import get_orchestrator
from mcp_optimizer.core.audit import AuditOrchestrator
from mcp_optimizer.errors.exceptions import ValidationError
from mcp_optimizer.schemas.audit import AuditRequest, AuditResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/audit")
async def create_audit(
    request: Request,
    orchestrator: AuditOrchestrator = Depends(get_orchestrator),  # noqa: B008
) -> JSONResponse:
    """
    Run a Lighthouse audit and return its summary and fix suggestion.

    Engine failures do not change the status code: the response is still 200
    with ``error`` set and no fix. A body without ``url`` is rejected with 400
    before the engine is touched.
    """
    try:
        body = await request.body()
        payload: Any = json.loads(body or b"{}")
    except Exception as e:
        logger.warning(f"Could not read audit request body: {e}")
        return _error(500, str(e))

    if not isinstance(payload, dict):
        return _error(400, "request body must be a JSON object")

    try:
        audit_request = AuditRequest.model_validate(payload)
    except PydanticValidationError as e:
        return _error(400, str(e))

    if not audit_request.url:
        return _error(400, "missing url")

    try:
        record = await orchestrator.run_audit(audit_request)
        fix = None
        if not record.degraded:
            fix = orchestrator.derive_fix(record, only_failures=audit_request.only_failures)
        response = AuditResponse(
            summary=orchestrator.summarize(record),
            fix=fix,
            error=record.error,
        )
    except ValidationError as e:
        return _error(400, str(e))
    except Exception as e:
        logger.exception(f"Error running audit: {e}")
        return _error(500, str(e))

    return JSONResponse(content=response.model_dump(mode="json", by_alias=True))
