"""Catch-all informational endpoint."""

from fastapi import APIRouter

router = APIRouter()

INFO_MESSAGE = 'MCP Optimizer running - POST /audit { "url": "https://..." }'


@router.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def info(path: str) -> dict[str, str]:
    """Any path without its own route gets a short usage hint."""
    return {"message": INFO_MESSAGE}
