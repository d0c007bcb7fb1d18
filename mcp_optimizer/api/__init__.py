"""HTTP API package."""

from fastapi import APIRouter

from mcp_optimizer.api.routes import audits, info, sse

router = APIRouter()
router.include_router(audits.router, tags=["audits"])
router.include_router(sse.router, tags=["sse"])
# Must stay last: matches every path
router.include_router(info.router)
