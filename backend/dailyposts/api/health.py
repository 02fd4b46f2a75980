from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from dailyposts.api.deps import get_context
from dailyposts.core.context import AppContext

router = APIRouter()


@router.get("")
async def health(ctx: AppContext = Depends(get_context)):
    return {"status": "ok", "app": ctx.settings.app_name}


@router.get("/ready")
async def ready(ctx: AppContext = Depends(get_context)):
    """Readiness probe, includes database connectivity."""
    if not ctx.executor.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {"status": "ready"}
