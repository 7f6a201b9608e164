from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...database.session import SessionManager
from ..dependencies import get_session_manager

router = APIRouter(tags=["health"])


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/health/ready")
async def ready(manager: SessionManager = Depends(get_session_manager)):
    """Readiness probe: 503 until the database answers."""
    report = await manager.health_check()
    return JSONResponse(report, status_code=200 if report["status"] == "healthy" else 503)
