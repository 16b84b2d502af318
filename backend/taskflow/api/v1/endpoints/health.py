"""
Health endpoints

- /health       - liveness plus live push connection count
- /health/ready - readiness (database reachable)
"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
import time

from taskflow import __version__
from taskflow.core.config import settings
from taskflow.core.database import get_session_local
from taskflow.core.logging_config import logger


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(request: Request):
    registry = getattr(request.app.state, "registry", None)
    return {
        "status": "healthy",
        "service": settings.APP_NAME.lower(),
        "version": __version__,
        "connections": len(registry) if registry is not None else 0
    }


@router.get("/ready")
async def readiness_check():
    start = time.time()
    try:
        async with get_session_local()() as session:
            await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"[HealthCheck] Database check failed: {e}")
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": str(e)}
        )
    return {
        "status": "ready",
        "database": {"status": "healthy", "latency_ms": round((time.time() - start) * 1000, 2)}
    }
