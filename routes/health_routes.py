"""
Health check endpoint.

GET /health - checks the table store's Redis connectivity.
Rules:
- Redis configured but unreachable → "unhealthy" (503) - passcodes can be
  neither issued nor verified.
- Redis not configured → "degraded" (200) - rows live in process memory.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from dependencies import get_redis
from schemas.dto.responses.common import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse, responses={503: {"model": HealthResponse}})
async def health_check(redis=Depends(get_redis)) -> JSONResponse:
    checks: dict[str, str] = {}
    overall = "healthy"

    if redis is None:
        checks["redis"] = "not_configured"
        overall = "degraded"
    else:
        try:
            await redis.ping()
            checks["redis"] = "ok"
        except Exception:
            checks["redis"] = "error"
            overall = "unhealthy"

    status_code = 503 if overall == "unhealthy" else 200
    return JSONResponse(
        status_code=status_code,
        content={"status": overall, "checks": checks},
    )
