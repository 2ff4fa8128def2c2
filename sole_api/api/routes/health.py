from __future__ import annotations

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from sole_api.core.config import settings

router = APIRouter(tags=["Health"])

_STARTED_AT = time.monotonic()


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
def health_check() -> dict:
    """Liveness check.

    Confirms the process is serving requests. Used by load balancers and
    never rate limited.
    """

    return {
        "status": "ok",
        "timestamp": _now_iso(),
        "uptime": round(time.monotonic() - _STARTED_AT, 3),
        "environment": settings.app_env,
    }


@router.get("/health/ready")
def readiness_check(request: Request) -> JSONResponse:
    """Readiness check: 200 when every dependency answers, 503 otherwise."""

    checks: dict[str, dict[str, str]] = {"server": {"status": "ok"}}

    healthy, error = request.app.state.database.check_connection()
    if healthy:
        checks["database"] = {"status": "ok"}
    else:
        checks["database"] = {
            "status": "error",
            "message": error or "Database connection failed",
        }

    all_healthy = all(check["status"] == "ok" for check in checks.values())
    return JSONResponse(
        status_code=200 if all_healthy else 503,
        content={
            "status": "healthy" if all_healthy else "unhealthy",
            "checks": checks,
            "timestamp": _now_iso(),
        },
    )
