"""
Health and readiness check endpoints for container orchestration.
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from hotel_dashboard.dependencies import get_properties
from hotel_dashboard.models.properties import Property

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health_check() -> JSONResponse:
    """
    Liveness endpoint. Returns 200 while the process is running.

    Example:
        >>> GET /health
        {"status": "ok"}
    """
    return JSONResponse(content={"status": "ok"})


@router.get("/ready")
def readiness_check(properties: list[Property] = Depends(get_properties)) -> JSONResponse:
    """
    Readiness endpoint.

    Returns 200 when at least one property is configured, 503 otherwise. Upstream
    APIs are not contacted here; use /api/connection-status for that.

    Example:
        >>> GET /ready
        {"status": "ready", "checks": {"properties": 5}}
    """
    checks = {"properties": len(properties)}

    if properties:
        return JSONResponse(content={"status": "ready", "checks": checks})

    logger.error("readiness_check_failed", reason="no_properties_configured")
    return JSONResponse(status_code=503, content={"status": "not ready", "checks": checks})
