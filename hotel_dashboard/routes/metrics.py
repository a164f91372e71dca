"""
Prometheus metrics endpoint.

Example:
    GET /metrics

    Response:
        # HELP dashboard_property_fetches_total Per-property aggregation passes (success and failure)
        # TYPE dashboard_property_fetches_total counter
        dashboard_property_fetches_total{property_id="311271",status="success"} 12.0
        ...
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics", response_class=Response)
async def metrics() -> Any:
    """Expose upstream, aggregation and token-cache metrics in Prometheus text format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
