"""Connectivity check for both upstream systems, independent of the main report."""

from __future__ import annotations

from typing import Optional, Sequence

import httpx
import structlog

from hotel_dashboard.analytics.client import build_analytics_client
from hotel_dashboard.cache import AccessTokenCache
from hotel_dashboard.cloudbeds_api.client import CloudbedsClient
from hotel_dashboard.config import GA_PROPERTY_ID, GOOGLE_SERVICE_ACCOUNT
from hotel_dashboard.models.properties import Property
from hotel_dashboard.schemas.dashboard import (
    AnalyticsStatus,
    CloudbedsStatus,
    ConnectionStatus,
    PropertyConnection,
)
from hotel_dashboard.utils.datetime import utc_now

logger = structlog.get_logger(__name__)


async def check_analytics(
    http: httpx.AsyncClient,
    token_cache: AccessTokenCache,
    service_account_json: Optional[str],
    property_id: str,
) -> AnalyticsStatus:
    status = AnalyticsStatus()
    if not service_account_json:
        return status

    try:
        client = build_analytics_client(http, token_cache, service_account_json, property_id)
        await client.run_report(
            {
                "dateRanges": [{"startDate": "yesterday", "endDate": "today"}],
                "metrics": [{"name": "sessions"}],
            }
        )
    except Exception as e:
        logger.error("analytics_connection_failed", error=str(e))
        return status

    status.connected = True
    status.last_sync = utc_now().isoformat()
    return status


async def check_cloudbeds(http: httpx.AsyncClient, properties: Sequence[Property]) -> CloudbedsStatus:
    client = CloudbedsClient(http)
    status = CloudbedsStatus()

    # One property at a time, the check is not latency sensitive
    for prop in properties:
        connected = await client.check_connection(prop)
        status.properties.append(PropertyConnection(name=prop.name, id=prop.id, connected=connected))

    connected_count = sum(1 for p in status.properties if p.connected)
    status.connected = connected_count > 0
    status.last_sync = utc_now().isoformat() if connected_count > 0 else None
    status.connected_properties = f"{connected_count}/{len(properties)}"
    return status


async def get_connection_status(
    http: httpx.AsyncClient,
    properties: Sequence[Property],
    token_cache: AccessTokenCache,
    service_account_json: Optional[str] = GOOGLE_SERVICE_ACCOUNT,
    ga_property_id: str = GA_PROPERTY_ID,
) -> ConnectionStatus:
    """
    Report whether each upstream system is reachable with the configured credentials.

    Never raises; an unreachable system is reported as disconnected.

    Returns:
        ConnectionStatus
    """
    analytics = await check_analytics(http, token_cache, service_account_json, ga_property_id)
    cloudbeds = await check_cloudbeds(http, properties)

    logger.info(
        "connection_status_checked",
        analytics_connected=analytics.connected,
        cloudbeds_connected=cloudbeds.connected_properties,
    )
    return ConnectionStatus(google_analytics=analytics, cloudbeds=cloudbeds)
