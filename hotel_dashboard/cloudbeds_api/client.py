"""
Client for the Cloudbeds reservations API.

Pages are walked strictly sequentially per property with a fixed pause
between pages to stay under the Cloudbeds rate limit (~10 req/sec). The pause
is per property only: properties fetched concurrently do not coordinate with
each other. Nothing is retried; a non-success page aborts that fetch.
"""

from __future__ import annotations

import asyncio
import time
from datetime import date
from typing import Any, Dict, List, Optional

import httpx
import structlog

from hotel_dashboard.config import (
    CLOUDBEDS_API_URL,
    CLOUDBEDS_PAGE_DELAY_SECONDS,
    CLOUDBEDS_PAGE_SIZE,
)
from hotel_dashboard.exceptions import UpstreamError
from hotel_dashboard.metrics import upstream_latency, upstream_requests
from hotel_dashboard.models.properties import Property
from hotel_dashboard.models.reservations import Reservation
from hotel_dashboard.models.rooms import RoomRecord, UnassignedRooms
from hotel_dashboard.models.summaries import OperationalSnapshot
from hotel_dashboard.utils.datetime import utc_today

logger = structlog.get_logger(__name__)

SOURCE = "cloudbeds"
RESERVATIONS_ENDPOINT = "getReservationsWithRateDetails"
UNASSIGNED_ROOMS_ENDPOINT = "getRoomsUnassigned"
DASHBOARD_ENDPOINT = "getDashboard"
RESERVATIONS_LIST_ENDPOINT = "getReservations"


async def pause(seconds: float) -> None:
    """Fixed inter-page delay."""
    if seconds > 0:
        await asyncio.sleep(seconds)


class CloudbedsClient:
    """
    Thin async wrapper over the Cloudbeds v1.3 endpoints the dashboard reads.

    Args:
        http: Shared httpx.AsyncClient
        base_url: Cloudbeds API base URL
        page_size: Reservations per page
        page_delay: Seconds to wait between consecutive pages of one property
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        base_url: str = CLOUDBEDS_API_URL,
        page_size: int = CLOUDBEDS_PAGE_SIZE,
        page_delay: float = CLOUDBEDS_PAGE_DELAY_SECONDS,
    ) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.page_delay = page_delay

    def _headers(self, prop: Property, with_property_header: bool = True) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {prop.api_key}",
            "Content-Type": "application/json",
        }
        if with_property_header:
            headers["X-PROPERTY-ID"] = prop.id
        return headers

    async def request(
        self,
        prop: Property,
        endpoint: str,
        params: Dict[str, str],
        with_property_header: bool = True,
    ) -> httpx.Response:
        """
        Issue one GET against a Cloudbeds endpoint, recording request metrics.

        Args:
            prop: Property whose API key authenticates the call
            endpoint: Endpoint name (e.g. 'getDashboard')
            params: Query parameters
            with_property_header: Send X-PROPERTY-ID alongside the bearer token

        Returns:
            httpx.Response: The raw response, whatever its status

        Raises:
            httpx.HTTPError: On transport failures (connect errors, timeouts)
        """
        url = f"{self.base_url}/{endpoint}"
        logger.debug("cloudbeds_request", endpoint=endpoint, property_id=prop.id, params=params)

        start_time = time.perf_counter()
        try:
            res = await self.http.get(
                url, params=params, headers=self._headers(prop, with_property_header)
            )
        except httpx.HTTPError:
            upstream_requests.labels(source=SOURCE, endpoint=endpoint, status_code="error").inc()
            raise
        finally:
            upstream_latency.labels(source=SOURCE, endpoint=endpoint).observe(
                time.perf_counter() - start_time
            )

        upstream_requests.labels(
            source=SOURCE, endpoint=endpoint, status_code=str(res.status_code)
        ).inc()
        return res

    async def request_json(
        self, prop: Property, endpoint: str, params: Dict[str, str]
    ) -> Dict[str, Any]:
        """Like request(), but raises UpstreamError on a non-success status."""
        res = await self.request(prop, endpoint, params)
        if not res.is_success:
            raise UpstreamError(SOURCE, endpoint, res.status_code, res.text, context=prop.name)
        body = res.json()
        return body if isinstance(body, dict) else {}

    async def fetch_reservations(
        self, prop: Property, start_date: str, end_date: str
    ) -> List[Reservation]:
        """
        Fetch every non-canceled reservation for a property over a date range.

        Keeps requesting pages while fewer records than the declared total
        have been collected. A page that comes back empty also ends the walk.

        Args:
            prop: Property to fetch
            start_date: First day, YYYY-MM-DD
            end_date: Last day, YYYY-MM-DD

        Returns:
            List[Reservation]: All pages concatenated in fetch order

        Raises:
            UpstreamError: If any page answers with a non-success status
        """
        results: List[Dict[str, Any]] = []
        page_number = 1

        while True:
            if page_number > 1:
                await pause(self.page_delay)

            params = {
                "propertyID": prop.id,
                "resultsFrom": f"{start_date} 00:00:00",
                "resultsTo": f"{end_date} 23:59:59",
                "excludeStatuses": "canceled",
                "pageNumber": str(page_number),
                "pageSize": str(self.page_size),
            }
            data = await self.request_json(prop, RESERVATIONS_ENDPOINT, params)

            page = data.get("data") or []
            results.extend(page)
            total_count = int(data.get("total") or 0)

            logger.debug(
                "reservations_page_fetched",
                property_id=prop.id,
                page=page_number,
                fetched=len(results),
                total=total_count,
            )

            if not page or len(results) >= total_count:
                break
            page_number += 1

        logger.info(
            "reservations_fetched",
            property_id=prop.id,
            count=len(results),
            pages=page_number,
        )
        return [Reservation.from_api(raw) for raw in results]

    async def fetch_unassigned_rooms(self, prop: Property) -> UnassignedRooms:
        """
        Fetch the unassigned room inventory for a property.

        The declared total is read from the first page. Walking stops when a
        page is empty, or once as many rooms as declared have been collected.

        Raises:
            UpstreamError: If any page answers with a non-success status
        """
        rooms: List[RoomRecord] = []
        total_unassigned = 0
        page_number = 1

        while True:
            if page_number > 1:
                await pause(self.page_delay)

            params = {"propertyID": prop.id, "pageNumber": str(page_number)}
            data = await self.request_json(prop, UNASSIGNED_ROOMS_ENDPOINT, params)

            groups = data.get("data") or []
            if not groups or data.get("count") == 0:
                break

            if page_number == 1:
                total_unassigned = int(data.get("total") or 0)

            for group in groups:
                rooms.extend(RoomRecord.model_validate(r) for r in group.get("rooms") or [])

            if len(rooms) >= total_unassigned:
                break
            page_number += 1

        logger.info(
            "unassigned_rooms_fetched",
            property_id=prop.id,
            rooms=len(rooms),
            total_unassigned=total_unassigned,
        )
        return UnassignedRooms(rooms=rooms, total_unassigned=total_unassigned)

    async def fetch_dashboard_snapshot(
        self, prop: Property, day: Optional[date] = None
    ) -> OperationalSnapshot:
        """
        Fetch today's check-in/check-out/in-house counts for a property.

        Best effort: any failure yields an all-zero snapshot.

        Args:
            prop: Property to fetch
            day: Day to report on (defaults to today, UTC)

        Returns:
            OperationalSnapshot
        """
        params = {
            "propertyID": prop.id,
            "date": (day or utc_today()).isoformat(),
        }
        try:
            data = await self.request_json(prop, DASHBOARD_ENDPOINT, params)
            payload = data.get("data") or {}
            if not isinstance(payload, dict):
                raise ValueError(f"unexpected getDashboard payload: {payload!r}")
            return OperationalSnapshot.from_api(payload)
        except Exception as e:
            logger.warning("dashboard_snapshot_unavailable", property_id=prop.id, error=str(e))
            return OperationalSnapshot()

    async def check_connection(self, prop: Property) -> bool:
        """Return True if the property's API key can list reservations."""
        try:
            res = await self.request(
                prop,
                RESERVATIONS_LIST_ENDPOINT,
                {"propertyID": prop.id, "pageSize": "1"},
                with_property_header=False,
            )
        except httpx.HTTPError as e:
            logger.warning("cloudbeds_connection_failed", property_id=prop.id, error=str(e))
            return False
        return res.is_success
