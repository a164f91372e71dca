"""
Google Analytics Data API client and traffic summary builder.

Three independent runReport calls (summary metrics, top pages, daily trend)
are issued concurrently and folded into a TrafficSummary. fetch_traffic() is
the pipeline entry point: it never raises, returning None when analytics is
unavailable for any reason.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any, Dict, List, Optional

import httpx
import structlog

from hotel_dashboard.analytics.auth import AnalyticsTokenProvider, load_service_account
from hotel_dashboard.cache import AccessTokenCache
from hotel_dashboard.config import GA_PROPERTY_ID, GOOGLE_SERVICE_ACCOUNT
from hotel_dashboard.exceptions import UpstreamError
from hotel_dashboard.metrics import upstream_latency, upstream_requests
from hotel_dashboard.models.traffic import TopPage, TrafficSummary, TrafficTrendPoint

logger = structlog.get_logger(__name__)

ANALYTICS_DATA_URL = "https://analyticsdata.googleapis.com/v1beta"
SOURCE = "analytics"

SUMMARY_METRICS = (
    "sessions",
    "screenPageViews",
    "newUsers",
    "averageSessionDuration",
    "activeUsers",
    "engagedSessions",
    "bounceRate",
    "conversions",
)


def _metric(row: Dict[str, Any], index: int) -> str:
    values = row.get("metricValues") or []
    if index >= len(values):
        return "0"
    return str(values[index].get("value") or "0")


def _dimension(row: Dict[str, Any], index: int) -> str:
    values = row.get("dimensionValues") or []
    if index >= len(values):
        return ""
    return str(values[index].get("value") or "")


def _as_int(value: str) -> int:
    try:
        return int(float(value))
    except ValueError:
        return 0


def _as_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def format_engagement_time(seconds: float) -> str:
    """Format seconds as "{minutes}m {seconds}s", e.g. 125.4 -> "2m 5s"."""
    minutes = int(seconds // 60)
    remainder = int(seconds % 60 + 0.5)
    return f"{minutes}m {remainder}s"


class AnalyticsClient:
    """
    Minimal client for the runReport operation of one analytics property.

    Args:
        http: Shared httpx.AsyncClient
        tokens: Provider of bearer tokens
        property_id: Analytics property identifier
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        tokens: AnalyticsTokenProvider,
        property_id: str = GA_PROPERTY_ID,
        base_url: str = ANALYTICS_DATA_URL,
    ) -> None:
        self.http = http
        self.tokens = tokens
        self.property_id = property_id
        self.base_url = base_url.rstrip("/")

    async def run_report(self, report_request: Dict[str, Any]) -> Dict[str, Any]:
        """
        Run one report against the analytics property.

        Raises:
            UpstreamError: On a non-success response
            AnalyticsAuthError: If no token could be obtained
        """
        token = await self.tokens.get_token()
        url = f"{self.base_url}/properties/{self.property_id}:runReport"

        start_time = time.perf_counter()
        res = await self.http.post(
            url,
            json=report_request,
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
        )
        upstream_latency.labels(source=SOURCE, endpoint="runReport").observe(
            time.perf_counter() - start_time
        )
        upstream_requests.labels(
            source=SOURCE, endpoint="runReport", status_code=str(res.status_code)
        ).inc()

        if not res.is_success:
            raise UpstreamError(SOURCE, "runReport", res.status_code, res.text)

        body = res.json()
        return body if isinstance(body, dict) else {}

    async def fetch_traffic_summary(self, start_date: str, end_date: str) -> Optional[TrafficSummary]:
        """
        Build the traffic summary for a date range.

        Returns:
            Optional[TrafficSummary]: None when the summary report has no rows
        """
        date_ranges = [{"startDate": start_date, "endDate": end_date}]

        results = await asyncio.gather(
            self.run_report(
                {
                    "dateRanges": date_ranges,
                    "metrics": [{"name": name} for name in SUMMARY_METRICS],
                }
            ),
            self.run_report(
                {
                    "dateRanges": date_ranges,
                    "dimensions": [{"name": "pagePath"}],
                    "metrics": [{"name": "screenPageViews"}, {"name": "sessions"}],
                    "orderBys": [{"metric": {"metricName": "screenPageViews"}, "desc": True}],
                    "limit": 10,
                }
            ),
            self.run_report(
                {
                    "dateRanges": date_ranges,
                    "dimensions": [{"name": "date"}],
                    "metrics": [
                        {"name": "sessions"},
                        {"name": "screenPageViews"},
                        {"name": "newUsers"},
                    ],
                    "orderBys": [{"dimension": {"dimensionName": "date"}, "desc": False}],
                }
            ),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        summary_report, page_report, daily_report = results

        rows: List[Dict[str, Any]] = summary_report.get("rows") or []
        if not rows:
            logger.warning("analytics_summary_empty", start_date=start_date, end_date=end_date)
            return None
        row = rows[0]

        return TrafficSummary(
            sessions=_as_int(_metric(row, 0)),
            page_views=_as_int(_metric(row, 1)),
            new_users=_as_int(_metric(row, 2)),
            avg_engagement_time=format_engagement_time(_as_float(_metric(row, 3))),
            active_users=_as_int(_metric(row, 4)),
            engaged_sessions=_as_int(_metric(row, 5)),
            bounce_rate=round(_as_float(_metric(row, 6)) * 100, 1),
            conversions=_as_int(_metric(row, 7)),
            top_pages=[
                TopPage(
                    path=_dimension(r, 0),
                    views=_as_int(_metric(r, 0)),
                    sessions=_as_int(_metric(r, 1)),
                )
                for r in page_report.get("rows") or []
            ],
            daily_trend=[
                TrafficTrendPoint(
                    date=_dimension(r, 0),
                    sessions=_as_int(_metric(r, 0)),
                    page_views=_as_int(_metric(r, 1)),
                    new_users=_as_int(_metric(r, 2)),
                )
                for r in daily_report.get("rows") or []
            ],
        )


def build_analytics_client(
    http: httpx.AsyncClient,
    cache: AccessTokenCache,
    service_account_json: Optional[str] = GOOGLE_SERVICE_ACCOUNT,
    property_id: str = GA_PROPERTY_ID,
) -> AnalyticsClient:
    """
    Wire an AnalyticsClient from configuration.

    Raises:
        AnalyticsAuthError: If the service account credential is missing or invalid
    """
    service_account = load_service_account(service_account_json)
    tokens = AnalyticsTokenProvider(http, service_account, cache)
    return AnalyticsClient(http, tokens, property_id=property_id)


async def fetch_traffic(
    http: httpx.AsyncClient,
    start_date: str,
    end_date: str,
    cache: AccessTokenCache,
    service_account_json: Optional[str] = GOOGLE_SERVICE_ACCOUNT,
    property_id: str = GA_PROPERTY_ID,
) -> Optional[TrafficSummary]:
    """
    Fetch the traffic summary, degrading every failure to None.

    Returns:
        Optional[TrafficSummary]: None when analytics is unavailable
    """
    try:
        client = build_analytics_client(http, cache, service_account_json, property_id)
        summary = await client.fetch_traffic_summary(start_date, end_date)
    except Exception as e:
        logger.error("analytics_fetch_failed", error=str(e), error_type=type(e).__name__)
        return None

    if summary is not None:
        logger.info("analytics_fetched", sessions=summary.sessions, page_views=summary.page_views)
    return summary
