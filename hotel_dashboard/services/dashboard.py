"""Dashboard report orchestrator: bookings and traffic, fetched concurrently and joined."""

from __future__ import annotations

import asyncio
import math
from datetime import timezone
from typing import Optional, Sequence, Tuple

import httpx
import structlog
from dateutil import parser as date_parser

from hotel_dashboard.aggregators.portfolio import fetch_portfolio, reduce_portfolio
from hotel_dashboard.analytics.client import fetch_traffic
from hotel_dashboard.cache import AccessTokenCache
from hotel_dashboard.cloudbeds_api.client import CloudbedsClient
from hotel_dashboard.config import GA_PROPERTY_ID, GOOGLE_SERVICE_ACCOUNT, PROPERTY_BATCH_SIZE
from hotel_dashboard.exceptions import InvalidDateRangeError
from hotel_dashboard.metrics import report_duration
from hotel_dashboard.models.properties import Property
from hotel_dashboard.models.summaries import PortfolioAggregate
from hotel_dashboard.models.traffic import TrafficSummary
from hotel_dashboard.schemas.dashboard import DashboardReport, PropertyRow, WebsiteTraffic

logger = structlog.get_logger(__name__)


def normalize_date(value: Optional[str], field: str = "date") -> str:
    """
    Normalize an ISO date or datetime string to YYYY-MM-DD.

    Timezone-aware datetimes are converted to UTC first, so
    "2025-03-01T23:30:00-05:00" becomes "2025-03-02".

    Raises:
        InvalidDateRangeError: If the value is missing or unparsable
    """
    if not value:
        raise InvalidDateRangeError(f"{field} is required")
    try:
        parsed = date_parser.isoparse(value)
    except (ValueError, OverflowError) as e:
        raise InvalidDateRangeError(f"{field} is not a valid ISO date: {value!r}") from e

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date().isoformat()


def normalize_date_range(start: Optional[str], end: Optional[str]) -> Tuple[str, str]:
    """
    Normalize an inbound start/end pair.

    Raises:
        InvalidDateRangeError: If either date is missing or invalid, or end precedes start
    """
    start_date = normalize_date(start, "startDate")
    end_date = normalize_date(end, "endDate")
    if end_date < start_date:
        raise InvalidDateRangeError(f"endDate {end_date} is before startDate {start_date}")
    return start_date, end_date


def conversion_rate(bookings: int, traffic: Optional[TrafficSummary]) -> float:
    """Bookings per 100 sessions, 0 when traffic is unavailable or empty."""
    if traffic is None or traffic.sessions <= 0:
        return 0.0
    return round(bookings / traffic.sessions * 100, 2)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def compose_report(
    portfolio: PortfolioAggregate, traffic: Optional[TrafficSummary]
) -> DashboardReport:
    """
    Join the booking aggregate and the (possibly unavailable) traffic summary.

    Every traffic-sourced field falls back to its default when traffic is None.
    """
    website_traffic = WebsiteTraffic(
        adr=portfolio.adr,
        revpar=portfolio.revpar,
        conversion=conversion_rate(portfolio.total_bookings, traffic),
    )
    if traffic is not None:
        website_traffic.sessions = traffic.sessions
        website_traffic.page_views = traffic.page_views
        website_traffic.avg_engagement_time = traffic.avg_engagement_time
        website_traffic.new_users = traffic.new_users
        website_traffic.active_users = traffic.active_users
        website_traffic.bounce_rate = traffic.bounce_rate

    return DashboardReport(
        website_traffic=website_traffic,
        property_data=[
            PropertyRow(
                name=s.name,
                total_bookings=s.bookings,
                private_rooms=s.private_rooms,
                capacity=s.capacity,
                occupancy=_round_half_up(s.occupancy),
                beds_remaining=s.beds_remaining,
                revenue=s.revenue,
                available_rooms=s.available_rooms,
            )
            for s in portfolio.property_summaries
        ],
        booking_source_data=portfolio.booking_source_data,
        country_data=portfolio.country_data,
        hourly_data=portfolio.hourly_data,
        daily_data=portfolio.daily_data,
        platform_data=portfolio.platform_data,
        operational_data=portfolio.operational,
        overall_occupancy=portfolio.overall_occupancy,
        total_beds_left=portfolio.total_beds_left,
        total_capacity=portfolio.total_capacity,
        total_bookings=portfolio.total_bookings,
        total_revenue=portfolio.total_revenue,
        ga_top_pages=traffic.top_pages if traffic else [],
        ga_daily_trend=traffic.daily_trend if traffic else [],
    )


async def build_portfolio(
    http: httpx.AsyncClient,
    properties: Sequence[Property],
    start_date: str,
    end_date: str,
    batch_size: int = PROPERTY_BATCH_SIZE,
) -> PortfolioAggregate:
    client = CloudbedsClient(http)
    summaries = await fetch_portfolio(client, properties, start_date, end_date, batch_size)
    return reduce_portfolio(summaries)


async def build_dashboard_report(
    http: httpx.AsyncClient,
    properties: Sequence[Property],
    start_date: str,
    end_date: str,
    token_cache: AccessTokenCache,
    service_account_json: Optional[str] = GOOGLE_SERVICE_ACCOUNT,
    ga_property_id: str = GA_PROPERTY_ID,
) -> DashboardReport:
    """
    Build the full dashboard report for a normalized date range.

    Property and analytics failures are absorbed below this function, so it
    only raises on programming errors.

    Args:
        http: Shared httpx.AsyncClient
        properties: Registered properties
        start_date: First day, YYYY-MM-DD
        end_date: Last day, YYYY-MM-DD
        token_cache: Analytics access token cache
        service_account_json: Analytics service account credential
        ga_property_id: Analytics property identifier

    Returns:
        DashboardReport
    """
    logger.info(
        "dashboard_report_started",
        start_date=start_date,
        end_date=end_date,
        properties=len(properties),
    )

    with report_duration.time():
        portfolio, traffic = await asyncio.gather(
            build_portfolio(http, properties, start_date, end_date),
            fetch_traffic(
                http,
                start_date,
                end_date,
                token_cache,
                service_account_json=service_account_json,
                property_id=ga_property_id,
            ),
        )
        report = compose_report(portfolio, traffic)

    logger.info(
        "dashboard_report_completed",
        total_bookings=report.total_bookings,
        total_revenue=report.total_revenue,
        traffic_available=traffic is not None,
        conversion=report.website_traffic.conversion,
    )
    return report
