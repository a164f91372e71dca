"""
Cross-property reduction.

Properties are aggregated in small concurrent batches to bound the load on
Cloudbeds, then every property's reservations are folded once into the
portfolio breakdowns. Totals are sums of the per-property summaries, so a
failed property contributes its zero-valued fallback rather than vanishing.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from datetime import timezone
from typing import Sequence

import structlog

from hotel_dashboard.aggregators.property import aggregate_property
from hotel_dashboard.cloudbeds_api.client import CloudbedsClient
from hotel_dashboard.config import PROPERTY_BATCH_SIZE
from hotel_dashboard.models.properties import Property
from hotel_dashboard.models.reservations import Reservation
from hotel_dashboard.models.summaries import (
    BookingSourceRow,
    CountryRow,
    DailyBucket,
    HourlyBucket,
    OperationalTotals,
    PlatformRow,
    PortfolioAggregate,
    PropertySummary,
)
from hotel_dashboard.utils.datetime import parse_timestamp

logger = structlog.get_logger(__name__)

TOP_N = 10
UNKNOWN = "Unknown"
WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
WEBSITE_MARKERS = ("website", "booking engine")


def is_website_source(source: str) -> bool:
    lowered = source.lower()
    return any(marker in lowered for marker in WEBSITE_MARKERS)


def _adr(revenue: float, bookings: int) -> float:
    return round(revenue / bookings, 2) if bookings > 0 else 0.0


async def fetch_portfolio(
    client: CloudbedsClient,
    properties: Sequence[Property],
    start_date: str,
    end_date: str,
    batch_size: int = PROPERTY_BATCH_SIZE,
) -> list[PropertySummary]:
    """
    Aggregate every property, `batch_size` at a time.

    Batches run one after another; properties within a batch run concurrently.

    Returns:
        list[PropertySummary]: One summary per property, in registry order
    """
    batch_size = max(1, batch_size)
    summaries: list[PropertySummary] = []

    for i in range(0, len(properties), batch_size):
        batch = properties[i : i + batch_size]
        logger.debug("property_batch_started", property_ids=[p.id for p in batch])
        results = await asyncio.gather(
            *(aggregate_property(client, prop, start_date, end_date) for prop in batch)
        )
        summaries.extend(results)

    return summaries


class _Bucket:
    __slots__ = ("bookings", "revenue")

    def __init__(self) -> None:
        self.bookings = 0
        self.revenue = 0.0

    def add(self, revenue: float) -> None:
        self.bookings += 1
        self.revenue += revenue


def reduce_portfolio(summaries: Sequence[PropertySummary]) -> PortfolioAggregate:
    """
    Merge per-property summaries into portfolio totals and breakdowns.

    Args:
        summaries: Output of fetch_portfolio (fallback records included)

    Returns:
        PortfolioAggregate
    """
    countries: dict[str, _Bucket] = defaultdict(_Bucket)
    platforms: dict[str, _Bucket] = defaultdict(_Bucket)
    hourly = [0] * 24
    daily = dict.fromkeys(WEEKDAYS, 0)
    website = _Bucket()
    other = _Bucket()

    for summary in summaries:
        for reservation in summary.reservations:
            _fold_reservation(reservation, countries, platforms, hourly, daily, website, other)

    total_bookings = sum(s.bookings for s in summaries)
    total_revenue = sum(s.revenue for s in summaries)
    total_capacity = sum(s.capacity for s in summaries)
    total_beds_left = sum(s.beds_remaining for s in summaries)

    adr = _adr(total_revenue, total_bookings)
    exact_adr = total_revenue / total_bookings if total_bookings > 0 else 0.0
    overall_occupancy = (
        (total_capacity - total_beds_left) / total_capacity * 100 if total_capacity > 0 else 0.0
    )
    revpar = exact_adr * (overall_occupancy / 100)

    country_rows = sorted(
        (
            CountryRow(
                country=country,
                bookings=bucket.bookings,
                revenue=round(bucket.revenue, 2),
                adr=_adr(bucket.revenue, bucket.bookings),
            )
            for country, bucket in countries.items()
        ),
        key=lambda row: row.bookings,
        reverse=True,
    )[:TOP_N]

    platform_rows = sorted(
        (
            PlatformRow(
                name=source,
                value=bucket.bookings,
                revenue=round(bucket.revenue, 2),
                adr=_adr(bucket.revenue, bucket.bookings),
            )
            for source, bucket in platforms.items()
        ),
        key=lambda row: row.value,
        reverse=True,
    )[:TOP_N]

    operational = OperationalTotals(
        check_ins=sum(s.snapshot.check_ins for s in summaries),
        check_outs=sum(s.snapshot.check_outs for s in summaries),
        in_house=sum(s.snapshot.in_house for s in summaries),
        stay_over=sum(s.snapshot.stay_overs for s in summaries),
        no_shows=sum(s.no_shows for s in summaries),
        cancellations=sum(s.snapshot.cancellations for s in summaries),
    )

    aggregate = PortfolioAggregate(
        property_summaries=list(summaries),
        total_bookings=total_bookings,
        total_revenue=round(total_revenue, 2),
        total_no_shows=operational.no_shows,
        total_private_rooms=sum(s.private_rooms for s in summaries),
        total_beds_left=total_beds_left,
        total_capacity=total_capacity,
        overall_occupancy=round(overall_occupancy, 2),
        adr=adr,
        revpar=round(revpar, 2),
        website_bookings=website.bookings,
        website_revenue=round(website.revenue, 2),
        booking_source_data=[
            BookingSourceRow(
                name="Website/Booking Engine",
                amount=round(website.revenue, 2),
                count=website.bookings,
            ),
            BookingSourceRow(
                name="Other Channels",
                amount=round(other.revenue, 2),
                count=other.bookings,
            ),
        ],
        country_data=country_rows,
        platform_data=platform_rows,
        hourly_data=[
            HourlyBucket(hour=f"{hour:02d}:00", bookings=count) for hour, count in enumerate(hourly)
        ],
        daily_data=[DailyBucket(day=day, bookings=count) for day, count in daily.items()],
        operational=operational,
    )

    logger.info(
        "portfolio_reduced",
        properties=len(summaries),
        failed_properties=sum(1 for s in summaries if s.fetch_failed),
        total_bookings=aggregate.total_bookings,
        total_revenue=aggregate.total_revenue,
    )
    return aggregate


def _fold_reservation(
    reservation: Reservation,
    countries: dict[str, _Bucket],
    platforms: dict[str, _Bucket],
    hourly: list[int],
    daily: dict[str, int],
    website: _Bucket,
    other: _Bucket,
) -> None:
    source = reservation.source_name or UNKNOWN
    country = reservation.guest_country or UNKNOWN
    revenue = reservation.total

    countries[country].add(revenue)
    platforms[source].add(revenue)

    # The booking source split reconciles with the booked totals, so no-shows stay out
    if not reservation.is_no_show:
        if is_website_source(source):
            website.add(revenue)
        else:
            other.add(revenue)

    if not reservation.date_created:
        return
    created = parse_timestamp(reservation.date_created)
    if created is None:
        logger.debug(
            "reservation_created_unparsable",
            property_id=reservation.property_id,
            date_created=reservation.date_created,
        )
        return
    if created.tzinfo is not None:
        created = created.astimezone(timezone.utc)
    hourly[created.hour] += 1
    daily[WEEKDAYS[created.weekday()]] += 1
