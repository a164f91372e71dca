"""
Unit tests for the cross-property reducer and batched portfolio fetch.
"""

from __future__ import annotations

import asyncio
from typing import Any
from unittest.mock import patch

import pytest

from hotel_dashboard.aggregators.portfolio import (
    fetch_portfolio,
    is_website_source,
    reduce_portfolio,
)
from hotel_dashboard.models.properties import Property
from hotel_dashboard.models.reservations import Reservation
from hotel_dashboard.models.summaries import OperationalSnapshot, PropertySummary


def _summary(
    prop_id: str,
    reservations: list[Reservation],
    capacity: int = 100,
    beds: int = 0,
    snapshot: OperationalSnapshot | None = None,
) -> PropertySummary:
    booked = [r for r in reservations if not r.is_no_show]
    return PropertySummary(
        property_id=prop_id,
        name=f"Property {prop_id}",
        capacity=capacity,
        bookings=len(booked),
        revenue=round(sum(r.total for r in booked), 2),
        no_shows=len(reservations) - len(booked),
        beds_remaining=beds,
        snapshot=snapshot or OperationalSnapshot(),
        reservations=reservations,
    )


def _res(factory: Any, **kwargs: Any) -> Reservation:
    return Reservation.from_api(factory(**kwargs))


@pytest.mark.unit
def test_reduce_totals_equal_sum_of_property_summaries(reservation_factory: Any) -> None:
    a = _summary("A", [_res(reservation_factory, total="100.10") for _ in range(3)], beds=20)
    b = _summary(
        "B",
        [
            _res(reservation_factory, total="33.33"),
            _res(reservation_factory, total="50", status="no_show"),
        ],
        capacity=50,
        beds=10,
    )

    aggregate = reduce_portfolio([a, b])

    assert aggregate.total_bookings == a.bookings + b.bookings == 4
    assert aggregate.total_revenue == round(a.revenue + b.revenue, 2)
    assert aggregate.total_no_shows == 1
    assert aggregate.operational.no_shows == 1
    assert aggregate.total_capacity == 150
    assert aggregate.total_beds_left == 30
    assert aggregate.overall_occupancy == 80.0
    assert aggregate.adr == round(aggregate.total_revenue / 4, 2)
    assert aggregate.revpar == round(aggregate.total_revenue / 4 * 0.8, 2)


@pytest.mark.unit
def test_reduce_with_failed_property_keeps_its_row() -> None:
    failed = PropertySummary.failed(Property(id="B", name="Broken", api_key="k", capacity=40))

    aggregate = reduce_portfolio([failed])

    assert aggregate.property_summaries == [failed]
    assert aggregate.total_bookings == 0
    assert aggregate.total_revenue == 0
    assert aggregate.total_capacity == 40
    assert aggregate.adr == 0
    assert aggregate.overall_occupancy == 100.0


@pytest.mark.unit
def test_reduce_empty_portfolio_is_all_zero() -> None:
    aggregate = reduce_portfolio([])

    assert aggregate.total_bookings == 0
    assert aggregate.adr == 0
    assert aggregate.overall_occupancy == 0
    assert aggregate.revpar == 0
    assert len(aggregate.hourly_data) == 24
    assert [d.day for d in aggregate.daily_data] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


@pytest.mark.unit
def test_platform_and_country_tables_truncated_and_sorted(reservation_factory: Any) -> None:
    reservations = []
    for i in range(15):
        for _ in range(i + 1):
            reservations.append(
                _res(reservation_factory, source=f"Channel {i}", country=f"C{i}", total="10")
            )

    aggregate = reduce_portfolio([_summary("A", reservations)])

    assert len(aggregate.platform_data) == 10
    assert len(aggregate.country_data) == 10
    platform_counts = [row.value for row in aggregate.platform_data]
    country_counts = [row.bookings for row in aggregate.country_data]
    assert platform_counts == sorted(platform_counts, reverse=True)
    assert country_counts == sorted(country_counts, reverse=True)
    assert aggregate.platform_data[0].name == "Channel 14"
    assert aggregate.platform_data[0].value == 15
    assert aggregate.platform_data[0].adr == 10.0
    assert aggregate.country_data[0].country == "C14"


@pytest.mark.unit
def test_missing_source_and_country_bucket_as_unknown(reservation_factory: Any) -> None:
    reservations = [
        _res(reservation_factory, source=None, country=None),
        _res(reservation_factory, source="", country=""),
    ]

    aggregate = reduce_portfolio([_summary("A", reservations)])

    assert [(row.name, row.value) for row in aggregate.platform_data] == [("Unknown", 2)]
    assert [(row.country, row.bookings) for row in aggregate.country_data] == [("Unknown", 2)]


@pytest.mark.unit
def test_hourly_and_daily_histograms(reservation_factory: Any) -> None:
    reservations = [
        _res(reservation_factory, created="2025-03-03 14:05:09"),  # Monday
        _res(reservation_factory, created="2025-03-03 14:59:59"),  # Monday
        _res(reservation_factory, created="2025-03-09T00:30:00Z"),  # Sunday
        _res(reservation_factory, created=None),
        _res(reservation_factory, created="not a date"),
    ]

    aggregate = reduce_portfolio([_summary("A", reservations)])

    hourly = {bucket.hour: bucket.bookings for bucket in aggregate.hourly_data}
    daily = {bucket.day: bucket.bookings for bucket in aggregate.daily_data}
    assert len(aggregate.hourly_data) == 24
    assert sum(hourly.values()) == 3
    assert hourly["14:00"] == 2
    assert hourly["00:00"] == 1
    assert daily["Mon"] == 2
    assert daily["Sun"] == 1
    assert sum(daily.values()) == 3


@pytest.mark.unit
@pytest.mark.parametrize(
    ("source", "expected"),
    [
        ("Website", True),
        ("My WEBSITE direct", True),
        ("Booking Engine", True),
        ("booking engine (mobile)", True),
        ("Booking.com", False),
        ("Hostelworld", False),
    ],
)
def test_is_website_source(source: str, expected: bool) -> None:
    assert is_website_source(source) is expected


@pytest.mark.unit
def test_booking_source_split(reservation_factory: Any) -> None:
    reservations = [
        _res(reservation_factory, source="Website", total="200"),
        _res(reservation_factory, source="Booking Engine", total="100"),
        _res(reservation_factory, source="Booking.com", total="50"),
    ]

    aggregate = reduce_portfolio([_summary("A", reservations)])

    website, other = aggregate.booking_source_data
    assert (website.name, website.count, website.amount) == ("Website/Booking Engine", 2, 300.0)
    assert (other.name, other.count, other.amount) == ("Other Channels", 1, 50.0)
    assert aggregate.website_bookings == 2


@pytest.mark.unit
def test_booking_source_split_reconciles_with_totals(reservation_factory: Any) -> None:
    """A no-show appears in neither row, so the two rows add up to the headline totals."""
    reservations = [
        _res(reservation_factory, source="Website", total="100"),
        _res(reservation_factory, source="Booking.com", total="80", status="no_show"),
    ]

    aggregate = reduce_portfolio([_summary("A", reservations)])

    website, other = aggregate.booking_source_data
    assert (aggregate.total_bookings, aggregate.total_revenue) == (1, 100.0)
    assert website.count + other.count == aggregate.total_bookings
    assert website.amount + other.amount == aggregate.total_revenue
    assert (other.count, other.amount) == (0, 0.0)


@pytest.mark.unit
def test_revpar_uses_unrounded_adr(reservation_factory: Any) -> None:
    """100 over 3 bookings at 50% occupancy is 16.67, not 33.33 * 0.5 = 16.66."""
    reservations = [
        _res(reservation_factory, total="33.33"),
        _res(reservation_factory, total="33.33"),
        _res(reservation_factory, total="33.34"),
    ]

    aggregate = reduce_portfolio([_summary("A", reservations, capacity=100, beds=50)])

    assert aggregate.adr == 33.33
    assert aggregate.overall_occupancy == 50.0
    assert aggregate.revpar == 16.67


@pytest.mark.unit
def test_unparsable_creation_timestamp_skipped_and_logged(reservation_factory: Any) -> None:
    """Unparsable timestamps are left out of both histograms and reported at debug level."""
    reservations = [
        _res(reservation_factory, created="2025-03-04 09:15:00"),  # Tuesday
        _res(reservation_factory, created="31/31/2025 99:99"),
        _res(reservation_factory, created=None),
    ]

    with patch("hotel_dashboard.aggregators.portfolio.logger") as mock_logger:
        aggregate = reduce_portfolio([_summary("A", reservations)])

    assert sum(bucket.bookings for bucket in aggregate.hourly_data) == 1
    assert sum(bucket.bookings for bucket in aggregate.daily_data) == 1
    mock_logger.debug.assert_called_once()
    event = mock_logger.debug.call_args
    assert event.args == ("reservation_created_unparsable",)
    assert event.kwargs["date_created"] == "31/31/2025 99:99"


@pytest.mark.unit
def test_operational_totals_summed(reservation_factory: Any) -> None:
    a = _summary("A", [], snapshot=OperationalSnapshot(check_ins=2, stay_overs=5, cancellations=1))
    b = _summary("B", [], snapshot=OperationalSnapshot(check_ins=3, check_outs=4, in_house=7))

    ops = reduce_portfolio([a, b]).operational

    assert (ops.check_ins, ops.check_outs, ops.in_house) == (5, 4, 7)
    assert (ops.stay_over, ops.cancellations, ops.no_shows) == (5, 1, 0)


@pytest.mark.unit
@pytest.mark.anyio
async def test_fetch_portfolio_runs_in_batches() -> None:
    """At most batch_size properties are in flight; results keep registry order."""
    properties = [Property(id=str(i), name=f"P{i}", api_key="k") for i in range(5)]
    in_flight = 0
    peak = 0

    async def fake_aggregate(client: Any, prop: Property, start: str, end: str) -> PropertySummary:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0)
        in_flight -= 1
        return PropertySummary(property_id=prop.id, name=prop.name)

    with patch("hotel_dashboard.aggregators.portfolio.aggregate_property", side_effect=fake_aggregate):
        summaries = await fetch_portfolio(object(), properties, "2025-03-01", "2025-03-02", batch_size=2)

    assert [s.property_id for s in summaries] == ["0", "1", "2", "3", "4"]
    assert peak == 2
