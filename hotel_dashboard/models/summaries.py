"""Derived per-property and portfolio-wide aggregates."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from hotel_dashboard.models.base import CamelModel
from hotel_dashboard.models.properties import Property
from hotel_dashboard.models.reservations import Reservation
from hotel_dashboard.models.rooms import AvailableRoom


def _to_int(value: Any) -> int:
    try:
        return int(float(value or 0))
    except (TypeError, ValueError):
        return 0


class OperationalSnapshot(CamelModel):
    """Today's front-desk counts for one property. All zero when unavailable."""

    check_ins: int = 0
    check_outs: int = 0
    in_house: int = 0
    stay_overs: int = 0
    cancellations: int = 0

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "OperationalSnapshot":
        return cls(
            check_ins=_to_int(data.get("arrivalsConfirmed")),
            check_outs=_to_int(data.get("departuresConfirmed")),
            in_house=_to_int(data.get("inHouse")),
            stay_overs=_to_int(data.get("stayovers")),
            cancellations=_to_int(data.get("cancellations")),
        )


class PropertySummary(CamelModel):
    """
    One property's contribution to the report.

    The fetched reservations ride along (excluded from serialization) so the
    portfolio reducer can build its breakdowns without fetching again.
    """

    property_id: str
    name: str
    capacity: int = 0
    bookings: int = 0
    revenue: float = 0.0
    no_shows: int = 0
    private_rooms: int = 0
    beds_remaining: int = 0
    occupancy: float = 0.0
    available_rooms: list[AvailableRoom] = Field(default_factory=list)
    snapshot: OperationalSnapshot = Field(default_factory=OperationalSnapshot)
    fetch_failed: bool = False
    reservations: list[Reservation] = Field(default_factory=list, exclude=True)

    @classmethod
    def failed(cls, prop: Property) -> "PropertySummary":
        """Zero-valued fallback used when a property's fetch fails."""
        return cls(
            property_id=prop.id,
            name=prop.name,
            capacity=prop.capacity,
            fetch_failed=True,
        )


class CountryRow(CamelModel):
    country: str
    bookings: int = 0
    revenue: float = 0.0
    adr: float = 0.0


class PlatformRow(CamelModel):
    name: str
    value: int = 0
    revenue: float = 0.0
    adr: float = 0.0
    color: str = "#2d5a3d"


class HourlyBucket(CamelModel):
    hour: str
    bookings: int = 0


class DailyBucket(CamelModel):
    day: str
    bookings: int = 0


class BookingSourceRow(CamelModel):
    name: str
    amount: float = 0.0
    count: int = 0


class OperationalTotals(CamelModel):
    check_ins: int = 0
    check_outs: int = 0
    in_house: int = 0
    stay_over: int = 0
    no_shows: int = 0
    cancellations: int = 0


class PortfolioAggregate(CamelModel):
    """Portfolio-wide totals and breakdowns across every configured property."""

    property_summaries: list[PropertySummary] = Field(default_factory=list)
    total_bookings: int = 0
    total_revenue: float = 0.0
    total_no_shows: int = 0
    total_private_rooms: int = 0
    total_beds_left: int = 0
    total_capacity: int = 0
    overall_occupancy: float = 0.0
    adr: float = 0.0
    revpar: float = 0.0
    website_bookings: int = 0
    website_revenue: float = 0.0
    booking_source_data: list[BookingSourceRow] = Field(default_factory=list)
    country_data: list[CountryRow] = Field(default_factory=list)
    platform_data: list[PlatformRow] = Field(default_factory=list)
    hourly_data: list[HourlyBucket] = Field(default_factory=list)
    daily_data: list[DailyBucket] = Field(default_factory=list)
    operational: OperationalTotals = Field(default_factory=OperationalTotals)
