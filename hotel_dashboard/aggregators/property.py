"""
Per-property aggregation.

Fetches a property's reservations, unassigned rooms and today's snapshot
concurrently, then folds them into one PropertySummary. A failed reservation
or inventory fetch turns the whole property into a zero-valued fallback so
the rest of the portfolio still renders.
"""

from __future__ import annotations

import asyncio
from typing import Iterable

import structlog

from hotel_dashboard.cloudbeds_api.client import CloudbedsClient
from hotel_dashboard.metrics import property_fetches
from hotel_dashboard.models.properties import Property
from hotel_dashboard.models.reservations import Reservation
from hotel_dashboard.models.rooms import AvailableRoom, RoomClassification, UnassignedRooms
from hotel_dashboard.models.summaries import OperationalSnapshot, PropertySummary

logger = structlog.get_logger(__name__)

PRIVATE_ROOM_KEYWORDS = ("private", "single", "double", "queen", "king")


def classify_rooms(inventory: UnassignedRooms) -> RoomClassification:
    """
    Split unassigned rooms into test, private, blocked and available.

    Rules are applied in order, first match wins:
        1. unblocked room whose name or type contains TEST -> test inventory
        2. unblocked room whose type contains PRIVATE -> private inventory
        3. blocked room not seen before (by room ID) -> blocked
        4. any other unblocked room -> available

    A blocked room repeated across pages is counted once.

    Args:
        inventory: Rooms and declared total from the inventory fetcher

    Returns:
        RoomClassification: Counts plus the list of available rooms
    """
    seen_blocked: set[str] = set()
    result = RoomClassification(total_unassigned=inventory.total_unassigned)

    for room in inventory.rooms:
        name = room.room_name.upper()
        room_type = room.room_type_name.upper()

        if ("TEST" in name or "TEST" in room_type) and not room.blocked:
            result.test_rooms += 1
            continue

        if "PRIVATE" in room_type and not room.blocked:
            result.private_rooms_unassigned += 1
            continue

        if room.blocked:
            if room.room_id not in seen_blocked:
                seen_blocked.add(room.room_id)
                result.blocked_count += 1
            continue

        result.available_rooms.append(
            AvailableRoom(room_name=room.room_name, room_type_name=room.room_type_name)
        )

    return result


def occupancy_percent(capacity: int, beds_remaining: int) -> float:
    """Occupied share of capacity as a percentage; 0 when capacity is unknown."""
    if capacity <= 0:
        return 0.0
    return round((capacity - beds_remaining) / capacity * 100, 2)


def count_private_rooms(reservations: Iterable[Reservation]) -> int:
    # One per qualifying room entry, so a reservation with two private rooms counts twice
    count = 0
    for reservation in reservations:
        for room in reservation.rooms:
            room_type = room.room_type_name.lower()
            if any(keyword in room_type for keyword in PRIVATE_ROOM_KEYWORDS):
                count += 1
    return count


def summarize_property(
    prop: Property,
    reservations: list[Reservation],
    inventory: UnassignedRooms,
    snapshot: OperationalSnapshot,
) -> PropertySummary:
    """
    Fold one property's fetched data into a PropertySummary.

    Every reservation is counted exactly once, either as a booking (adding its
    total to revenue) or as a no-show.

    Args:
        prop: The property
        reservations: Reservations from the reservation fetcher
        inventory: Unassigned rooms from the inventory fetcher
        snapshot: Today's operational snapshot

    Returns:
        PropertySummary
    """
    bookings = 0
    no_shows = 0
    revenue = 0.0

    for reservation in reservations:
        if reservation.is_no_show:
            no_shows += 1
            continue
        bookings += 1
        revenue += reservation.total

    rooms = classify_rooms(inventory)
    beds_remaining = rooms.beds_remaining

    return PropertySummary(
        property_id=prop.id,
        name=prop.name,
        capacity=prop.capacity,
        bookings=bookings,
        revenue=round(revenue, 2),
        no_shows=no_shows,
        private_rooms=count_private_rooms(reservations),
        beds_remaining=beds_remaining,
        occupancy=occupancy_percent(prop.capacity, beds_remaining),
        available_rooms=rooms.available_rooms,
        snapshot=snapshot,
        reservations=reservations,
    )


async def aggregate_property(
    client: CloudbedsClient, prop: Property, start_date: str, end_date: str
) -> PropertySummary:
    """
    Fetch and summarize one property, never raising.

    Args:
        client: Cloudbeds API client
        prop: Property to aggregate
        start_date: First day, YYYY-MM-DD
        end_date: Last day, YYYY-MM-DD

    Returns:
        PropertySummary: The real summary, or PropertySummary.failed(prop)
    """
    results = await asyncio.gather(
        client.fetch_reservations(prop, start_date, end_date),
        client.fetch_unassigned_rooms(prop),
        client.fetch_dashboard_snapshot(prop),
        return_exceptions=True,
    )
    reservations, inventory, snapshot = results

    errors = [r for r in results if isinstance(r, BaseException)]
    if errors:
        for error in errors:
            logger.error(
                "property_fetch_failed",
                property_id=prop.id,
                property_name=prop.name,
                error=str(error),
                error_type=type(error).__name__,
            )
        property_fetches.labels(property_id=prop.id, status="failure").inc()
        return PropertySummary.failed(prop)

    summary = summarize_property(prop, reservations, inventory, snapshot)  # type: ignore[arg-type]
    property_fetches.labels(property_id=prop.id, status="success").inc()
    logger.info(
        "property_aggregated",
        property_id=prop.id,
        bookings=summary.bookings,
        no_shows=summary.no_shows,
        beds_remaining=summary.beds_remaining,
        occupancy=summary.occupancy,
    )
    return summary
