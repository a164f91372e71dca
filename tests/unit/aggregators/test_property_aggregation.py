"""
Unit tests for room classification and per-property summaries.
"""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from hotel_dashboard.aggregators.property import (
    aggregate_property,
    classify_rooms,
    occupancy_percent,
    summarize_property,
)
from hotel_dashboard.models.properties import Property
from hotel_dashboard.models.reservations import Reservation
from hotel_dashboard.models.rooms import RoomRecord, UnassignedRooms
from hotel_dashboard.models.summaries import OperationalSnapshot


def _rooms(*rooms: dict[str, Any], total: int) -> UnassignedRooms:
    return UnassignedRooms(rooms=[RoomRecord.model_validate(r) for r in rooms], total_unassigned=total)


def _room(room_id: str, name: str = "Bed", room_type: str = "8 Bed Dorm", blocked: bool = False) -> dict:
    return {"roomID": room_id, "roomName": name, "roomTypeName": room_type, "roomBlocked": blocked}


@pytest.mark.unit
def test_classify_rooms_applies_rules_in_order() -> None:
    inventory = _rooms(
        _room("1", name="TEST BED"),
        _room("2", room_type="Test Room"),
        _room("3", room_type="Private Twin"),
        _room("4", room_type="Private Twin", blocked=True),
        _room("5", name="test blocked", blocked=True),
        _room("6"),
        _room("7"),
        total=7,
    )

    result = classify_rooms(inventory)

    assert result.test_rooms == 2
    assert result.private_rooms_unassigned == 1
    # Blocked rooms are counted as blocked even when private or test
    assert result.blocked_count == 2
    assert [r.room_name for r in result.available_rooms] == ["Bed", "Bed"]
    assert result.beds_remaining == 7 - 2 - 2 - 1


@pytest.mark.unit
def test_classify_rooms_counts_duplicate_blocked_room_once() -> None:
    """The same blocked room appearing on two consecutive pages counts once."""
    inventory = _rooms(
        _room("42", blocked=True),
        _room("42", blocked=True),
        _room("43"),
        total=3,
    )

    result = classify_rooms(inventory)

    assert result.blocked_count == 1
    assert result.beds_remaining == 2


@pytest.mark.unit
def test_beds_remaining_never_negative() -> None:
    """5 unassigned, 3 blocked, 2 test, 1 private -> max(0, -1) == 0."""
    inventory = _rooms(
        _room("b1", blocked=True),
        _room("b2", blocked=True),
        _room("b3", blocked=True),
        _room("t1", name="TEST 1"),
        _room("t2", name="TEST 2"),
        _room("p1", room_type="Private Double"),
        total=5,
    )

    result = classify_rooms(inventory)

    assert (result.blocked_count, result.test_rooms, result.private_rooms_unassigned) == (3, 2, 1)
    assert result.beds_remaining == 0


@pytest.mark.unit
def test_room_blocked_flag_requires_literal_true() -> None:
    room = RoomRecord.model_validate(_room("1", blocked="true"))  # type: ignore[arg-type]
    assert room.blocked is False


@pytest.mark.unit
@pytest.mark.parametrize(
    ("capacity", "beds", "expected"),
    [(100, 25, 75.0), (48, 0, 100.0), (0, 10, 0.0), (3, 2, 33.33)],
)
def test_occupancy_percent(capacity: int, beds: int, expected: float) -> None:
    assert occupancy_percent(capacity, beds) == expected


@pytest.mark.unit
def test_summarize_property_counts_bookings_and_no_shows(
    property_a: Property, reservation_factory: Any
) -> None:
    raw = [
        reservation_factory(total="100"),
        reservation_factory(total="50.5"),
        reservation_factory(total="80", status="no_show"),
        reservation_factory(total="20", status="NO_SHOW"),
        reservation_factory(total=None),
    ]
    reservations = [Reservation.from_api(r) for r in raw]

    summary = summarize_property(
        property_a, reservations, _rooms(total=0), OperationalSnapshot(check_ins=3)
    )

    assert summary.bookings == 3
    assert summary.no_shows == 2
    assert summary.bookings + summary.no_shows == len(reservations)
    assert summary.revenue == pytest.approx(150.5)
    assert summary.snapshot.check_ins == 3
    assert summary.reservations == reservations
    assert summary.fetch_failed is False


@pytest.mark.unit
def test_summarize_property_counts_each_private_room_entry(
    property_a: Property, reservation_factory: Any
) -> None:
    """Two qualifying rooms on one reservation count twice."""
    raw = [
        reservation_factory(room_types=("Private Queen", "Deluxe King")),
        reservation_factory(room_types=("Single Pod",)),
        reservation_factory(room_types=("Mixed Dorm", "female dorm")),
        reservation_factory(room_types=("DOUBLE ENSUITE",), status="no_show"),
    ]
    reservations = [Reservation.from_api(r) for r in raw]

    summary = summarize_property(property_a, reservations, _rooms(total=0), OperationalSnapshot())

    assert summary.private_rooms == 4


@pytest.mark.unit
def test_summarize_property_occupancy_from_inventory(property_b: Property) -> None:
    inventory = _rooms(_room("1"), _room("2", blocked=True), total=12)

    summary = summarize_property(property_b, [], inventory, OperationalSnapshot())

    assert summary.beds_remaining == 11
    assert summary.occupancy == round((48 - 11) / 48 * 100, 2)
    assert len(summary.available_rooms) == 1


@pytest.mark.unit
@pytest.mark.anyio
async def test_aggregate_property_success(property_a: Property, reservation_factory: Any) -> None:
    client = Mock()
    client.fetch_reservations = AsyncMock(
        return_value=[Reservation.from_api(reservation_factory(total="99"))]
    )
    client.fetch_unassigned_rooms = AsyncMock(return_value=_rooms(_room("1"), total=1))
    client.fetch_dashboard_snapshot = AsyncMock(return_value=OperationalSnapshot(in_house=4))

    summary = await aggregate_property(client, property_a, "2025-03-01", "2025-03-07")

    client.fetch_reservations.assert_awaited_once_with(property_a, "2025-03-01", "2025-03-07")
    assert summary.bookings == 1
    assert summary.revenue == 99.0
    assert summary.beds_remaining == 1
    assert summary.snapshot.in_house == 4


@pytest.mark.unit
@pytest.mark.anyio
@pytest.mark.parametrize("failing", ["fetch_reservations", "fetch_unassigned_rooms"])
async def test_aggregate_property_falls_back_to_zero_summary(
    property_a: Property, reservation_factory: Any, failing: str
) -> None:
    client = Mock()
    client.fetch_reservations = AsyncMock(
        return_value=[Reservation.from_api(reservation_factory())]
    )
    client.fetch_unassigned_rooms = AsyncMock(return_value=_rooms(total=0))
    client.fetch_dashboard_snapshot = AsyncMock(return_value=OperationalSnapshot(check_ins=9))
    setattr(client, failing, AsyncMock(side_effect=httpx.ConnectError("connection refused")))

    summary = await aggregate_property(client, property_a, "2025-03-01", "2025-03-07")

    assert summary.fetch_failed is True
    assert summary.property_id == property_a.id
    assert summary.name == property_a.name
    assert summary.capacity == property_a.capacity
    assert (summary.bookings, summary.revenue, summary.occupancy) == (0, 0.0, 0.0)
    assert summary.snapshot == OperationalSnapshot()
    assert summary.reservations == []
