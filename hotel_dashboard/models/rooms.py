"""Unassigned room inventory as returned by getRoomsUnassigned."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hotel_dashboard.models.base import CamelModel


class RoomRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: str = Field("", alias="roomID")
    room_name: str = Field("", alias="roomName")
    room_type_name: str = Field("Other", alias="roomTypeName")
    blocked: bool = Field(False, alias="roomBlocked")

    @field_validator("room_id", "room_name", mode="before")
    @classmethod
    def _to_str(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("room_type_name", mode="before")
    @classmethod
    def _default_type(cls, value: Any) -> str:
        return value or "Other"

    @field_validator("blocked", mode="before")
    @classmethod
    def _strict_true(cls, value: Any) -> bool:
        # Only a literal JSON true marks a room as blocked
        return value is True


class UnassignedRooms(BaseModel):
    rooms: list[RoomRecord] = Field(default_factory=list)
    total_unassigned: int = 0


class AvailableRoom(CamelModel):
    room_name: str
    room_type_name: str


class RoomClassification(BaseModel):
    """Counts from one pass over the unassigned inventory."""

    total_unassigned: int = 0
    blocked_count: int = 0
    test_rooms: int = 0
    private_rooms_unassigned: int = 0
    available_rooms: list[AvailableRoom] = Field(default_factory=list)

    @property
    def beds_remaining(self) -> int:
        remaining = (
            self.total_unassigned
            - self.blocked_count
            - self.test_rooms
            - self.private_rooms_unassigned
        )
        return max(0, remaining)
