"""Reservation records as returned by getReservationsWithRateDetails."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

NO_SHOW_STATUS = "no_show"


class ReservationRoom(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_type_name: str = Field("", alias="roomTypeName")

    @field_validator("room_type_name", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return value or ""


class Reservation(BaseModel):
    """
    One reservation, reduced to the fields the aggregation needs.

    Monetary totals arrive as strings or numbers; anything unparsable counts as 0.
    The creation timestamp prefers dateCreatedUTC over dateCreated.
    """

    model_config = ConfigDict(populate_by_name=True)

    property_id: Optional[str] = Field(None, alias="propertyID")
    source_name: Optional[str] = Field(None, alias="sourceName")
    total: float = 0.0
    guest_country: Optional[str] = Field(None, alias="guestCountry")
    rooms: list[ReservationRoom] = Field(default_factory=list)
    status: str = ""
    date_created: Optional[str] = Field(None, alias="dateCreated")
    start_date: Optional[str] = Field(None, alias="startDate")
    end_date: Optional[str] = Field(None, alias="endDate")

    @classmethod
    def from_api(cls, raw: dict[str, Any]) -> "Reservation":
        data = dict(raw)
        if data.get("dateCreatedUTC"):
            data["dateCreated"] = data["dateCreatedUTC"]
        if data.get("propertyID") is not None:
            data["propertyID"] = str(data["propertyID"])
        return cls.model_validate(data)

    @field_validator("total", mode="before")
    @classmethod
    def _parse_total(cls, value: Any) -> float:
        try:
            return float(value or 0)
        except (TypeError, ValueError):
            return 0.0

    @field_validator("rooms", mode="before")
    @classmethod
    def _none_to_list(cls, value: Any) -> Any:
        return value or []

    @field_validator("status", mode="before")
    @classmethod
    def _none_to_blank(cls, value: Any) -> Any:
        return value or ""

    @property
    def is_no_show(self) -> bool:
        return self.status.lower() == NO_SHOW_STATUS
