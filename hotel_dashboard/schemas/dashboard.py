from typing import Optional

from pydantic import Field

from hotel_dashboard.models.base import CamelModel
from hotel_dashboard.models.rooms import AvailableRoom
from hotel_dashboard.models.summaries import (
    BookingSourceRow,
    CountryRow,
    DailyBucket,
    HourlyBucket,
    OperationalTotals,
    PlatformRow,
)
from hotel_dashboard.models.traffic import TopPage, TrafficTrendPoint


class DashboardRequest(CamelModel):
    """
    Inbound date range. Both fields are optional here so a missing date is
    reported as a 400 with details rather than a generic validation error.
    """

    start_date: Optional[str] = Field(None, description="ISO date or datetime")
    end_date: Optional[str] = Field(None, description="ISO date or datetime")


class WebsiteTraffic(CamelModel):
    sessions: int = 0
    page_views: int = 0
    avg_engagement_time: str = "0m 0s"
    new_users: int = 0
    active_users: int = 0
    bounce_rate: float = 0.0
    adr: float = 0.0
    revpar: float = 0.0
    conversion: float = 0.0


class PropertyRow(CamelModel):
    name: str
    total_bookings: int = 0
    private_rooms: int = 0
    capacity: int = 0
    occupancy: int = 0
    beds_remaining: int = 0
    revenue: float = 0.0
    available_rooms: list[AvailableRoom] = Field(default_factory=list)


class DashboardReport(CamelModel):
    """The merged traffic + booking view returned to the dashboard."""

    website_traffic: WebsiteTraffic = Field(default_factory=WebsiteTraffic)
    property_data: list[PropertyRow] = Field(default_factory=list)
    booking_source_data: list[BookingSourceRow] = Field(default_factory=list)
    country_data: list[CountryRow] = Field(default_factory=list)
    hourly_data: list[HourlyBucket] = Field(default_factory=list)
    daily_data: list[DailyBucket] = Field(default_factory=list)
    platform_data: list[PlatformRow] = Field(default_factory=list)
    operational_data: OperationalTotals = Field(default_factory=OperationalTotals)
    overall_occupancy: float = 0.0
    total_beds_left: int = 0
    total_capacity: int = 0
    total_bookings: int = 0
    total_revenue: float = 0.0
    ga_top_pages: list[TopPage] = Field(default_factory=list)
    ga_daily_trend: list[TrafficTrendPoint] = Field(default_factory=list)


class AnalyticsStatus(CamelModel):
    connected: bool = False
    last_sync: Optional[str] = None


class PropertyConnection(CamelModel):
    name: str
    id: str
    connected: bool = False


class CloudbedsStatus(CamelModel):
    connected: bool = False
    last_sync: Optional[str] = None
    properties: list[PropertyConnection] = Field(default_factory=list)
    connected_properties: str = "0/0"


class ConnectionStatus(CamelModel):
    google_analytics: AnalyticsStatus = Field(default_factory=AnalyticsStatus)
    cloudbeds: CloudbedsStatus = Field(default_factory=CloudbedsStatus)
