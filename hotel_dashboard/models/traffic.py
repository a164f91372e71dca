from pydantic import Field

from hotel_dashboard.models.base import CamelModel


class TopPage(CamelModel):
    path: str
    views: int = 0
    sessions: int = 0


class TrafficTrendPoint(CamelModel):
    date: str
    sessions: int = 0
    page_views: int = 0
    new_users: int = 0


class TrafficSummary(CamelModel):
    """Website traffic for a date range, independent of booking data."""

    sessions: int = 0
    page_views: int = 0
    new_users: int = 0
    active_users: int = 0
    engaged_sessions: int = 0
    bounce_rate: float = 0.0
    avg_engagement_time: str = "0m 0s"
    conversions: int = 0
    top_pages: list[TopPage] = Field(default_factory=list)
    daily_trend: list[TrafficTrendPoint] = Field(default_factory=list)
