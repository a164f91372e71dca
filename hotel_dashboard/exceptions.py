"""Exception types raised inside the aggregation pipeline."""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for dashboard pipeline errors."""


class UpstreamError(DashboardError):
    """An upstream API answered with a non-success status."""

    def __init__(self, source: str, endpoint: str, status_code: int, body: str, context: str = ""):
        self.source = source
        self.endpoint = endpoint
        self.status_code = status_code
        self.body = body
        prefix = f"{source} API error"
        if context:
            prefix = f"{prefix} for {context}"
        super().__init__(f"{prefix}: {endpoint} returned {status_code}: {body}")


class AnalyticsAuthError(DashboardError):
    """The analytics service credential is missing or the token exchange failed."""


class InvalidDateRangeError(DashboardError, ValueError):
    """The inbound start/end dates are missing or cannot be parsed."""
