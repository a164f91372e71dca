"""UTC datetime and date-string utilities."""

from __future__ import annotations

from datetime import date, datetime, timezone

from dateutil import parser as date_parser


def utc_now() -> datetime:
    """
    Return current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(timezone.utc)


def utc_today() -> date:
    """Return today's date in UTC."""
    return utc_now().date()


def parse_timestamp(value: str | None) -> datetime | None:
    """
    Parse an upstream timestamp such as "2025-03-01 14:05:09" or an ISO string.

    Returns None for missing or unparsable values instead of raising.
    """
    if not value:
        return None
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError):
        return None
