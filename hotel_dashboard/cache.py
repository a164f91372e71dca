"""
In-memory cache for the analytics access token.

The analytics API hands out short-lived bearer tokens (typically one hour).
The cache keeps the current token together with its expiry and reports it as
stale a safety margin before it actually expires. Each process keeps its own
token.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

from hotel_dashboard.utils.datetime import utc_now


class AccessTokenCache:
    """
    Single-slot token cache with expiry and a refresh safety margin.

    Attributes:
        margin: How long before real expiry the token is treated as stale
        lock: Serializes refreshes so concurrent callers mint at most one token

    Example:
        >>> cache = AccessTokenCache(margin_seconds=300)
        >>> cache.set("ya29.token", expires_in=3600)
        >>> cache.get()
        'ya29.token'
        >>> cache.invalidate()
    """

    def __init__(self, margin_seconds: int = 300):
        """
        Initialize an empty token cache.

        Args:
            margin_seconds: Safety margin before expiry (default: 300 = 5 minutes)
        """
        self.margin = timedelta(seconds=margin_seconds)
        self.lock = asyncio.Lock()
        self._token: str | None = None
        self._expires_at: datetime | None = None

    def get(self, now: datetime | None = None) -> str | None:
        """
        Get the cached token if it is still valid outside the safety margin.

        Args:
            now: Current time override (tests)

        Returns:
            Cached token string if usable, None otherwise
        """
        if self._token is None or self._expires_at is None:
            return None
        current = now or utc_now()
        if current < self._expires_at - self.margin:
            return self._token
        self.invalidate()
        return None

    def set(self, token: str, expires_in: float, now: datetime | None = None) -> None:
        """
        Store a token that expires `expires_in` seconds from now.

        Args:
            token: Bearer token
            expires_in: Lifetime in seconds as reported by the token endpoint
            now: Current time override (tests)
        """
        current = now or utc_now()
        self._token = token
        self._expires_at = current + timedelta(seconds=expires_in)

    def invalidate(self) -> None:
        """Drop the cached token."""
        self._token = None
        self._expires_at = None

    @property
    def expires_at(self) -> datetime | None:
        return self._expires_at


# Process-wide instance handed to the analytics client by the dependency layer
analytics_token_cache = AccessTokenCache(margin_seconds=300)
