"""
FastAPI dependency injection providers.

Every upstream-facing collaborator a route needs comes through here, so
tests can swap them with app.dependency_overrides.

Testing Example:
    >>> app.dependency_overrides[get_properties] = lambda: [Property(id="1", name="A", api_key="k")]
    >>> app.dependency_overrides[get_service_account] = lambda: None
    >>> client = TestClient(app)
    >>> client.post("/api/dashboard-data", json={"startDate": "2025-03-01", "endDate": "2025-03-07"})
"""

from __future__ import annotations

from functools import lru_cache
from typing import AsyncGenerator, Optional

import httpx

from hotel_dashboard.cache import AccessTokenCache, analytics_token_cache
from hotel_dashboard.config import GOOGLE_SERVICE_ACCOUNT, HTTP_TIMEOUT_SECONDS
from hotel_dashboard.models.properties import Property
from hotel_dashboard.properties import load_properties


@lru_cache(maxsize=1)
def get_properties() -> list[Property]:
    """
    Provide the registered properties, read from the environment once per process.

    Returns:
        list[Property]: Configured properties
    """
    return load_properties()


async def get_http_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    Provide an httpx.AsyncClient scoped to one request.

    Yields:
        httpx.AsyncClient: Client shared by every upstream call of the request
    """
    async with httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS) as client:
        yield client


def get_token_cache() -> AccessTokenCache:
    return analytics_token_cache


def get_service_account() -> Optional[str]:
    return GOOGLE_SERVICE_ACCOUNT
