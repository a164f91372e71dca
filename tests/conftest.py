"""Shared fixtures: properties, canned Cloudbeds payloads and a throwaway service account."""

from __future__ import annotations

import json
from typing import Any

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from hotel_dashboard.cache import AccessTokenCache
from hotel_dashboard.models.properties import Property


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Run async tests on the asyncio event loop."""
    return "asyncio"


@pytest.fixture
def property_a() -> Property:
    return Property(id="311271", name="Darling Harbour", api_key="key-a", capacity=176)


@pytest.fixture
def property_b() -> Property:
    return Property(id="311267", name="Central Sydney", api_key="key-b", capacity=48)


@pytest.fixture
def token_cache() -> AccessTokenCache:
    return AccessTokenCache(margin_seconds=300)


@pytest.fixture(scope="session")
def rsa_private_key_pem() -> str:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture
def service_account(rsa_private_key_pem: str) -> dict[str, str]:
    return {
        "client_email": "dashboard@example-project.iam.gserviceaccount.com",
        "private_key": rsa_private_key_pem,
    }


@pytest.fixture
def service_account_json(service_account: dict[str, str]) -> str:
    return json.dumps(service_account)


def make_reservation(
    total: Any = "100.00",
    source: str | None = "Direct",
    country: str | None = "AU",
    status: str = "confirmed",
    created: str | None = "2025-03-03 14:05:09",
    room_types: tuple[str, ...] = ("Mixed Dorm",),
) -> dict[str, Any]:
    """Build a raw getReservationsWithRateDetails record."""
    return {
        "reservationID": "R1",
        "sourceName": source,
        "total": total,
        "guestCountry": country,
        "status": status,
        "dateCreatedUTC": created,
        "startDate": "2025-03-05",
        "endDate": "2025-03-07",
        "rooms": [{"roomTypeName": room_type} for room_type in room_types],
    }


@pytest.fixture
def reservation_factory() -> Any:
    return make_reservation
