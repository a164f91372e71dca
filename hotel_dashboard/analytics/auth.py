"""
Service-account authentication for the Google Analytics Data API.

A JWT signed with the service account's private key is exchanged at the
Google token endpoint for a short-lived bearer token. Tokens are kept in an
AccessTokenCache and reused until shortly before they expire.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, Optional, Tuple

import httpx
import jwt
import structlog

from hotel_dashboard.cache import AccessTokenCache
from hotel_dashboard.exceptions import AnalyticsAuthError
from hotel_dashboard.metrics import (
    token_cache_hits,
    token_cache_misses,
    token_refreshes,
    upstream_requests,
)
from hotel_dashboard.utils.datetime import utc_now

logger = structlog.get_logger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
ANALYTICS_SCOPE = "https://www.googleapis.com/auth/analytics.readonly"
JWT_BEARER_GRANT = "urn:ietf:params:oauth:grant-type:jwt-bearer"
ASSERTION_LIFETIME_SECONDS = 3600


def load_service_account(raw: Optional[str]) -> Dict[str, str]:
    """
    Parse the service account JSON from configuration.

    Args:
        raw: JSON document with at least client_email and private_key

    Returns:
        Dict[str, str]: The parsed service account

    Raises:
        AnalyticsAuthError: If the credential is missing or incomplete
    """
    if not raw:
        raise AnalyticsAuthError("GOOGLE_SERVICE_ACCOUNT is not set")

    try:
        account = json.loads(raw)
    except json.JSONDecodeError as e:
        raise AnalyticsAuthError(f"GOOGLE_SERVICE_ACCOUNT is not valid JSON: {e}") from e

    if not isinstance(account, dict) or not account.get("client_email") or not account.get(
        "private_key"
    ):
        raise AnalyticsAuthError("GOOGLE_SERVICE_ACCOUNT lacks client_email or private_key")

    return account


def build_signed_assertion(
    service_account: Dict[str, str],
    scope: str = ANALYTICS_SCOPE,
    now: Optional[datetime] = None,
) -> str:
    """
    Create the RS256-signed JWT assertion for the token exchange.

    Args:
        service_account: Parsed service account (client_email, private_key)
        scope: OAuth scope to request
        now: Issue time override (tests)

    Returns:
        str: Compact JWT

    Raises:
        AnalyticsAuthError: If the private key cannot be used for signing
    """
    issued_at = int((now or utc_now()).timestamp())
    claims: Dict[str, Any] = {
        "iss": service_account["client_email"],
        "scope": scope,
        "aud": GOOGLE_TOKEN_URL,
        "iat": issued_at,
        "exp": issued_at + ASSERTION_LIFETIME_SECONDS,
    }

    try:
        return jwt.encode(claims, service_account["private_key"], algorithm="RS256")
    except (ValueError, TypeError, jwt.PyJWTError) as e:
        raise AnalyticsAuthError(f"Failed to sign service account assertion: {e}") from e


class AnalyticsTokenProvider:
    """
    Hands out analytics bearer tokens, minting a new one only when the cached
    token is missing or inside its expiry margin.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        service_account: Dict[str, str],
        cache: AccessTokenCache,
    ) -> None:
        self.http = http
        self.service_account = service_account
        self.cache = cache

    async def get_token(self) -> str:
        token = self.cache.get()
        if token:
            token_cache_hits.inc()
            return token

        async with self.cache.lock:
            # Another caller may have refreshed while we waited
            token = self.cache.get()
            if token:
                token_cache_hits.inc()
                return token

            token_cache_misses.inc()
            token, expires_in = await self._exchange_assertion()
            self.cache.set(token, expires_in)
            token_refreshes.inc()

        logger.info("analytics_token_refreshed", expires_at=str(self.cache.expires_at))
        return token

    async def _exchange_assertion(self) -> Tuple[str, float]:
        assertion = build_signed_assertion(self.service_account)

        res = await self.http.post(
            GOOGLE_TOKEN_URL,
            data={"grant_type": JWT_BEARER_GRANT, "assertion": assertion},
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        upstream_requests.labels(
            source="analytics", endpoint="token", status_code=str(res.status_code)
        ).inc()

        if not res.is_success:
            logger.error("analytics_token_request_failed", status_code=res.status_code, body=res.text)
            raise AnalyticsAuthError(f"Failed to get Google access token: {res.text}")

        body = res.json()
        token = body.get("access_token")
        if not isinstance(token, str):
            raise AnalyticsAuthError("No access_token in Google token response.")

        return token, float(body.get("expires_in") or ASSERTION_LIFETIME_SECONDS)
