"""OAuth2 client-credentials token acquisition with a single-entry cache."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

import httpx
import structlog

from georesolve.config import ProviderCredentials
from georesolve.errors import ResolutionError
from georesolve.fetch.fetcher import fetch_json
from georesolve.normalize.geo import to_finite_float
from georesolve.observability.metrics import MetricsRegistry

LOGGER = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AccessToken:
    """A bearer token and the epoch second at which it stops being valid."""

    value: str
    expires_at: float

    def is_usable(self, now: float, margin: float) -> bool:
        return self.expires_at - now > margin


class TokenCache:
    """Holds at most one access token for the lifetime of the owning resolver."""

    def __init__(self) -> None:
        self._token: Optional[AccessToken] = None

    @property
    def current(self) -> Optional[AccessToken]:
        return self._token

    def store(self, token: AccessToken) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class TokenManager:
    """Returns a cached token, refreshing it when absent or about to expire.

    The read-check-refresh sequence is not locked. Two concurrent callers that
    both see an expiring token will both refresh; the later write wins.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        credentials: ProviderCredentials,
        token_url: str,
        cache: Optional[TokenCache] = None,
        expiry_margin_seconds: float = 5.0,
        metrics: Optional[MetricsRegistry] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._credentials = credentials
        self._token_url = token_url
        self._cache = cache if cache is not None else TokenCache()
        self._margin = expiry_margin_seconds
        self._metrics = metrics or MetricsRegistry()
        self._clock = clock

    @property
    def cache(self) -> TokenCache:
        return self._cache

    async def get_access_token(self) -> Optional[str]:
        """Return a bearer token or None when authentication is unavailable."""
        now = self._clock()
        cached = self._cache.current
        if cached is not None and cached.is_usable(now, self._margin):
            self._metrics.incr("token_cache_hits")
            return cached.value

        if not self._credentials.has_client_credentials:
            LOGGER.info("token_skipped", reason="client credentials not configured")
            self._metrics.incr("token_failures")
            return None

        self._metrics.incr("token_requests")
        try:
            payload = await fetch_json(
                self._client,
                "POST",
                self._token_url,
                data={"grant_type": "client_credentials"},
                auth=(
                    self._credentials.mapmyindia_client_id or "",
                    self._credentials.mapmyindia_client_secret or "",
                ),
            )
        except ResolutionError as exc:
            LOGGER.error("token_error", url=self._token_url, error=str(exc))
            self._metrics.incr("token_failures")
            return None

        value = payload.get("access_token") if isinstance(payload, dict) else None
        if not isinstance(value, str) or not value:
            LOGGER.error("token_error", url=self._token_url, error="response carried no access_token")
            self._metrics.incr("token_failures")
            return None

        expires_in = to_finite_float(payload.get("expires_in")) or 0.0
        token = AccessToken(value=value, expires_at=self._clock() + expires_in)
        self._cache.store(token)
        LOGGER.info("token_refreshed", expires_in=expires_in)
        return token.value
