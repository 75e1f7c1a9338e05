"""Entry point sequencing the direct parse, token, provider chain and fallbacks."""
from __future__ import annotations

import contextlib
import re
from typing import AsyncIterator, Iterable, List, Optional

import httpx
import structlog

from georesolve.config import ProviderCredentials, ResolverSettings
from georesolve.errors import ConfigurationError, ResolutionError
from georesolve.fetch.session import create_geocoding_session
from georesolve.fetch.token import TokenCache, TokenManager
from georesolve.models import Granularity, LocationResult
from georesolve.normalize.eloc import ELocResolver
from georesolve.normalize.geo import Coordinates, format_coordinates
from georesolve.normalize.granularity import radius_for
from georesolve.normalize.response import ResponseNormalizer
from georesolve.observability.metrics import MetricsRegistry, record_duration
from georesolve.observability.tracing import clear_context, log_stage_failure, set_context, span
from georesolve.orchestrator.strategies import (
    ResolutionContext,
    ResolutionStrategy,
    build_default_strategies,
)

LOGGER = structlog.get_logger(__name__)

_NUMBER = r"[-+]?(?:\d+(?:\.\d*)?|\.\d+)"
COORDINATE_PATTERN = re.compile(rf"^\s*({_NUMBER})\s*,\s*({_NUMBER})\s*$")


def parse_coordinates(text: str) -> Optional[Coordinates]:
    """Return coordinates when the text is a literal ``lat,lon`` pair."""
    match = COORDINATE_PATTERN.match(text)
    if not match:
        return None
    return Coordinates(latitude=float(match.group(1)), longitude=float(match.group(2)))


class LocationResolver:
    """Resolves place text to a `LocationResult`, degrading stage by stage.

    Stages run strictly one after another and the first success wins.
    `resolve` never raises; exhausting every stage yields None.
    """

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        credentials: ProviderCredentials,
        settings: Optional[ResolverSettings] = None,
        token_cache: Optional[TokenCache] = None,
        metrics: Optional[MetricsRegistry] = None,
        strategies: Optional[Iterable[ResolutionStrategy]] = None,
    ) -> None:
        self._settings = settings or ResolverSettings()
        self._metrics = metrics or MetricsRegistry()
        self._token_manager = TokenManager(
            client=client,
            credentials=credentials,
            token_url=self._settings.endpoints.token_url,
            cache=token_cache,
            expiry_margin_seconds=self._settings.token.expiry_margin_seconds,
            metrics=self._metrics,
        )
        if strategies is None:
            normalizer = ResponseNormalizer(
                eloc_resolver=ELocResolver(
                    client=client,
                    url=self._settings.endpoints.eloc_url,
                    metrics=self._metrics,
                ),
                confidence=self._settings.confidence,
            )
            strategies = build_default_strategies(
                client=client,
                settings=self._settings,
                credentials=credentials,
                normalizer=normalizer,
            )
        self.strategies: List[ResolutionStrategy] = list(strategies)

    @property
    def metrics(self) -> MetricsRegistry:
        return self._metrics

    @property
    def token_manager(self) -> TokenManager:
        return self._token_manager

    async def resolve(self, text: Optional[str]) -> Optional[LocationResult]:
        """Resolve free text or a ``lat,lon`` literal; None when nothing matched."""
        if text is None or not text.strip():
            return None
        query = text.strip()
        self._metrics.incr("resolutions")
        set_context(query=query)
        try:
            with record_duration(self._metrics, "resolve_duration_ms"):
                return await self._resolve(query)
        finally:
            clear_context()

    async def _resolve(self, query: str) -> Optional[LocationResult]:
        direct = parse_coordinates(query)
        if direct is not None:
            self._metrics.incr("fast_path_hits")
            return LocationResult(
                latitude=direct.latitude,
                longitude=direct.longitude,
                display_name=format_coordinates(direct),
                granularity=Granularity.EXACT,
                estimated_radius_meters=radius_for(Granularity.EXACT),
                importance=1.0,
                provider="direct",
            )

        token = await self._token_manager.get_access_token()
        context = ResolutionContext(query=query, token=token)
        for strategy in self.strategies:
            if strategy.requires_token and token is None:
                LOGGER.info("stage_skipped", stage=strategy.name, reason="no access token")
                continue
            result = await self._attempt(strategy, context)
            if result is not None:
                self._metrics.incr(f"{strategy.name}_hits")
                LOGGER.info(
                    "resolution_succeeded",
                    stage=strategy.name,
                    granularity=result.granularity.value,
                    importance=result.importance,
                )
                return result

        self._metrics.incr("resolution_failures")
        LOGGER.error("resolution_failed", query=query)
        return None

    async def _attempt(
        self, strategy: ResolutionStrategy, context: ResolutionContext
    ) -> Optional[LocationResult]:
        self._metrics.incr("provider_attempts")
        try:
            with span(name=strategy.name):
                result = await strategy.try_resolve(context)
        except ConfigurationError as exc:
            LOGGER.info("stage_skipped", stage=strategy.name, reason=str(exc))
            return None
        except ResolutionError as exc:
            self._metrics.incr("provider_failures")
            log_stage_failure(stage=strategy.name, reason=str(exc))
            return None
        except Exception:
            self._metrics.incr("provider_failures")
            LOGGER.exception("stage_crashed", stage=strategy.name)
            return None
        if result is None:
            self._metrics.incr("provider_misses")
        return result

    async def reverse_to_text(self, coordinates: Coordinates) -> str:
        """Return a display string for coordinates; never None."""
        result = await self.resolve(f"{coordinates.latitude:.6f},{coordinates.longitude:.6f}")
        if result is None:
            return format_coordinates(coordinates)
        return result.display_name


@contextlib.asynccontextmanager
async def open_resolver(
    *,
    settings: ResolverSettings,
    credentials: ProviderCredentials,
    token_cache: Optional[TokenCache] = None,
    metrics: Optional[MetricsRegistry] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[LocationResolver]:
    """Yield a resolver bound to a fresh HTTP session."""
    async with create_geocoding_session(
        user_agent=settings.http.user_agent,
        timeout=settings.http.timeout_seconds,
        transport=transport,
    ) as client:
        yield LocationResolver(
            client=client,
            credentials=credentials,
            settings=settings,
            token_cache=token_cache,
            metrics=metrics,
        )
