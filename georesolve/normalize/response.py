"""Turn provider answers into canonical location results."""
from __future__ import annotations

from typing import Any, Optional

import structlog

from georesolve.config import ConfidenceSettings
from georesolve.models import LocationResult
from georesolve.normalize.adapters import PartialLocation, ProviderAdapter
from georesolve.normalize.eloc import ELocResolver
from georesolve.normalize.geo import Coordinates
from georesolve.normalize.granularity import radius_for

LOGGER = structlog.get_logger(__name__)


class ResponseNormalizer:
    """Combines an adapter's partial location with eLoc lookup and defaults."""

    def __init__(
        self,
        *,
        eloc_resolver: Optional[ELocResolver],
        confidence: Optional[ConfidenceSettings] = None,
    ) -> None:
        self._eloc_resolver = eloc_resolver
        self._confidence = confidence or ConfidenceSettings()

    def _build(
        self,
        partial: PartialLocation,
        coordinates: Coordinates,
        *,
        query: str,
        provider: str,
        default_importance: float,
    ) -> LocationResult:
        importance = partial.confidence if partial.confidence is not None else default_importance
        return LocationResult(
            latitude=coordinates.latitude,
            longitude=coordinates.longitude,
            display_name=partial.display_name or query,
            granularity=partial.granularity,
            estimated_radius_meters=radius_for(partial.granularity),
            importance=importance,
            provider=provider,
            raw=partial.raw,
        )

    async def normalize(
        self,
        adapter: ProviderAdapter,
        raw: Any,
        *,
        query: str,
        provider: str,
        token: Optional[str] = None,
    ) -> Optional[LocationResult]:
        """Return a result for this answer or None when it is a miss."""
        partial = adapter.extract(raw)
        if partial is None:
            return None

        if partial.coordinates is not None:
            return self._build(
                partial,
                partial.coordinates,
                query=query,
                provider=provider,
                default_importance=self._confidence.direct,
            )

        if partial.eloc is None or self._eloc_resolver is None or not token:
            LOGGER.info("eloc_unresolvable", provider=provider, eloc=partial.eloc)
            return None
        coordinates = await self._eloc_resolver.resolve(token, partial.eloc)
        if coordinates is None:
            return None
        return self._build(
            partial,
            coordinates,
            query=query,
            provider=provider,
            default_importance=self._confidence.eloc,
        )
