"""Resolve MapmyIndia eLoc place codes to coordinates."""
from __future__ import annotations

from typing import Any, Optional

import httpx
import structlog

from georesolve.errors import ResolutionError
from georesolve.fetch.fetcher import fetch_json
from georesolve.normalize.geo import Coordinates, to_finite_float
from georesolve.observability.metrics import MetricsRegistry

LOGGER = structlog.get_logger(__name__)


def _first_result(payload: Any) -> Any:
    if isinstance(payload, dict):
        results = payload.get("results")
        if isinstance(results, list):
            return results[0] if results else None
        if isinstance(results, dict):
            return results
    return payload


def _coordinates_from(entry: Any) -> Optional[Coordinates]:
    if not isinstance(entry, dict):
        return None
    geometry = entry.get("geometry")
    location = geometry.get("location") if isinstance(geometry, dict) else None
    candidates = []
    if isinstance(location, dict):
        candidates.append((location.get("lat"), location.get("lng")))
    candidates.append((entry.get("latitude"), entry.get("longitude")))
    candidates.append((entry.get("lat"), entry.get("lng")))
    for raw_lat, raw_lng in candidates:
        lat = to_finite_float(raw_lat)
        lng = to_finite_float(raw_lng)
        if lat is not None and lng is not None:
            return Coordinates(latitude=lat, longitude=lng)
    return None


class ELocResolver:
    """Looks up the coordinates behind an opaque eLoc with one bearer-auth GET."""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        url: str,
        metrics: Optional[MetricsRegistry] = None,
    ) -> None:
        self._client = client
        self._url = url
        self._metrics = metrics or MetricsRegistry()

    async def resolve(self, token: str, code: str) -> Optional[Coordinates]:
        """Return coordinates for the code, or None on any failure."""
        self._metrics.incr("eloc_lookups")
        try:
            payload = await fetch_json(
                self._client,
                "GET",
                self._url,
                params={"place_id": code},
                headers={"Authorization": f"Bearer {token}"},
            )
        except ResolutionError as exc:
            LOGGER.warning("eloc_lookup_failed", eloc=code, error=str(exc))
            return None

        coordinates = _coordinates_from(_first_result(payload))
        if coordinates is None:
            LOGGER.warning("eloc_lookup_failed", eloc=code, error="no finite coordinates in response")
        return coordinates
