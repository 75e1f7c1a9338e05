"""Per-provider adapters that pull a partial location out of raw JSON."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence, Tuple

import structlog

from georesolve.errors import ParseError
from georesolve.models import Granularity
from georesolve.normalize.geo import Coordinates, to_finite_float
from georesolve.normalize.granularity import classify, classify_types

LOGGER = structlog.get_logger(__name__)


@dataclass(slots=True)
class PartialLocation:
    """What an adapter could read from one provider answer.

    Either `coordinates` or `eloc` is set; the normalizer turns the former
    into a result directly and resolves the latter first.
    """

    raw: Dict[str, Any]
    granularity: Granularity = Granularity.UNKNOWN
    coordinates: Optional[Coordinates] = None
    eloc: Optional[str] = None
    confidence: Optional[float] = None
    display_name: Optional[str] = None


def _first_present(entry: Dict[str, Any], fields: Sequence[str]) -> Any:
    for field in fields:
        value = entry.get(field)
        if value not in (None, ""):
            return value
    return None


def _confidence(entry: Dict[str, Any], fields: Sequence[str]) -> Optional[float]:
    value = to_finite_float(_first_present(entry, fields))
    if value is None:
        return None
    return min(max(value, 0.0), 1.0)


class ProviderAdapter:
    """Interface for reading one provider's response shape."""

    name = "provider"

    def extract(self, raw: Any) -> Optional[PartialLocation]:
        """Return the partial location or None when the answer has no match."""
        raise NotImplementedError


class MapmyIndiaAdapter(ProviderAdapter):
    """Handles the geocode, search and legacy REST answers of MapmyIndia."""

    name = "mapmyindia"

    RESULT_KEYS = ("results", "suggestedLocations", "copResults", "cop_results")
    COORDINATE_FIELDS: Tuple[Tuple[str, str], ...] = (("latitude", "longitude"), ("lat", "lng"))
    PLACE_TYPE_FIELDS = ("place_type", "placeType", "geocodeLevel", "type")
    CONFIDENCE_FIELDS = ("confidenceScore", "confidence", "relevance", "importance")
    DISPLAY_FIELDS = (
        "formattedAddress",
        "formatted_address",
        "placeName",
        "place_name",
        "placeAddress",
        "display_name",
    )
    ADDRESS_PARTS = ("houseName", "street", "subLocality", "locality", "city", "state")
    ELOC_FIELDS = ("eLoc", "eloc")

    def _locate(self, raw: Any) -> Any:
        if isinstance(raw, dict):
            for key in self.RESULT_KEYS:
                if raw.get(key) is not None:
                    return raw[key]
        return raw

    def _coordinates(self, entry: Dict[str, Any]) -> Optional[Coordinates]:
        pairs = []
        geometry = entry.get("geometry")
        location = geometry.get("location") if isinstance(geometry, dict) else None
        if isinstance(location, dict):
            pairs.append((location.get("lat"), location.get("lng")))
        pairs.extend((entry.get(lat), entry.get(lng)) for lat, lng in self.COORDINATE_FIELDS)
        geo = entry.get("geo")
        if isinstance(geo, dict):
            pairs.append((geo.get("lat"), geo.get("lng")))
        for raw_lat, raw_lng in pairs:
            lat = to_finite_float(raw_lat)
            lng = to_finite_float(raw_lng)
            if lat is not None and lng is not None:
                return Coordinates(latitude=lat, longitude=lng)
        return None

    def _display_name(self, entry: Dict[str, Any]) -> Optional[str]:
        name = _first_present(entry, self.DISPLAY_FIELDS)
        if isinstance(name, str):
            return name
        parts = [str(entry[part]).strip() for part in self.ADDRESS_PARTS if entry.get(part)]
        return ", ".join(part for part in parts if part) or None

    def extract(self, raw: Any) -> Optional[PartialLocation]:
        located = self._locate(raw)
        if isinstance(located, list):
            if not located:
                return None
            located = located[0]
        if not isinstance(located, dict):
            raise ParseError(f"unrecognised {self.name} result of type {type(located).__name__}")

        place_type = _first_present(located, self.PLACE_TYPE_FIELDS)
        partial = PartialLocation(
            raw=located,
            granularity=classify(place_type if isinstance(place_type, str) else None),
            confidence=_confidence(located, self.CONFIDENCE_FIELDS),
            display_name=self._display_name(located),
        )
        partial.coordinates = self._coordinates(located)
        if partial.coordinates is None:
            eloc = _first_present(located, self.ELOC_FIELDS)
            if not isinstance(eloc, str):
                return None
            partial.eloc = eloc
        return partial


class GoogleAdapter(ProviderAdapter):
    """Reads Google Geocoding answers; confidence comes from `location_type`."""

    name = "google"

    LOCATION_TYPE_CONFIDENCE = {
        "ROOFTOP": 1.0,
        "RANGE_INTERPOLATED": 0.8,
        "GEOMETRIC_CENTER": 0.6,
        "APPROXIMATE": 0.4,
    }

    def extract(self, raw: Any) -> Optional[PartialLocation]:
        if not isinstance(raw, dict):
            raise ParseError(f"unrecognised google payload of type {type(raw).__name__}")
        status = raw.get("status", "")
        if status != "OK":
            LOGGER.info("google_status", status=status, error=raw.get("error_message"))
            return None
        results = raw.get("results")
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            return None
        entry = results[0]

        geometry = entry.get("geometry") if isinstance(entry.get("geometry"), dict) else {}
        location = geometry.get("location") if isinstance(geometry.get("location"), dict) else {}
        lat = to_finite_float(location.get("lat"))
        lng = to_finite_float(location.get("lng"))
        if lat is None or lng is None:
            return None

        types = entry.get("types")
        return PartialLocation(
            raw=entry,
            granularity=classify_types(types) if isinstance(types, list) else Granularity.UNKNOWN,
            coordinates=Coordinates(latitude=lat, longitude=lng),
            confidence=self.LOCATION_TYPE_CONFIDENCE.get(geometry.get("location_type")),
            display_name=entry.get("formatted_address") or None,
        )
