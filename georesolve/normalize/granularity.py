"""Helpers for mapping provider place types to canonical granularity."""
from __future__ import annotations

from typing import Dict, Iterable, Optional

from georesolve.models import Granularity

PLACE_TYPE_MAP: Dict[str, Granularity] = {
    "house": Granularity.EXACT,
    "building": Granularity.EXACT,
    "poi": Granularity.EXACT,
    "premise": Granularity.EXACT,
    "street_address": Granularity.EXACT,
    "street": Granularity.STREET,
    "road": Granularity.STREET,
    "route": Granularity.STREET,
    "locality": Granularity.NEIGHBOURHOOD,
    "sublocality": Granularity.NEIGHBOURHOOD,
    "neighbourhood": Granularity.NEIGHBOURHOOD,
    "neighborhood": Granularity.NEIGHBOURHOOD,
    "city": Granularity.CITY,
    "town": Granularity.CITY,
    "village": Granularity.CITY,
    "administrative_area_level_3": Granularity.CITY,
    "district": Granularity.REGION,
    "state": Granularity.REGION,
    "administrative_area_level_1": Granularity.REGION,
    "administrative_area_level_2": Granularity.REGION,
    "country": Granularity.COUNTRY,
}

RADIUS_METERS: Dict[Granularity, int] = {
    Granularity.EXACT: 50,
    Granularity.STREET: 200,
    Granularity.NEIGHBOURHOOD: 1000,
    Granularity.CITY: 5000,
    Granularity.REGION: 50000,
    Granularity.COUNTRY: 100000,
    Granularity.UNKNOWN: 2000,
}


def classify(place_type: Optional[str]) -> Granularity:
    """Return the granularity for a single place-type string."""
    if not isinstance(place_type, str):
        return Granularity.UNKNOWN
    return PLACE_TYPE_MAP.get(place_type.strip().lower(), Granularity.UNKNOWN)


def classify_types(types: Iterable[object]) -> Granularity:
    """Classify a Google-style list of types using the first recognised entry."""
    for item in types:
        granularity = classify(item if isinstance(item, str) else None)
        if granularity is not Granularity.UNKNOWN:
            return granularity
    return Granularity.UNKNOWN


def radius_for(granularity: Granularity) -> int:
    return RADIUS_METERS[granularity]
