"""Static table of well-known places used when every networked stage fails.

Entries are scanned in order and the first whose `match_substring` occurs in
the lowercased query wins, so neighbourhoods precede the cities and regions
that contain them ("Jadavpur, Kolkata" must hit Jadavpur, not Kolkata).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from georesolve.config import ConfidenceSettings
from georesolve.models import Granularity, LocationResult

APPROXIMATE_SUFFIX = " (Approximate)"


@dataclass(frozen=True, slots=True)
class GazetteerEntry:
    match_substring: str
    latitude: float
    longitude: float
    display_name: str
    granularity: Granularity = Granularity.CITY


DEFAULT_ENTRIES: Tuple[GazetteerEntry, ...] = (
    GazetteerEntry("chakraborty para", 22.7677, 88.3732, "Chakraborty Para, Barrackpore", Granularity.NEIGHBOURHOOD),
    GazetteerEntry("barrackpore", 22.7606, 88.3742, "Barrackpore, North 24 Parganas"),
    GazetteerEntry("titagarh", 22.7383, 88.3736, "Titagarh, North 24 Parganas"),
    GazetteerEntry("khardah", 22.7197, 88.3786, "Khardah, North 24 Parganas"),
    GazetteerEntry("sodepur", 22.6947, 88.3902, "Sodepur, North 24 Parganas"),
    GazetteerEntry("shyamnagar", 22.8300, 88.3730, "Shyamnagar, North 24 Parganas"),
    GazetteerEntry("naihati", 22.8930, 88.4170, "Naihati, North 24 Parganas"),
    GazetteerEntry("barasat", 22.7229, 88.4809, "Barasat, North 24 Parganas"),
    GazetteerEntry("dum dum", 22.6420, 88.4312, "Dum Dum, North 24 Parganas"),
    GazetteerEntry("jadavpur", 22.4999, 88.3697, "Jadavpur, Kolkata", Granularity.NEIGHBOURHOOD),
    GazetteerEntry("salt lake", 22.5800, 88.4150, "Salt Lake, Kolkata", Granularity.NEIGHBOURHOOD),
    GazetteerEntry("new town", 22.5922, 88.4847, "New Town, Kolkata", Granularity.NEIGHBOURHOOD),
    GazetteerEntry("howrah", 22.5958, 88.2636, "Howrah"),
    GazetteerEntry("kalyani", 22.9751, 88.4345, "Kalyani, Nadia"),
    GazetteerEntry("kolkata", 22.5726, 88.3639, "Kolkata"),
    GazetteerEntry("calcutta", 22.5726, 88.3639, "Kolkata"),
    GazetteerEntry("siliguri", 26.7271, 88.3953, "Siliguri"),
    GazetteerEntry("durgapur", 23.5204, 87.3119, "Durgapur, Paschim Bardhaman"),
    GazetteerEntry("asansol", 23.6739, 86.9524, "Asansol, Paschim Bardhaman"),
    GazetteerEntry("north 24 parganas", 22.6757, 88.5410, "North 24 Parganas District", Granularity.REGION),
    GazetteerEntry("west bengal", 22.9868, 87.8550, "West Bengal", Granularity.REGION),
)


class GazetteerFallback:
    """Case-insensitive containment lookup over a fixed entry table."""

    def __init__(
        self,
        entries: Sequence[GazetteerEntry] = DEFAULT_ENTRIES,
        *,
        confidence: Optional[ConfidenceSettings] = None,
    ) -> None:
        self._entries = tuple(entries)
        self._confidence = confidence or ConfidenceSettings()

    @property
    def entries(self) -> Tuple[GazetteerEntry, ...]:
        return self._entries

    def match(self, text: str) -> Optional[GazetteerEntry]:
        needle = text.lower()
        for entry in self._entries:
            if entry.match_substring.lower() in needle:
                return entry
        return None

    def lookup(self, text: str) -> Optional[LocationResult]:
        entry = self.match(text)
        if entry is None:
            return None
        return LocationResult(
            latitude=entry.latitude,
            longitude=entry.longitude,
            display_name=entry.display_name + APPROXIMATE_SUFFIX,
            granularity=entry.granularity,
            estimated_radius_meters=self._confidence.gazetteer_radius_meters,
            importance=self._confidence.gazetteer,
            provider="gazetteer",
        )
