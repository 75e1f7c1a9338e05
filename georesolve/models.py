"""Pydantic models for canonical resolution results."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from georesolve.normalize.geo import Coordinates


class Granularity(str, Enum):
    """Coarseness of a resolved location, finest first."""

    EXACT = "exact"
    STREET = "street"
    NEIGHBOURHOOD = "neighbourhood"
    CITY = "city"
    REGION = "region"
    COUNTRY = "country"
    UNKNOWN = "unknown"


class LocationResult(BaseModel):
    """A geocoded answer for one query, built fresh per call."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=False)

    latitude: float
    longitude: float
    display_name: str = Field(alias="displayName")
    granularity: Granularity
    estimated_radius_meters: int = Field(alias="estimatedRadiusMeters", ge=0)
    importance: float = Field(ge=0, le=1)
    provider: str
    raw: Optional[Dict[str, Any]] = None

    @field_validator("importance", mode="before")
    @classmethod
    def _clamp_importance(cls, value: object) -> object:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return min(max(float(value), 0.0), 1.0)
        return value

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

    def geofence_radius(self, *, minimum: int = 500, low_confidence_floor: int = 2000) -> int:
        """Radius to use when this result anchors an attendance geofence.

        Low-importance answers (below 0.5) are widened to at least
        ``low_confidence_floor`` and nothing goes under ``minimum`` so that
        ordinary GPS drift still matches.
        """
        radius = self.estimated_radius_meters or 100
        if self.importance < 0.5:
            radius = max(radius, low_confidence_floor)
        return max(radius, minimum)

    def to_payload(self, *, include_raw: bool = False) -> Dict[str, Any]:
        """Return the camelCase mapping consumed by the rest of the application."""
        exclude = None if include_raw else {"raw"}
        return self.model_dump(mode="json", by_alias=True, exclude=exclude)
