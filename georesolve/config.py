"""Settings and credentials for the resolution chain."""
from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_SETTINGS_PATH = Path("config/settings.toml")


class ProviderCredentials(BaseModel):
    """Optional secrets; a missing value disables only the stage that needs it."""

    mapmyindia_client_id: Optional[str] = None
    mapmyindia_client_secret: Optional[str] = None
    mapmyindia_legacy_api_key: Optional[str] = None
    google_api_key: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @property
    def has_client_credentials(self) -> bool:
        return bool(self.mapmyindia_client_id and self.mapmyindia_client_secret)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProviderCredentials":
        """Build credentials from the process environment (or a supplied mapping)."""
        env = os.environ if environ is None else environ
        return cls(
            mapmyindia_client_id=env.get("MAPMYINDIA_CLIENT_ID"),
            mapmyindia_client_secret=env.get("MAPMYINDIA_CLIENT_SECRET"),
            mapmyindia_legacy_api_key=env.get("MAPMYINDIA_LEGACY_API_KEY"),
            google_api_key=env.get("GOOGLE_API_KEY"),
        )


class HttpSettings(BaseModel):
    user_agent: str = "georesolve/1.0"
    timeout_seconds: float = Field(default=10.0, gt=0)


class EndpointSettings(BaseModel):
    """Provider URLs. The legacy URL carries a ``{key}`` placeholder."""

    token_url: str = "https://outpost.mapmyindia.com/api/security/oauth/token"
    geocode_url: str = "https://atlas.mapmyindia.com/api/places/geocode"
    search_url: str = "https://atlas.mapmyindia.com/api/places/search/json"
    legacy_geocode_url: str = "https://apis.mapmyindia.com/advancedmaps/v1/{key}/geo_code"
    eloc_url: str = "https://atlas.mapmyindia.com/api/places/details/json"
    google_geocode_url: str = "https://maps.googleapis.com/maps/api/geocode/json"

    @field_validator("legacy_geocode_url")
    @classmethod
    def _require_key_placeholder(cls, value: str) -> str:
        if "{key}" not in value:
            raise ValueError("legacy_geocode_url must contain a {key} placeholder")
        return value


class ConfidenceSettings(BaseModel):
    """Importance defaults per resolution path and the gazetteer radius."""

    direct: float = Field(default=0.8, ge=0, le=1)
    eloc: float = Field(default=0.5, ge=0, le=1)
    gazetteer: float = Field(default=0.3, ge=0, le=1)
    gazetteer_radius_meters: int = Field(default=10000, gt=0)


class TokenSettings(BaseModel):
    expiry_margin_seconds: float = Field(default=5.0, ge=0)


class GoogleSettings(BaseModel):
    region: Optional[str] = "in"


class ResolverSettings(BaseModel):
    """Validated, non-secret configuration for a resolver instance."""

    http: HttpSettings = Field(default_factory=HttpSettings)
    endpoints: EndpointSettings = Field(default_factory=EndpointSettings)
    confidence: ConfidenceSettings = Field(default_factory=ConfidenceSettings)
    token: TokenSettings = Field(default_factory=TokenSettings)
    google: GoogleSettings = Field(default_factory=GoogleSettings)


def load_settings(path: Path = DEFAULT_SETTINGS_PATH) -> ResolverSettings:
    """Read the TOML configuration file, falling back to defaults when absent."""
    if not path.exists():
        return ResolverSettings()
    with path.open("rb") as handle:
        return ResolverSettings(**tomllib.load(handle))
