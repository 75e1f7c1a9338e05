import pytest
from pydantic import ValidationError

from georesolve.config import EndpointSettings, ProviderCredentials, ResolverSettings, load_settings
from georesolve.models import Granularity, LocationResult


def test_missing_settings_file_gives_defaults(tmp_path):
    settings = load_settings(tmp_path / "absent.toml")
    assert settings == ResolverSettings()
    assert settings.confidence.gazetteer_radius_meters == 10000
    assert settings.token.expiry_margin_seconds == 5


def test_settings_file_overrides(tmp_path):
    path = tmp_path / "settings.toml"
    path.write_text(
        '[http]\ntimeout_seconds = 3\n\n'
        '[endpoints]\nlegacy_geocode_url = "https://legacy.test/{key}/geo_code"\n\n'
        '[confidence]\neloc = 0.4\n'
    )
    settings = load_settings(path)
    assert settings.http.timeout_seconds == 3
    assert settings.endpoints.legacy_geocode_url == "https://legacy.test/{key}/geo_code"
    assert settings.confidence.eloc == 0.4
    assert settings.confidence.direct == 0.8


def test_legacy_url_requires_key_placeholder():
    with pytest.raises(ValidationError):
        EndpointSettings(legacy_geocode_url="https://legacy.test/geo_code")


def test_credentials_from_env_treats_blank_as_missing():
    credentials = ProviderCredentials.from_env(
        {
            "MAPMYINDIA_CLIENT_ID": "client",
            "MAPMYINDIA_CLIENT_SECRET": "  ",
            "GOOGLE_API_KEY": "google-key",
        }
    )
    assert credentials.mapmyindia_client_id == "client"
    assert credentials.mapmyindia_client_secret is None
    assert credentials.mapmyindia_legacy_api_key is None
    assert credentials.google_api_key == "google-key"
    assert not credentials.has_client_credentials


def test_location_result_payload_uses_camel_case():
    result = LocationResult(
        latitude=22.5,
        longitude=88.3,
        display_name="Kolkata",
        granularity=Granularity.CITY,
        estimated_radius_meters=5000,
        importance=1.7,
        provider="google",
        raw={"place_id": "abc"},
    )
    assert result.importance == 1.0
    payload = result.to_payload()
    assert payload == {
        "latitude": 22.5,
        "longitude": 88.3,
        "displayName": "Kolkata",
        "granularity": "city",
        "estimatedRadiusMeters": 5000,
        "importance": 1.0,
        "provider": "google",
    }
    assert result.to_payload(include_raw=True)["raw"] == {"place_id": "abc"}


@pytest.mark.parametrize(
    "radius, importance, expected",
    [(50, 1.0, 500), (5000, 0.8, 5000), (200, 0.3, 2000), (0, 0.9, 500), (10000, 0.3, 10000)],
)
def test_geofence_radius(radius, importance, expected):
    result = LocationResult(
        latitude=0,
        longitude=0,
        display_name="x",
        granularity=Granularity.UNKNOWN,
        estimated_radius_meters=radius,
        importance=importance,
        provider="direct",
    )
    assert result.geofence_radius() == expected
