"""Resolution stages, tried by the orchestrator in list order."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

import httpx

from georesolve.config import ProviderCredentials, ResolverSettings
from georesolve.errors import ConfigurationError
from georesolve.fetch.fetcher import fetch_json
from georesolve.models import LocationResult
from georesolve.normalize.adapters import GoogleAdapter, MapmyIndiaAdapter
from georesolve.normalize.gazetteer import GazetteerFallback
from georesolve.normalize.response import ResponseNormalizer


@dataclass(frozen=True, slots=True)
class ResolutionContext:
    """Inputs shared by every stage of one `resolve()` call."""

    query: str
    token: Optional[str] = None


class ResolutionStrategy:
    """One stage of the fallback chain.

    `try_resolve` returns a result, returns None for a miss, or raises a
    `ResolutionError` subclass; the orchestrator treats all three uniformly.
    """

    name = "strategy"
    requires_token = False

    async def try_resolve(self, context: ResolutionContext) -> Optional[LocationResult]:
        raise NotImplementedError


class MapmyIndiaStrategy(ResolutionStrategy):
    """Bearer-authenticated MapmyIndia endpoint taking the query in one parameter."""

    requires_token = True

    def __init__(
        self,
        *,
        name: str,
        client: httpx.AsyncClient,
        url: str,
        query_param: str,
        normalizer: ResponseNormalizer,
        adapter: Optional[MapmyIndiaAdapter] = None,
    ) -> None:
        self.name = name
        self._client = client
        self._url = url
        self._query_param = query_param
        self._normalizer = normalizer
        self._adapter = adapter or MapmyIndiaAdapter()

    def _headers(self, context: ResolutionContext) -> Dict[str, str]:
        return {"Authorization": f"Bearer {context.token}"}

    async def try_resolve(self, context: ResolutionContext) -> Optional[LocationResult]:
        payload = await fetch_json(
            self._client,
            "GET",
            self._url,
            params={self._query_param: context.query},
            headers=self._headers(context),
        )
        return await self._normalizer.normalize(
            self._adapter,
            payload,
            query=context.query,
            provider=self.name,
            token=context.token,
        )


class MapmyIndiaLegacyStrategy(MapmyIndiaStrategy):
    """REST-key geocoding; the key lives in the URL path instead of a header."""

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        url_template: str,
        api_key: Optional[str],
        normalizer: ResponseNormalizer,
    ) -> None:
        super().__init__(
            name="mapmyindia_legacy",
            client=client,
            url=url_template,
            query_param="addr",
            normalizer=normalizer,
        )
        self._api_key = api_key

    async def try_resolve(self, context: ResolutionContext) -> Optional[LocationResult]:
        if not self._api_key:
            raise ConfigurationError("legacy REST key not configured")
        payload = await fetch_json(
            self._client,
            "GET",
            self._url.format(key=self._api_key),
            params={self._query_param: context.query},
            log_url=self._url.format(key="***"),
        )
        return await self._normalizer.normalize(
            self._adapter,
            payload,
            query=context.query,
            provider=self.name,
            token=context.token,
        )


class GoogleGeocodeStrategy(ResolutionStrategy):
    name = "google"

    def __init__(
        self,
        *,
        client: httpx.AsyncClient,
        url: str,
        api_key: Optional[str],
        normalizer: ResponseNormalizer,
        region: Optional[str] = None,
    ) -> None:
        self._client = client
        self._url = url
        self._api_key = api_key
        self._normalizer = normalizer
        self._region = region
        self._adapter = GoogleAdapter()

    async def try_resolve(self, context: ResolutionContext) -> Optional[LocationResult]:
        if not self._api_key:
            raise ConfigurationError("Google API key not configured")
        params = {"address": context.query, "key": self._api_key}
        if self._region:
            params["region"] = self._region
        payload = await fetch_json(self._client, "GET", self._url, params=params)
        return await self._normalizer.normalize(
            self._adapter,
            payload,
            query=context.query,
            provider=self.name,
        )


class GazetteerStrategy(ResolutionStrategy):
    name = "gazetteer"

    def __init__(self, gazetteer: GazetteerFallback) -> None:
        self._gazetteer = gazetteer

    async def try_resolve(self, context: ResolutionContext) -> Optional[LocationResult]:
        return self._gazetteer.lookup(context.query)


def build_default_strategies(
    *,
    client: httpx.AsyncClient,
    settings: ResolverSettings,
    credentials: ProviderCredentials,
    normalizer: ResponseNormalizer,
    gazetteer: Optional[GazetteerFallback] = None,
) -> List[ResolutionStrategy]:
    """Return the stages in their fixed priority order."""
    endpoints = settings.endpoints
    return [
        MapmyIndiaStrategy(
            name="mapmyindia_geocode",
            client=client,
            url=endpoints.geocode_url,
            query_param="address",
            normalizer=normalizer,
        ),
        MapmyIndiaStrategy(
            name="mapmyindia_search",
            client=client,
            url=endpoints.search_url,
            query_param="query",
            normalizer=normalizer,
        ),
        MapmyIndiaLegacyStrategy(
            client=client,
            url_template=endpoints.legacy_geocode_url,
            api_key=credentials.mapmyindia_legacy_api_key,
            normalizer=normalizer,
        ),
        GoogleGeocodeStrategy(
            client=client,
            url=endpoints.google_geocode_url,
            api_key=credentials.google_api_key,
            normalizer=normalizer,
            region=settings.google.region,
        ),
        GazetteerStrategy(gazetteer or GazetteerFallback(confidence=settings.confidence)),
    ]
