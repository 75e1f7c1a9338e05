import asyncio
import base64

import httpx

from georesolve.config import ProviderCredentials
from georesolve.fetch.token import AccessToken, TokenCache, TokenManager
from georesolve.observability.metrics import MetricsRegistry

TOKEN_URL = "https://auth.test/oauth/token"
CREDENTIALS = ProviderCredentials(mapmyindia_client_id="client", mapmyindia_client_secret="secret")


class TokenEndpoint:
    def __init__(self, response=None, error=None):
        self.requests = []
        self._response = response
        self._error = error

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self._error is not None:
            raise self._error(request)
        if self._response is not None:
            return self._response
        return httpx.Response(200, json={"access_token": f"tok-{len(self.requests)}", "expires_in": 3600})


def _manager(client, *, credentials=CREDENTIALS, cache=None, clock=None, metrics=None):
    kwargs = {}
    if clock is not None:
        kwargs["clock"] = clock
    return TokenManager(
        client=client,
        credentials=credentials,
        token_url=TOKEN_URL,
        cache=cache,
        metrics=metrics,
        **kwargs,
    )


def test_token_is_cached_until_expiry():
    endpoint = TokenEndpoint()
    cache = TokenCache()

    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(endpoint)) as client:
            manager = _manager(client, cache=cache)
            assert await manager.get_access_token() == "tok-1"
            assert await manager.get_access_token() == "tok-1"
            assert len(endpoint.requests) == 1

            cache.store(AccessToken(value="tok-1", expires_at=0))
            assert await manager.get_access_token() == "tok-2"
            assert len(endpoint.requests) == 2

    asyncio.run(_run())


def test_token_request_uses_basic_auth_client_credentials():
    endpoint = TokenEndpoint()

    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(endpoint)) as client:
            await _manager(client).get_access_token()

    asyncio.run(_run())
    request = endpoint.requests[0]
    assert request.method == "POST"
    expected = base64.b64encode(b"client:secret").decode()
    assert request.headers["Authorization"] == f"Basic {expected}"
    assert request.content == b"grant_type=client_credentials"


def test_token_within_margin_is_refreshed():
    endpoint = TokenEndpoint()
    now = [1_000.0]
    cache = TokenCache()
    cache.store(AccessToken(value="old", expires_at=1_004.0))

    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(endpoint)) as client:
            manager = _manager(client, cache=cache, clock=lambda: now[0])
            assert await manager.get_access_token() == "tok-1"

    asyncio.run(_run())
    assert len(endpoint.requests) == 1
    assert cache.current == AccessToken(value="tok-1", expires_at=4_600.0)


def test_missing_credentials_skip_network():
    endpoint = TokenEndpoint()
    metrics = MetricsRegistry()

    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(endpoint)) as client:
            manager = _manager(client, credentials=ProviderCredentials(), metrics=metrics)
            assert await manager.get_access_token() is None

    asyncio.run(_run())
    assert endpoint.requests == []
    assert metrics.get("token_failures") == 1


def test_token_failures_return_none():
    failing = [
        TokenEndpoint(response=httpx.Response(401, json={"error": "invalid_client"})),
        TokenEndpoint(response=httpx.Response(200, content=b"<html>")),
        TokenEndpoint(response=httpx.Response(200, json={"token_type": "bearer"})),
        TokenEndpoint(error=lambda request: httpx.ConnectError("refused", request=request)),
    ]

    async def _run(endpoint):
        cache = TokenCache()
        async with httpx.AsyncClient(transport=httpx.MockTransport(endpoint)) as client:
            token = await _manager(client, cache=cache).get_access_token()
        return token, cache.current

    for endpoint in failing:
        assert asyncio.run(_run(endpoint)) == (None, None)


def test_missing_expires_in_is_not_reused():
    endpoint = TokenEndpoint(response=httpx.Response(200, json={"access_token": "short"}))

    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(endpoint)) as client:
            manager = _manager(client)
            assert await manager.get_access_token() == "short"
            assert await manager.get_access_token() == "short"

    asyncio.run(_run())
    assert len(endpoint.requests) == 2
