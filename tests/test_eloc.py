import asyncio

import httpx

from georesolve.normalize.eloc import ELocResolver
from georesolve.normalize.geo import Coordinates

ELOC_URL = "https://maps.test/places/details"


def _resolve(handler, code="MMI000"):
    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            resolver = ELocResolver(client=client, url=ELOC_URL)
            return await resolver.resolve("tok", code)

    return asyncio.run(_run())


def test_eloc_resolves_geometry_location():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            json={"results": [{"geometry": {"location": {"lat": "22.7606", "lng": "88.3742"}}}]},
        )

    assert _resolve(handler, "7ZQ2LK") == Coordinates(22.7606, 88.3742)
    assert seen[0].headers["Authorization"] == "Bearer tok"
    assert seen[0].url.params["place_id"] == "7ZQ2LK"


def test_eloc_accepts_flat_coordinates():
    def handler(request):
        return httpx.Response(200, json={"latitude": 22.5, "longitude": 88.3})

    assert _resolve(handler) == Coordinates(22.5, 88.3)


def test_eloc_failures_yield_none():
    responses = [
        httpx.Response(404, json={"error": "not found"}),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json={"results": []}),
        httpx.Response(200, json={"results": [{"geometry": {"location": {"lat": "NaN", "lng": 88.3}}}]}),
    ]
    for response in responses:
        assert _resolve(lambda request, response=response: response) is None


def test_eloc_transport_error_yields_none():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    assert _resolve(handler) is None
