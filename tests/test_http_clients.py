"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import pytest

from ask4rent.adapters.favorites_client import HttpxFavoritesClient
from ask4rent.adapters.places_client import HttpxPlacesClient
from ask4rent.adapters.query_client import HttpxQueryClient
from ask4rent.adapters.session_client import HttpxSessionClient
from ask4rent.errors import SessionRejectedError


def _client(handler) -> httpx.AsyncClient:  # type: ignore[no-untyped-def]
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def test_session_client_creates_and_renews() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path.endswith("/onStartUpSession"):
            return httpx.Response(200, text='"abc-123"')
        return httpx.Response(200, json={"ok": True})

    client = HttpxSessionClient(base_url="https://api.test", http_client=_client(handler))

    token = asyncio.run(client.create_session())
    renewed = asyncio.run(client.renew_session(token))

    assert token == "abc-123"
    assert renewed
    assert seen[1].url.path == "/onReflashSession"
    assert seen[1].url.params["session_id"] == "abc-123"


def test_session_client_reports_unknown_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    client = HttpxSessionClient(base_url="https://api.test", http_client=_client(handler))

    assert not asyncio.run(client.renew_session("gone"))


def test_session_client_rejects_empty_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text='""')

    client = HttpxSessionClient(base_url="https://api.test", http_client=_client(handler))

    with pytest.raises(ValueError):
        asyncio.run(client.create_session())


def test_session_client_raises_on_server_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    client = HttpxSessionClient(base_url="https://api.test", http_client=_client(handler))

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.renew_session("abc"))


def test_query_client_posts_message_with_session() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/query"
        payload = json.loads(request.content.decode())
        assert payload == {"session_id": "abc", "message": "2 bedrooms"}
        return httpx.Response(200, json={"properties": []})

    client = HttpxQueryClient(base_url="https://api.test", http_client=_client(handler))

    assert asyncio.run(client.query_properties("abc", "2 bedrooms")) == {"properties": []}


def test_query_client_zone_and_commute_requests() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"rentals": []})

    client = HttpxQueryClient(base_url="https://api.test", http_client=_client(handler))

    async def scenario() -> None:
        await client.list_territorial_authorities("abc")
        await client.schools_by_territorial_authority("abc", "Auckland Central")
        await client.rentals_by_school("abc", "Grafton Primary")
        await client.driving_isochrone("abc", 174.76, -36.85, 30)

    asyncio.run(scenario())

    assert [request.url.path for request in seen] == [
        "/territorial-authorities",
        "/schools-by-ta",
        "/rentals-by-school",
        "/isochrone",
    ]
    assert seen[1].url.params["ta_name"] == "Auckland Central"
    assert seen[2].url.params["school_name"] == "Grafton Primary"
    assert seen[3].url.params["minutes"] == "30"
    assert seen[3].url.params["lon"] == "174.76"


def test_query_client_maps_rejected_session() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401)

    client = HttpxQueryClient(base_url="https://api.test", http_client=_client(handler))

    with pytest.raises(SessionRejectedError):
        asyncio.run(client.query_properties("stale", "anything"))


def test_query_client_empty_body_is_none() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200)

    client = HttpxQueryClient(base_url="https://api.test", http_client=_client(handler))

    assert asyncio.run(client.rentals_by_school("abc", "Grafton Primary")) is None


def test_places_client_sends_country_filter() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/search"
        assert request.url.params["q"] == "Grafton"
        assert request.url.params["countrycodes"] == "nz"
        assert request.url.params["format"] == "json"
        return httpx.Response(200, json=[{"display_name": "Grafton, Auckland"}])

    client = HttpxPlacesClient(base_url="https://geo.test", http_client=_client(handler))

    assert asyncio.run(client.search("Grafton")) == [{"display_name": "Grafton, Auckland"}]


def test_favorites_client_scopes_requests() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.method == "DELETE":
            return httpx.Response(200, json={"result": False})
        if request.method == "POST":
            return httpx.Response(201, json={"ok": True})
        return httpx.Response(200, json={"favorites": []})

    client = HttpxFavoritesClient(base_url="https://api.test", http_client=_client(handler))

    async def scenario() -> bool:
        await client.list_favorites("abc", None)
        await client.add_favorite("abc", "L1", "jwt")
        return await client.remove_favorite("abc", "L1", "jwt")

    removed = asyncio.run(scenario())

    assert not removed
    assert "authorization" not in seen[0].headers
    assert seen[1].headers["authorization"] == "Bearer jwt"
    assert json.loads(seen[1].content.decode()) == {"session_id": "abc", "listing_id": "L1"}
    assert seen[2].url.path == "/favorites/L1"
