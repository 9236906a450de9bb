"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import httpx
import pytest

from ask4rent.config import Settings, viewport_defaults
from ask4rent.domain.geo import GeoPoint, ViewportDefaults
from ask4rent.services.favorites import FavoritesClient
from ask4rent.services.search import PlacesClient, QueryClient, SearchModeOrchestrator
from ask4rent.services.session_store import SessionStore
from ask4rent.services.sessions import SessionClient, SessionLifecycleManager
from ask4rent.services.storage import InMemoryKeyValueStore


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 3, 1, 9, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@dataclass
class FakeSessionClient(SessionClient):
    """Session service issuing sequential tokens."""

    created: int = 0
    renewals: list[str] = field(default_factory=list)
    renew_result: bool = True
    fail_create: bool = False
    fail_renew: bool = False
    renew_gate: asyncio.Event | None = None

    async def create_session(self) -> str:
        if self.fail_create:
            raise httpx.ConnectError("session service unreachable")
        self.created += 1
        return f"token-{self.created}"

    async def renew_session(self, token: str) -> bool:
        self.renewals.append(token)
        if self.renew_gate is not None:
            await self.renew_gate.wait()
        if self.fail_renew:
            raise httpx.ConnectError("session service unreachable")
        return self.renew_result


@dataclass
class FakeQueryClient(QueryClient):
    """Query services returning canned payloads.

    ``responses`` maps a call key (the query text, TA name, school name or
    "territorial_authorities" / "isochrone") to a payload or an exception.
    ``gates`` holds events a call waits on before answering.
    """

    responses: dict[str, object] = field(default_factory=dict)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)
    calls: list[tuple[str, str, object]] = field(default_factory=list)

    async def _answer(self, kind: str, key: str, session_id: str) -> object:
        self.calls.append((kind, session_id, key))
        gate = self.gates.get(key)
        if gate is not None:
            await gate.wait()
        response = self.responses.get(key)
        if isinstance(response, Exception):
            raise response
        return response

    async def query_properties(self, session_id: str, message: str) -> object:
        return await self._answer("query", message, session_id)

    async def list_territorial_authorities(self, session_id: str) -> object:
        return await self._answer("tas", "territorial_authorities", session_id)

    async def schools_by_territorial_authority(
        self, session_id: str, ta_name: str
    ) -> object:
        return await self._answer("schools", ta_name, session_id)

    async def rentals_by_school(self, session_id: str, school_name: str) -> object:
        return await self._answer("rentals", school_name, session_id)

    async def driving_isochrone(
        self, session_id: str, lon: float, lat: float, minutes: int
    ) -> object:
        return await self._answer("isochrone", f"isochrone:{lon}:{lat}:{minutes}", session_id)


@dataclass
class FakePlacesClient(PlacesClient):
    """Geocoder returning a fixed hit list."""

    hits: object = field(default_factory=list)
    queries: list[str] = field(default_factory=list)
    gate: asyncio.Event | None = None

    async def search(self, query: str, limit: int = 8) -> object:
        self.queries.append(query)
        if self.gate is not None:
            await self.gate.wait()
        if isinstance(self.hits, Exception):
            raise self.hits
        return self.hits


@dataclass
class FakeFavoritesClient(FavoritesClient):
    """Favorites service backed by a dict of scope -> listing ids."""

    listings: dict[str, list[str]] = field(default_factory=dict)
    scopes: list[str] = field(default_factory=list)
    fail: bool = False

    def _scope(self, session_id: str, access_token: str | None) -> str:
        scope = f"user:{access_token}" if access_token else f"session:{session_id}"
        self.scopes.append(scope)
        return scope

    async def list_favorites(self, session_id: str, access_token: str | None) -> object:
        if self.fail:
            raise httpx.ConnectError("favorites unreachable")
        scope = self._scope(session_id, access_token)
        return [{"listing_id": item} for item in self.listings.get(scope, [])]

    async def add_favorite(
        self, session_id: str, listing_id: str, access_token: str | None
    ) -> None:
        if self.fail:
            raise httpx.ConnectError("favorites unreachable")
        scope = self._scope(session_id, access_token)
        self.listings.setdefault(scope, []).append(listing_id)

    async def remove_favorite(
        self, session_id: str, listing_id: str, access_token: str | None
    ) -> bool:
        scope = self._scope(session_id, access_token)
        items = self.listings.get(scope, [])
        if listing_id not in items:
            return False
        items.remove(listing_id)
        return True


def property_payload(
    listing_id: str | None, address: str, lat: float, lng: float, **extra: object
) -> dict[str, object]:
    payload: dict[str, object] = {
        "address": address,
        "rent_per_week": 550,
        "bedrooms": 2,
        "bathrooms": 1,
        "latitude": lat,
        "longitude": lng,
    }
    if listing_id is not None:
        payload["id"] = listing_id
    payload.update(extra)
    return payload


@pytest.fixture
def settings() -> Settings:
    return Settings(session_store_path="unused.json")


@pytest.fixture
def viewport(settings: Settings) -> ViewportDefaults:
    return viewport_defaults(settings)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_store(clock: FakeClock) -> SessionStore:
    return SessionStore(
        store=InMemoryKeyValueStore(), ttl=timedelta(minutes=5), clock=clock
    )


@pytest.fixture
def session_client() -> FakeSessionClient:
    return FakeSessionClient()


@pytest.fixture
def session_manager(
    session_store: SessionStore, session_client: FakeSessionClient
) -> SessionLifecycleManager:
    return SessionLifecycleManager(
        store=session_store,
        client=session_client,
        renew_debounce_seconds=0.05,
        sweep_interval_seconds=0.05,
    )


@pytest.fixture
def query_client() -> FakeQueryClient:
    return FakeQueryClient()


@pytest.fixture
def places_client() -> FakePlacesClient:
    return FakePlacesClient()


@pytest.fixture
def orchestrator(
    session_manager: SessionLifecycleManager,
    query_client: FakeQueryClient,
    places_client: FakePlacesClient,
    viewport: ViewportDefaults,
) -> SearchModeOrchestrator:
    return SearchModeOrchestrator(
        sessions=session_manager,
        query_client=query_client,
        places_client=places_client,
        viewport=viewport,
        place_search_debounce_seconds=0.01,
    )


AUCKLAND = GeoPoint(lat=-36.8485, lng=174.7633)
