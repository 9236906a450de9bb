"""Tests for favorites scoping and refresh."""

import asyncio

from ask4rent.domain.sessions import AuthenticatedUser
from ask4rent.services.favorites import FavoritesService
from ask4rent.services.sessions import SessionLifecycleManager
from tests.conftest import FakeFavoritesClient, FakeSessionClient


def _service(
    session_manager: SessionLifecycleManager, client: FakeFavoritesClient
) -> FavoritesService:
    service = FavoritesService(client=client, sessions=session_manager)
    session_manager.subscribe(service.handle_session_reset)
    return service


def test_anonymous_favorites_use_session_scope(
    session_manager: SessionLifecycleManager,
) -> None:
    client = FakeFavoritesClient(listings={"session:token-1": ["L1"]})
    service = _service(session_manager, client)

    async def scenario() -> bool:
        await service.load()
        return await service.add("L2")

    assert asyncio.run(scenario())
    assert [item.listing_id for item in service.favorites] == ["L1", "L2"]
    assert service.is_favorited("L2")
    assert set(client.scopes) == {"session:token-1"}


def test_signed_in_user_scope_takes_precedence(
    session_manager: SessionLifecycleManager,
) -> None:
    client = FakeFavoritesClient(listings={"user:jwt-abc": ["U1"]})
    service = _service(session_manager, client)
    session_manager.sign_in(AuthenticatedUser(access_token="jwt-abc", email="a@b.nz"))

    favorites = asyncio.run(service.load())

    assert [item.listing_id for item in favorites] == ["U1"]
    assert client.scopes == ["user:jwt-abc"]


def test_toggle_removes_existing_favorite(
    session_manager: SessionLifecycleManager,
) -> None:
    client = FakeFavoritesClient(listings={"session:token-1": ["L1"]})
    service = _service(session_manager, client)

    async def scenario() -> bool:
        await service.load()
        return await service.toggle("L1")

    assert asyncio.run(scenario())
    assert service.favorites == []


def test_remove_unknown_listing_reports_error(
    session_manager: SessionLifecycleManager,
) -> None:
    service = _service(session_manager, FakeFavoritesClient())

    async def scenario() -> bool:
        await service.load()
        return await service.remove("missing")

    assert not asyncio.run(scenario())
    assert service.error == "Failed to remove from favorites"


def test_add_without_session_is_refused(
    session_manager: SessionLifecycleManager,
) -> None:
    service = _service(session_manager, FakeFavoritesClient())

    assert not asyncio.run(service.add("L1"))
    assert service.error == "No session available"


def test_load_failure_empties_list(session_manager: SessionLifecycleManager) -> None:
    client = FakeFavoritesClient(fail=True)
    service = _service(session_manager, client)

    assert asyncio.run(service.load()) == []
    assert service.error == "Failed to load favorites"


def test_load_reports_session_creation_failure(
    session_manager: SessionLifecycleManager, session_client: FakeSessionClient
) -> None:
    session_client.fail_create = True
    service = _service(session_manager, FakeFavoritesClient())

    asyncio.run(service.load())

    assert service.error == "Failed to create session"


def test_logout_reloads_favorites_for_new_session(
    session_manager: SessionLifecycleManager,
) -> None:
    client = FakeFavoritesClient(
        listings={"user:jwt-abc": ["U1"], "session:token-2": ["S2"]}
    )
    service = _service(session_manager, client)
    session_manager.sign_in(AuthenticatedUser(access_token="jwt-abc"))

    async def scenario() -> None:
        await service.load()
        await session_manager.invalidate()

    asyncio.run(scenario())

    assert session_manager.authenticated_user is None
    assert [item.listing_id for item in service.favorites] == ["S2"]
    assert client.scopes[-1] == "session:token-2"
