"""Dependency container wiring for the client."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta

from ask4rent.adapters.favorites_client import HttpxFavoritesClient
from ask4rent.adapters.json_file_store import JsonFileKeyValueStore
from ask4rent.adapters.places_client import HttpxPlacesClient
from ask4rent.adapters.query_client import HttpxQueryClient
from ask4rent.adapters.session_client import HttpxSessionClient
from ask4rent.app_logging import configure_logging
from ask4rent.config import Settings, viewport_defaults
from ask4rent.services.favorites import FavoritesService
from ask4rent.services.search import SearchModeOrchestrator
from ask4rent.services.session_store import SessionStore
from ask4rent.services.sessions import SessionLifecycleManager


@dataclass
class AppContainer:
    """Holds client-wide dependencies."""

    settings: Settings
    session_manager: SessionLifecycleManager
    orchestrator: SearchModeOrchestrator
    favorites_service: FavoritesService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    timeout = resolved_settings.http_timeout_seconds
    base_url = resolved_settings.api_base_url.rstrip("/")
    session_store = SessionStore(
        store=JsonFileKeyValueStore.create(resolved_settings.session_store_path),
        ttl=timedelta(seconds=resolved_settings.session_ttl_seconds),
    )
    session_client = HttpxSessionClient.create(base_url, timeout=timeout)
    query_client = HttpxQueryClient.create(base_url, timeout=timeout)
    favorites_client = HttpxFavoritesClient.create(base_url, timeout=timeout)
    places_client = HttpxPlacesClient.create(
        resolved_settings.places_base_url.rstrip("/"),
        country_codes=resolved_settings.places_country_codes,
        user_agent=resolved_settings.places_user_agent,
        timeout=timeout,
    )
    session_manager = SessionLifecycleManager(
        store=session_store,
        client=session_client,
        renew_debounce_seconds=resolved_settings.session_renew_debounce_seconds,
        sweep_interval_seconds=resolved_settings.session_sweep_interval_seconds,
        activity_write_interval_seconds=(
            resolved_settings.session_activity_write_interval_seconds
        ),
    )
    orchestrator = SearchModeOrchestrator(
        sessions=session_manager,
        query_client=query_client,
        places_client=places_client,
        viewport=viewport_defaults(resolved_settings),
        place_search_debounce_seconds=resolved_settings.places_debounce_seconds,
    )
    favorites_service = FavoritesService(client=favorites_client, sessions=session_manager)
    session_manager.subscribe(favorites_service.handle_session_reset)

    async def close_resources() -> None:
        await session_manager.close(discard_session=True)
        await session_client.close()
        await query_client.close()
        await favorites_client.close()
        await places_client.close()

    return AppContainer(
        settings=resolved_settings,
        session_manager=session_manager,
        orchestrator=orchestrator,
        favorites_service=favorites_service,
        close_resources=close_resources,
    )
