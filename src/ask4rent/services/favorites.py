"""Favorite listings scoped to the current session or signed-in user."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

import httpx

from ask4rent.domain.listings import Favorite
from ask4rent.domain.sessions import SessionReset
from ask4rent.errors import MalformedPayloadError, SessionCreationError
from ask4rent.services.ingestion import parse_favorites
from ask4rent.services.sessions import SessionLifecycleManager

_logger = logging.getLogger(__name__)


class FavoritesClient(Protocol):
    """Interface for the favorites service."""

    async def list_favorites(self, session_id: str, access_token: str | None) -> object:
        """Return the raw favorites list."""

    async def add_favorite(
        self, session_id: str, listing_id: str, access_token: str | None
    ) -> None:
        """Add a listing to favorites."""

    async def remove_favorite(
        self, session_id: str, listing_id: str, access_token: str | None
    ) -> bool:
        """Remove a listing from favorites; False when it was not removed."""


@dataclass
class FavoritesService:
    """Keeps the favorites list in sync with the backend."""

    client: FavoritesClient
    sessions: SessionLifecycleManager
    favorites: list[Favorite] = field(default_factory=list)
    error: str | None = None

    async def load(self) -> list[Favorite]:
        """Reload favorites, creating a session first when none exists."""
        try:
            session = await self.sessions.ensure_session()
        except SessionCreationError:
            self.error = "Failed to create session"
            return self.favorites
        self.error = None
        try:
            raw = await self.client.list_favorites(session.token, self._access_token())
            self.favorites = parse_favorites(raw)
        except (httpx.HTTPError, MalformedPayloadError) as exc:
            _logger.warning("Failed to load favorites: %s", exc)
            self.error = "Failed to load favorites"
            self.favorites = []
        return self.favorites

    async def add(self, listing_id: str) -> bool:
        """Add a listing and refresh the list."""
        session = self.sessions.session
        if session is None:
            self.error = "No session available"
            return False
        self.error = None
        try:
            await self.client.add_favorite(session.token, listing_id, self._access_token())
        except httpx.HTTPError as exc:
            _logger.warning("Failed to add favorite %s: %s", listing_id, exc)
            self.error = "Failed to add to favorites"
            return False
        await self.load()
        return True

    async def remove(self, listing_id: str) -> bool:
        """Remove a listing and refresh the list."""
        session = self.sessions.session
        if session is None:
            self.error = "No session available"
            return False
        self.error = None
        try:
            removed = await self.client.remove_favorite(
                session.token, listing_id, self._access_token()
            )
        except httpx.HTTPError as exc:
            _logger.warning("Failed to remove favorite %s: %s", listing_id, exc)
            removed = False
        if not removed:
            self.error = "Failed to remove from favorites"
            return False
        await self.load()
        return True

    async def toggle(self, listing_id: str) -> bool:
        """Flip the favorite state of a listing."""
        if self.is_favorited(listing_id):
            return await self.remove(listing_id)
        return await self.add(listing_id)

    def is_favorited(self, listing_id: str) -> bool:
        return any(item.listing_id == listing_id for item in self.favorites)

    async def handle_session_reset(self, event: SessionReset) -> None:
        """Drop favorites of the previous scope and reload for the new one."""
        _logger.info("Session reset (%s), refreshing favorites", event.reason)
        self.favorites = []
        self.error = None
        if event.session is not None:
            await self.load()

    def _access_token(self) -> str | None:
        user = self.sessions.authenticated_user
        return user.access_token if user else None
