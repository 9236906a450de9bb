"""Favorites service client."""

from dataclasses import dataclass

import httpx

from ask4rent.services.favorites import FavoritesClient


@dataclass
class HttpxFavoritesClient(FavoritesClient):
    """HTTPX-backed favorites client.

    A bearer token, when given, takes precedence over the anonymous session
    scope on the server side.
    """

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15.0

    @classmethod
    def create(cls, base_url: str, timeout: float = 15.0) -> "HttpxFavoritesClient":
        """Create a favorites client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient(), timeout=timeout)

    async def list_favorites(self, session_id: str, access_token: str | None) -> object:
        """List favorites for the session or user."""
        response = await self.http_client.get(
            f"{self.base_url}/favorites",
            params={"session_id": session_id},
            headers=_auth_headers(access_token),
            timeout=self.timeout,
        )
        response.raise_for_status()
        return response.json()

    async def add_favorite(
        self, session_id: str, listing_id: str, access_token: str | None
    ) -> None:
        """Add a listing to favorites."""
        response = await self.http_client.post(
            f"{self.base_url}/favorites",
            json={"session_id": session_id, "listing_id": listing_id},
            headers=_auth_headers(access_token),
            timeout=self.timeout,
        )
        response.raise_for_status()

    async def remove_favorite(
        self, session_id: str, listing_id: str, access_token: str | None
    ) -> bool:
        """Remove a listing from favorites."""
        response = await self.http_client.delete(
            f"{self.base_url}/favorites/{listing_id}",
            params={"session_id": session_id},
            headers=_auth_headers(access_token),
            timeout=self.timeout,
        )
        response.raise_for_status()
        if not response.content:
            return True
        payload = response.json()
        if isinstance(payload, dict):
            return bool(payload.get("result", True))
        return bool(payload)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _auth_headers(access_token: str | None) -> dict[str, str]:
    if not access_token:
        return {}
    return {"Authorization": f"Bearer {access_token}"}
