"""Nominatim place search client."""

from dataclasses import dataclass

import httpx

from ask4rent.services.search import PlacesClient


@dataclass
class HttpxPlacesClient(PlacesClient):
    """HTTPX-backed geocoder client."""

    base_url: str
    http_client: httpx.AsyncClient
    country_codes: str = "nz"
    user_agent: str = "ask4rent-client"
    timeout: float = 15.0

    @classmethod
    def create(
        cls,
        base_url: str,
        country_codes: str = "nz",
        user_agent: str = "ask4rent-client",
        timeout: float = 15.0,
    ) -> "HttpxPlacesClient":
        """Create a places client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(headers={"User-Agent": user_agent}),
            country_codes=country_codes,
            user_agent=user_agent,
            timeout=timeout,
        )

    async def search(self, query: str, limit: int = 8) -> object:
        """Search places by free text."""
        params: dict[str, object] = {"q": query, "format": "json", "limit": limit}
        if self.country_codes:
            params["countrycodes"] = self.country_codes
        response = await self.http_client.get(
            f"{self.base_url}/search", params=params, timeout=self.timeout
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
