"""Backend query services client."""

from dataclasses import dataclass

import httpx

from ask4rent.errors import SessionRejectedError
from ask4rent.services.search import QueryClient

_SESSION_REJECTED_STATUSES = {401, 403, 440}


@dataclass
class HttpxQueryClient(QueryClient):
    """HTTPX-backed client for the property, zone and commute queries."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15.0

    @classmethod
    def create(cls, base_url: str, timeout: float = 15.0) -> "HttpxQueryClient":
        """Create a query client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient(), timeout=timeout)

    async def query_properties(self, session_id: str, message: str) -> object:
        """Send a natural-language property query."""
        response = await self.http_client.post(
            f"{self.base_url}/query",
            json={"session_id": session_id, "message": message},
            timeout=self.timeout,
        )
        return _json(response)

    async def list_territorial_authorities(self, session_id: str) -> object:
        """List territorial authorities with their school counts."""
        response = await self.http_client.get(
            f"{self.base_url}/territorial-authorities",
            params={"session_id": session_id},
            timeout=self.timeout,
        )
        return _json(response)

    async def schools_by_territorial_authority(
        self, session_id: str, ta_name: str
    ) -> object:
        """Fetch the schools and boundary of a territorial authority."""
        response = await self.http_client.get(
            f"{self.base_url}/schools-by-ta",
            params={"session_id": session_id, "ta_name": ta_name},
            timeout=self.timeout,
        )
        return _json(response)

    async def rentals_by_school(self, session_id: str, school_name: str) -> object:
        """Fetch rentals near a school and its enrolment zone."""
        response = await self.http_client.get(
            f"{self.base_url}/rentals-by-school",
            params={"session_id": session_id, "school_name": school_name},
            timeout=self.timeout,
        )
        return _json(response)

    async def driving_isochrone(
        self, session_id: str, lon: float, lat: float, minutes: int
    ) -> object:
        """Fetch rentals inside a driving isochrone around a point."""
        response = await self.http_client.get(
            f"{self.base_url}/isochrone",
            params={
                "session_id": session_id,
                "lon": lon,
                "lat": lat,
                "minutes": minutes,
            },
            timeout=self.timeout,
        )
        return _json(response)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _json(response: httpx.Response) -> object:
    if response.status_code in _SESSION_REJECTED_STATUSES:
        raise SessionRejectedError(f"session rejected with status {response.status_code}")
    response.raise_for_status()
    if not response.content:
        return None
    return response.json()
