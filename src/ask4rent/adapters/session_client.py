"""Backend session service client."""

from dataclasses import dataclass

import httpx

from ask4rent.services.sessions import SessionClient

_REJECTED_STATUSES = {401, 403, 404, 410, 440}


@dataclass
class HttpxSessionClient(SessionClient):
    """HTTPX-backed session service client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15.0

    @classmethod
    def create(cls, base_url: str, timeout: float = 15.0) -> "HttpxSessionClient":
        """Create a session client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient(), timeout=timeout)

    async def create_session(self) -> str:
        """Request a new anonymous session token."""
        response = await self.http_client.get(
            f"{self.base_url}/onStartUpSession", timeout=self.timeout
        )
        response.raise_for_status()
        token = response.text.strip().replace('"', "")
        if not token:
            raise ValueError("session service returned an empty token")
        return token

    async def renew_session(self, token: str) -> bool:
        """Extend a session; returns False when the token is no longer known."""
        response = await self.http_client.get(
            f"{self.base_url}/onReflashSession",
            params={"session_id": token},
            timeout=self.timeout,
        )
        if response.status_code in _REJECTED_STATUSES:
            return False
        response.raise_for_status()
        return True

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
