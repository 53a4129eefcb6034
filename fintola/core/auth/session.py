"""Request authentication."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping

import httpx
from loguru import logger

USER_ID_HEADER = "X-User-Id"
SESSION_ID_HEADER = "X-Session-Id"


class Authenticator(ABC):
    """Resolves the signed-in user from request headers."""

    @abstractmethod
    async def authenticate(self, headers: Mapping[str, str]) -> str | None:
        """Return the user id, or ``None`` for anonymous requests."""

    async def close(self) -> None:
        return None


class HeaderAuthenticator(Authenticator):
    """Trusts the ``X-User-Id`` header. Local development only."""

    async def authenticate(self, headers: Mapping[str, str]) -> str | None:
        return headers.get(USER_ID_HEADER) or None


class ClerkSessionAuthenticator(Authenticator):
    """Verifies the ``X-Session-Id`` header against the Clerk sessions API."""

    def __init__(
        self,
        secret_key: str,
        api_url: str = "https://api.clerk.com/v1",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            timeout=httpx.Timeout(timeout),
            headers={"Authorization": f"Bearer {secret_key}"},
            transport=transport,
        )

    async def authenticate(self, headers: Mapping[str, str]) -> str | None:
        session_id = headers.get(SESSION_ID_HEADER)
        if not session_id:
            return None

        try:
            response = await self._client.get(f"/sessions/{session_id}")
        except httpx.HTTPError as e:
            logger.warning(f"Session lookup failed: {e}")
            return None

        if response.status_code != 200:
            return None
        try:
            session = response.json()
        except ValueError:
            logger.warning("Session lookup returned invalid JSON")
            return None
        if not isinstance(session, dict) or session.get("status") != "active":
            return None
        return session.get("user_id") or None

    async def close(self) -> None:
        await self._client.aclose()
