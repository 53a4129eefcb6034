"""
User metadata storage.

The identity provider keeps two JSON documents per user: public metadata,
readable by the browser, and private metadata, readable only by the
backend. They double as the application's database: broker sessions,
broker tokens and AutoTrader state all live there.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from typing import Any

import httpx
from loguru import logger

from fintola.core.exceptions import MetadataStoreError


def deep_merge(target: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``updates`` into a copy of ``target``.

    Nested dicts are merged key by key; any other value, including ``None``,
    replaces the existing one.
    """
    merged = copy.deepcopy(target)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


class UserMetadataStore(ABC):
    """Per-user public/private metadata documents."""

    @abstractmethod
    async def get_user(self, user_id: str) -> dict[str, dict[str, Any]]:
        """Return ``{"public": {...}, "private": {...}}`` for ``user_id``."""

    @abstractmethod
    async def update_metadata(
        self,
        user_id: str,
        public: dict[str, Any] | None = None,
        private: dict[str, Any] | None = None,
    ) -> None:
        """Deep-merge the given documents into the stored ones."""

    async def close(self) -> None:
        return None


class InMemoryMetadataStore(UserMetadataStore):
    """Process-local store for development and tests."""

    def __init__(self, users: dict[str, dict[str, dict[str, Any]]] | None = None) -> None:
        self._users: dict[str, dict[str, dict[str, Any]]] = {}
        for user_id, documents in (users or {}).items():
            self._users[user_id] = {
                "public": copy.deepcopy(documents.get("public", {})),
                "private": copy.deepcopy(documents.get("private", {})),
            }

    async def get_user(self, user_id: str) -> dict[str, dict[str, Any]]:
        documents = self._users.get(user_id, {"public": {}, "private": {}})
        return copy.deepcopy(documents)

    async def update_metadata(
        self,
        user_id: str,
        public: dict[str, Any] | None = None,
        private: dict[str, Any] | None = None,
    ) -> None:
        documents = self._users.setdefault(user_id, {"public": {}, "private": {}})
        if public:
            documents["public"] = deep_merge(documents["public"], public)
        if private:
            documents["private"] = deep_merge(documents["private"], private)


class ClerkMetadataStore(UserMetadataStore):
    """Metadata store backed by the Clerk backend API.

    ``PATCH /users/{id}/metadata`` deep-merges server side, so updates are
    sent as partial documents.
    """

    def __init__(
        self,
        secret_key: str,
        api_url: str = "https://api.clerk.com/v1",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.secret_key = secret_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> ClerkMetadataStore:
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                timeout=httpx.Timeout(self.timeout),
                headers={"Authorization": f"Bearer {self.secret_key}"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, path: str, user_id: str, **kwargs: Any) -> dict[str, Any]:
        client = self._ensure_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            raise MetadataStoreError(f"Identity provider request failed: {e}", user_id=user_id) from e

        if response.status_code >= 400:
            raise MetadataStoreError(
                f"Identity provider returned HTTP {response.status_code}",
                user_id=user_id,
                status=response.status_code,
            )
        if not response.content:
            return {}
        try:
            body = response.json()
        except ValueError as e:
            raise MetadataStoreError("Identity provider returned invalid JSON", user_id=user_id) from e
        if not isinstance(body, dict):
            raise MetadataStoreError("Identity provider returned an unexpected body", user_id=user_id)
        return body

    async def get_user(self, user_id: str) -> dict[str, dict[str, Any]]:
        user = await self._request("GET", f"/users/{user_id}", user_id)
        return {
            "public": user.get("public_metadata") or {},
            "private": user.get("private_metadata") or {},
        }

    async def update_metadata(
        self,
        user_id: str,
        public: dict[str, Any] | None = None,
        private: dict[str, Any] | None = None,
    ) -> None:
        body: dict[str, Any] = {}
        if public:
            body["public_metadata"] = public
        if private:
            body["private_metadata"] = private
        if not body:
            return
        await self._request("PATCH", f"/users/{user_id}/metadata", user_id, json=body)


async def get_user_metadata(store: UserMetadataStore, user_id: str) -> dict[str, Any]:
    """Public metadata for ``user_id``; an empty dict when the store fails."""
    try:
        documents = await store.get_user(user_id)
    except MetadataStoreError as e:
        logger.error(f"Error fetching user metadata: {e.message}", user_id=user_id)
        return {}
    return documents.get("public") or {}


async def update_user_metadata(store: UserMetadataStore, user_id: str, metadata: dict[str, Any]) -> bool:
    """Merge ``metadata`` into the public document; ``False`` when the store fails."""
    try:
        await store.update_metadata(user_id, public=metadata)
    except MetadataStoreError as e:
        logger.error(f"Error updating user metadata: {e.message}", user_id=user_id)
        return False
    return True
