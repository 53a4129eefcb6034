"""用户元数据存储测试"""

from __future__ import annotations

import json

import httpx
import pytest

from fintola.core.auth import (
    ClerkMetadataStore,
    InMemoryMetadataStore,
    UserMetadataStore,
    deep_merge,
    get_user_metadata,
    update_user_metadata,
)
from fintola.core.exceptions import MetadataStoreError


class TestDeepMerge:
    def test_nested_dicts_are_merged(self):
        target = {"brokerSessions": {"a": {"status": "pending"}}, "plan": "free"}
        merged = deep_merge(target, {"brokerSessions": {"b": {"status": "pending"}}})

        assert merged == {
            "brokerSessions": {"a": {"status": "pending"}, "b": {"status": "pending"}},
            "plan": "free",
        }

    def test_scalars_and_none_replace(self):
        merged = deep_merge({"a": {"x": 1}, "b": 2}, {"a": None, "b": 3})
        assert merged == {"a": None, "b": 3}

    def test_target_is_not_mutated(self):
        target = {"a": {"x": 1}}
        deep_merge(target, {"a": {"y": 2}})
        assert target == {"a": {"x": 1}}


class TestInMemoryStore:
    @pytest.mark.asyncio
    async def test_unknown_user_has_empty_documents(self):
        store = InMemoryMetadataStore()
        assert await store.get_user("nobody") == {"public": {}, "private": {}}

    @pytest.mark.asyncio
    async def test_update_merges_documents(self):
        store = InMemoryMetadataStore({"u1": {"public": {"isPremium": True}}})

        await store.update_metadata("u1", public={"autoTraderEnabled": True}, private={"brokerTokens": {"X": {}}})
        documents = await store.get_user("u1")

        assert documents["public"] == {"isPremium": True, "autoTraderEnabled": True}
        assert documents["private"] == {"brokerTokens": {"X": {}}}

    @pytest.mark.asyncio
    async def test_returned_documents_are_copies(self):
        store = InMemoryMetadataStore({"u1": {"public": {"a": 1}}})
        documents = await store.get_user("u1")
        documents["public"]["a"] = 2
        assert (await store.get_user("u1"))["public"] == {"a": 1}


def _clerk(handler) -> ClerkMetadataStore:
    return ClerkMetadataStore("sk_test", api_url="https://clerk.test/v1/", transport=httpx.MockTransport(handler))


class TestClerkStore:
    @pytest.mark.asyncio
    async def test_get_user(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            return httpx.Response(
                200, json={"id": "u1", "public_metadata": {"isPremium": True}, "private_metadata": None}
            )

        async with _clerk(handler) as store:
            documents = await store.get_user("u1")

        assert seen == {"url": "https://clerk.test/v1/users/u1", "auth": "Bearer sk_test"}
        assert documents == {"public": {"isPremium": True}, "private": {}}

    @pytest.mark.asyncio
    async def test_update_sends_partial_documents(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append((request.method, request.url.path, json.loads(request.content)))
            return httpx.Response(200, json={})

        store = _clerk(handler)
        await store.update_metadata("u1", private={"brokerSessions": {"s": {"status": "pending"}}})
        await store.update_metadata("u1")
        await store.close()

        assert requests == [
            ("PATCH", "/v1/users/u1/metadata", {"private_metadata": {"brokerSessions": {"s": {"status": "pending"}}}})
        ]

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        store = _clerk(lambda request: httpx.Response(404, json={"errors": []}))

        with pytest.raises(MetadataStoreError) as exc_info:
            await store.get_user("u1")
        await store.close()

        assert exc_info.value.details["upstream_status"] == 404
        assert exc_info.value.details["user_id"] == "u1"

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        store = _clerk(handler)
        with pytest.raises(MetadataStoreError, match="Identity provider request failed"):
            await store.get_user("u1")
        await store.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>maintenance</html>"),
            httpx.Response(200, json=[{"id": "u1"}]),
        ],
    )
    async def test_unreadable_body(self, response):
        store = _clerk(lambda request: response)

        with pytest.raises(MetadataStoreError) as exc_info:
            await store.get_user("u1")
        assert await get_user_metadata(store, "u1") == {}
        await store.close()

        assert exc_info.value.details["user_id"] == "u1"

    @pytest.mark.asyncio
    async def test_empty_update_response(self):
        store = _clerk(lambda request: httpx.Response(204))
        await store.update_metadata("u1", public={"isPremium": True})
        await store.close()


class FailingStore(UserMetadataStore):
    async def get_user(self, user_id):
        raise MetadataStoreError("down", user_id=user_id)

    async def update_metadata(self, user_id, public=None, private=None):
        raise MetadataStoreError("down", user_id=user_id)


class TestHelpers:
    @pytest.mark.asyncio
    async def test_get_user_metadata(self):
        store = InMemoryMetadataStore({"u1": {"public": {"a": 1}, "private": {"secret": 2}}})
        assert await get_user_metadata(store, "u1") == {"a": 1}

    @pytest.mark.asyncio
    async def test_update_user_metadata(self):
        store = InMemoryMetadataStore()
        assert await update_user_metadata(store, "u1", {"a": 1}) is True
        assert await get_user_metadata(store, "u1") == {"a": 1}

    @pytest.mark.asyncio
    async def test_failures_are_softened(self):
        store = FailingStore()
        assert await get_user_metadata(store, "u1") == {}
        assert await update_user_metadata(store, "u1", {"a": 1}) is False
