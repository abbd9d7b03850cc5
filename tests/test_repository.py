"""Tests for the listing repository and the API client."""
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
import respx

from gallery_uploader.errors import EphemeralReferenceError
from gallery_uploader.models import EphemeralReference, PersistentReference
from gallery_uploader.services.api_client import HTTPAPIClient
from gallery_uploader.services.repository import ListingRepository

API = "https://api.test"
A = PersistentReference("https://storage.googleapis.com/bucket/uploads/a")
PREVIEW = EphemeralReference("blob:gallery-uploader/1")


class TestListingRepository:
    @pytest.fixture
    def api(self):
        api = Mock()
        api.put = AsyncMock()
        api.get = AsyncMock()
        return api

    @pytest.mark.asyncio
    async def test_save_images_puts_plain_strings(self, api):
        repo = ListingRepository(api)

        await repo.save_images("42", (A, PersistentReference("/objects/uploads/b")))

        api.put.assert_awaited_once_with(
            "/api/listings/42",
            json={"images": [A.locator, "/objects/uploads/b"]},
        )

    @pytest.mark.asyncio
    async def test_save_refuses_previews(self, api):
        repo = ListingRepository(api)

        with pytest.raises(EphemeralReferenceError) as exc_info:
            await repo.save_images("42", (A, PREVIEW))

        assert exc_info.value.count == 1
        api.put.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_save_previews_when_allowed(self, api):
        repo = ListingRepository(api)

        await repo.save_images("42", (A, PREVIEW), allow_ephemeral=True)

        api.put.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_images_accepts_strings_and_objects(self, api):
        api.get.return_value = Mock(
            json=Mock(return_value={"id": "42", "images": [A.locator, {"url": "/objects/uploads/b"}, {"id": 3}]})
        )
        repo = ListingRepository(api)

        refs = await repo.get_images("42")

        assert refs == (A, PersistentReference("/objects/uploads/b"))
        api.get.assert_awaited_once_with("/api/listings/42")

    @pytest.mark.asyncio
    async def test_get_images_without_images_field(self, api):
        api.get.return_value = Mock(json=Mock(return_value={"id": "42"}))
        assert await ListingRepository(api).get_images("42") == ()


class TestHTTPAPIClient:
    @pytest.mark.asyncio
    async def test_requires_context(self):
        client = HTTPAPIClient(API)
        with pytest.raises(RuntimeError, match="not initialized"):
            await client.get("/api/listings/1")

    @pytest.mark.asyncio
    async def test_sends_bearer_token(self):
        with respx.mock:
            route = respx.get(f"{API}/api/listings/1").mock(return_value=httpx.Response(200, json={}))
            async with HTTPAPIClient(API, token="secret") as client:
                await client.get("/api/listings/1")

        assert route.calls.last.request.headers["authorization"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_sends_session_cookie(self):
        with respx.mock:
            route = respx.put(f"{API}/api/listings/1").mock(return_value=httpx.Response(200, json={}))
            async with HTTPAPIClient(API, session_cookie="s%3Aabc") as client:
                await client.put("/api/listings/1", json={"images": []})

        assert "connect.sid=s%3Aabc" in route.calls.last.request.headers["cookie"]

    @pytest.mark.asyncio
    async def test_retries_server_errors(self, monkeypatch):
        monkeypatch.setattr("gallery_uploader.services.api_client.asyncio.sleep", AsyncMock())
        with respx.mock:
            route = respx.put(f"{API}/api/listings/1").mock(
                side_effect=[httpx.Response(502), httpx.Response(200, json={"ok": True})]
            )
            async with HTTPAPIClient(API) as client:
                response = await client.put("/api/listings/1", json={"images": []})

        assert response.json() == {"ok": True}
        assert route.call_count == 2

    @pytest.mark.asyncio
    async def test_client_errors_are_not_retried(self):
        with respx.mock:
            route = respx.put(f"{API}/api/listings/1").mock(
                return_value=httpx.Response(404, json={"error": "Listing not found"})
            )
            async with HTTPAPIClient(API) as client:
                with pytest.raises(RuntimeError, match="API error 404"):
                    await client.put("/api/listings/1", json={"images": []})

        assert route.call_count == 1
