"""Unit tests for InkwellService wiring: uploads, static files, CORS and lifespan."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from inkwell.service import InkwellService
from inkwell.stores import MongoPostStore, MongoUserStore

PNG_BYTES = b"\x89PNG\r\n\x1a\nnot-really-a-png"


class TestStatus:
    def test_status(self, client):
        response = client.get("/status")

        assert response.status_code == 200
        assert response.json() == {"status": "Available"}


class TestUploadImage:
    """Tests for PUT /post-image."""

    def test_requires_auth(self, client):
        response = client.put("/post-image", files={"image": ("a.png", PNG_BYTES, "image/png")})

        assert response.status_code == 401
        assert response.json() == {"message": "Not authenticated!"}

    def test_no_file(self, client, alice, token_for):
        response = client.put("/post-image", headers=token_for(alice))

        assert response.status_code == 200
        assert response.json() == {"message": "No image is uploaded!"}

    def test_unsupported_type_is_dropped(self, client, settings, alice, token_for):
        response = client.put(
            "/post-image", files={"image": ("a.gif", b"GIF89a", "image/gif")}, headers=token_for(alice)
        )

        assert response.status_code == 200
        assert "filePath" not in response.json()
        assert list(Path(settings.UPLOAD_DIR).iterdir()) == []

    def test_png_is_stored_and_served(self, client, settings, alice, token_for):
        response = client.put(
            "/post-image", files={"image": ("a.png", PNG_BYTES, "image/png")}, headers=token_for(alice)
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "File stored."
        assert body["filePath"].startswith("images/")
        assert body["filePath"].endswith(".png")

        served = client.get(f"/{body['filePath']}")
        assert served.status_code == 200
        assert served.content == PNG_BYTES

    def test_old_image_is_replaced(self, client, settings, alice, token_for):
        headers = token_for(alice)
        first = client.put("/post-image", files={"image": ("a.jpg", b"one", "image/jpeg")}, headers=headers).json()

        second = client.put(
            "/post-image",
            files={"image": ("b.jpg", b"two", "image/jpeg")},
            data={"oldPath": first["filePath"]},
            headers=headers,
        ).json()

        stored = sorted(p.name for p in Path(settings.UPLOAD_DIR).iterdir())
        assert stored == [Path(second["filePath"]).name]


class TestMiddleware:
    def test_cors_preflight(self, client):
        response = client.options(
            "/graphql",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type, Authorization",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "PATCH" in response.headers["access-control-allow-methods"]

    def test_cors_preflight_with_extra_request_headers(self, client):
        """Test that preflights asking for headers beyond the allowed list still succeed."""
        response = client.options(
            "/graphql",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "content-type, x-requested-with",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.parametrize("path", ["/graphql", "/post-image", "/status"])
    def test_bare_options_is_answered(self, client, path):
        """Test that OPTIONS without preflight headers gets 200 and CORS headers."""
        response = client.options(path)

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert response.headers["access-control-allow-methods"] == "OPTIONS, GET, POST, PUT, PATCH, DELETE"
        assert response.headers["access-control-allow-headers"] == "Content-Type, Authorization"

    def test_request_id_header(self, client):
        generated = client.get("/status")
        echoed = client.get("/status", headers={"X-Request-ID": "req-123"})

        assert generated.headers["X-Request-ID"]
        assert echoed.headers["X-Request-ID"] == "req-123"


class TestDefaultStores:
    """Tests for the Mongo-backed default wiring."""

    def test_creates_mongo_stores_when_none_injected(self, settings):
        service = InkwellService(settings=settings)

        assert isinstance(service.users, MongoUserStore)
        assert isinstance(service.posts, MongoPostStore)
        assert service.db is not None
        assert service.db.is_connected is False

    def test_injected_stores_skip_database(self, service, user_store, post_store):
        assert service.db is None
        assert service.users is user_store
        assert service.posts is post_store


class TestLifespan:
    @pytest.mark.asyncio
    async def test_connects_and_disconnects(self, settings):
        mock_db = MagicMock()
        mock_db.connect = AsyncMock()
        mock_db.disconnect = AsyncMock()

        with patch("inkwell.service.InkwellDB", return_value=mock_db):
            service = InkwellService(settings=settings)
            async with service._lifespan(service.app):
                mock_db.connect.assert_awaited_once()
                mock_db.disconnect.assert_not_awaited()

        mock_db.disconnect.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_connection_aborts_startup(self, settings):
        mock_db = MagicMock()
        mock_db.connect = AsyncMock(side_effect=ServerSelectionTimeoutError("unreachable"))
        mock_db.disconnect = AsyncMock()

        with patch("inkwell.service.InkwellDB", return_value=mock_db):
            service = InkwellService(settings=settings)
            with pytest.raises(ServerSelectionTimeoutError):
                async with service._lifespan(service.app):
                    pass
