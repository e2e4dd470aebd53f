"""
API Tests - Endpoint Tests over the ASGI App

The app is built with create_app around fake-backed services and driven
with httpx.AsyncClient over ASGITransport.

Files that USE this module:
- pytest (test runner executes these tests)

Files that this module USES:
- tokenstats.adapters.web.server (create_app)
- tests.conftest (stats_env fixture)
"""
from unittest.mock import Mock

import httpx
import pytest
import pytest_asyncio

from conftest import fail_everything
from tokenstats.adapters.persistence.meme_store import MemeStore
from tokenstats.adapters.storage.base import ObjectStore
from tokenstats.adapters.web.server import create_app
from tokenstats.application.health import HealthChecker
from tokenstats.application.uploads import UploadService
from tokenstats.config import Settings
from tokenstats.domain.errors import StorageError
from tokenstats.domain.models import StoredObject


@pytest.fixture
def object_store():
    store = Mock(spec=ObjectStore)
    store.name = "mock"
    store.store.side_effect = lambda data, content_type, filename: StoredObject(
        url=f"/uploads/{filename}", pathname=filename
    )
    return store


def build_app(stats_env, object_store, tmp_path, **overrides):
    cfg = Settings(
        environment=overrides.pop("environment", "test"),
        cors_origins="http://localhost:3000",
        rate_limit_max_requests=overrides.pop("rate_limit_max_requests", 100),
        rate_limit_window_seconds=60,
    )
    uploads = UploadService(
        store=object_store,
        records=MemeStore(tmp_path / "memes.json"),
        max_bytes=overrides.pop("max_bytes", 1024),
        allowed_types=["image/png", "image/jpeg"],
    )
    checker = HealthChecker(stats_env.service, storage_backend="mock")
    return create_app(cfg, stats_env.service, uploads, checker)


@pytest_asyncio.fixture
async def client(stats_env, object_store, tmp_path):
    app = build_app(stats_env, object_store, tmp_path)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"


@pytest.mark.asyncio
async def test_token_stats_then_cached(client, stats_env):
    first = await client.get("/api/token-stats")
    assert first.status_code == 200
    body = first.json()
    assert body["cached"] is False
    assert "cacheAge" not in body
    assert body["price"] == 0.5
    assert body["circulatingSupply"] == 850_000_000
    assert body["holderCount"] == 3
    assert body["degraded"] == []
    assert body["formatted"]["marketCap"] == "$425.00M"

    stats_env.clock.advance(7)
    second = (await client.get("/api/token-stats")).json()
    assert second["cached"] is True
    assert second["cacheAge"] == 7
    for key in ("cached", "cacheAge"):
        body.pop(key, None)
        second.pop(key, None)
    assert second == body


@pytest.mark.asyncio
async def test_token_stats_all_sources_down_returns_503(client, stats_env):
    fail_everything(stats_env)

    response = await client.get("/api/token-stats")

    assert response.status_code == 503
    body = response.json()
    assert body["error"] == "all_sources_unavailable"
    assert body["message"]


@pytest.mark.asyncio
async def test_token_stats_stale_snapshot(client, stats_env):
    await client.get("/api/token-stats")
    stats_env.clock.advance(120)
    fail_everything(stats_env)

    body = (await client.get("/api/token-stats")).json()

    assert body["stale"] is True
    assert body["error"] == "all_sources_unavailable"
    assert body["price"] == 0.5


@pytest.mark.asyncio
async def test_health_details(client):
    await client.get("/api/token-stats")

    body = (await client.get("/health/details")).json()

    assert body["status"] == "healthy"
    assert body["storage_backend"] == "mock"
    assert body["checks"]["cache"]["details"]["present"] is True
    assert body["checks"]["refreshes"]["details"]["refreshes"] == 1


@pytest.mark.asyncio
async def test_upload_and_list(client, object_store):
    response = await client.post(
        "/api/memes/upload",
        files={"meme": ("cat.png", b"\x89PNG fake image", "image/png")},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["originalName"] == "cat.png"
    assert data["mimeType"] == "image/png"
    assert data["url"].startswith("/uploads/")
    object_store.store.assert_called_once()

    listing = (await client.get("/api/memes")).json()
    assert listing["success"] is True
    assert [m["id"] for m in listing["data"]] == [data["id"]]


@pytest.mark.asyncio
async def test_upload_non_image_rejected_before_storage(client, object_store):
    response = await client.post(
        "/api/memes/upload",
        files={"meme": ("notes.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 400
    assert response.json()["success"] is False
    object_store.store.assert_not_called()


@pytest.mark.asyncio
async def test_upload_oversize_rejected_before_storage(client, object_store):
    response = await client.post(
        "/api/memes/upload",
        files={"meme": ("big.png", b"x" * 2048, "image/png")},
    )
    assert response.status_code == 413
    object_store.store.assert_not_called()


@pytest.mark.asyncio
async def test_upload_without_file(client, object_store):
    response = await client.post("/api/memes/upload", data={"other": "field"})
    assert response.status_code == 400
    assert response.json()["error"] == "No file uploaded"
    object_store.store.assert_not_called()


@pytest.mark.asyncio
async def test_storage_failure_maps_to_502(client, object_store):
    object_store.store.side_effect = StorageError("bucket unavailable")

    response = await client.post(
        "/api/memes/upload",
        files={"meme": ("cat.png", b"\x89PNG", "image/png")},
    )

    assert response.status_code == 502
    assert response.json()["detail"] == "bucket unavailable"


@pytest.mark.asyncio
async def test_unhandled_error_hides_detail_in_production(stats_env, object_store, tmp_path):
    app = build_app(stats_env, object_store, tmp_path, environment="production")
    stats_env.service.get_stats = Mock(side_effect=RuntimeError("secret internals"))
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)

    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        response = await c.get("/api/token-stats")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


@pytest.mark.asyncio
async def test_rate_limit(stats_env, object_store, tmp_path):
    app = build_app(stats_env, object_store, tmp_path, rate_limit_max_requests=2)
    transport = httpx.ASGITransport(app=app)

    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        statuses = [(await c.get("/api/memes")).status_code for _ in range(3)]
        limited = await c.get("/api/memes")
        health = await c.get("/health")

    assert statuses == [200, 200, 429]
    assert limited.status_code == 429
    assert int(limited.headers["retry-after"]) >= 1
    assert health.status_code == 200


@pytest.mark.asyncio
async def test_cors_allows_vercel_preview_origin(client):
    response = await client.get("/health", headers={"Origin": "https://soba-preview.vercel.app"})
    assert response.headers["access-control-allow-origin"] == "https://soba-preview.vercel.app"

    response = await client.get("/health", headers={"Origin": "https://evil.example.com"})
    assert "access-control-allow-origin" not in response.headers
