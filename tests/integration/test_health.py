"""Integration tests for GET /health."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app import create_app
from config import AppSettings, RedisSettings
from dependencies import get_redis
from errors import register_error_handlers
from infrastructure.storage.memory_store import MemoryTableStore
from routes.health_routes import router as health_router


def _build_test_app(redis_ok: bool = True, redis_configured: bool = True) -> FastAPI:
    """
    Build a minimal FastAPI app with a mocked Redis client injected via lifespan.
    No real network connections are made.
    """
    if not redis_configured:
        mock_redis = None
    else:
        mock_redis = AsyncMock()
        if redis_ok:
            mock_redis.ping = AsyncMock(return_value=True)
        else:
            mock_redis.ping = AsyncMock(side_effect=Exception("redis down"))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.redis = mock_redis
        yield

    app = FastAPI(lifespan=lifespan)
    register_error_handlers(app)
    app.include_router(health_router)
    return app


class TestHealthEndpoint:
    def test_healthy_when_redis_ok(self):
        app = _build_test_app(redis_ok=True)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "healthy"
        assert body["checks"]["redis"] == "ok"

    def test_unhealthy_when_redis_fails(self):
        app = _build_test_app(redis_ok=False)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 503
        body = resp.json()
        assert body["status"] == "unhealthy"
        assert body["checks"]["redis"] == "error"

    def test_degraded_when_redis_not_configured(self):
        app = _build_test_app(redis_configured=False)
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 200
        body = resp.json()
        assert body["status"] == "degraded"
        assert body["checks"]["redis"] == "not_configured"

    def test_factory_app_without_redis_is_degraded(self):
        settings = AppSettings(redis=RedisSettings(redis_uri=None))
        app = create_app(settings, table_store=MemoryTableStore())
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "degraded", "checks": {"redis": "not_configured"}}

    def test_redis_client_comes_from_dependency(self):
        app = _build_test_app(redis_configured=False)
        override = AsyncMock()
        override.ping = AsyncMock(return_value=True)
        app.dependency_overrides[get_redis] = lambda: override
        with TestClient(app) as client:
            resp = client.get("/health")
        assert resp.json()["checks"]["redis"] == "ok"
        override.ping.assert_awaited_once()
