"""Unit tests for AppError hierarchy."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from errors import (
    AppError,
    DeliveryError,
    MissingInputError,
    RateLimitExceededError,
    ValidationError,
    register_error_handlers,
)


class TestAppErrorSubclasses:
    def test_validation_error(self):
        e = ValidationError("bad input")
        assert e.status_code == 400
        assert e.error_code == "validation_error"
        assert e.message == "bad input"

    def test_missing_input_is_validation_error(self):
        e = MissingInputError("code required", field="code")
        assert isinstance(e, ValidationError)
        assert e.status_code == 400
        assert e.error_code == "missing_input"

    def test_rate_limit_error(self):
        e = RateLimitExceededError("slow down", retry_after_seconds=42)
        assert e.status_code == 429
        assert e.error_code == "rate_limit_exceeded"
        assert e.retry_after_seconds == 42
        assert e.details == {"retry_after_seconds": 42}

    def test_delivery_error(self):
        e = DeliveryError("provider down")
        assert e.status_code == 502
        assert e.error_code == "delivery_failed"


class TestAppErrorToDict:
    def test_basic(self):
        e = DeliveryError("provider down")
        assert e.to_dict() == {"error": "provider down", "code": "delivery_failed"}

    @pytest.mark.parametrize(
        "kwargs, key, value",
        [
            ({"field": "destination"}, "field", "destination"),
            ({"details": {"min": 1, "max": 10}}, "details", {"min": 1, "max": 10}),
        ],
        ids=["with_field", "with_details"],
    )
    def test_optional_key_present(self, kwargs, key, value):
        e = ValidationError("invalid", **kwargs)
        assert e.to_dict()[key] == value

    def test_no_optional_keys_when_absent(self):
        d = AppError("boom").to_dict()
        assert "field" not in d
        assert "details" not in d


def _app_raising(exc: Exception) -> FastAPI:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/boom")
    async def boom():
        raise exc

    return app


class TestErrorHandlers:
    def test_rate_limit_sets_retry_after(self):
        app = _app_raising(RateLimitExceededError("slow down", retry_after_seconds=90))
        with TestClient(app) as client:
            resp = client.get("/boom")
        assert resp.status_code == 429
        assert resp.headers["Retry-After"] == "90"
        assert resp.json()["details"] == {"retry_after_seconds": 90}

    def test_app_error_json_shape(self):
        app = _app_raising(MissingInputError("A code is required.", field="code"))
        with TestClient(app) as client:
            resp = client.get("/boom")
        assert resp.status_code == 400
        assert resp.json() == {
            "error": "A code is required.",
            "code": "missing_input",
            "field": "code",
        }

    def test_unhandled_error_is_opaque_500(self):
        app = _app_raising(RuntimeError("redis exploded"))
        with TestClient(app, raise_server_exceptions=False) as client:
            resp = client.get("/boom")
        assert resp.status_code == 500
        assert resp.json()["code"] == "internal_error"
        assert "redis" not in resp.text
