"""Unit tests for RFC 7807 exception handlers."""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from pydantic import BaseModel

from onboardkit.config import Settings
from onboardkit.core.errors import (
    AllocationExhaustedError,
    NotFoundError,
    ServiceUnavailableError,
    SlugUnavailableError,
    register_exception_handlers,
)


class Body(BaseModel):
    name: str


@pytest.fixture
def error_app() -> FastAPI:
    app = FastAPI()
    app.state.settings = Settings(api_docs_base_url="https://docs.test")
    register_exception_handlers(app)

    @app.get("/missing")
    async def missing():
        raise NotFoundError("Tenant not found", resource="tenant", resource_id="t-1")

    @app.get("/taken")
    async def taken():
        raise SlugUnavailableError("joes-cafe")

    @app.get("/exhausted")
    async def exhausted():
        raise AllocationExhaustedError("joes-cafe", 99)

    @app.get("/down")
    async def down():
        raise ServiceUnavailableError(details={"service": "identity", "reason": "timeout"})

    @app.post("/validate")
    async def validate(body: Body):
        return body

    @app.get("/crash")
    async def crash():
        raise RuntimeError("secret internals")

    return app


@pytest.fixture
async def error_client(error_app):
    async with AsyncClient(
        transport=ASGITransport(app=error_app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client


class TestProblemDetails:
    """Tests for exception handler responses."""

    async def test_not_found(self, error_client):
        response = await error_client.get("/missing")

        assert response.status_code == 404
        data = response.json()
        assert data["type"] == "https://docs.test/errors/not_found"
        assert data["title"] == "Not Found"
        assert data["detail"] == "Tenant not found"
        assert data["instance"] == "/missing"
        assert data["resource"] == "tenant"

    async def test_slug_unavailable_carries_slug(self, error_client):
        response = await error_client.get("/taken")

        assert response.status_code == 409
        assert response.json()["slug"] == "joes-cafe"

    async def test_exhausted_carries_attempts(self, error_client):
        response = await error_client.get("/exhausted")

        assert response.status_code == 409
        data = response.json()
        assert data["base"] == "joes-cafe"
        assert data["attempts"] == 99

    async def test_unavailable_hides_details(self, error_client):
        response = await error_client.get("/down")

        assert response.status_code == 503
        assert "reason" not in response.json()

    async def test_request_validation(self, error_client):
        response = await error_client.post("/validate", json={})

        assert response.status_code == 422
        data = response.json()
        assert data["errors"][0]["field"] == "name"

    async def test_unexpected_error_is_opaque(self, error_client):
        response = await error_client.get("/crash")

        assert response.status_code == 500
        assert "secret internals" not in response.text
