"""Integration tests for operator authentication."""

import pytest
from httpx import AsyncClient

from tests.factories import ProfileFactory


pytestmark = pytest.mark.integration


class TestOperatorAuth:
    """Every module route requires an operator session."""

    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/api/v1/reconciliation/report")

        assert response.status_code == 401
        assert response.json()["type"].endswith("/errors/missing_token")

    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/reconciliation/report",
            headers={"Authorization": "Bearer not-a-session"},
        )

        assert response.status_code == 401

    async def test_non_operator_forbidden(self, client: AsyncClient, db, identity_service):
        identity_service.add_user("owner-7", "owner7@example.com")
        identity_service.sessions["owner-token"] = "owner-7"
        db.add(ProfileFactory.build(user_id="owner-7", role="tenant_owner"))
        await db.commit()

        response = await client.get(
            "/api/v1/reconciliation/report",
            headers={"Authorization": "Bearer owner-token"},
        )

        assert response.status_code == 403
        assert response.json()["type"].endswith("/errors/not_operator")

    async def test_session_without_profile_forbidden(self, client: AsyncClient, identity_service):
        identity_service.add_user("ghost", "ghost@example.com")
        identity_service.sessions["ghost-token"] = "ghost"

        response = await client.get(
            "/api/v1/slugs/joes-cafe/availability",
            headers={"Authorization": "Bearer ghost-token"},
        )

        assert response.status_code == 403

    async def test_operator_allowed(self, operator_client: AsyncClient):
        response = await operator_client.get("/api/v1/reconciliation/report")

        assert response.status_code == 200
        assert response.headers["X-Request-ID"]

    async def test_request_id_is_echoed(self, operator_client: AsyncClient):
        response = await operator_client.get(
            "/api/v1/reconciliation/report",
            headers={"X-Request-ID": "req-123"},
        )

        assert response.headers["X-Request-ID"] == "req-123"
