"""Integration tests for slug endpoints."""

import pytest
from httpx import AsyncClient

from tests.factories import ProvisioningRecordFactory, TenantFactory


pytestmark = pytest.mark.integration


class TestAvailability:
    """Tests for GET /api/v1/slugs/{slug}/availability."""

    async def test_free_slug(self, operator_client: AsyncClient):
        response = await operator_client.get("/api/v1/slugs/joes-cafe/availability")

        assert response.status_code == 200
        data = response.json()
        assert data["available"] is True
        assert data["reason"] == "available"
        assert data["suggestion"] is None

    async def test_taken_slug_has_suggestion(self, operator_client: AsyncClient, db):
        db.add(TenantFactory.build(slug="joes-cafe"))
        db.add(ProvisioningRecordFactory.build(candidate_slug="joes-cafe-2"))
        await db.commit()

        response = await operator_client.get("/api/v1/slugs/joes-cafe/availability")

        data = response.json()
        assert data["available"] is False
        assert data["reason"] == "taken_by_tenant"
        assert data["suggestion"] == "joes-cafe-3"

    async def test_malformed_slug(self, operator_client: AsyncClient):
        response = await operator_client.get("/api/v1/slugs/Joes_Cafe/availability")

        assert response.status_code == 422


class TestAllocation:
    """Tests for POST /api/v1/slugs/allocations."""

    async def test_allocates_normalized_slug(self, operator_client: AsyncClient):
        response = await operator_client.post(
            "/api/v1/slugs/allocations", json={"name": "Joe's Café & Grill"}
        )

        assert response.status_code == 201
        assert response.json() == {"name": "Joe's Café & Grill", "slug": "joes-cafe-grill"}

    async def test_blank_name(self, operator_client: AsyncClient):
        response = await operator_client.post("/api/v1/slugs/allocations", json={"name": "   "})

        assert response.status_code == 422

    async def test_exhausted(self, operator_client: AsyncClient, db):
        db.add(TenantFactory.build(slug="busy"))
        for counter in range(2, 101):
            db.add(ProvisioningRecordFactory.build(candidate_slug=f"busy-{counter}"))
        await db.commit()

        response = await operator_client.post("/api/v1/slugs/allocations", json={"name": "Busy"})

        assert response.status_code == 409
        data = response.json()
        assert data["type"].endswith("/errors/allocation_exhausted")
        assert data["attempts"] == 99
