"""Integration tests for provisioning endpoints."""

from datetime import UTC, datetime
from uuid import uuid4

import httpx
import pytest
from httpx import AsyncClient
from sqlalchemy import select

from onboardkit.modules.provisioning.models import ProvisioningRecord, ProvisioningStatus
from tests.factories import ProvisioningRecordFactory, TenantFactory
from tests.fakes import error_response


pytestmark = pytest.mark.integration


def onboarding_body(name: str = "Joe's Cafe") -> dict:
    return {
        "name": name,
        "payload": {
            "basics": {"name": name, "timezone": "America/New_York"},
            "owner": {"email": "owner@joes-cafe.com", "name": "Joe"},
            "seed": {"seatingPreset": "standard", "enablePacing": True},
        },
    }


class TestOnboarding:
    """Tests for POST /api/v1/provisioning."""

    async def test_onboards_with_allocated_slug(
        self, operator_client: AsyncClient, db, provisioning_service
    ):
        db.add(TenantFactory.build(slug="joes-cafe"))
        await db.commit()

        response = await operator_client.post("/api/v1/provisioning", json=onboarding_body())

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "succeeded"
        assert data["slug"] == "joes-cafe-2"
        sent = provisioning_service.requests[0]
        assert sent["basics"]["slug"] == "joes-cafe-2"
        assert sent["seed"]["enablePacing"] is True
        assert sent["idempotencyKey"]

    async def test_remote_slug_conflict_reallocates(
        self, operator_client: AsyncClient, provisioning_service
    ):
        provisioning_service.queue(error_response(409, "SLUG_TAKEN", "Slug taken"))

        response = await operator_client.post("/api/v1/provisioning", json=onboarding_body())

        assert response.status_code == 201
        slugs = [r["basics"]["slug"] for r in provisioning_service.requests]
        assert slugs == ["joes-cafe", "joes-cafe-2"]
        assert response.json()["slug"] == "joes-cafe-2"

    async def test_remote_rejection_passed_through(
        self, operator_client: AsyncClient, provisioning_service
    ):
        provisioning_service.queue(
            error_response(
                400, "OWNER_EXISTS", "Owner email already registered", hint="Use another email"
            )
        )

        response = await operator_client.post("/api/v1/provisioning", json=onboarding_body())

        assert response.status_code == 422
        data = response.json()
        assert data["detail"] == "Owner email already registered"
        assert data["type"].endswith("/errors/OWNER_EXISTS")
        assert data["hint"] == "Use another email"

    async def test_remote_unreachable(self, operator_client: AsyncClient, provisioning_service):
        provisioning_service.queue(httpx.ConnectError("connection refused"))

        response = await operator_client.post("/api/v1/provisioning", json=onboarding_body())

        assert response.status_code == 503

    async def test_invalid_payload(self, operator_client: AsyncClient, provisioning_service):
        body = onboarding_body()
        body["payload"]["owner"]["email"] = "nope"

        response = await operator_client.post("/api/v1/provisioning", json=body)

        assert response.status_code == 422
        assert provisioning_service.requests == []


class TestMarkFailed:
    """Tests for POST /api/v1/provisioning/{record_id}/mark-failed."""

    async def test_marks_pending_record(self, operator_client: AsyncClient, db):
        record = ProvisioningRecordFactory.build(
            candidate_slug="stuck-cafe", created_at=datetime(2026, 1, 1, tzinfo=UTC)
        )
        db.add(record)
        await db.commit()

        response = await operator_client.post(
            f"/api/v1/provisioning/{record.id}/mark-failed",
            json={"reason": "stuck since January"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failed"
        assert data["error_message"] == "stuck since January"
        assert data["candidate_slug"] == "stuck-cafe"

        stored = (
            await db.execute(select(ProvisioningRecord).where(ProvisioningRecord.id == record.id))
        ).scalar_one()
        await db.refresh(stored)
        assert stored.status == ProvisioningStatus.FAILED

    async def test_completed_record_conflict(self, operator_client: AsyncClient, db):
        record = ProvisioningRecordFactory.build(status=ProvisioningStatus.COMPLETED.value)
        db.add(record)
        await db.commit()

        response = await operator_client.post(
            f"/api/v1/provisioning/{record.id}/mark-failed", json={"reason": "oops"}
        )

        assert response.status_code == 409
        assert response.json()["type"].endswith("/errors/record_not_pending")

    async def test_unknown_record(self, operator_client: AsyncClient):
        response = await operator_client.post(
            f"/api/v1/provisioning/{uuid4()}/mark-failed", json={"reason": "oops"}
        )

        assert response.status_code == 404

    async def test_reason_required(self, operator_client: AsyncClient):
        response = await operator_client.post(
            f"/api/v1/provisioning/{uuid4()}/mark-failed", json={"reason": ""}
        )

        assert response.status_code == 422
