"""Integration tests for the reconciliation endpoint."""

import pytest
from httpx import AsyncClient

from onboardkit.modules.provisioning.models import ProvisioningStatus
from tests.factories import ProvisioningRecordFactory, TenantFactory


pytestmark = pytest.mark.integration


async def test_report(operator_client: AsyncClient, db):
    """GET /api/v1/reconciliation/report lists orphans with camelCase keys."""
    linked = TenantFactory.build(slug="linked-cafe")
    orphan = TenantFactory.build(slug="orphan-cafe")
    db.add_all([linked, orphan])
    await db.flush()
    db.add(
        ProvisioningRecordFactory.build(
            tenant_id=linked.id,
            candidate_slug="linked-cafe",
            status=ProvisioningStatus.COMPLETED.value,
        )
    )
    await db.commit()

    response = await operator_client.get("/api/v1/reconciliation/report")

    assert response.status_code == 200
    data = response.json()
    assert [t["slug"] for t in data["orphanedTenants"]] == ["orphan-cafe"]
    assert data["summary"]["orphanedTenants"] == 1
    assert data["summary"]["sectionErrors"] == 0
    assert data["generatedAt"] is not None


async def test_report_on_empty_store(operator_client: AsyncClient):
    response = await operator_client.get("/api/v1/reconciliation/report")

    data = response.json()
    assert data["orphanedTenants"] == []
    # The operator's own profile is linked, so no broken links
    assert data["brokenIdentityLinks"] == []
