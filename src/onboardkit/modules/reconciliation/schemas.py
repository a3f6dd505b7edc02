"""Reconciliation report schemas.

Reports serialize with camelCase keys (``orphanedTenants``, ...) so they
can be compared with reports produced by earlier tooling.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ReportModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class TenantEntry(ReportModel):
    id: UUID
    slug: str
    name: str
    email: str | None
    status: str
    created_at: datetime


class RecentTenantEntry(TenantEntry):
    """A recent tenant with its provisioning status side by side.

    ``provisioning_status`` is ``missing`` when no ledger record references
    the tenant.
    """

    provisioning_status: str


class ProvisioningRecordEntry(ReportModel):
    id: UUID
    tenant_id: UUID | None
    user_id: str | None
    restaurant_name: str | None
    candidate_slug: str
    status: str
    created_at: datetime


class BrokenIdentityLinkEntry(ReportModel):
    """A profile without an identity reference."""

    profile_id: UUID
    email: str
    full_name: str | None
    role: str | None
    matches_tenant_email: bool


class SectionError(ReportModel):
    section: str
    error: str


class ReportSummary(ReportModel):
    """Counts per section; ``None`` where the section could not be computed."""

    admin_email_tenants: int | None = None
    recent_tenants: int | None = None
    recent_provisioning_records: int | None = None
    broken_identity_links: int | None = None
    broken_links_matching_tenant_email: int | None = None
    orphaned_tenants: int | None = None
    stale_pending_records: int | None = None
    section_errors: int = 0


class ReconciliationReport(ReportModel):
    """Read-only integrity report over tenants, ledger and profiles.

    ``generated_at`` is only set on request and is ignored when comparing
    reports, so two sweeps over unchanged data compare equal.
    """

    admin_email_tenants: list[TenantEntry] = []
    recent_tenants: list[RecentTenantEntry] = []
    recent_provisioning_records: list[ProvisioningRecordEntry] = []
    broken_identity_links: list[BrokenIdentityLinkEntry] = []
    orphaned_tenants: list[TenantEntry] = []
    stale_pending_records: list[ProvisioningRecordEntry] = []
    section_errors: list[SectionError] = []
    summary: ReportSummary = ReportSummary()
    generated_at: datetime | None = None

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ReconciliationReport):
            return NotImplemented
        return self.findings() == other.findings()

    def findings(self) -> dict[str, Any]:
        """The report content without its generation timestamp."""
        return self.model_dump(exclude={"generated_at"})

    def to_json_dict(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=False)
