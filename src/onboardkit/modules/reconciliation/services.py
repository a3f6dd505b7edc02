"""Reconciliation sweep over tenants, the provisioning ledger and profiles.

The sweep only reads. Every section is computed independently so one
failing query is recorded in the report instead of aborting it.
"""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any, TypeVar

import structlog

from onboardkit.modules.profiles.repos import ProfileRepository
from onboardkit.modules.provisioning.models import ProvisioningStatus
from onboardkit.modules.provisioning.repos import ProvisioningRecordRepository
from onboardkit.modules.reconciliation.schemas import (
    BrokenIdentityLinkEntry,
    ProvisioningRecordEntry,
    ReconciliationReport,
    RecentTenantEntry,
    ReportSummary,
    SectionError,
    TenantEntry,
)
from onboardkit.modules.tenants.repos import TenantRepository


if TYPE_CHECKING:
    from onboardkit.core.context import ServiceContext


logger = structlog.get_logger()

T = TypeVar("T")

MISSING_STATUS = "missing"


class ReconciliationSweep:
    """Builds a ``ReconciliationReport``.

    Findings:
    - tenants still carrying a placeholder admin email
    - the latest tenants with their provisioning status
    - the latest ledger records
    - profiles with a null identity reference (broken identity links)
    - tenants with no completed ledger record (orphans)
    - pending records older than the stale threshold
    """

    def __init__(
        self,
        tenants: TenantRepository,
        ledger: ProvisioningRecordRepository,
        profiles: ProfileRepository,
        placeholder_emails: list[str],
        recent_limit: int = 10,
        stale_pending_minutes: int = 60,
    ) -> None:
        self.tenants = tenants
        self.ledger = ledger
        self.profiles = profiles
        self.placeholder_emails = placeholder_emails
        self.recent_limit = recent_limit
        self.stale_pending_minutes = stale_pending_minutes

    @classmethod
    def from_context(cls, ctx: "ServiceContext") -> "ReconciliationSweep":
        settings = ctx.settings
        return cls(
            TenantRepository(ctx.session),
            ProvisioningRecordRepository(ctx.session),
            ProfileRepository(ctx.session),
            placeholder_emails=settings.placeholder_tenant_emails,
            recent_limit=settings.report_recent_limit,
            stale_pending_minutes=settings.stale_pending_minutes,
        )

    async def run(
        self,
        now: datetime | None = None,
        include_timestamp: bool = False,
    ) -> ReconciliationReport:
        """Compute the report.

        Args:
            now: Reference time for the stale-pending threshold
            include_timestamp: Stamp the report with ``now``
        """
        now = now or datetime.now(UTC)
        errors: list[SectionError] = []

        async def section(name: str, compute: Callable[[], Awaitable[T]]) -> T | None:
            try:
                return await compute()
            except Exception as exc:
                logger.error(
                    "reconciliation_section_failed",
                    section=name,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
                errors.append(SectionError(section=name, error=f"{type(exc).__name__}: {exc}"))
                return None

        admin_email = await section("adminEmailTenants", self._admin_email_tenants)
        recent = await section("recentTenants", self._recent_tenants)
        records = await section("recentProvisioningRecords", self._recent_records)
        broken = await section("brokenIdentityLinks", self._broken_identity_links)
        orphans = await section("orphanedTenants", self._orphaned_tenants)
        stale = await section("stalePendingRecords", lambda: self._stale_pending(now))

        summary = ReportSummary(
            admin_email_tenants=_count(admin_email),
            recent_tenants=_count(recent),
            recent_provisioning_records=_count(records),
            broken_identity_links=_count(broken),
            broken_links_matching_tenant_email=(
                None if broken is None else sum(1 for link in broken if link.matches_tenant_email)
            ),
            orphaned_tenants=_count(orphans),
            stale_pending_records=_count(stale),
            section_errors=len(errors),
        )

        report = ReconciliationReport(
            admin_email_tenants=admin_email or [],
            recent_tenants=recent or [],
            recent_provisioning_records=records or [],
            broken_identity_links=broken or [],
            orphaned_tenants=orphans or [],
            stale_pending_records=stale or [],
            section_errors=errors,
            summary=summary,
            generated_at=now if include_timestamp else None,
        )

        logger.info(
            "reconciliation_completed",
            orphaned_tenants=summary.orphaned_tenants,
            broken_identity_links=summary.broken_identity_links,
            stale_pending_records=summary.stale_pending_records,
            section_errors=summary.section_errors,
        )
        return report

    async def _admin_email_tenants(self) -> list[TenantEntry]:
        tenants = await self.tenants.list_by_emails(self.placeholder_emails)
        return [TenantEntry.model_validate(tenant) for tenant in tenants]

    async def _recent_tenants(self) -> list[RecentTenantEntry]:
        tenants = await self.tenants.list_recent(self.recent_limit)
        records = await self.ledger.list_by_tenant_ids([tenant.id for tenant in tenants])

        # Records come newest first; a completed record wins over later attempts.
        statuses: dict[Any, str] = {}
        for record in records:
            current = statuses.get(record.tenant_id)
            if current is None or (
                record.status == ProvisioningStatus.COMPLETED
                and current != ProvisioningStatus.COMPLETED
            ):
                statuses[record.tenant_id] = record.status

        return [
            RecentTenantEntry(
                **TenantEntry.model_validate(tenant).model_dump(),
                provisioning_status=statuses.get(tenant.id, MISSING_STATUS),
            )
            for tenant in tenants
        ]

    async def _recent_records(self) -> list[ProvisioningRecordEntry]:
        records = await self.ledger.list_recent(self.recent_limit)
        return [ProvisioningRecordEntry.model_validate(record) for record in records]

    async def _broken_identity_links(self) -> list[BrokenIdentityLinkEntry]:
        profiles = await self.profiles.list_unlinked()
        tenant_emails = await self.tenants.list_emails()
        return [
            BrokenIdentityLinkEntry(
                profile_id=profile.id,
                email=profile.email,
                full_name=profile.full_name,
                role=profile.role,
                matches_tenant_email=profile.email.lower() in tenant_emails,
            )
            for profile in profiles
        ]

    async def _orphaned_tenants(self) -> list[TenantEntry]:
        tenants = await self.tenants.list_all()
        completed = await self.ledger.list_completed_tenant_ids()
        return [
            TenantEntry.model_validate(tenant) for tenant in tenants if tenant.id not in completed
        ]

    async def _stale_pending(self, now: datetime) -> list[ProvisioningRecordEntry]:
        cutoff = now - timedelta(minutes=self.stale_pending_minutes)
        records = await self.ledger.list_stale_pending(cutoff)
        return [ProvisioningRecordEntry.model_validate(record) for record in records]


def _count(items: list[Any] | None) -> int | None:
    return None if items is None else len(items)
