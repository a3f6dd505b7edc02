"""Provisioning ledger repository."""

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from onboardkit.modules.provisioning.models import ProvisioningRecord, ProvisioningStatus


class ProvisioningRecordRepository:
    """Repository for ProvisioningRecord database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def exists_by_candidate_slug(self, slug: str) -> bool:
        """Check whether any ledger record, in any status, claims ``slug``."""
        stmt = (
            select(func.count())
            .select_from(ProvisioningRecord)
            .where(ProvisioningRecord.candidate_slug == slug)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0

    async def get(self, record_id: UUID) -> ProvisioningRecord | None:
        """Get a ledger record by primary key."""
        stmt = select(ProvisioningRecord).where(ProvisioningRecord.id == record_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_completed_for_tenant(self, tenant_id: UUID) -> ProvisioningRecord | None:
        """Get the completed record for a tenant, if any."""
        stmt = (
            select(ProvisioningRecord)
            .where(
                ProvisioningRecord.tenant_id == tenant_id,
                ProvisioningRecord.status == ProvisioningStatus.COMPLETED,
            )
            .order_by(ProvisioningRecord.created_at.asc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_completed_tenant_ids(self) -> set[UUID]:
        """Return the tenant references of every completed record."""
        stmt = select(ProvisioningRecord.tenant_id).where(
            ProvisioningRecord.status == ProvisioningStatus.COMPLETED,
            ProvisioningRecord.tenant_id.is_not(None),
        )
        result = await self.session.execute(stmt)
        return {tenant_id for tenant_id in result.scalars().all() if tenant_id is not None}

    async def list_by_tenant_ids(self, tenant_ids: list[UUID]) -> list[ProvisioningRecord]:
        """List records referencing any of ``tenant_ids``, newest first."""
        if not tenant_ids:
            return []
        stmt = (
            select(ProvisioningRecord)
            .where(ProvisioningRecord.tenant_id.in_(tenant_ids))
            .order_by(ProvisioningRecord.created_at.desc(), ProvisioningRecord.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_recent(self, limit: int) -> list[ProvisioningRecord]:
        """List the most recent records, newest first."""
        stmt = (
            select(ProvisioningRecord)
            .order_by(ProvisioningRecord.created_at.desc(), ProvisioningRecord.id.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_stale_pending(self, older_than: datetime) -> list[ProvisioningRecord]:
        """List pending records created before ``older_than``, oldest first."""
        stmt = (
            select(ProvisioningRecord)
            .where(
                ProvisioningRecord.status == ProvisioningStatus.PENDING,
                ProvisioningRecord.created_at < older_than,
            )
            .order_by(ProvisioningRecord.created_at.asc(), ProvisioningRecord.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, record: ProvisioningRecord) -> ProvisioningRecord:
        """Flush changes made to ``record``."""
        await self.session.flush()
        await self.session.refresh(record)
        return record
