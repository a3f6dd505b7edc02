"""Tenant repository for database operations."""

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from onboardkit.modules.tenants.models import Tenant


class TenantRepository:
    """Repository for Tenant database operations.

    Tenants are written by the remote provisioning service; this service
    only reads them, apart from operator repairs of the owner link.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def exists_by_slug(self, slug: str) -> bool:
        """Check whether any tenant holds ``slug``."""
        stmt = select(func.count()).select_from(Tenant).where(Tenant.slug == slug)
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0

    async def get_by_id(self, tenant_id: UUID) -> Tenant | None:
        """Get a tenant by ID."""
        result = await self.session.execute(select(Tenant).where(Tenant.id == tenant_id))
        return result.scalar_one_or_none()

    async def get_by_slug(self, slug: str) -> Tenant | None:
        """Get a tenant by slug."""
        result = await self.session.execute(select(Tenant).where(Tenant.slug == slug))
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Tenant]:
        """List every tenant, oldest first."""
        stmt = select(Tenant).order_by(Tenant.created_at.asc(), Tenant.slug.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_recent(self, limit: int) -> list[Tenant]:
        """List the most recently created tenants, newest first."""
        stmt = select(Tenant).order_by(Tenant.created_at.desc(), Tenant.slug.asc()).limit(limit)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_by_emails(self, emails: list[str]) -> list[Tenant]:
        """List tenants whose contact email is one of ``emails`` (case-insensitive)."""
        if not emails:
            return []
        wanted = [email.lower() for email in emails]
        stmt = (
            select(Tenant)
            .where(func.lower(Tenant.email).in_(wanted))
            .order_by(Tenant.created_at.asc(), Tenant.slug.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def set_owner(self, tenant: Tenant, owner_id: str) -> Tenant:
        """Link ``tenant`` to its owner identity."""
        tenant.owner_id = owner_id
        await self.session.flush()
        return tenant

    async def set_email(self, tenant: Tenant, email: str) -> Tenant:
        """Change the tenant contact email."""
        tenant.email = email
        await self.session.flush()
        return tenant

    async def list_emails(self) -> set[str]:
        """Return every tenant contact email, lowercased."""
        stmt = select(func.lower(Tenant.email)).where(Tenant.email.is_not(None))
        result = await self.session.execute(stmt)
        return {email for email in result.scalars().all() if email}
