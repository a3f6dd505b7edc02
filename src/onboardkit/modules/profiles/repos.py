"""Profile repository for database operations."""

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from onboardkit.modules.profiles.models import Profile


class ProfileRepository:
    """Repository for Profile database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_email(self, email: str) -> Profile | None:
        """Get the oldest profile carrying ``email`` (case-insensitive)."""
        stmt = (
            select(Profile)
            .where(func.lower(Profile.email) == email.strip().lower())
            .order_by(Profile.created_at.asc(), Profile.id.asc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_user_id(self, user_id: str) -> Profile | None:
        """Get the profile linked to an identity."""
        stmt = select(Profile).where(Profile.user_id == user_id).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_email_for_user(self, user_id: str, email: str) -> int:
        """Set the email on every profile linked to ``user_id``; returns the row count."""
        stmt = update(Profile).where(Profile.user_id == user_id).values(email=email)
        result = await self.session.execute(stmt)
        return result.rowcount or 0

    async def list_unlinked(self) -> list[Profile]:
        """List profiles whose identity reference is null."""
        stmt = (
            select(Profile)
            .where(Profile.user_id.is_(None))
            .order_by(Profile.email.asc(), Profile.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
