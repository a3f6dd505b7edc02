"""Profile database models."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from onboardkit.core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH, MAX_ROLE_LENGTH
from onboardkit.core.database.base import Base, TimestampMixin, UUIDMixin


class Profile(Base, UUIDMixin, TimestampMixin):
    """Maps a login identity to its display email and role.

    A profile meant to represent a tenant owner must carry a non-null
    ``user_id``; a null one is a broken identity link that only an
    operator can repair.
    """

    __tablename__ = "profiles"

    user_id: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
        index=True,
    )
    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        index=True,
    )
    full_name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    role: Mapped[str | None] = mapped_column(
        String(MAX_ROLE_LENGTH),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, email={self.email}, user_id={self.user_id})>"
