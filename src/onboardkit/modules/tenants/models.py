"""Tenant database models."""

from enum import StrEnum

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from onboardkit.core.constants import (
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_SLUG_LENGTH,
    MAX_STATUS_LENGTH,
)
from onboardkit.core.database.base import Base, TimestampMixin, UUIDMixin


class TenantStatus(StrEnum):
    """Lifecycle status of a tenant. Tenants are never deleted."""

    ACTIVE = "active"
    PROVISIONING = "provisioning"
    SUSPENDED = "suspended"
    ARCHIVED = "archived"


class Tenant(Base, UUIDMixin, TimestampMixin):
    """One onboarded restaurant account.

    Rows are created by the remote provisioning service together with the
    matching ledger entry. The unique constraint on ``slug`` is the final
    arbiter of slug uniqueness.
    """

    __tablename__ = "tenants"

    slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    email: Mapped[str | None] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=True,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        String(MAX_STATUS_LENGTH),
        default=TenantStatus.ACTIVE,
        nullable=False,
    )
    owner_id: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    timezone: Mapped[str] = mapped_column(
        String(64),
        default="UTC",
        nullable=False,
    )
    currency: Mapped[str] = mapped_column(
        String(3),
        default="USD",
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name={self.name}, slug={self.slug})>"
