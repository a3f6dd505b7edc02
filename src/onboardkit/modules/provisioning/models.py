"""Provisioning ledger models."""

from enum import StrEnum
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from onboardkit.core.constants import (
    MAX_IDEMPOTENCY_KEY_LENGTH,
    MAX_NAME_LENGTH,
    MAX_SLUG_LENGTH,
    MAX_STATUS_LENGTH,
)
from onboardkit.core.database.base import Base, TimestampMixin, UUIDMixin


class ProvisioningStatus(StrEnum):
    """Status of one onboarding attempt."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class ProvisioningRecord(Base, UUIDMixin, TimestampMixin):
    """Outcome of one onboarding attempt.

    A record claims its ``candidate_slug`` from the moment it is written,
    whatever its status. Records are never hard-deleted; at most one
    ``completed`` record exists per tenant.
    """

    __tablename__ = "auto_provisioning"
    __table_args__ = (
        # At most one completed record per tenant
        Index(
            "uq_auto_provisioning_completed_tenant",
            "tenant_id",
            unique=True,
            postgresql_where=text("status = 'completed'"),
            sqlite_where=text("status = 'completed'"),
        ),
    )

    tenant_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("tenants.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    user_id: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    restaurant_name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    candidate_slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        nullable=False,
        index=True,
    )
    status: Mapped[str] = mapped_column(
        String(MAX_STATUS_LENGTH),
        default=ProvisioningStatus.PENDING,
        nullable=False,
        index=True,
    )
    error_message: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    idempotency_key: Mapped[str | None] = mapped_column(
        String(MAX_IDEMPOTENCY_KEY_LENGTH),
        nullable=True,
        unique=True,
    )

    def __repr__(self) -> str:
        return (
            f"<ProvisioningRecord(id={self.id}, slug={self.candidate_slug}, "
            f"status={self.status})>"
        )
