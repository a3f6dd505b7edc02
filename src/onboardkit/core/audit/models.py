"""Security event model.

One row per credential change made through tenant management: who changed
which owner identity, for which tenant, and how.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from onboardkit.core.constants import MAX_NAME_LENGTH, MAX_STATUS_LENGTH
from onboardkit.core.database.base import Base, UUIDMixin


class SecurityEvent(Base, UUIDMixin):
    """Audit entry for a security-relevant action.

    Attributes:
        event_type: Kind of event (``credential_change``)
        severity: ``info``, ``high`` or ``critical``
        user_id: The identity that was changed
        tenant_id: The tenant the identity owns
        actor_id: The operator identity that made the change, if known
        request_id: Correlation ID of the API request or CLI run
        event_data: Action name and non-secret details
        created_at: When the change was made
    """

    __tablename__ = "security_events"

    event_type: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        index=True,
    )
    severity: Mapped[str] = mapped_column(
        String(MAX_STATUS_LENGTH),
        nullable=False,
    )
    user_id: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
        index=True,
    )
    tenant_id: Mapped[UUID | None] = mapped_column(
        nullable=True,
        index=True,
    )
    actor_id: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    request_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
    )
    event_data: Mapped[dict[str, Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=dict,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<SecurityEvent(id={self.id}, event_type={self.event_type}, "
            f"user_id={self.user_id})>"
        )
