"""Audit service for recording credential changes."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from onboardkit.core.audit.models import SecurityEvent


log = structlog.get_logger()

CREDENTIAL_CHANGE = "credential_change"


@dataclass
class AuditContext:
    """Who is acting, captured once per request or CLI run.

    ``actor_id`` is ``None`` when the change comes from the operator CLI,
    which runs with service credentials rather than an operator session.
    """

    actor_id: str | None = None
    actor_email: str | None = None
    request_id: str | None = None
    source: str = "api"


class AuditService:
    """Writes security events in the caller's unit of work.

    The entry is flushed immediately, so a store failure surfaces at the
    change it belongs to and rolls back together with it.
    """

    def __init__(self, session: AsyncSession, context: AuditContext) -> None:
        self.session = session
        self.context = context

    async def log(
        self,
        event_type: str,
        severity: str,
        user_id: str | None = None,
        tenant_id: UUID | None = None,
        event_data: dict[str, Any] | None = None,
    ) -> SecurityEvent:
        """Create a security event entry."""
        entry = SecurityEvent(
            event_type=event_type,
            severity=severity,
            user_id=user_id,
            tenant_id=tenant_id,
            actor_id=self.context.actor_id,
            request_id=self.context.request_id,
            event_data=event_data or {},
        )

        self.session.add(entry)
        await self.session.flush()

        log.info(
            "security_event_recorded",
            event_type=event_type,
            user_id=user_id,
            tenant_id=str(tenant_id) if tenant_id else None,
            actor_id=self.context.actor_id,
        )
        return entry

    async def log_credential_change(
        self,
        action: str,
        tenant_id: UUID,
        owner_id: str,
        **details: Any,
    ) -> SecurityEvent:
        """Record one credential change on a tenant owner identity.

        ``details`` must never carry secret values.
        """
        return await self.log(
            event_type=CREDENTIAL_CHANGE,
            severity="high",
            user_id=owner_id,
            tenant_id=tenant_id,
            event_data={
                "action": action,
                "tenant_id": str(tenant_id),
                "changed_by": self.context.actor_id,
                "changed_by_email": self.context.actor_email,
                "source": self.context.source,
                **details,
            },
        )
