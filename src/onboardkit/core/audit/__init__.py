"""Audit trail for credential changes."""

from onboardkit.core.audit.models import SecurityEvent
from onboardkit.core.audit.service import AuditContext, AuditService


__all__ = [
    "AuditContext",
    "AuditService",
    "SecurityEvent",
]
