"""Pydantic schemas for credential operations."""

from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from onboardkit.core.constants import MIN_PASSWORD_LENGTH


class OwnerSource(StrEnum):
    """Where the owner identity was found."""

    TENANT_OWNER = "tenant_owner"
    PROVISIONING_LEDGER = "provisioning_ledger"
    PROFILE = "profile"
    IDENTITY_EMAIL = "identity_email"


class CredentialAction(StrEnum):
    """Credential changes an operator can make on a tenant owner."""

    UPDATE_EMAIL = "update_email"
    UPDATE_PASSWORD = "update_password"
    GENERATE_PASSWORD = "generate_password"
    RESET_PASSWORD = "reset_password"


class DeliveryResult(BaseModel):
    """Outcome of a credentials dispatch.

    ``channel_response`` is the notification channel's body, verbatim, when
    delivery failed.
    """

    delivered: bool
    channel_response: str | None = None
    error: str | None = None


class RotationResult(BaseModel):
    """Outcome of a password rotation.

    ``temporary_password`` is only filled when the email could not be
    delivered: the old password is already gone, so the operator is the
    only remaining way to hand the new one over.
    """

    tenant_id: UUID
    owner_id: str
    owner_email: str
    owner_source: OwnerSource
    delivery: DeliveryResult
    temporary_password: str | None = None


class OwnerEmailUpdate(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def email_lower(cls, v: str) -> str:
        return v.lower()


class OwnerPasswordUpdate(BaseModel):
    password: str = Field(min_length=MIN_PASSWORD_LENGTH, max_length=72)


class CredentialChangeResult(BaseModel):
    """Outcome of an operator credential change."""

    tenant_id: UUID
    owner_id: str
    owner_email: str | None = None
    owner_source: OwnerSource
    action: CredentialAction
    message: str
    recovery_link: str | None = None


class ProbeOutcome(StrEnum):
    PASSED = "passed"
    FAILED = "failed"
    REVERT_FAILED = "revert_failed"


class ProbeStep(StrEnum):
    TENANT_LOOKUP = "tenant_lookup"
    OWNER_RESOLUTION = "owner_resolution"
    IDENTITY_VERIFICATION = "identity_verification"
    MARKER_WRITE = "marker_write"
    MARKER_READBACK = "marker_readback"
    REVERT_WRITE = "revert_write"
    REVERT_READBACK = "revert_readback"


class ProbeReport(BaseModel):
    """Result of a reversible owner mutation probe.

    Attributes:
        outcome: passed, failed (state untouched or restored) or
            revert_failed (state left altered, needs manual repair)
        severity: info, error or critical
        completed_steps: Steps that finished, in order
        failed_step: The step that failed, if any
        error: Error message of the failing step
    """

    tenant_id: UUID
    outcome: ProbeOutcome
    severity: str = "info"
    owner_id: str | None = None
    owner_source: OwnerSource | None = None
    completed_steps: list[ProbeStep] = []
    failed_step: ProbeStep | None = None
    error: str | None = None
