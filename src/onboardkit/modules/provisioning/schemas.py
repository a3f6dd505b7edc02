"""Pydantic schemas for tenant onboarding.

The payload mirrors the remote provisioning service's JSON contract, so
every model serializes with camelCase aliases while Python code uses
snake_case names.
"""

from collections.abc import Mapping
from datetime import datetime
from enum import StrEnum
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from onboardkit.core.constants import MAX_NAME_LENGTH, MAX_SLUG_LENGTH
from onboardkit.core.errors import (
    AppException,
    RemoteServiceError,
    ServiceUnavailableError,
    SlugUnavailableError,
    ValidationError,
)
from onboardkit.core.utils import is_valid_slug


class CamelModel(BaseModel):
    """Base model serializing to the remote service's camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ============================================================
# Onboarding Payload
# ============================================================


class Address(CamelModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None


class BusinessBasics(CamelModel):
    """Business profile of the restaurant being onboarded."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    slug: str | None = Field(default=None, max_length=MAX_SLUG_LENGTH)
    timezone: str = "UTC"
    currency: str = Field(default="USD", min_length=3, max_length=3)
    description: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    website: str | None = None
    address: Address | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        """Reject names made only of whitespace."""
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v

    @field_validator("slug")
    @classmethod
    def slug_is_normalized(cls, v: str | None) -> str | None:
        """Only accept slugs that are already in canonical form."""
        if v is not None and not is_valid_slug(v):
            raise ValueError(
                "Slug must be 3-50 lowercase letters, digits or single hyphens"
            )
        return v

    @field_validator("currency")
    @classmethod
    def currency_upper(cls, v: str) -> str:
        return v.upper()


class OwnerDetails(CamelModel):
    """Identity fields for the tenant owner account."""

    email: EmailStr
    name: str | None = Field(default=None, max_length=MAX_NAME_LENGTH)
    send_invite: bool = True

    @field_validator("email")
    @classmethod
    def email_lower(cls, v: str) -> str:
        return v.strip().lower()


class AccessSettings(CamelModel):
    mode: Literal["standard", "restricted"] = "standard"


class SeedSettings(CamelModel):
    """Feature flags applied to the new tenant's initial data."""

    seating_preset: str = "standard"
    enable_pacing: bool = False
    enable_deposit_policy: bool = False


class BillingSelection(CamelModel):
    create_subscription: bool = False
    plan: str = "basic"


class SmsSettings(CamelModel):
    start_registration: bool = False


class OnboardingPayload(CamelModel):
    """A fully assembled tenant onboarding request.

    ``basics.slug`` may be left empty on a draft handed to the onboarding
    flow, which fills it from the allocator; the orchestrator refuses to
    submit a payload without one.
    """

    kind: Literal["tenant_onboarding"] = "tenant_onboarding"
    basics: BusinessBasics
    owner: OwnerDetails
    access: AccessSettings = Field(default_factory=AccessSettings)
    seed: SeedSettings = Field(default_factory=SeedSettings)
    billing: BillingSelection = Field(default_factory=BillingSelection)
    sms: SmsSettings = Field(default_factory=SmsSettings)
    idempotency_key: str = Field(default_factory=lambda: str(uuid4()), min_length=1)

    @classmethod
    def parse(cls, data: "OnboardingPayload | Mapping[str, Any]") -> "OnboardingPayload":
        """Validate raw input into a payload.

        Raises:
            ValidationError: With dotted field paths (``basics.slug``, ...)
        """
        if isinstance(data, cls):
            return data
        try:
            return cls.model_validate(data)
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc) from exc

    def with_slug(self, slug: str) -> "OnboardingPayload":
        """Return a copy carrying ``slug`` as the requested tenant slug."""
        return self.model_copy(
            update={"basics": self.basics.model_copy(update={"slug": slug})}
        )

    def to_wire(self) -> dict[str, Any]:
        """Serialize to the remote service's request body."""
        return self.model_dump(mode="json", by_alias=True, exclude={"kind"})


# ============================================================
# Remote Envelope
# ============================================================


class ProvisionedTenant(CamelModel):
    tenant_id: str
    owner_id: str | None = None
    slug: str
    primary_url: str | None = None
    message: str | None = None


class RemoteErrorBody(CamelModel):
    code: str | None = None
    message: str | None = None
    hint: str | None = None


class ProvisioningEnvelope(CamelModel):
    """Response envelope of the provisioning service."""

    success: bool = False
    data: ProvisionedTenant | None = None
    error: RemoteErrorBody | None = None


# ============================================================
# Outcome
# ============================================================


class OutcomeStatus(StrEnum):
    SUCCEEDED = "succeeded"
    SLUG_TAKEN = "slug_taken"
    REJECTED = "rejected"
    UNAVAILABLE = "unavailable"


class ProvisioningOutcome(BaseModel):
    """Structured result of one provisioning submission.

    Attributes:
        status: succeeded, slug_taken (allocate again), rejected (remote
            error passed through) or unavailable (never assume success)
        slug: The slug that was submitted
        tenant_id: Tenant reference on success
        owner_id: Owner identity reference on success
        primary_url: Tenant URL on success
        message: Remote message, verbatim
        error_code: Remote machine-readable code, verbatim
        hint: Remote hint, verbatim
        remote_status: HTTP status of the remote answer, when there was one
    """

    status: OutcomeStatus
    slug: str
    tenant_id: str | None = None
    owner_id: str | None = None
    primary_url: str | None = None
    message: str | None = None
    error_code: str | None = None
    hint: str | None = None
    remote_status: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.SUCCEEDED

    def to_exception(self) -> AppException | None:
        """Map a failed outcome to the matching application error."""
        if self.status == OutcomeStatus.SUCCEEDED:
            return None
        if self.status == OutcomeStatus.SLUG_TAKEN:
            return SlugUnavailableError(self.slug, message=self.message)
        if self.status == OutcomeStatus.UNAVAILABLE:
            return ServiceUnavailableError(details={"service": "provisioning"})

        if self.remote_status in (400, 422):
            status_code = 422
        elif self.remote_status == 409:
            status_code = 409
        else:
            status_code = 502
        return RemoteServiceError(
            message=self.message,
            error_code=self.error_code,
            hint=self.hint,
            status_code=status_code,
        )


# ============================================================
# Ledger Schemas
# ============================================================


class MarkFailedRequest(BaseModel):
    """Operator request to close out a stuck pending record."""

    reason: str = Field(..., min_length=1, max_length=1000)


class ProvisioningRecordResponse(BaseModel):
    """Ledger record as exposed to operators."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    tenant_id: UUID | None
    user_id: str | None
    restaurant_name: str | None
    candidate_slug: str
    status: str
    error_message: str | None
    created_at: datetime
    updated_at: datetime


class OnboardingRequest(BaseModel):
    """HTTP body for the two-phase onboarding flow.

    ``name`` feeds the allocator; the payload's own slug is ignored.
    """

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    payload: OnboardingPayload
