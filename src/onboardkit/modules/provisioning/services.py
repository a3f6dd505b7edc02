"""Provisioning orchestration and ledger repair."""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from uuid import UUID

import structlog

from onboardkit.core.errors import (
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from onboardkit.modules.provisioning.client import ProvisioningServiceClient
from onboardkit.modules.provisioning.models import ProvisioningRecord, ProvisioningStatus
from onboardkit.modules.provisioning.repos import ProvisioningRecordRepository
from onboardkit.modules.provisioning.schemas import (
    OnboardingPayload,
    OutcomeStatus,
    ProvisioningOutcome,
)
from onboardkit.modules.slugs.services import SlugAllocator, SlugAvailabilityChecker


if TYPE_CHECKING:
    from onboardkit.core.context import ServiceContext


logger = structlog.get_logger()


class ProvisioningOrchestrator:
    """Submits one fully assembled onboarding payload.

    The remote service creates the tenant and completes the ledger record;
    this class only validates, submits once and reports. It never retries:
    a failed attempt may have partially landed, so any retry has to go back
    through slug allocation.
    """

    def __init__(self, client: ProvisioningServiceClient) -> None:
        self.client = client

    async def submit(
        self, payload: OnboardingPayload | Mapping[str, Any]
    ) -> ProvisioningOutcome:
        """Validate and submit a payload.

        Raises:
            ValidationError: If the payload is incomplete or malformed; no
                request is sent in that case
        """
        payload = OnboardingPayload.parse(payload)
        slug = payload.basics.slug
        if slug is None:
            raise ValidationError(
                "Payload validation failed",
                errors=[{"field": "basics.slug", "message": "Field required"}],
            )

        logger.info(
            "provisioning_submitted",
            slug=slug,
            idempotency_key=payload.idempotency_key,
        )

        try:
            outcome = await self.client.create_tenant(payload.to_wire(), slug=slug)
        except ServiceUnavailableError as exc:
            logger.warning("provisioning_unavailable", slug=slug, details=exc.details)
            return ProvisioningOutcome(
                status=OutcomeStatus.UNAVAILABLE,
                slug=slug,
                message=exc.message,
            )

        if outcome.succeeded:
            logger.info(
                "provisioning_succeeded",
                slug=outcome.slug,
                tenant_id=outcome.tenant_id,
            )
        else:
            logger.warning(
                "provisioning_rejected",
                slug=slug,
                status=outcome.status,
                error_code=outcome.error_code,
                remote_status=outcome.remote_status,
            )
        return outcome


class OnboardingService:
    """Two-phase onboarding: allocate a slug, then submit.

    When the remote service reports the slug as taken (another onboarding
    claimed it between allocation and submission) a fresh slug is allocated,
    which re-checks availability, and the payload is resubmitted.
    """

    def __init__(
        self,
        allocator: SlugAllocator,
        orchestrator: ProvisioningOrchestrator,
        slug_retries: int = 3,
    ) -> None:
        if slug_retries < 1:
            raise ValueError("slug_retries must be at least 1")
        self.allocator = allocator
        self.orchestrator = orchestrator
        self.slug_retries = slug_retries

    @classmethod
    def from_context(cls, ctx: "ServiceContext") -> "OnboardingService":
        return cls(
            SlugAllocator(SlugAvailabilityChecker.from_context(ctx)),
            ProvisioningOrchestrator(ctx.provisioning),
            slug_retries=ctx.settings.provisioning_slug_retries,
        )

    async def onboard(
        self, name: str, payload: OnboardingPayload | Mapping[str, Any]
    ) -> ProvisioningOutcome:
        """Allocate a slug for ``name`` and provision the tenant.

        Returns the last outcome: succeeded, or the first non-recoverable
        failure, or ``slug_taken`` once the retry bound is spent.

        Raises:
            ValidationError: If ``name`` is blank or the payload is invalid
            ServiceUnavailableError: If slug allocation cannot reach the store
            AllocationExhaustedError: If no free slug exists for ``name``
        """
        payload = OnboardingPayload.parse(payload)

        rejected: set[str] = set()
        attempt = 1
        while True:
            slug = await self.allocator.allocate(name, exclude=rejected)
            outcome = await self.orchestrator.submit(payload.with_slug(slug))
            if outcome.status != OutcomeStatus.SLUG_TAKEN or attempt >= self.slug_retries:
                return outcome
            logger.info("provisioning_slug_conflict", slug=slug, attempt=attempt)
            rejected.add(slug)
            attempt += 1


class ProvisioningLedger:
    """Operator repairs on the provisioning ledger.

    Nothing here runs automatically; stuck records are only listed by the
    reconciliation sweep until an operator acts on them.
    """

    def __init__(self, repo: ProvisioningRecordRepository) -> None:
        self.repo = repo

    @classmethod
    def from_context(cls, ctx: "ServiceContext") -> "ProvisioningLedger":
        return cls(ProvisioningRecordRepository(ctx.session))

    async def mark_failed(self, record_id: UUID, reason: str) -> ProvisioningRecord:
        """Transition one pending record to failed.

        The record keeps its candidate slug, so the slug stays claimed.

        Raises:
            NotFoundError: If the record does not exist
            ConflictError: If the record is not pending
        """
        record = await self.repo.get(record_id)
        if record is None:
            raise NotFoundError(
                "Provisioning record not found",
                resource="provisioning_record",
                resource_id=str(record_id),
            )

        if record.status != ProvisioningStatus.PENDING:
            raise ConflictError(
                "Only pending records can be marked failed",
                error_code="record_not_pending",
                details={"record_id": str(record_id), "status": record.status},
            )

        record.status = ProvisioningStatus.FAILED
        record.error_message = reason
        record = await self.repo.update(record)

        logger.info(
            "provisioning_record_marked_failed",
            record_id=str(record_id),
            slug=record.candidate_slug,
        )
        return record
