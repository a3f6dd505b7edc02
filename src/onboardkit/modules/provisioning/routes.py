"""Provisioning API routes."""

from uuid import UUID

from fastapi import status

from onboardkit.api.dependencies import Context
from onboardkit.core.auth.dependencies import Operator
from onboardkit.modules.provisioning import router
from onboardkit.modules.provisioning.schemas import (
    MarkFailedRequest,
    OnboardingRequest,
    ProvisioningOutcome,
    ProvisioningRecordResponse,
)
from onboardkit.modules.provisioning.services import OnboardingService, ProvisioningLedger


@router.post(
    "",
    response_model=ProvisioningOutcome,
    status_code=status.HTTP_201_CREATED,
    summary="Onboard a tenant",
    description="Allocates a slug for the name and submits the payload to the "
    "provisioning service. Remote errors are passed through unmodified.",
)
async def onboard_tenant(
    data: OnboardingRequest,
    ctx: Context,
    _operator: Operator,
) -> ProvisioningOutcome:
    """Run the two-phase onboarding flow."""
    outcome = await OnboardingService.from_context(ctx).onboard(data.name, data.payload)
    error = outcome.to_exception()
    if error is not None:
        raise error
    return outcome


@router.post(
    "/{record_id}/mark-failed",
    response_model=ProvisioningRecordResponse,
    summary="Mark a pending record failed",
    description="Operator repair for stuck onboarding attempts. Only pending "
    "records can be transitioned.",
)
async def mark_record_failed(
    record_id: UUID,
    data: MarkFailedRequest,
    ctx: Context,
    _operator: Operator,
) -> ProvisioningRecordResponse:
    """Transition one pending ledger record to failed."""
    record = await ProvisioningLedger.from_context(ctx).mark_failed(record_id, data.reason)
    return ProvisioningRecordResponse.model_validate(record)
