"""Credential API routes."""

from uuid import UUID

from fastapi import Request

from onboardkit.api.dependencies import Context
from onboardkit.core.audit import AuditContext
from onboardkit.core.auth import IdentityUser
from onboardkit.core.auth.dependencies import Operator
from onboardkit.core.errors import RevertFailedError
from onboardkit.modules.credentials import router
from onboardkit.modules.credentials.schemas import (
    CredentialChangeResult,
    OwnerEmailUpdate,
    OwnerPasswordUpdate,
    ProbeOutcome,
    ProbeReport,
    RotationResult,
)
from onboardkit.modules.credentials.services import CredentialIssuer


def _issuer(ctx: Context, request: Request, operator: IdentityUser) -> CredentialIssuer:
    actor = AuditContext(
        actor_id=operator.id,
        actor_email=operator.email,
        request_id=getattr(request.state, "request_id", None),
    )
    return CredentialIssuer.from_context(ctx, actor=actor)


@router.post(
    "/{tenant_id}/rotate",
    response_model=RotationResult,
    summary="Rotate the owner password",
    description="Sets a new temporary password for the tenant owner and emails it. "
    "The password is only returned when the email could not be delivered.",
)
async def rotate_owner_password(
    tenant_id: UUID,
    request: Request,
    ctx: Context,
    operator: Operator,
) -> RotationResult:
    """Rotate and dispatch temporary owner credentials."""
    return await _issuer(ctx, request, operator).rotate_owner_password(tenant_id)


@router.post(
    "/{tenant_id}/email",
    response_model=CredentialChangeResult,
    summary="Change the owner login email",
)
async def update_owner_email(
    tenant_id: UUID,
    data: OwnerEmailUpdate,
    request: Request,
    ctx: Context,
    operator: Operator,
) -> CredentialChangeResult:
    """Change the owner email in the identity service, profile and tenant."""
    return await _issuer(ctx, request, operator).update_owner_email(tenant_id, data.email)


@router.post(
    "/{tenant_id}/password",
    response_model=CredentialChangeResult,
    summary="Set the owner password",
)
async def update_owner_password(
    tenant_id: UUID,
    data: OwnerPasswordUpdate,
    request: Request,
    ctx: Context,
    operator: Operator,
) -> CredentialChangeResult:
    """Set an operator-chosen owner password."""
    return await _issuer(ctx, request, operator).update_owner_password(tenant_id, data.password)


@router.post(
    "/{tenant_id}/reset",
    response_model=CredentialChangeResult,
    summary="Generate an owner password recovery link",
)
async def send_password_reset(
    tenant_id: UUID,
    request: Request,
    ctx: Context,
    operator: Operator,
) -> CredentialChangeResult:
    """Generate a recovery link for the owner."""
    return await _issuer(ctx, request, operator).send_password_reset(tenant_id)


@router.post(
    "/{tenant_id}/probe",
    response_model=ProbeReport,
    summary="Probe owner identity writes",
    description="Writes a temporary marker email to the owner identity and restores "
    "the original. A failed restore answers 500 with error code revert_failed.",
)
async def probe_owner_mutation(
    tenant_id: UUID,
    request: Request,
    ctx: Context,
    operator: Operator,
) -> ProbeReport:
    """Run the reversible mutation probe."""
    report = await _issuer(ctx, request, operator).probe_owner_mutation(tenant_id)
    if report.outcome == ProbeOutcome.REVERT_FAILED:
        raise RevertFailedError(details=report.model_dump(mode="json"))
    return report
