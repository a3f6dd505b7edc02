"""Owner credential management and the reversible mutation probe.

Every credential change on an owner identity is recorded as a security
event in the same unit of work as the local repairs it triggers.
"""

import secrets
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

import structlog
from pydantic import ValidationError as PydanticValidationError

from onboardkit.core.audit import AuditContext, AuditService
from onboardkit.core.auth import IdentityServiceClient, IdentityUser, generate_temporary_password
from onboardkit.core.constants import PROBE_MARKER_DOMAIN
from onboardkit.core.errors import (
    AppException,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RevertFailedError,
    ServiceUnavailableError,
    ValidationError,
)
from onboardkit.modules.credentials.notifier import NotificationClient
from onboardkit.modules.credentials.schemas import (
    CredentialAction,
    CredentialChangeResult,
    DeliveryResult,
    OwnerEmailUpdate,
    OwnerPasswordUpdate,
    OwnerSource,
    ProbeOutcome,
    ProbeReport,
    ProbeStep,
    RotationResult,
)
from onboardkit.modules.profiles.repos import ProfileRepository
from onboardkit.modules.provisioning.repos import ProvisioningRecordRepository
from onboardkit.modules.tenants.models import Tenant
from onboardkit.modules.tenants.repos import TenantRepository


if TYPE_CHECKING:
    from onboardkit.core.context import ServiceContext


logger = structlog.get_logger()


class ProbeCheckError(AppException):
    """A probe read-back did not match what was written."""

    message = "Probe verification failed"
    error_code = "probe_check_failed"


@dataclass
class ResolvedOwner:
    user: IdentityUser
    source: OwnerSource


@asynccontextmanager
async def reversible_mutation(
    apply: Callable[[], Awaitable[object]],
    revert: Callable[[], Awaitable[object]],
    label: str,
) -> AsyncIterator[None]:
    """Apply a mutation and always attempt to revert it on exit.

    The revert runs on every exit path, including a failure of ``apply``
    itself. A failing revert raises ``RevertFailedError`` and takes
    precedence over whatever error was already propagating.
    """
    try:
        await apply()
        yield
    finally:
        try:
            await revert()
        except Exception as exc:
            logger.critical("mutation_revert_failed", mutation=label, error=str(exc))
            raise RevertFailedError(
                details={"mutation": label, "step": ProbeStep.REVERT_WRITE.value}
            ) from exc


def _marker_email() -> str:
    return f"temp_test_{int(time.time())}_{secrets.token_hex(3)}@{PROBE_MARKER_DOMAIN}"


def _same_email(left: str | None, right: str | None) -> bool:
    return (left or "").strip().lower() == (right or "").strip().lower()


class CredentialIssuer:
    """Manages tenant owner credentials.

    Owner identities are resolved from the tenant's owner link, then the
    tenant's completed ledger record, then the profile carrying the tenant
    email, then the identity service itself by that email. Operator
    accounts are never modified through this path.
    """

    def __init__(
        self,
        tenants: TenantRepository,
        ledger: ProvisioningRecordRepository,
        profiles: ProfileRepository,
        identity: IdentityServiceClient,
        notifier: NotificationClient,
        audit: AuditService,
        operator_roles: list[str],
        login_url: str | None = None,
    ) -> None:
        self.tenants = tenants
        self.ledger = ledger
        self.profiles = profiles
        self.identity = identity
        self.notifier = notifier
        self.audit = audit
        self.operator_roles = operator_roles
        self.login_url = login_url

    @classmethod
    def from_context(
        cls, ctx: "ServiceContext", actor: AuditContext | None = None
    ) -> "CredentialIssuer":
        return cls(
            TenantRepository(ctx.session),
            ProvisioningRecordRepository(ctx.session),
            ProfileRepository(ctx.session),
            identity=ctx.identity,
            notifier=ctx.notifier,
            audit=AuditService(ctx.session, actor or AuditContext(source="cli")),
            operator_roles=ctx.settings.operator_roles,
            login_url=ctx.settings.owner_login_url,
        )

    async def _get_tenant(self, tenant_id: UUID) -> Tenant:
        tenant = await self.tenants.get_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError(
                "Tenant not found", resource="tenant", resource_id=str(tenant_id)
            )
        return tenant

    async def _lookup_identity(self, user_id: str) -> IdentityUser | None:
        try:
            return await self.identity.get_user_by_id(user_id)
        except NotFoundError:
            return None

    async def _find_owner(self, tenant: Tenant) -> ResolvedOwner:
        if tenant.owner_id:
            user = await self._lookup_identity(tenant.owner_id)
            if user is not None:
                return ResolvedOwner(user, OwnerSource.TENANT_OWNER)
            logger.warning("owner_link_stale", tenant_id=str(tenant.id), owner_id=tenant.owner_id)

        record = await self.ledger.get_completed_for_tenant(tenant.id)
        if record is not None and record.user_id:
            user = await self._lookup_identity(record.user_id)
            if user is not None:
                return ResolvedOwner(user, OwnerSource.PROVISIONING_LEDGER)

        if tenant.email:
            profile = await self.profiles.get_by_email(tenant.email)
            if profile is not None:
                if profile.user_id is None:
                    raise ConflictError(
                        "Owner profile has no identity reference",
                        error_code="broken_identity_link",
                        details={"profile_id": str(profile.id), "email": profile.email},
                    )
                user = await self._lookup_identity(profile.user_id)
                if user is not None:
                    return ResolvedOwner(user, OwnerSource.PROFILE)

            user = await self.identity.get_user_by_email(tenant.email)
            if user is not None:
                return ResolvedOwner(user, OwnerSource.IDENTITY_EMAIL)

        raise NotFoundError(
            "No owner identity found for tenant",
            resource="tenant_owner",
            resource_id=str(tenant.id),
        )

    async def resolve_owner(self, tenant: Tenant) -> ResolvedOwner:
        """Find the identity that owns ``tenant``.

        Raises:
            NotFoundError: If no source yields an existing identity
            ConflictError: If the matching profile is a broken identity link
            ForbiddenError: If the resolved identity is an operator account
        """
        owner = await self._find_owner(tenant)

        profile = await self.profiles.get_by_user_id(owner.user.id)
        if profile is not None and profile.role in self.operator_roles:
            logger.error(
                "owner_is_operator",
                tenant_id=str(tenant.id),
                owner_id=owner.user.id,
                source=owner.source,
            )
            raise ForbiddenError(
                "Tenant is linked to an operator account; operator credentials "
                "cannot be changed through tenant management",
                error_code="owner_is_operator",
            )
        return owner

    async def _owner_for_change(self, tenant: Tenant) -> ResolvedOwner:
        """Resolve the owner about to be changed, repairing a stale owner link.

        The acting operator may not change their own identity here.
        """
        owner = await self.resolve_owner(tenant)
        if owner.user.id == self.audit.context.actor_id:
            raise ForbiddenError(
                "Operators cannot change their own credentials through tenant management",
                error_code="owner_is_operator",
            )

        if owner.source != OwnerSource.TENANT_OWNER:
            await self.tenants.set_owner(tenant, owner.user.id)
            logger.info(
                "owner_link_repaired",
                tenant_id=str(tenant.id),
                owner_id=owner.user.id,
                source=owner.source,
            )
        return owner

    async def send_credentials(
        self,
        tenant: Tenant,
        owner_name: str,
        owner_email: str,
        temporary_password: str,
    ) -> DeliveryResult:
        """Dispatch temporary credentials to the owner.

        A channel failure is reported, not raised, with the channel's
        response body verbatim.
        """
        try:
            result = await self.notifier.send_credentials_email(
                owner_name=owner_name,
                owner_email=owner_email,
                restaurant_name=tenant.name,
                temporary_password=temporary_password,
                login_url=self.login_url,
            )
        except ServiceUnavailableError as exc:
            return DeliveryResult(delivered=False, error=exc.message)

        if result.delivered:
            logger.info("credentials_sent", tenant_id=str(tenant.id))
            return DeliveryResult(delivered=True)
        return DeliveryResult(delivered=False, channel_response=result.response_body)

    async def rotate_owner_password(self, tenant_id: UUID) -> RotationResult:
        """Set a fresh temporary password for the tenant owner and send it.

        Once the identity holds the new password nothing raises: a failed
        delivery is reported and the password is handed to the operator in
        the result instead.
        """
        tenant = await self._get_tenant(tenant_id)
        owner = await self._owner_for_change(tenant)
        user = owner.user
        if not user.email:
            raise ConflictError(
                "Owner identity has no email",
                error_code="owner_without_email",
                details={"owner_id": user.id},
            )

        password = generate_temporary_password()
        await self.identity.update_user(user.id, password=password)
        logger.info("owner_password_rotated", tenant_id=str(tenant.id), owner_id=user.id)

        owner_name = user.user_metadata.get("name") or f"{tenant.name} Owner"
        delivery = await self.send_credentials(tenant, owner_name, user.email, password)
        if not delivery.delivered:
            logger.warning(
                "credentials_not_delivered",
                tenant_id=str(tenant.id),
                owner_id=user.id,
            )

        await self.audit.log_credential_change(
            CredentialAction.GENERATE_PASSWORD,
            tenant.id,
            user.id,
            delivered=delivery.delivered,
        )

        return RotationResult(
            tenant_id=tenant.id,
            owner_id=user.id,
            owner_email=user.email,
            owner_source=owner.source,
            delivery=delivery,
            temporary_password=None if delivery.delivered else password,
        )

    async def update_owner_email(self, tenant_id: UUID, new_email: str) -> CredentialChangeResult:
        """Change the owner's login email and mirror it locally.

        The profile linked to the owner and the tenant contact email follow
        the identity service.

        Raises:
            ValidationError: If ``new_email`` is not an email address
        """
        try:
            email = OwnerEmailUpdate(email=new_email).email
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc, "Invalid email address") from exc

        tenant = await self._get_tenant(tenant_id)
        owner = await self._owner_for_change(tenant)
        previous = owner.user.email

        await self.identity.update_user(owner.user.id, email=email)
        profiles = await self.profiles.update_email_for_user(owner.user.id, email)
        await self.tenants.set_email(tenant, email)
        logger.info(
            "owner_email_updated",
            tenant_id=str(tenant.id),
            owner_id=owner.user.id,
            profiles_updated=profiles,
        )

        await self.audit.log_credential_change(
            CredentialAction.UPDATE_EMAIL,
            tenant.id,
            owner.user.id,
            previous_email=previous,
            new_email=email,
        )
        return CredentialChangeResult(
            tenant_id=tenant.id,
            owner_id=owner.user.id,
            owner_email=email,
            owner_source=owner.source,
            action=CredentialAction.UPDATE_EMAIL,
            message="Email updated successfully",
        )

    async def update_owner_password(
        self, tenant_id: UUID, new_password: str
    ) -> CredentialChangeResult:
        """Set an operator-chosen password on the owner identity.

        Raises:
            ValidationError: If the password is too short or too long
        """
        try:
            password = OwnerPasswordUpdate(password=new_password).password
        except PydanticValidationError as exc:
            raise ValidationError.from_pydantic(exc, "Invalid password") from exc

        tenant = await self._get_tenant(tenant_id)
        owner = await self._owner_for_change(tenant)

        await self.identity.update_user(owner.user.id, password=password)
        logger.info("owner_password_updated", tenant_id=str(tenant.id), owner_id=owner.user.id)

        await self.audit.log_credential_change(
            CredentialAction.UPDATE_PASSWORD, tenant.id, owner.user.id
        )
        return CredentialChangeResult(
            tenant_id=tenant.id,
            owner_id=owner.user.id,
            owner_email=owner.user.email,
            owner_source=owner.source,
            action=CredentialAction.UPDATE_PASSWORD,
            message="Password updated successfully",
        )

    async def send_password_reset(self, tenant_id: UUID) -> CredentialChangeResult:
        """Generate a recovery link for the owner.

        The current password stays valid until the owner follows the link.
        """
        tenant = await self._get_tenant(tenant_id)
        owner = await self._owner_for_change(tenant)
        if not owner.user.email:
            raise ConflictError(
                "Owner identity has no email",
                error_code="owner_without_email",
                details={"owner_id": owner.user.id},
            )

        link = await self.identity.generate_recovery_link(owner.user.email)
        logger.info(
            "owner_recovery_link_generated",
            tenant_id=str(tenant.id),
            owner_id=owner.user.id,
        )

        await self.audit.log_credential_change(
            CredentialAction.RESET_PASSWORD, tenant.id, owner.user.id
        )
        return CredentialChangeResult(
            tenant_id=tenant.id,
            owner_id=owner.user.id,
            owner_email=owner.user.email,
            owner_source=owner.source,
            action=CredentialAction.RESET_PASSWORD,
            message="Password recovery link generated",
            recovery_link=link.action_link,
        )

    async def probe_owner_mutation(self, tenant_id: UUID) -> ProbeReport:
        """Support triage: prove the owner identity can be written and restored.

        Writes a temporary marker email to the owner identity, reads it back,
        writes the original email back and reads that back. The original
        email is restored on every exit path; a failed restore is reported
        as ``revert_failed`` with critical severity.
        """
        completed: list[ProbeStep] = []
        step = ProbeStep.TENANT_LOOKUP
        owner_id: str | None = None
        source: OwnerSource | None = None

        try:
            tenant = await self._get_tenant(tenant_id)
            completed.append(step)

            step = ProbeStep.OWNER_RESOLUTION
            owner = await self.resolve_owner(tenant)
            owner_id, source = owner.user.id, owner.source
            completed.append(step)

            step = ProbeStep.IDENTITY_VERIFICATION
            user = await self.identity.get_user_by_id(owner_id)
            original_email = user.email
            if not original_email:
                raise ProbeCheckError("Owner identity has no email to probe")
            completed.append(step)

            marker = _marker_email()
            user_id = owner_id

            async def write_marker() -> IdentityUser:
                return await self.identity.update_user(user_id, email=marker)

            async def restore() -> IdentityUser:
                return await self.identity.update_user(user_id, email=original_email)

            step = ProbeStep.MARKER_WRITE
            async with reversible_mutation(write_marker, restore, label="owner_email"):
                completed.append(step)
                step = ProbeStep.MARKER_READBACK
                current = await self.identity.get_user_by_id(user_id)
                if not _same_email(current.email, marker):
                    raise ProbeCheckError("Marker email was not persisted")
                completed.append(step)
            completed.append(ProbeStep.REVERT_WRITE)

            step = ProbeStep.REVERT_READBACK
            current = await self.identity.get_user_by_id(user_id)
            if not _same_email(current.email, original_email):
                raise RevertFailedError(
                    "Original email was not restored",
                    details={"step": ProbeStep.REVERT_READBACK.value},
                )
            completed.append(step)
        except RevertFailedError as exc:
            failed_step = ProbeStep(exc.details.get("step", ProbeStep.REVERT_WRITE))
            logger.critical(
                "owner_probe_revert_failed",
                tenant_id=str(tenant_id),
                owner_id=owner_id,
                step=failed_step,
            )
            return ProbeReport(
                tenant_id=tenant_id,
                outcome=ProbeOutcome.REVERT_FAILED,
                severity=RevertFailedError.severity,
                owner_id=owner_id,
                owner_source=source,
                completed_steps=completed,
                failed_step=failed_step,
                error=exc.message,
            )
        except AppException as exc:
            logger.warning(
                "owner_probe_failed",
                tenant_id=str(tenant_id),
                step=step,
                error_code=exc.error_code,
            )
            return ProbeReport(
                tenant_id=tenant_id,
                outcome=ProbeOutcome.FAILED,
                severity="error",
                owner_id=owner_id,
                owner_source=source,
                completed_steps=completed,
                failed_step=step,
                error=exc.message,
            )

        logger.info("owner_probe_passed", tenant_id=str(tenant_id), owner_id=owner_id)
        return ProbeReport(
            tenant_id=tenant_id,
            outcome=ProbeOutcome.PASSED,
            owner_id=owner_id,
            owner_source=source,
            completed_steps=completed,
        )
