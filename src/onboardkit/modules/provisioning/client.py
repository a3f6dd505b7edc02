"""Remote provisioning service client."""

import structlog
from pydantic import ValidationError as PydanticValidationError

from onboardkit.core.constants import SLUG_CONFLICT_CODES
from onboardkit.core.http import RemoteServiceClient, response_json
from onboardkit.modules.provisioning.schemas import (
    OutcomeStatus,
    ProvisioningEnvelope,
    ProvisioningOutcome,
)


logger = structlog.get_logger()

PROVISIONING_PATH = "/tenant-provisioning"


class ProvisioningServiceClient(RemoteServiceClient):
    """Submits tenant creation requests to the provisioning service.

    The remote service creates the tenant row and completes the ledger
    record in one step. Creation is not idempotent, so this client never
    retries on its own.
    """

    service_name = "provisioning"

    async def create_tenant(self, body: dict, slug: str) -> ProvisioningOutcome:
        """POST one onboarding request and interpret the envelope.

        Args:
            body: camelCase request body
            slug: The slug carried by ``body``, echoed into the outcome

        Raises:
            ServiceUnavailableError: On timeout or transport failure
        """
        response = await self.request("POST", PROVISIONING_PATH, json=body)
        raw = response_json(response)

        try:
            envelope = ProvisioningEnvelope.model_validate(raw)
        except PydanticValidationError:
            envelope = ProvisioningEnvelope()

        if response.is_success and envelope.success and envelope.data is not None:
            data = envelope.data
            return ProvisioningOutcome(
                status=OutcomeStatus.SUCCEEDED,
                slug=data.slug,
                tenant_id=data.tenant_id,
                owner_id=data.owner_id,
                primary_url=data.primary_url,
                message=data.message,
                remote_status=response.status_code,
            )

        error = envelope.error
        code = error.code if error else None

        if code in SLUG_CONFLICT_CODES or (response.status_code == 409 and code is None):
            return ProvisioningOutcome(
                status=OutcomeStatus.SLUG_TAKEN,
                slug=slug,
                message=error.message if error else None,
                error_code=code,
                hint=error.hint if error else None,
                remote_status=response.status_code,
            )

        if error is None:
            # No structured answer: the request may or may not have landed.
            logger.warning(
                "provisioning_unstructured_response",
                status_code=response.status_code,
                slug=slug,
            )
            return ProvisioningOutcome(
                status=OutcomeStatus.UNAVAILABLE,
                slug=slug,
                message="Provisioning service returned an unrecognized response",
                remote_status=response.status_code,
            )

        return ProvisioningOutcome(
            status=OutcomeStatus.REJECTED,
            slug=slug,
            message=error.message,
            error_code=code,
            hint=error.hint,
            remote_status=response.status_code,
        )
