"""Identity service client.

Talks to a GoTrue-style admin API. Every call carries the service key, so
this client is only ever built server-side from settings.
"""

from typing import Any

import httpx
import structlog
from pydantic import ValidationError as PydanticValidationError

from onboardkit.core.auth.schemas import IdentityUser, RecoveryLink
from onboardkit.core.errors import NotFoundError, RemoteServiceError, UnauthorizedError
from onboardkit.core.http import RemoteServiceClient, response_json


logger = structlog.get_logger()


def _remote_error(response: httpx.Response, fallback: str) -> RemoteServiceError:
    body = response_json(response)
    message = body.get("msg") or body.get("message") or body.get("error_description")
    code = body.get("error_code") or body.get("code") or body.get("error")
    return RemoteServiceError(
        message=str(message or fallback),
        error_code=str(code) if code else "identity_error",
    )


def _parse_user(data: Any) -> IdentityUser:
    """Validate one identity payload; a malformed answer is a remote error."""
    try:
        return IdentityUser.model_validate(data)
    except PydanticValidationError as exc:
        logger.warning("identity_response_malformed", errors=exc.error_count())
        raise RemoteServiceError(
            "Identity service returned an unexpected response",
            error_code="identity_malformed_response",
        ) from exc


class IdentityServiceClient(RemoteServiceClient):
    """Admin and session operations against the identity service."""

    service_name = "identity"

    async def get_user_by_id(self, user_id: str) -> IdentityUser:
        """Fetch one identity by reference.

        Raises:
            NotFoundError: If no identity has this reference
            RemoteServiceError: On any other non-success or malformed answer
        """
        response = await self.request("GET", f"/admin/users/{user_id}")
        if response.status_code == 404:
            raise NotFoundError("Identity not found", resource="identity", resource_id=user_id)
        if response.is_error:
            raise _remote_error(response, "Identity lookup failed")
        return _parse_user(response_json(response))

    async def get_user_by_email(self, email: str) -> IdentityUser | None:
        """Find an identity by login email, case-insensitively."""
        response = await self.request("GET", "/admin/users", params={"email": email})
        if response.is_error:
            raise _remote_error(response, "Identity lookup failed")

        users = response_json(response).get("users")
        if not isinstance(users, list):
            users = []
        wanted = email.strip().lower()
        for raw in users:
            user = _parse_user(raw)
            if user.email and user.email.lower() == wanted:
                return user
        return None

    async def update_user(self, user_id: str, **attributes: Any) -> IdentityUser:
        """Update identity attributes (``email``, ``password``, ...).

        Attribute values are never logged.
        """
        response = await self.request("PUT", f"/admin/users/{user_id}", json=attributes)
        if response.status_code == 404:
            raise NotFoundError("Identity not found", resource="identity", resource_id=user_id)
        if response.is_error:
            raise _remote_error(response, "Identity update failed")

        logger.info("identity_updated", user_id=user_id, fields=sorted(attributes))
        return _parse_user(response_json(response))

    async def generate_recovery_link(self, email: str) -> RecoveryLink:
        """Generate a password recovery link for the identity owning ``email``."""
        response = await self.request(
            "POST",
            "/admin/generate_link",
            json={"type": "recovery", "email": email},
        )
        if response.status_code == 404:
            raise NotFoundError("Identity not found", resource="identity")
        if response.is_error:
            raise _remote_error(response, "Recovery link generation failed")

        body = response_json(response)
        properties = body.get("properties")
        link = body.get("action_link") or (
            properties.get("action_link") if isinstance(properties, dict) else None
        )
        if not link:
            raise RemoteServiceError(
                "Identity service returned no recovery link",
                error_code="identity_malformed_response",
            )
        return RecoveryLink(action_link=link, email=email)

    async def get_session_user(self, access_token: str) -> IdentityUser:
        """Resolve the identity behind a session access token.

        Raises:
            UnauthorizedError: If the token is invalid or expired
        """
        response = await self.request(
            "GET",
            "/user",
            headers={"Authorization": f"Bearer {access_token}"},
        )
        if response.status_code in (401, 403):
            raise UnauthorizedError("Invalid or expired token", error_code="invalid_token")
        if response.is_error:
            raise _remote_error(response, "Session lookup failed")
        return _parse_user(response_json(response))
