"""Identity service schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class IdentityUser(BaseModel):
    """A login account as returned by the identity service.

    Attributes:
        id: Opaque identity reference
        email: Login email, may be missing for phone-only accounts
        user_metadata: Free-form profile data (display name, ...)
        app_metadata: Service-managed data (provider, ...)
    """

    model_config = ConfigDict(extra="ignore")

    id: str
    email: str | None = None
    user_metadata: dict[str, Any] = {}
    app_metadata: dict[str, Any] = {}


class RecoveryLink(BaseModel):
    """A one-time password recovery link."""

    action_link: str
    email: str
