"""FastAPI dependencies for operator authentication.

Operators sign in through the identity service. A bearer token is verified
there, then the caller's profile must carry one of the configured operator
roles.
"""

from typing import Annotated

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from onboardkit.api.dependencies import Context
from onboardkit.core.auth.schemas import IdentityUser
from onboardkit.core.errors import ForbiddenError, UnauthorizedError
from onboardkit.modules.profiles.repos import ProfileRepository


# HTTP Bearer token security scheme
bearer_scheme = HTTPBearer(auto_error=False)


async def require_operator(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    ctx: Context,
) -> IdentityUser:
    """Resolve the calling operator.

    Raises:
        UnauthorizedError: If the token is missing or rejected
        ForbiddenError: If the caller has no operator role
    """
    if not credentials:
        raise UnauthorizedError(
            "Missing authentication token",
            error_code="missing_token",
        )

    user = await ctx.identity.get_session_user(credentials.credentials)

    profile = await ProfileRepository(ctx.session).get_by_user_id(user.id)
    if not profile or profile.role not in ctx.settings.operator_roles:
        raise ForbiddenError(
            "Operator privileges required",
            error_code="not_operator",
        )

    request.state.operator_id = user.id
    structlog.contextvars.bind_contextvars(operator_id=user.id)
    return user


Operator = Annotated[IdentityUser, Depends(require_operator)]
