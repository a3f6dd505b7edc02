"""Error handling module with RFC 7807 Problem Details."""

from onboardkit.core.errors.exceptions import (
    AllocationExhaustedError,
    AppException,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RemoteServiceError,
    RevertFailedError,
    ServiceUnavailableError,
    SlugUnavailableError,
    UnauthorizedError,
    ValidationError,
)
from onboardkit.core.errors.handlers import (
    FieldError,
    ProblemDetail,
    register_exception_handlers,
)


__all__ = [
    "AllocationExhaustedError",
    # Exceptions
    "AppException",
    "ConflictError",
    # Handlers
    "FieldError",
    "ForbiddenError",
    "NotFoundError",
    "ProblemDetail",
    "RemoteServiceError",
    "RevertFailedError",
    "ServiceUnavailableError",
    "SlugUnavailableError",
    "UnauthorizedError",
    "ValidationError",
    "register_exception_handlers",
]
