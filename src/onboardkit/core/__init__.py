"""Core services and cross-cutting concerns."""

from onboardkit.core.database import Base, get_db
from onboardkit.core.errors import (
    AppException,
    ConflictError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
    register_exception_handlers,
)


__all__ = [
    # Errors
    "AppException",
    # Database
    "Base",
    "ConflictError",
    "NotFoundError",
    "ServiceUnavailableError",
    "ValidationError",
    "get_db",
    "register_exception_handlers",
]
