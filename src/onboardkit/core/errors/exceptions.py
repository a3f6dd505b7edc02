"""Domain exceptions for the application.

These exceptions represent business-logic errors. The HTTP surface converts
them to RFC 7807 Problem Details responses; the CLI prints their message.
"""

from typing import Any


class AppException(Exception):
    """Base exception for all application errors.

    All domain exceptions should inherit from this class.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code for clients
        status_code: HTTP status code for the response
        details: Additional error details
    """

    message: str = "An unexpected error occurred"
    error_code: str = "internal_error"
    status_code: int = 500

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.message
        self.error_code = error_code or self.error_code
        self.details = details or {}
        super().__init__(self.message)


class NotFoundError(AppException):
    """Raised when a requested resource is not found.

    Example:
        raise NotFoundError("Tenant not found", resource="tenant", resource_id=str(tenant_id))
    """

    message = "Resource not found"
    error_code = "not_found"
    status_code = 404

    def __init__(
        self,
        message: str | None = None,
        resource: str | None = None,
        resource_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if resource:
            details["resource"] = resource
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message=message, details=details, **kwargs)


class ConflictError(AppException):
    """Raised when there's a conflict with existing data.

    Example:
        raise ConflictError("Record is not pending", details={"status": record.status})
    """

    message = "Resource conflict"
    error_code = "conflict"
    status_code = 409


class SlugUnavailableError(ConflictError):
    """Raised when a slug is already claimed by a tenant or a ledger entry.

    Callers may retry with a different base name or a fresh allocation.
    """

    message = "This slug is already taken"
    error_code = "slug_unavailable"

    def __init__(self, slug: str, message: str | None = None, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        details["slug"] = slug
        self.slug = slug
        super().__init__(message=message, details=details, **kwargs)


class AllocationExhaustedError(ConflictError):
    """Raised when every suffixed candidate for a base slug is taken.

    Not retryable without new input: the caller must supply another name.
    """

    message = "No free slug could be allocated for this name"
    error_code = "allocation_exhausted"

    def __init__(self, base: str, attempts: int, **kwargs: Any) -> None:
        details = kwargs.pop("details", {})
        details.update({"base": base, "attempts": attempts})
        self.base = base
        self.attempts = attempts
        super().__init__(details=details, **kwargs)


class ValidationError(AppException):
    """Raised when request data fails validation.

    Example:
        raise ValidationError(
            "Invalid input data",
            errors=[{"field": "basics.slug", "message": "Slug is malformed"}]
        )
    """

    message = "Validation error"
    error_code = "validation_error"
    status_code = 422

    def __init__(
        self,
        message: str | None = None,
        errors: list[dict[str, Any]] | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if errors:
            details["errors"] = errors
        super().__init__(message=message, details=details, **kwargs)

    @classmethod
    def from_pydantic(cls, exc: Any, message: str | None = None) -> "ValidationError":
        """Build a ValidationError from a pydantic ValidationError.

        Field paths are dotted (``basics.slug``) so messages identify the
        offending field.
        """
        errors = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ())) or "unknown",
                "message": error.get("msg", "Invalid value"),
                "type": error.get("type"),
            }
            for error in exc.errors()
        ]
        return cls(message or "Payload validation failed", errors=errors)


class UnauthorizedError(AppException):
    """Raised when authentication is required but not provided or invalid."""

    message = "Authentication required"
    error_code = "unauthorized"
    status_code = 401


class ForbiddenError(AppException):
    """Raised when the caller lacks the operator role."""

    message = "Access forbidden"
    error_code = "forbidden"
    status_code = 403


class ServiceUnavailableError(AppException):
    """Raised when the store or a remote service cannot be reached.

    Always treated as a failure by callers, never as success.

    Example:
        raise ServiceUnavailableError(details={"service": "provisioning"})
    """

    message = "Service temporarily unavailable, please try again"
    error_code = "service_unavailable"
    status_code = 503


class RemoteServiceError(AppException):
    """Raised when a remote service answers with a structured error.

    The remote code and message are carried through unmodified.
    """

    message = "Remote service rejected the request"
    error_code = "remote_error"
    status_code = 502

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        hint: str | None = None,
        status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        details = kwargs.pop("details", {})
        if hint:
            details["hint"] = hint
        if status_code:
            self.status_code = status_code
        super().__init__(message=message, error_code=error_code, details=details, **kwargs)


class RevertFailedError(AppException):
    """Raised when a reversible mutation could not be reverted.

    This is the most severe failure: persisted state is left altered and
    needs manual repair.
    """

    message = "Revert failed, persisted state is altered"
    error_code = "revert_failed"
    status_code = 500
    severity = "critical"
