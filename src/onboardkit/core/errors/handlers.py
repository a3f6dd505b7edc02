"""Problem Details (RFC 7807) responses for the operator API.

Remote rejections keep the remote code and hint in the body; outages and
store failures keep their details in the log only.
"""

from typing import TYPE_CHECKING, Any, cast

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from onboardkit.config import get_settings
from onboardkit.core.errors.exceptions import AppException, ServiceUnavailableError


if TYPE_CHECKING:
    from starlette.types import ExceptionHandler


logger = structlog.get_logger()


class FieldError(BaseModel):
    field: str
    message: str
    type: str | None = None


class ProblemDetail(BaseModel):
    """Problem body; ``request_id`` matches the ``X-Request-ID`` header."""

    type: str
    title: str
    status: int
    detail: str
    instance: str | None = None
    errors: list[FieldError] | None = None
    request_id: str | None = None

    model_config = {"extra": "allow"}


def _problem(
    request: Request,
    error_code: str,
    status_code: int,
    detail: str,
    title: str | None = None,
    errors: list[FieldError] | None = None,
) -> dict[str, Any]:
    settings = getattr(request.app.state, "settings", None) or get_settings()
    return ProblemDetail(
        type=f"{settings.api_docs_base_url}/errors/{error_code}",
        title=title or error_code.replace("_", " ").title(),
        status=status_code,
        detail=detail,
        instance=str(request.url.path),
        errors=errors,
        request_id=getattr(request.state, "request_id", None),
    ).model_dump(exclude_none=True)


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    logger.warning(
        "app_exception",
        error_code=exc.error_code,
        message=exc.message,
        status_code=exc.status_code,
        path=str(request.url.path),
        details=exc.details,
    )

    content = _problem(request, exc.error_code, exc.status_code, exc.message)
    if not isinstance(exc, ServiceUnavailableError):
        for key, value in exc.details.items():
            content.setdefault(key, value)

    return JSONResponse(status_code=exc.status_code, content=content)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Field paths are dotted and drop the ``body`` prefix (``payload.basics.slug``)."""
    errors = [
        FieldError(
            field=".".join(str(part) for part in error.get("loc", ()) if part != "body")
            or "unknown",
            message=error.get("msg", "Invalid value"),
            type=error.get("type"),
        )
        for error in exc.errors()
    ]

    logger.warning("validation_error", path=str(request.url.path), error_count=len(errors))

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_problem(
            request,
            "validation_error",
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "Request validation failed",
            title="Validation Error",
            errors=errors,
        ),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "unhandled_exception",
        path=str(request.url.path),
        error_type=type(exc).__name__,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_problem(
            request,
            "internal_error",
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "An unexpected error occurred",
            title="Internal Server Error",
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(
        AppException, cast("ExceptionHandler", app_exception_handler)
    )
    app.add_exception_handler(
        RequestValidationError, cast("ExceptionHandler", validation_exception_handler)
    )
    app.add_exception_handler(Exception, generic_exception_handler)
