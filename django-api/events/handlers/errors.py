"""Maps domain errors to HTTP responses.

Every error body has the same shape::

    {"error": {"code": "...", "message": "..."}}

Internal details (ids that failed to parse, store operations, tracebacks)
never reach the client.
"""

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from events.domain.errors import (
    AuthorizationError,
    ConflictError,
    DomainError,
    InvalidTokenError,
    InvalidTransitionError,
    NotFoundError,
    PreconditionError,
    StoreUnavailableError,
    ValidationError,
)

STATUS_BY_ERROR: list[tuple[type[DomainError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (InvalidTokenError, status.HTTP_404_NOT_FOUND),
    (InvalidTransitionError, status.HTTP_409_CONFLICT),
    (PreconditionError, status.HTTP_409_CONFLICT),
    (ConflictError, status.HTTP_409_CONFLICT),
    (StoreUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def status_for(exc: DomainError) -> int:
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(code: str, message: str, **extra) -> dict:
    return {"error": {"code": code, "message": message, **extra}}


def exception_handler(exc, context):
    """DRF exception handler aware of domain errors."""
    if isinstance(exc, DomainError):
        extra = {}
        if isinstance(exc, ValidationError) and exc.field:
            extra["field"] = exc.field
        elif isinstance(exc, PreconditionError):
            extra["condition"] = exc.condition
        response = Response(
            error_body(exc.code.value, exc.message, **extra), status=status_for(exc)
        )
        if isinstance(exc, StoreUnavailableError):
            response["Retry-After"] = "1"
        return response

    if isinstance(exc, exceptions.ValidationError):
        return Response(
            error_body("VALIDATION_FAILED", "Invalid request", details=exc.detail),
            status=status.HTTP_400_BAD_REQUEST,
        )

    response = drf_exception_handler(exc, context)
    if response is not None:
        code = getattr(exc, "default_code", "error")
        response.data = error_body(str(code).upper(), str(getattr(exc, "detail", exc)))
    return response
