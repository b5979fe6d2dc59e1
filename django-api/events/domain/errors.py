"""Domain error codes for the events module."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    TIMESLOT_NOT_FOUND = "TIMESLOT_NOT_FOUND"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    ACCESS_DENIED = "ACCESS_DENIED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    PRECONDITION_FAILED = "PRECONDITION_FAILED"
    TIMESLOT_HAS_SUBMISSION = "TIMESLOT_HAS_SUBMISSION"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(DomainError):
    """Raised when caller input is malformed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(code=ErrorCode.VALIDATION_FAILED, message=message)
        object.__setattr__(self, "field", field)


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""


class EventNotFoundError(NotFoundError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        object.__setattr__(self, "event_id", event_id)


class TimeslotNotFoundError(NotFoundError):
    """Raised when a timeslot is not found."""

    def __init__(self, timeslot_id: str) -> None:
        super().__init__(
            code=ErrorCode.TIMESLOT_NOT_FOUND,
            message="Timeslot not found",
        )
        object.__setattr__(self, "timeslot_id", timeslot_id)


class PromoFileNotFoundError(NotFoundError):
    """Raised when a storage reference is not among a submission's files."""

    def __init__(self, storage_ref: str) -> None:
        super().__init__(
            code=ErrorCode.FILE_NOT_FOUND,
            message="File not found",
        )
        object.__setattr__(self, "storage_ref", storage_ref)


class AuthorizationError(DomainError):
    """Raised when the requester does not own the event."""

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.ACCESS_DENIED,
            message="Access denied",
        )


class InvalidTokenError(DomainError):
    """Raised for any failure on the submission token path.

    The message is the same whatever the cause, so callers cannot tell an
    unknown token from a mismatched one.
    """

    def __init__(self) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TOKEN,
            message="Invalid submission link",
        )


class InvalidTransitionError(DomainError):
    """Raised when a phase change is not an edge of the phase graph."""

    def __init__(self, source: str, target: str) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=f"Cannot move event from '{source}' to '{target}'",
        )
        object.__setattr__(self, "source", source)
        object.__setattr__(self, "target", target)


class PreconditionError(DomainError):
    """Raised when a business rule for an operation is not met."""

    def __init__(self, condition: str, message: str) -> None:
        super().__init__(code=ErrorCode.PRECONDITION_FAILED, message=message)
        object.__setattr__(self, "condition", condition)


class ConflictError(DomainError):
    """Raised when a timeslot change would orphan its submission."""

    def __init__(self, message: str) -> None:
        super().__init__(code=ErrorCode.TIMESLOT_HAS_SUBMISSION, message=message)


class StoreUnavailableError(DomainError):
    """Raised when the backing store fails. Callers may retry."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            code=ErrorCode.STORE_UNAVAILABLE,
            message="Storage is temporarily unavailable",
        )
        object.__setattr__(self, "operation", operation)
