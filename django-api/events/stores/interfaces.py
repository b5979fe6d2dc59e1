"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
Uniqueness (user email, submission token, one submission per timeslot) is
enforced by the store, which reports a lost race as DuplicateRecordError.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from events.domain import (
    Event,
    EventId,
    EventPhase,
    PhaseRecord,
    Submission,
    SubmissionId,
    Timeslot,
    TimeslotId,
    User,
    UserId,
)
from events.domain.read_models import UploadTicket


class DuplicateRecordError(Exception):
    """A write collided with a uniqueness constraint."""

    def __init__(self, constraint: str) -> None:
        super().__init__(constraint)
        self.constraint = constraint


class UserStore(ABC):
    """Interface for user persistence operations."""

    @abstractmethod
    def get_user_by_email(self, email: str) -> User | None:
        """Return the user with this (normalized) email, or None."""
        ...

    @abstractmethod
    def add_user(self, user: User) -> User:
        """Insert a user. Raises DuplicateRecordError if the email is taken."""
        ...

    @abstractmethod
    def record_login(self, user_id: UserId, at: datetime, name: str | None = None) -> User:
        """Set last-login, and the display name when one is given."""
        ...


class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    def list_events(self, organizer_id: UserId) -> list[Event]:
        """Return the organizer's events ordered by created_at descending."""
        ...

    @abstractmethod
    def get_event(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def add_event(self, event: Event) -> Event:
        ...

    @abstractmethod
    def update_event_details(self, event: Event) -> Event:
        """Persist editable fields only; phase and organizer are left alone."""
        ...

    @abstractmethod
    def transition_phase(
        self,
        event_id: EventId,
        expected: EventPhase,
        target: EventPhase,
        record: PhaseRecord,
    ) -> Event | None:
        """Move the event to ``target`` only if it is still in ``expected``.

        Also stamps the milestone belonging to ``target``. Returns None when
        the event was no longer in ``expected``.
        """
        ...


class TimeslotStore(ABC):
    """Interface for timeslot persistence operations."""

    @abstractmethod
    def get_timeslot(self, timeslot_id: TimeslotId) -> Timeslot | None:
        ...

    @abstractmethod
    def get_timeslot_by_token(self, token: str) -> Timeslot | None:
        ...

    @abstractmethod
    def token_exists(self, token: str) -> bool:
        ...

    @abstractmethod
    def list_timeslots(self, event_id: EventId) -> list[Timeslot]:
        """Return all timeslots for an event, ordered by start_time ascending."""
        ...

    @abstractmethod
    def list_timeslots_without_token(self) -> list[Timeslot]:
        ...

    @abstractmethod
    def add_timeslot(self, timeslot: Timeslot) -> Timeslot:
        """Insert a timeslot. Raises DuplicateRecordError on a token collision."""
        ...

    @abstractmethod
    def update_schedule(self, timeslot: Timeslot) -> Timeslot:
        """Persist times and DJ fields; token and submission ref are left alone."""
        ...

    @abstractmethod
    def set_token(self, timeslot_id: TimeslotId, token: str) -> Timeslot:
        """Replace the token. Raises DuplicateRecordError on a collision."""
        ...

    @abstractmethod
    def set_submission_ref(self, timeslot_id: TimeslotId, submission_id: SubmissionId) -> None:
        ...

    @abstractmethod
    def delete_timeslot(self, timeslot_id: TimeslotId) -> None:
        """Delete a timeslot. Raises ConflictError if a submission references it."""
        ...


class SubmissionStore(ABC):
    """Interface for submission persistence operations."""

    @abstractmethod
    def get_submission_for_timeslot(self, timeslot_id: TimeslotId) -> Submission | None:
        ...

    @abstractmethod
    def list_submissions(self, event_id: EventId) -> list[Submission]:
        ...

    @abstractmethod
    def add_submission(self, submission: Submission) -> Submission:
        """Insert a submission.

        Raises DuplicateRecordError if the timeslot already has one.
        """
        ...

    @abstractmethod
    def replace_content(self, submission: Submission) -> Submission:
        """Overwrite promo materials, guest list and payment info.

        ``last_updated_at`` becomes ``submission.last_updated_at`` or, if that
        is not later than the stored value, the stored value plus a tick. The
        comparison happens under the row lock.
        """
        ...


class BlobStore(ABC):
    """Interface for the external file store."""

    @abstractmethod
    def create_upload_ticket(self) -> UploadTicket:
        ...

    @abstractmethod
    def create_view_link(self, storage_ref: str) -> tuple[str, datetime]:
        """Return a URL for reading a stored file and when it stops working."""
        ...
