"""Domain models representing persisted state.

These are pure domain objects with no API input rules.
Django ORM models are in events/models.py (persistence layer).
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta

from events.domain.phases import EventPhase
from events.domain.value_objects import (
    EventId,
    GuestLimit,
    Money,
    SubmissionId,
    TimeslotId,
    UserId,
    Venue,
)


@dataclass(frozen=True)
class User:
    """Internal identity record for an authenticated person."""

    id: UserId
    email: str
    name: str | None
    created_at: datetime
    last_login_at: datetime | None = None


@dataclass(frozen=True)
class Deadlines:
    guest_list: date
    promo_materials: date


@dataclass(frozen=True)
class Payment:
    """DJ fee terms. Stored, never processed."""

    amount: Money
    currency: str
    due_date: date
    per_dj: Money | None = None


@dataclass(frozen=True)
class PhaseRecord:
    """Who moved the event into its current phase, when, and why."""

    entered_at: datetime
    entered_by: UserId | None = None
    reason: str | None = None


# Phase -> Milestones field stamped when the event enters that phase
MILESTONE_FIELDS = {
    EventPhase.PLANNING: "published_at",
    EventPhase.FINALIZED: "finalized_at",
    EventPhase.DAY_OF: "day_of_started_at",
    EventPhase.COMPLETED: "completed_at",
    EventPhase.CANCELLED: "cancelled_at",
}


@dataclass(frozen=True)
class Milestones:
    published_at: datetime | None = None
    finalized_at: datetime | None = None
    day_of_started_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None

    def stamped(self, phase: EventPhase, at: datetime) -> "Milestones":
        name = MILESTONE_FIELDS.get(phase)
        return replace(self, **{name: at}) if name else self


@dataclass(frozen=True)
class Event:
    """Domain representation of an Event."""

    id: EventId
    organizer_id: UserId
    name: str
    date: date
    venue: Venue
    deadlines: Deadlines
    payment: Payment
    phase: EventPhase
    phase_record: PhaseRecord
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    hashtags: str | None = None
    guest_limit_per_dj: GuestLimit | None = None
    milestones: Milestones = Milestones()

    def is_owned_by(self, user_id: UserId) -> bool:
        return self.organizer_id == user_id

    @property
    def has_required_info(self) -> bool:
        return bool(
            self.name.strip()
            and self.venue.name.strip()
            and self.venue.address.strip()
            and self.deadlines.guest_list
            and self.deadlines.promo_materials
        )


# Column width of the stored submission token.
SUBMISSION_TOKEN_MAX_LENGTH = 64


@dataclass(frozen=True)
class Timeslot:
    """Domain representation of a Timeslot."""

    id: TimeslotId
    event_id: EventId
    start_time: datetime
    end_time: datetime
    dj_name: str
    dj_instagram: str
    submission_token: str | None = None
    submission_id: SubmissionId | None = None


@dataclass(frozen=True)
class PromoFile:
    """A file the DJ uploaded to the blob store."""

    file_name: str
    mime_type: str
    size: int
    storage_ref: str
    uploaded_at: datetime


@dataclass(frozen=True)
class PromoMaterials:
    files: tuple[PromoFile, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class Guest:
    name: str
    phone: str | None = None


@dataclass(frozen=True)
class PaymentInfo:
    """Bank details for paying the DJ.

    ``account_number`` and ``resident_number`` are plaintext here; the store
    encrypts them at rest.
    """

    account_holder: str
    bank_name: str
    account_number: str
    resident_number: str
    prefer_direct_contact: bool = False


@dataclass(frozen=True)
class Submission:
    """Domain representation of a Submission."""

    id: SubmissionId
    event_id: EventId
    timeslot_id: TimeslotId
    unique_link: str
    promo_materials: PromoMaterials
    guest_list: tuple[Guest, ...]
    payment_info: PaymentInfo
    submitted_at: datetime
    last_updated_at: datetime

    def is_complete(self, guest_limit: GuestLimit | None = None) -> bool:
        """Promo files were provided, and guests unless ``guest_limit`` is zero."""
        no_guests_allowed = guest_limit is not None and guest_limit.value == 0
        return bool(self.promo_materials.files) and (bool(self.guest_list) or no_guests_allowed)


UPDATE_TICK = timedelta(microseconds=1)


def advance_update_time(stored: datetime, now: datetime) -> datetime:
    """Next last_updated_at: ``now``, but always past the stored value."""
    return max(now, stored + UPDATE_TICK)
