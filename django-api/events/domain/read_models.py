"""Read-side shapes returned by services but never persisted."""

from dataclasses import dataclass
from datetime import date, datetime

from events.domain.models import Deadlines, Event, Guest, Payment, Submission, Timeslot
from events.domain.phases import EventPhase
from events.domain.value_objects import EventId, GuestLimit, TimeslotId, Venue


@dataclass(frozen=True)
class PublicEventView:
    """What a DJ holding a token may see about the event.

    Carries no organizer identity.
    """

    id: EventId
    name: str
    date: date
    venue: Venue
    deadlines: Deadlines
    payment: Payment
    phase: EventPhase
    description: str | None = None
    hashtags: str | None = None
    guest_limit_per_dj: GuestLimit | None = None

    @classmethod
    def from_event(cls, event: Event) -> "PublicEventView":
        return cls(
            id=event.id,
            name=event.name,
            date=event.date,
            venue=event.venue,
            deadlines=event.deadlines,
            payment=event.payment,
            phase=event.phase,
            description=event.description,
            hashtags=event.hashtags,
            guest_limit_per_dj=event.guest_limit_per_dj,
        )


@dataclass(frozen=True)
class TokenResolution:
    timeslot: Timeslot
    event: PublicEventView
    existing_submission: Submission | None = None


@dataclass(frozen=True)
class SubmissionResult:
    submission: Submission
    created: bool
    success: bool = True


@dataclass(frozen=True)
class TimeslotStatus:
    """One row of the organizer's submission tracker."""

    timeslot_id: TimeslotId
    dj_name: str
    dj_instagram: str
    start_time: datetime
    end_time: datetime
    has_submitted: bool
    submitted_at: datetime | None
    guest_count: int
    file_count: int


@dataclass(frozen=True)
class GuestRow:
    """One guest on the door list, with the DJ who invited them."""

    name: str
    phone: str
    dj_name: str
    dj_instagram: str
    timeslot: str


@dataclass(frozen=True)
class DJGuests:
    dj_name: str
    dj_instagram: str
    timeslot: str
    guests: tuple[Guest, ...]


@dataclass(frozen=True)
class GuestListData:
    """Every submitted guest of an event, in timeslot order."""

    event: Event
    djs: tuple[DJGuests, ...]
    total_djs: int

    @property
    def rows(self) -> list[GuestRow]:
        return [
            GuestRow(g.name, g.phone or "", dj.dj_name, dj.dj_instagram, dj.timeslot)
            for dj in self.djs
            for g in dj.guests
        ]

    @property
    def total_guests(self) -> int:
        return sum(len(dj.guests) for dj in self.djs)

    @property
    def submitted_djs(self) -> int:
        return len(self.djs)


@dataclass(frozen=True)
class GuestListExport:
    filename: str
    content: str | bytes
    total_guests: int
    total_djs: int
    submitted_djs: int
    mime_type: str = "text/csv"


@dataclass(frozen=True)
class UploadTicket:
    """Where and until when a client may upload one file."""

    storage_ref: str
    upload_url: str
    expires_at: datetime


@dataclass(frozen=True)
class FileLink:
    """A time-limited URL for viewing one uploaded promo file."""

    storage_ref: str
    file_name: str
    mime_type: str
    url: str
    expires_at: datetime
