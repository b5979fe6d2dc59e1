"""Event service - all business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors
"""

import logging
import uuid
from collections.abc import Mapping
from dataclasses import asdict, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from events.domain import (
    Deadlines,
    Event,
    EventId,
    EventPhase,
    GuestLimit,
    Money,
    Payment,
    PhaseRecord,
    UserId,
    Venue,
)
from events.domain.commands import EVENT_PATCH_FIELDS, EventSpec, Patch
from events.domain.errors import PreconditionError, ValidationError
from events.domain.read_models import DJGuests, GuestListData, GuestListExport, TimeslotStatus
from events.services import exports
from events.services.access import load_owned_event, utc_now
from events.stores.interfaces import EventStore, SubmissionStore, TimeslotStore

logger = logging.getLogger(__name__)


def _required_text(values: Mapping[str, Any], field: str) -> str:
    value = values.get(field)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value.strip()


def _optional_text(values: Mapping[str, Any], field: str) -> str | None:
    value = values.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be text", field=field)
    return value.strip() or None


def _required_date(values: Mapping[str, Any], field: str) -> date:
    value = values.get(field)
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    raise ValidationError(f"{field} must be a valid date", field=field)


def _money(values: Mapping[str, Any], field: str, required: bool) -> Money | None:
    value = values.get(field)
    if value is None:
        if required:
            raise ValidationError(f"{field} is required", field=field)
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        amount = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"{field} must be a number", field=field) from exc
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        return Money(amount)
    except ValueError as exc:
        raise ValidationError(f"{field} cannot be negative", field=field) from exc


def _guest_limit(values: Mapping[str, Any]) -> GuestLimit | None:
    value = values.get("guest_limit_per_dj")
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            "guest_limit_per_dj must be a whole number", field="guest_limit_per_dj"
        )
    try:
        return GuestLimit(value)
    except ValueError as exc:
        raise ValidationError(str(exc), field="guest_limit_per_dj") from exc


def validated_details(values: Mapping[str, Any]) -> dict[str, Any]:
    """Validate flat event values and build the editable Event fields."""
    name = _required_text(values, "name")
    event_date = _required_date(values, "date")
    try:
        venue = Venue(
            name=str(values.get("venue_name") or "").strip(),
            address=str(values.get("venue_address") or "").strip(),
        )
    except ValueError as exc:
        raise ValidationError(str(exc), field="venue") from exc
    deadlines = Deadlines(
        guest_list=_required_date(values, "guest_list_deadline"),
        promo_materials=_required_date(values, "promo_materials_deadline"),
    )
    payment = Payment(
        amount=_money(values, "payment_amount", required=True),
        currency=_required_text(values, "payment_currency").upper(),
        due_date=_required_date(values, "payment_due_date"),
        per_dj=_money(values, "payment_per_dj", required=False),
    )
    return {
        "name": name,
        "date": event_date,
        "venue": venue,
        "deadlines": deadlines,
        "payment": payment,
        "description": _optional_text(values, "description"),
        "hashtags": _optional_text(values, "hashtags"),
        "guest_limit_per_dj": _guest_limit(values),
    }


def _flat_values(event: Event) -> dict[str, Any]:
    return {
        "name": event.name,
        "date": event.date,
        "venue_name": event.venue.name,
        "venue_address": event.venue.address,
        "description": event.description,
        "hashtags": event.hashtags,
        "guest_list_deadline": event.deadlines.guest_list,
        "promo_materials_deadline": event.deadlines.promo_materials,
        "payment_amount": event.payment.amount.amount,
        "payment_per_dj": event.payment.per_dj.amount if event.payment.per_dj else None,
        "payment_currency": event.payment.currency,
        "payment_due_date": event.payment.due_date,
        "guest_limit_per_dj": (
            event.guest_limit_per_dj.value if event.guest_limit_per_dj is not None else None
        ),
    }


class EventService:
    """Service for organizer-side event operations."""

    def __init__(
        self,
        events: EventStore,
        timeslots: TimeslotStore,
        submissions: SubmissionStore,
        clock=utc_now,
    ) -> None:
        self._events = events
        self._timeslots = timeslots
        self._submissions = submissions
        self._clock = clock

    def create_event(self, organizer_id: UserId, spec: EventSpec) -> Event:
        """Create a draft event owned by ``organizer_id``.

        Raises:
            ValidationError: If the event details are malformed.
        """
        details = validated_details(asdict(spec))
        now = self._clock()
        event = Event(
            id=EventId(uuid.uuid4()),
            organizer_id=organizer_id,
            phase=EventPhase.DRAFT,
            phase_record=PhaseRecord(entered_at=now, entered_by=organizer_id),
            created_at=now,
            updated_at=now,
            **details,
        )
        created = self._events.add_event(event)
        logger.info("Event %s created by %s", created.id, organizer_id)
        return created

    def list_events(self, organizer_id: UserId) -> list[Event]:
        """Return the organizer's events, newest first."""
        return self._events.list_events(organizer_id)

    def get_event(self, event_id: str, requester_id: UserId) -> Event:
        """Return an event by ID.

        Raises:
            EventNotFoundError: If the id is malformed or the event does not exist.
            AuthorizationError: If the requester is not the organizer.
        """
        return load_owned_event(self._events, event_id, requester_id)

    def update_event(self, event_id: str, requester_id: UserId, patch: Patch) -> Event:
        """Apply a sparse patch to an event's editable fields.

        Raises:
            EventNotFoundError, AuthorizationError: As for get_event.
            ValidationError: If the patch names unknown or read-only fields, or
                the merged event would be invalid.
            PreconditionError: If the event is completed or cancelled.
        """
        event = load_owned_event(self._events, event_id, requester_id)
        unknown = patch.unknown_fields(EVENT_PATCH_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown or read-only fields: {', '.join(unknown)}")
        if event.phase.is_terminal:
            raise PreconditionError(
                "event_editable", f"Event is {event.phase.value} and can no longer be edited"
            )
        if not patch:
            return event

        values = _flat_values(event)
        values.update(patch.changes)
        updated = replace(event, **validated_details(values), updated_at=self._clock())
        saved = self._events.update_event_details(updated)
        logger.info("Event %s updated fields %s", event.id, sorted(patch.changes))
        return saved

    def get_submission_status(self, event_id: str, requester_id: UserId) -> list[TimeslotStatus]:
        """Return one status row per timeslot, ordered by start time.

        ``has_submitted`` comes from the submissions themselves, not from the
        timeslot's denormalized reference.
        """
        event = load_owned_event(self._events, event_id, requester_id)
        submissions = {s.timeslot_id: s for s in self._submissions.list_submissions(event.id)}
        rows = []
        for timeslot in self._timeslots.list_timeslots(event.id):
            submission = submissions.get(timeslot.id)
            rows.append(
                TimeslotStatus(
                    timeslot_id=timeslot.id,
                    dj_name=timeslot.dj_name,
                    dj_instagram=timeslot.dj_instagram,
                    start_time=timeslot.start_time,
                    end_time=timeslot.end_time,
                    has_submitted=submission is not None,
                    submitted_at=submission.submitted_at if submission else None,
                    guest_count=len(submission.guest_list) if submission else 0,
                    file_count=len(submission.promo_materials.files) if submission else 0,
                )
            )
        return rows

    def guest_list(self, event_id: str, requester_id: UserId) -> GuestListData:
        """Collect every submitted guest, grouped by DJ in timeslot order.

        Submissions whose timeslot no longer exists are left out.
        """
        event = load_owned_event(self._events, event_id, requester_id)
        timeslots = self._timeslots.list_timeslots(event.id)
        by_id = {t.id: t for t in timeslots}
        submissions = [
            s for s in self._submissions.list_submissions(event.id) if s.timeslot_id in by_id
        ]
        submissions.sort(key=lambda s: by_id[s.timeslot_id].start_time)

        djs = []
        for submission in submissions:
            timeslot = by_id[submission.timeslot_id]
            djs.append(
                DJGuests(
                    dj_name=timeslot.dj_name,
                    dj_instagram=timeslot.dj_instagram,
                    timeslot=f"{timeslot.start_time:%H:%M} - {timeslot.end_time:%H:%M}",
                    guests=submission.guest_list,
                )
            )
        return GuestListData(event=event, djs=tuple(djs), total_djs=len(timeslots))

    def export_guest_list(
        self, event_id: str, requester_id: UserId, fmt: str = "csv"
    ) -> GuestListExport:
        """Render the guest list as a CSV or Excel file for the door staff.

        Raises:
            ValidationError: If ``fmt`` is not csv or xlsx.
        """
        renderer = exports.renderer_for(fmt)
        export = renderer(self.guest_list(event_id, requester_id))
        logger.info("Guest list of event %s exported as %s", event_id, fmt)
        return export
