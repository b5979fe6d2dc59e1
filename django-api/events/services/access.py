"""Id parsing and ownership checks shared by the organizer-facing services."""

from datetime import datetime, timezone

from events.domain import Event, EventId, Timeslot, TimeslotId, UserId
from events.domain.errors import (
    AuthorizationError,
    EventNotFoundError,
    TimeslotNotFoundError,
)
from events.stores.interfaces import EventStore, TimeslotStore


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_event_id(event_id: str) -> EventId:
    """Parse an event id; malformed ids are reported as not found."""
    try:
        return EventId.from_string(str(event_id))
    except ValueError as exc:
        raise EventNotFoundError(str(event_id)) from exc


def parse_timeslot_id(timeslot_id: str) -> TimeslotId:
    try:
        return TimeslotId.from_string(str(timeslot_id))
    except ValueError as exc:
        raise TimeslotNotFoundError(str(timeslot_id)) from exc


def load_owned_event(store: EventStore, event_id: str, requester_id: UserId) -> Event:
    """Return the event if ``requester_id`` organizes it.

    Raises:
        EventNotFoundError: If the id is malformed or the event does not exist.
        AuthorizationError: If the requester is not the organizer.
    """
    event = store.get_event(parse_event_id(event_id))
    if event is None:
        raise EventNotFoundError(str(event_id))
    if not event.is_owned_by(requester_id):
        raise AuthorizationError()
    return event


def load_owned_timeslot(
    events: EventStore, timeslots: TimeslotStore, timeslot_id: str, requester_id: UserId
) -> tuple[Timeslot, Event]:
    """Return a timeslot and its event if ``requester_id`` organizes the event."""
    timeslot = timeslots.get_timeslot(parse_timeslot_id(timeslot_id))
    if timeslot is None:
        raise TimeslotNotFoundError(str(timeslot_id))
    event = events.get_event(timeslot.event_id)
    if event is None:
        raise EventNotFoundError(str(timeslot.event_id))
    if not event.is_owned_by(requester_id):
        raise AuthorizationError()
    return timeslot, event
