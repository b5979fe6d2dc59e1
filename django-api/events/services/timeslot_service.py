"""Timeslot service: schedule management and the DJ token read path."""

import logging
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from events.domain import Event, Timeslot, TimeslotId, UserId
from events.domain.commands import TIMESLOT_PATCH_FIELDS, Patch, TimeslotSpec
from events.domain.errors import (
    ConflictError,
    InvalidTokenError,
    PreconditionError,
    StoreUnavailableError,
    ValidationError,
)
from events.domain.read_models import PublicEventView, TokenResolution
from events.services.access import load_owned_event, load_owned_timeslot
from events.services.token_issuer import TokenIssuer, is_well_formed, tokens_match
from events.stores.interfaces import (
    DuplicateRecordError,
    EventStore,
    SubmissionStore,
    TimeslotStore,
)

logger = logging.getLogger(__name__)

MAX_TOKEN_ATTEMPTS = 5


def _check_schedule(start_time: object, end_time: object, dj_name: object) -> None:
    if not isinstance(start_time, datetime) or not isinstance(end_time, datetime):
        raise ValidationError("start_time and end_time must be datetimes", field="start_time")
    try:
        ordered = start_time < end_time
    except TypeError as exc:
        raise ValidationError(
            "start_time and end_time must both carry a timezone", field="start_time"
        ) from exc
    if not ordered:
        raise ValidationError("start_time must be before end_time", field="end_time")
    if not isinstance(dj_name, str) or not dj_name.strip():
        raise ValidationError("dj_name is required", field="dj_name")


def _ensure_open(event: Event) -> None:
    if event.phase.is_terminal:
        raise PreconditionError(
            "event_editable", f"Event is {event.phase.value}; its lineup can no longer change"
        )


class TimeslotService:
    """Service for timeslot operations and token redemption lookups."""

    def __init__(
        self,
        events: EventStore,
        timeslots: TimeslotStore,
        submissions: SubmissionStore,
        issuer: TokenIssuer,
    ) -> None:
        self._events = events
        self._timeslots = timeslots
        self._submissions = submissions
        self._issuer = issuer

    def _with_fresh_token(self, write: Callable[[str], Timeslot]) -> Timeslot:
        """Run ``write`` with a token no other timeslot holds.

        The pre-check keeps retries cheap; the store's unique index decides
        when two writers race for the same token.
        """
        for attempt in range(1, MAX_TOKEN_ATTEMPTS + 1):
            token = self._issuer.issue()
            if self._timeslots.token_exists(token):
                logger.warning("Submission token collision on attempt %d; reissuing", attempt)
                continue
            try:
                return write(token)
            except DuplicateRecordError:
                logger.warning("Submission token taken concurrently on attempt %d", attempt)
        raise StoreUnavailableError("issue_token")

    def create_timeslot(
        self, event_id: str, requester_id: UserId, spec: TimeslotSpec
    ) -> tuple[Timeslot, str]:
        """Add a timeslot to an event and mint its submission token.

        Raises:
            EventNotFoundError, AuthorizationError: If the event is not the requester's.
            ValidationError: If start_time is not strictly before end_time.
            PreconditionError: If the event is completed or cancelled.
        """
        event = load_owned_event(self._events, event_id, requester_id)
        _check_schedule(spec.start_time, spec.end_time, spec.dj_name)
        _ensure_open(event)

        draft = Timeslot(
            id=TimeslotId(uuid.uuid4()),
            event_id=event.id,
            start_time=spec.start_time,
            end_time=spec.end_time,
            dj_name=spec.dj_name.strip(),
            dj_instagram=(spec.dj_instagram or "").strip(),
        )
        timeslot = self._with_fresh_token(
            lambda token: self._timeslots.add_timeslot(replace(draft, submission_token=token))
        )
        logger.info("Timeslot %s created for event %s", timeslot.id, event.id)
        return timeslot, timeslot.submission_token

    def list_timeslots(self, event_id: str, requester_id: UserId) -> list[Timeslot]:
        event = load_owned_event(self._events, event_id, requester_id)
        return self._timeslots.list_timeslots(event.id)

    def update_timeslot(self, timeslot_id: str, requester_id: UserId, patch: Patch) -> Timeslot:
        """Change a timeslot's times or DJ details.

        The submission token is not patchable; see rotate_token.
        """
        timeslot, event = load_owned_timeslot(
            self._events, self._timeslots, timeslot_id, requester_id
        )
        unknown = patch.unknown_fields(TIMESLOT_PATCH_FIELDS)
        if unknown:
            raise ValidationError(f"Unknown or read-only fields: {', '.join(unknown)}")
        _ensure_open(event)
        if not patch:
            return timeslot

        merged = replace(timeslot, **patch.changes)
        _check_schedule(merged.start_time, merged.end_time, merged.dj_name)
        merged = replace(
            merged,
            dj_name=merged.dj_name.strip(),
            dj_instagram=(merged.dj_instagram or "").strip(),
        )
        return self._timeslots.update_schedule(merged)

    def rotate_token(self, timeslot_id: str, requester_id: UserId) -> tuple[Timeslot, str]:
        """Replace the submission token, invalidating the old link.

        Raises:
            ConflictError: If a submission already exists for the timeslot,
                since its DJ would lose the way back to it.
        """
        timeslot, _ = load_owned_timeslot(self._events, self._timeslots, timeslot_id, requester_id)
        if self._submissions.get_submission_for_timeslot(timeslot.id) is not None:
            raise ConflictError("Cannot rotate the link of a timeslot that has a submission")
        rotated = self._with_fresh_token(
            lambda token: self._timeslots.set_token(timeslot.id, token)
        )
        logger.info("Submission token rotated for timeslot %s", timeslot.id)
        return rotated, rotated.submission_token

    def delete_timeslot(self, timeslot_id: str, requester_id: UserId) -> None:
        """Remove a timeslot that has no submission yet.

        Raises:
            ConflictError: If a submission references the timeslot.
        """
        timeslot, _ = load_owned_timeslot(self._events, self._timeslots, timeslot_id, requester_id)
        if self._submissions.get_submission_for_timeslot(timeslot.id) is not None:
            raise ConflictError("Cannot delete a timeslot that has a submission")
        self._timeslots.delete_timeslot(timeslot.id)
        logger.info("Timeslot %s deleted", timeslot.id)

    def resolve_by_token(self, token: str) -> TokenResolution:
        """Return what a DJ holding ``token`` may see.

        Raises:
            InvalidTokenError: If no timeslot holds the token or its event is
                gone. Both causes look the same to the caller.
        """
        if not is_well_formed(token):
            raise InvalidTokenError()
        timeslot = self._timeslots.get_timeslot_by_token(token)
        if timeslot is None or not tokens_match(timeslot.submission_token, token):
            raise InvalidTokenError()
        event = self._events.get_event(timeslot.event_id)
        if event is None:
            logger.warning("Timeslot %s points at a missing event", timeslot.id)
            raise InvalidTokenError()
        return TokenResolution(
            timeslot=timeslot,
            event=PublicEventView.from_event(event),
            existing_submission=self._submissions.get_submission_for_timeslot(timeslot.id),
        )

    def issue_missing_tokens(self) -> int:
        """Give every timeslot without a token a fresh one. Returns the count."""
        updated = 0
        for timeslot in self._timeslots.list_timeslots_without_token():
            self._with_fresh_token(lambda token: self._timeslots.set_token(timeslot.id, token))
            updated += 1
        logger.info("Issued submission tokens for %d timeslots", updated)
        return updated
