"""Phase service: moves events through their lifecycle."""

import logging

from events.domain import Event, EventPhase, PhaseRecord, UserId
from events.domain.errors import InvalidTransitionError, PreconditionError
from events.domain.phases import (
    AvailableAction,
    Capabilities,
    Precondition,
    compute_capabilities,
    find_transition,
    get_available_actions,
)
from events.services.access import load_owned_event, utc_now
from events.stores.interfaces import EventStore, SubmissionStore, TimeslotStore

logger = logging.getLogger(__name__)

PRECONDITION_MESSAGES = {
    Precondition.HAS_TIMESLOTS: "Add at least one timeslot before publishing",
    Precondition.HAS_REQUIRED_INFO: "Fill in the venue, deadlines and payment details first",
    Precondition.HAS_ALL_SUBMISSIONS: (
        "Every timeslot needs a submission with promo files and guests"
    ),
    Precondition.EVENT_DAY_REACHED: "The event day has not arrived yet",
}


class PhaseService:
    """Service evaluating and applying phase transitions."""

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

    def capabilities_for(self, event: Event) -> Capabilities:
        timeslot_ids = {t.id for t in self._timeslots.list_timeslots(event.id)}
        complete = sum(
            1
            for s in self._submissions.list_submissions(event.id)
            if s.timeslot_id in timeslot_ids and s.is_complete(event.guest_limit_per_dj)
        )
        return compute_capabilities(
            has_required_info=event.has_required_info,
            timeslot_count=len(timeslot_ids),
            complete_submission_count=complete,
            event_date=event.date,
            today=self._clock().date(),
        )

    def transition_phase(
        self,
        event_id: str,
        requester_id: UserId,
        to_phase: str | EventPhase,
        reason: str | None = None,
    ) -> Event:
        """Move an event to ``to_phase``.

        The store applies the change only if the event is still in the phase
        read here, so two concurrent transitions cannot both succeed.

        Raises:
            EventNotFoundError, AuthorizationError: If the event is not the requester's.
            InvalidTransitionError: If the edge is not in the table, or the
                event moved on in the meantime.
            PreconditionError: If a precondition of the edge does not hold.
        """
        event = load_owned_event(self._events, event_id, requester_id)
        try:
            target = EventPhase(to_phase)
        except ValueError as exc:
            raise InvalidTransitionError(event.phase.value, str(to_phase)) from exc

        transition = find_transition(event.phase, target)
        if transition is None:
            raise InvalidTransitionError(event.phase.value, target.value)
        unmet = self.capabilities_for(event).unmet(transition)
        if unmet:
            first = unmet[0]
            raise PreconditionError(first.value, PRECONDITION_MESSAGES[first])

        record = PhaseRecord(
            entered_at=self._clock(),
            entered_by=requester_id,
            reason=((reason or "").strip() or None) if target is EventPhase.CANCELLED else None,
        )
        moved = self._events.transition_phase(event.id, event.phase, target, record)
        if moved is None:
            current = self._events.get_event(event.id)
            actual = current.phase.value if current is not None else event.phase.value
            logger.warning(
                "Phase change %s -> %s lost a race on event %s (now %s)",
                event.phase.value,
                target.value,
                event.id,
                actual,
            )
            raise InvalidTransitionError(actual, target.value)

        logger.info(
            "Event %s moved %s -> %s by %s",
            event.id,
            event.phase.value,
            target.value,
            requester_id,
        )
        return moved

    def available_actions(self, event_id: str, requester_id: UserId) -> list[AvailableAction]:
        event = load_owned_event(self._events, event_id, requester_id)
        return get_available_actions(event.phase, self.capabilities_for(event))
