"""Event lifecycle phases and the transition table.

Everything in this module is pure: the same inputs always produce the same
outputs, with no store access and no clock reads. Services feed it the
current phase and a ``Capabilities`` snapshot.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum


class EventPhase(Enum):
    """Position of an event in its lifecycle."""

    DRAFT = "draft"
    PLANNING = "planning"
    FINALIZED = "finalized"
    DAY_OF = "day_of"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_PHASES


TERMINAL_PHASES = frozenset({EventPhase.COMPLETED, EventPhase.CANCELLED})


class PhaseAction(Enum):
    """Organizer actions that move an event between phases."""

    PUBLISH_EVENT = "PUBLISH_EVENT"
    FINALIZE_EVENT = "FINALIZE_EVENT"
    START_EVENT_DAY = "START_EVENT_DAY"
    COMPLETE_EVENT = "COMPLETE_EVENT"
    CANCEL_EVENT = "CANCEL_EVENT"


class Precondition(Enum):
    """Named business rules gating a transition."""

    HAS_TIMESLOTS = "has_timeslots"
    HAS_REQUIRED_INFO = "has_required_info"
    HAS_ALL_SUBMISSIONS = "has_all_submissions"
    EVENT_DAY_REACHED = "event_day_reached"


@dataclass(frozen=True)
class Transition:
    action: PhaseAction
    source: EventPhase
    target: EventPhase
    preconditions: tuple[Precondition, ...] = ()


TRANSITIONS: tuple[Transition, ...] = (
    Transition(
        PhaseAction.PUBLISH_EVENT,
        EventPhase.DRAFT,
        EventPhase.PLANNING,
        (Precondition.HAS_TIMESLOTS, Precondition.HAS_REQUIRED_INFO),
    ),
    Transition(
        PhaseAction.FINALIZE_EVENT,
        EventPhase.PLANNING,
        EventPhase.FINALIZED,
        (Precondition.HAS_ALL_SUBMISSIONS,),
    ),
    Transition(
        PhaseAction.START_EVENT_DAY,
        EventPhase.FINALIZED,
        EventPhase.DAY_OF,
        (Precondition.EVENT_DAY_REACHED,),
    ),
    Transition(PhaseAction.COMPLETE_EVENT, EventPhase.DAY_OF, EventPhase.COMPLETED),
) + tuple(
    Transition(PhaseAction.CANCEL_EVENT, phase, EventPhase.CANCELLED)
    for phase in EventPhase
    if phase not in TERMINAL_PHASES
)

_BY_EDGE: dict[tuple[EventPhase, EventPhase], Transition] = {
    (t.source, t.target): t for t in TRANSITIONS
}


def find_transition(source: EventPhase, target: EventPhase) -> Transition | None:
    """Return the table edge for ``source -> target``, or None."""
    return _BY_EDGE.get((source, target))


@dataclass(frozen=True)
class Capabilities:
    """Snapshot of an event's state used to evaluate preconditions."""

    has_timeslots: bool = False
    has_required_info: bool = False
    has_all_submissions: bool = False
    event_day_reached: bool = False

    def satisfies(self, precondition: Precondition) -> bool:
        return bool(getattr(self, precondition.value))

    def unmet(self, transition: Transition) -> list[Precondition]:
        return [p for p in transition.preconditions if not self.satisfies(p)]


def compute_capabilities(
    *,
    has_required_info: bool,
    timeslot_count: int,
    complete_submission_count: int,
    event_date: date,
    today: date,
) -> Capabilities:
    """Derive capabilities from counts gathered by the caller.

    ``complete_submission_count`` counts timeslots whose submission carries
    at least one promo file and one guest, or no guests when the event
    allows none.
    """
    return Capabilities(
        has_timeslots=timeslot_count > 0,
        has_required_info=has_required_info,
        has_all_submissions=timeslot_count > 0
        and complete_submission_count >= timeslot_count,
        event_day_reached=today >= event_date,
    )


@dataclass(frozen=True)
class AvailableAction:
    """An action the organizer can take right now."""

    action: PhaseAction
    target: EventPhase
    label: str
    confirm_message: str | None
    destructive: bool = False

    @property
    def confirm_required(self) -> bool:
        return self.confirm_message is not None


_LABELS = {
    PhaseAction.PUBLISH_EVENT: "Publish Event",
    PhaseAction.FINALIZE_EVENT: "Finalize Lineup",
    PhaseAction.START_EVENT_DAY: "Start Event Day",
    PhaseAction.COMPLETE_EVENT: "Mark as Completed",
    PhaseAction.CANCEL_EVENT: "Cancel Event",
}

_CONFIRM_MESSAGES = {
    PhaseAction.PUBLISH_EVENT: "Publishing will make this event visible to DJs. Continue?",
    PhaseAction.FINALIZE_EVENT: (
        "Finalizing confirms the lineup. DJs can still update their submissions. Continue?"
    ),
    PhaseAction.START_EVENT_DAY: None,
    PhaseAction.COMPLETE_EVENT: "Mark this event as completed?",
}

_CANCEL_MESSAGES = {
    EventPhase.DRAFT: "Are you sure you want to cancel this event?",
    EventPhase.PLANNING: (
        "Are you sure you want to cancel this event? DJs may already have submitted."
    ),
}
_DEFAULT_CANCEL_MESSAGE = "Are you sure you want to cancel this event? DJs have been booked."


def get_available_actions(
    phase: EventPhase, capabilities: Capabilities
) -> list[AvailableAction]:
    """Return the actions whose preconditions hold for ``phase``.

    Actions are listed in table order, so cancellation always comes last.
    """
    actions = []
    for transition in TRANSITIONS:
        if transition.source is not phase or capabilities.unmet(transition):
            continue
        if transition.action is PhaseAction.CANCEL_EVENT:
            message = _CANCEL_MESSAGES.get(phase, _DEFAULT_CANCEL_MESSAGE)
        else:
            message = _CONFIRM_MESSAGES[transition.action]
        actions.append(
            AvailableAction(
                action=transition.action,
                target=transition.target,
                label=_LABELS[transition.action],
                confirm_message=message,
                destructive=transition.action is PhaseAction.CANCEL_EVENT,
            )
        )
    return actions
