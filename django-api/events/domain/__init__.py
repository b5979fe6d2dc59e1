from events.domain.models import (
    Deadlines,
    Event,
    Guest,
    Milestones,
    Payment,
    PaymentInfo,
    PhaseRecord,
    PromoFile,
    PromoMaterials,
    Submission,
    Timeslot,
    User,
)
from events.domain.phases import EventPhase, PhaseAction
from events.domain.value_objects import (
    EventId,
    GuestLimit,
    Money,
    SubmissionId,
    TimeslotId,
    UserId,
    Venue,
)

__all__ = [
    "Deadlines",
    "Event",
    "Guest",
    "Milestones",
    "Payment",
    "PaymentInfo",
    "PhaseRecord",
    "PromoFile",
    "PromoMaterials",
    "Submission",
    "Timeslot",
    "User",
    "EventPhase",
    "PhaseAction",
    "EventId",
    "GuestLimit",
    "Money",
    "SubmissionId",
    "TimeslotId",
    "UserId",
    "Venue",
]
