from events.handlers.views import (
    EventActionsView,
    EventDetailView,
    EventListView,
    EventPhaseView,
    GuestListExportView,
    SubmissionStatusView,
    SubmitView,
    TimeslotDetailView,
    TimeslotFileView,
    TimeslotListView,
    TimeslotSubmissionView,
    TimeslotTokenView,
    UploadTicketView,
)

__all__ = [
    "EventActionsView",
    "EventDetailView",
    "EventListView",
    "EventPhaseView",
    "GuestListExportView",
    "SubmissionStatusView",
    "SubmitView",
    "TimeslotDetailView",
    "TimeslotFileView",
    "TimeslotListView",
    "TimeslotSubmissionView",
    "TimeslotTokenView",
    "UploadTicketView",
]
