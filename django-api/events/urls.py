from django.urls import path

from events.handlers import (
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

urlpatterns = [
    path("events", EventListView.as_view(), name="event-list"),
    path("events/<str:event_id>", EventDetailView.as_view(), name="event-detail"),
    path("events/<str:event_id>/phase", EventPhaseView.as_view(), name="event-phase"),
    path("events/<str:event_id>/actions", EventActionsView.as_view(), name="event-actions"),
    path(
        "events/<str:event_id>/submissions",
        SubmissionStatusView.as_view(),
        name="event-submissions",
    ),
    path(
        "events/<str:event_id>/guest-list",
        GuestListExportView.as_view(),
        name="event-guest-list",
    ),
    path(
        "events/<str:event_id>/guest-list.csv",
        GuestListExportView.as_view(file_format="csv"),
        name="event-guest-list-csv",
    ),
    path(
        "events/<str:event_id>/timeslots",
        TimeslotListView.as_view(),
        name="timeslot-list",
    ),
    path("timeslots/<str:timeslot_id>", TimeslotDetailView.as_view(), name="timeslot-detail"),
    path(
        "timeslots/<str:timeslot_id>/token",
        TimeslotTokenView.as_view(),
        name="timeslot-token",
    ),
    path(
        "timeslots/<str:timeslot_id>/submission",
        TimeslotSubmissionView.as_view(),
        name="timeslot-submission",
    ),
    path(
        "timeslots/<str:timeslot_id>/files/<str:storage_ref>",
        TimeslotFileView.as_view(),
        name="timeslot-file",
    ),
    path("submit/<str:token>", SubmitView.as_view(), name="submit"),
    path("uploads", UploadTicketView.as_view(), name="upload-ticket"),
]
