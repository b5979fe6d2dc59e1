"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses (see handlers/errors.py)
- Never contain business logic
- Never expose internal error details
"""

from django.http import HttpResponse
from rest_framework import status
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from events.domain.commands import Patch
from events.handlers.cache import cache_resolution, get_cached_resolution
from events.handlers.serializers import (
    AvailableActionSerializer,
    EventInputSerializer,
    EventSerializer,
    FileLinkSerializer,
    GuestListByDJSerializer,
    PhaseChangeSerializer,
    SubmissionInputSerializer,
    SubmissionResultSerializer,
    SubmissionSerializer,
    TimeslotInputSerializer,
    TimeslotSerializer,
    TimeslotStatusSerializer,
    TokenResolutionSerializer,
    UploadTicketSerializer,
)
from events.services import exports
from events.wiring import get_services

DJ_CONTEXT = {"mask_sensitive": True}


def _requester(request: Request):
    return request.user.id


class EventListView(APIView):
    """Handler for GET/POST /api/events"""

    def get(self, request: Request) -> Response:
        events = get_services().events.list_events(_requester(request))
        return Response(EventSerializer(events, many=True).data)

    def post(self, request: Request) -> Response:
        serializer = EventInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = get_services().events.create_event(_requester(request), serializer.to_spec())
        return Response(EventSerializer(event).data, status=status.HTTP_201_CREATED)


class EventDetailView(APIView):
    """Handler for GET/PATCH /api/events/{event_id}"""

    def get(self, request: Request, event_id: str) -> Response:
        event = get_services().events.get_event(event_id, _requester(request))
        return Response(EventSerializer(event).data)

    def patch(self, request: Request, event_id: str) -> Response:
        serializer = EventInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        event = get_services().events.update_event(
            event_id, _requester(request), Patch.of(**serializer.to_changes())
        )
        return Response(EventSerializer(event).data)


class EventPhaseView(APIView):
    """Handler for POST /api/events/{event_id}/phase"""

    def post(self, request: Request, event_id: str) -> Response:
        serializer = PhaseChangeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        event = get_services().phases.transition_phase(
            event_id,
            _requester(request),
            serializer.validated_data["phase"],
            reason=serializer.validated_data.get("reason"),
        )
        return Response(EventSerializer(event).data)


class EventActionsView(APIView):
    """Handler for GET /api/events/{event_id}/actions"""

    def get(self, request: Request, event_id: str) -> Response:
        actions = get_services().phases.available_actions(event_id, _requester(request))
        return Response(AvailableActionSerializer(actions, many=True).data)


class SubmissionStatusView(APIView):
    """Handler for GET /api/events/{event_id}/submissions"""

    def get(self, request: Request, event_id: str) -> Response:
        rows = get_services().events.get_submission_status(event_id, _requester(request))
        return Response(
            {
                "total": len(rows),
                "submitted": sum(1 for row in rows if row.has_submitted),
                "timeslots": TimeslotStatusSerializer(rows, many=True).data,
            }
        )


class GuestListExportView(APIView):
    """Handler for GET /api/events/{event_id}/guest-list

    ``?format=`` selects a csv (default) or xlsx download, ``by_dj`` for the
    list grouped by DJ, or ``sheets`` for spreadsheet rows with a title.
    """

    file_format = None

    def get(self, request: Request, event_id: str) -> HttpResponse:
        fmt = self.file_format or request.query_params.get("format", "csv")
        services = get_services()
        if fmt == "by_dj":
            data = services.events.guest_list(event_id, _requester(request))
            return Response(GuestListByDJSerializer(data).data)
        if fmt == "sheets":
            data = services.events.guest_list(event_id, _requester(request))
            return Response({"title": exports.sheet_title(data), "rows": exports.guest_rows(data)})

        export = services.events.export_guest_list(event_id, _requester(request), fmt)
        content_type = export.mime_type
        if isinstance(export.content, str):
            content_type = f"{content_type}; charset=utf-8"
        response = HttpResponse(export.content, content_type=content_type)
        response["Content-Disposition"] = f'attachment; filename="{export.filename}"'
        response["X-Total-Guests"] = str(export.total_guests)
        response["X-Total-DJs"] = str(export.total_djs)
        response["X-Submitted-DJs"] = str(export.submitted_djs)
        return response


class TimeslotListView(APIView):
    """Handler for GET/POST /api/events/{event_id}/timeslots"""

    def get(self, request: Request, event_id: str) -> Response:
        timeslots = get_services().timeslots.list_timeslots(event_id, _requester(request))
        return Response(TimeslotSerializer(timeslots, many=True).data)

    def post(self, request: Request, event_id: str) -> Response:
        serializer = TimeslotInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        timeslot, _ = get_services().timeslots.create_timeslot(
            event_id, _requester(request), serializer.to_spec()
        )
        return Response(TimeslotSerializer(timeslot).data, status=status.HTTP_201_CREATED)


class TimeslotDetailView(APIView):
    """Handler for PATCH/DELETE /api/timeslots/{timeslot_id}"""

    def patch(self, request: Request, timeslot_id: str) -> Response:
        serializer = TimeslotInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        timeslot = get_services().timeslots.update_timeslot(
            timeslot_id, _requester(request), Patch.of(**serializer.to_changes())
        )
        return Response(TimeslotSerializer(timeslot).data)

    def delete(self, request: Request, timeslot_id: str) -> Response:
        get_services().timeslots.delete_timeslot(timeslot_id, _requester(request))
        return Response(status=status.HTTP_204_NO_CONTENT)


class TimeslotTokenView(APIView):
    """Handler for POST /api/timeslots/{timeslot_id}/token"""

    def post(self, request: Request, timeslot_id: str) -> Response:
        timeslot, _ = get_services().timeslots.rotate_token(timeslot_id, _requester(request))
        return Response(TimeslotSerializer(timeslot).data)


class TimeslotSubmissionView(APIView):
    """Handler for GET /api/timeslots/{timeslot_id}/submission"""

    def get(self, request: Request, timeslot_id: str) -> Response:
        submission = get_services().submissions.get_submission(timeslot_id, _requester(request))
        if submission is None:
            return Response({"submission": None})
        return Response({"submission": SubmissionSerializer(submission).data})


class TimeslotFileView(APIView):
    """Handler for GET /api/timeslots/{timeslot_id}/files/{storage_ref}"""

    def get(self, request: Request, timeslot_id: str, storage_ref: str) -> Response:
        link = get_services().submissions.get_file_url(
            timeslot_id, storage_ref, _requester(request)
        )
        return Response(FileLinkSerializer(link).data)


class SubmitView(APIView):
    """Handler for GET/PUT /api/submit/{token}

    Anonymous: the token itself is the credential. Successful lookups are
    cached; signals drop the entry when the timeslot, its event or its
    submission changes.
    """

    authentication_classes = []
    permission_classes = [AllowAny]

    def get(self, request: Request, token: str) -> Response:
        cached = get_cached_resolution(token)
        if cached is not None:
            return Response(cached)
        resolution = get_services().timeslots.resolve_by_token(token)
        data = TokenResolutionSerializer(resolution, context=DJ_CONTEXT).data
        cache_resolution(token, resolution.timeslot.id, data)
        return Response(data)

    def put(self, request: Request, token: str) -> Response:
        serializer = SubmissionInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = get_services().submissions.save_submission(
            serializer.validated_data["timeslot_id"], token, serializer.to_payload()
        )
        return Response(
            SubmissionResultSerializer(result, context=DJ_CONTEXT).data,
            status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK,
        )


class UploadTicketView(APIView):
    """Handler for POST /api/uploads"""

    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request: Request) -> Response:
        ticket = get_services().submissions.generate_upload_reference()
        return Response(UploadTicketSerializer(ticket).data, status=status.HTTP_201_CREATED)
