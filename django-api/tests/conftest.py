"""Pytest configuration and shared fixtures.

Service tests run against in-memory stores that implement the store
interfaces, uniqueness rules included. API and store tests use the database.
"""

from dataclasses import replace
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from events.domain.commands import (
    EventSpec,
    ExternalIdentity,
    FileUpload,
    GuestEntry,
    PaymentDetails,
    SubmissionPayload,
    TimeslotSpec,
)
from events.domain.models import advance_update_time
from events.domain.read_models import UploadTicket
from events.services.event_service import EventService
from events.services.identity_service import IdentityService
from events.services.phase_service import PhaseService
from events.services.submission_service import SubmissionService
from events.services.timeslot_service import TimeslotService
from events.services.token_issuer import TokenIssuer
from events.stores.interfaces import (
    BlobStore,
    DuplicateRecordError,
    EventStore,
    SubmissionStore,
    TimeslotStore,
    UserStore,
)

START = datetime(2026, 11, 1, 12, 0, tzinfo=timezone.utc)
EVENT_DATE = date(2026, 11, 20)


class FixedClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now += timedelta(**delta)


class InMemoryUserStore(UserStore):
    def __init__(self) -> None:
        self.users = {}

    def get_user_by_email(self, email):
        return next((u for u in self.users.values() if u.email == email), None)

    def add_user(self, user):
        if self.get_user_by_email(user.email) is not None:
            raise DuplicateRecordError("user_email")
        self.users[user.id] = user
        return user

    def record_login(self, user_id, at, name=None):
        user = replace(self.users[user_id], last_login_at=at)
        if name is not None:
            user = replace(user, name=name)
        self.users[user_id] = user
        return user


class InMemoryEventStore(EventStore):
    def __init__(self) -> None:
        self.events = {}

    def list_events(self, organizer_id):
        owned = [e for e in self.events.values() if e.organizer_id == organizer_id]
        return sorted(owned, key=lambda e: e.created_at, reverse=True)

    def get_event(self, event_id):
        return self.events.get(event_id)

    def add_event(self, event):
        self.events[event.id] = event
        return event

    def update_event_details(self, event):
        current = self.events[event.id]
        updated = replace(event, phase=current.phase, organizer_id=current.organizer_id)
        self.events[event.id] = updated
        return updated

    def transition_phase(self, event_id, expected, target, record):
        current = self.events.get(event_id)
        if current is None or current.phase is not expected:
            return None
        moved = replace(
            current,
            phase=target,
            phase_record=record,
            updated_at=record.entered_at,
            milestones=current.milestones.stamped(target, record.entered_at),
        )
        self.events[event_id] = moved
        return moved


class InMemoryTimeslotStore(TimeslotStore):
    def __init__(self) -> None:
        self.timeslots = {}

    def _token_taken(self, token, exclude=None):
        return any(
            t.submission_token == token and t.id != exclude for t in self.timeslots.values()
        )

    def get_timeslot(self, timeslot_id):
        return self.timeslots.get(timeslot_id)

    def get_timeslot_by_token(self, token):
        return next((t for t in self.timeslots.values() if t.submission_token == token), None)

    def token_exists(self, token):
        return self._token_taken(token)

    def list_timeslots(self, event_id):
        owned = [t for t in self.timeslots.values() if t.event_id == event_id]
        return sorted(owned, key=lambda t: t.start_time)

    def list_timeslots_without_token(self):
        return [t for t in self.timeslots.values() if t.submission_token is None]

    def add_timeslot(self, timeslot):
        if timeslot.submission_token and self._token_taken(timeslot.submission_token):
            raise DuplicateRecordError("timeslot_token")
        self.timeslots[timeslot.id] = timeslot
        return timeslot

    def update_schedule(self, timeslot):
        current = self.timeslots[timeslot.id]
        updated = replace(
            current,
            start_time=timeslot.start_time,
            end_time=timeslot.end_time,
            dj_name=timeslot.dj_name,
            dj_instagram=timeslot.dj_instagram,
        )
        self.timeslots[timeslot.id] = updated
        return updated

    def set_token(self, timeslot_id, token):
        if self._token_taken(token, exclude=timeslot_id):
            raise DuplicateRecordError("timeslot_token")
        updated = replace(self.timeslots[timeslot_id], submission_token=token)
        self.timeslots[timeslot_id] = updated
        return updated

    def set_submission_ref(self, timeslot_id, submission_id):
        self.timeslots[timeslot_id] = replace(
            self.timeslots[timeslot_id], submission_id=submission_id
        )

    def delete_timeslot(self, timeslot_id):
        self.timeslots.pop(timeslot_id, None)


class InMemorySubmissionStore(SubmissionStore):
    def __init__(self) -> None:
        self.submissions = {}

    def get_submission_for_timeslot(self, timeslot_id):
        return next(
            (s for s in self.submissions.values() if s.timeslot_id == timeslot_id), None
        )

    def list_submissions(self, event_id):
        return [s for s in self.submissions.values() if s.event_id == event_id]

    def add_submission(self, submission):
        if self.get_submission_for_timeslot(submission.timeslot_id) is not None:
            raise DuplicateRecordError("submission_timeslot")
        self.submissions[submission.id] = submission
        return submission

    def replace_content(self, submission):
        current = self.submissions[submission.id]
        updated = replace(
            current,
            promo_materials=submission.promo_materials,
            guest_list=submission.guest_list,
            payment_info=submission.payment_info,
            last_updated_at=advance_update_time(
                current.last_updated_at, submission.last_updated_at
            ),
        )
        self.submissions[submission.id] = updated
        return updated


class FakeBlobStore(BlobStore):
    def __init__(self, clock) -> None:
        self._clock = clock
        self.issued = 0

    def create_upload_ticket(self):
        self.issued += 1
        ref = f"ref-{self.issued}"
        return UploadTicket(
            storage_ref=ref,
            upload_url=f"https://uploads.test/{ref}",
            expires_at=self._clock() + timedelta(minutes=15),
        )

    def create_view_link(self, storage_ref):
        return f"https://files.test/{storage_ref}", self._clock() + timedelta(hours=1)


def make_event_spec(**overrides) -> EventSpec:
    values = {
        "name": "Warehouse Night",
        "date": EVENT_DATE,
        "venue_name": "The Depot",
        "venue_address": "12 Dock Road",
        "guest_list_deadline": date(2026, 11, 15),
        "promo_materials_deadline": date(2026, 11, 10),
        "payment_amount": Decimal("300.00"),
        "payment_currency": "eur",
        "payment_due_date": date(2026, 11, 30),
    }
    values.update(overrides)
    return EventSpec(**values)


def make_timeslot_spec(hour: int = 22, dj_name: str = "DJ Nova", **overrides) -> TimeslotSpec:
    start = datetime(2026, 11, 20, hour, 0, tzinfo=timezone.utc)
    values = {
        "start_time": start,
        "end_time": start + timedelta(hours=1),
        "dj_name": dj_name,
        "dj_instagram": "@" + dj_name.lower().replace(" ", ""),
    }
    values.update(overrides)
    return TimeslotSpec(**values)


def make_payload(files=None, guests=None, **payment_overrides) -> SubmissionPayload:
    if files is None:
        files = (FileUpload("poster.jpg", "image/jpeg", 2048, "ref-poster"),)
    if guests is None:
        guests = (GuestEntry("Alex Kim", "010-1234-5678"), GuestEntry("Sam Lee"))
    payment = {
        "account_holder": "Nova Park",
        "bank_name": "City Bank",
        "account_number": "1234567890",
        "resident_number": "900101-1234567",
    }
    payment.update(payment_overrides)
    return SubmissionPayload(
        files=tuple(files),
        description="Latest mix poster",
        guest_list=tuple(guests),
        payment=PaymentDetails(**payment),
    )


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def timeslot_store() -> InMemoryTimeslotStore:
    return InMemoryTimeslotStore()


@pytest.fixture
def submission_store() -> InMemorySubmissionStore:
    return InMemorySubmissionStore()


@pytest.fixture
def identity_service(user_store, clock) -> IdentityService:
    return IdentityService(user_store, clock=clock)


@pytest.fixture
def event_service(event_store, timeslot_store, submission_store, clock) -> EventService:
    return EventService(event_store, timeslot_store, submission_store, clock=clock)


@pytest.fixture
def timeslot_service(event_store, timeslot_store, submission_store) -> TimeslotService:
    return TimeslotService(event_store, timeslot_store, submission_store, TokenIssuer())


@pytest.fixture
def submission_service(event_store, timeslot_store, submission_store, clock) -> SubmissionService:
    return SubmissionService(
        event_store, timeslot_store, submission_store, FakeBlobStore(clock), clock=clock
    )


@pytest.fixture
def phase_service(event_store, timeslot_store, submission_store, clock) -> PhaseService:
    return PhaseService(event_store, timeslot_store, submission_store, clock=clock)


@pytest.fixture
def organizer(identity_service):
    return identity_service.resolve(ExternalIdentity("organizer@example.com", "Olivia"))


@pytest.fixture
def stranger(identity_service):
    return identity_service.resolve(ExternalIdentity("someone.else@example.com"))


@pytest.fixture
def event(event_service, organizer):
    return event_service.create_event(organizer.id, make_event_spec())


@pytest.fixture
def organizer_client(api_client) -> APIClient:
    api_client.credentials(HTTP_X_AUTH_EMAIL="organizer@example.com", HTTP_X_AUTH_NAME="Olivia")
    return api_client


def event_body(**overrides) -> dict:
    body = {
        "name": "Warehouse Night",
        "date": "2026-11-20",
        "venue_name": "The Depot",
        "venue_address": "12 Dock Road",
        "guest_list_deadline": "2026-11-15",
        "promo_materials_deadline": "2026-11-10",
        "payment_amount": "300.00",
        "payment_currency": "EUR",
        "payment_due_date": "2026-11-30",
    }
    body.update(overrides)
    return body


def timeslot_body(hour: int = 22, dj_name: str = "DJ Nova") -> dict:
    start = datetime(2026, 11, 20, hour, 0, tzinfo=timezone.utc)
    return {
        "start_time": start.isoformat(),
        "end_time": (start + timedelta(hours=1)).isoformat(),
        "dj_name": dj_name,
        "dj_instagram": "@djnova",
    }


def submission_body(timeslot_id: str, guests=None) -> dict:
    if guests is None:
        guests = [{"name": "Alex Kim", "phone": "010-1234-5678"}, {"name": "Sam Lee"}]
    return {
        "timeslot_id": timeslot_id,
        "files": [
            {
                "file_name": "poster.jpg",
                "mime_type": "image/jpeg",
                "size": 2048,
                "storage_ref": "ref-poster",
            }
        ],
        "description": "Latest mix poster",
        "guest_list": guests,
        "payment": {
            "account_holder": "Nova Park",
            "bank_name": "City Bank",
            "account_number": "1234567890",
            "resident_number": "900101-1234567",
        },
    }
