"""Django ORM implementation of the stores.

Each write runs in its own ``transaction.atomic`` block so a uniqueness
violation rolls back to a savepoint and surfaces as DuplicateRecordError.
Other database failures surface as StoreUnavailableError.
"""

import functools
import logging
from dataclasses import fields
from datetime import datetime

from django.db import DatabaseError, IntegrityError, transaction
from django.db.models import RestrictedError

from events import models
from events.domain import (
    Deadlines,
    Event,
    EventId,
    EventPhase,
    Guest,
    GuestLimit,
    Milestones,
    Money,
    Payment,
    PaymentInfo,
    PhaseRecord,
    PromoFile,
    PromoMaterials,
    Submission,
    SubmissionId,
    Timeslot,
    TimeslotId,
    User,
    UserId,
    Venue,
)
from events.domain.errors import ConflictError, StoreUnavailableError
from events.domain.models import advance_update_time
from events.stores.encryption import FieldCipher
from events.stores.interfaces import (
    DuplicateRecordError,
    EventStore,
    SubmissionStore,
    TimeslotStore,
    UserStore,
)

logger = logging.getLogger(__name__)

EVENT_DETAIL_FIELDS = [
    "name",
    "date",
    "venue_name",
    "venue_address",
    "description",
    "hashtags",
    "guest_list_deadline",
    "promo_materials_deadline",
    "payment_amount",
    "payment_per_dj",
    "payment_currency",
    "payment_due_date",
    "guest_limit_per_dj",
    "updated_at",
]

MILESTONE_COLUMNS = [f.name for f in fields(Milestones)]


def _guarded(operation: str):
    """Translate infrastructure failures into StoreUnavailableError."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except IntegrityError:
                raise
            except DatabaseError as exc:
                logger.exception("Store operation %s failed", operation)
                raise StoreUnavailableError(operation) from exc

        return wrapper

    return decorator


def _to_user(row: models.User) -> User:
    return User(
        id=UserId(row.id),
        email=row.email,
        name=row.name,
        created_at=row.created_at,
        last_login_at=row.last_login_at,
    )


def _to_event(row: models.Event) -> Event:
    return Event(
        id=EventId(row.id),
        organizer_id=UserId(row.organizer_id),
        name=row.name,
        date=row.date,
        venue=Venue(name=row.venue_name, address=row.venue_address),
        deadlines=Deadlines(
            guest_list=row.guest_list_deadline,
            promo_materials=row.promo_materials_deadline,
        ),
        payment=Payment(
            amount=Money(row.payment_amount),
            currency=row.payment_currency,
            due_date=row.payment_due_date,
            per_dj=Money(row.payment_per_dj) if row.payment_per_dj is not None else None,
        ),
        phase=EventPhase(row.phase),
        phase_record=PhaseRecord(
            entered_at=row.phase_entered_at,
            entered_by=UserId(row.phase_entered_by_id) if row.phase_entered_by_id else None,
            reason=row.phase_reason,
        ),
        created_at=row.created_at,
        updated_at=row.updated_at,
        description=row.description,
        hashtags=row.hashtags,
        guest_limit_per_dj=(
            GuestLimit(row.guest_limit_per_dj) if row.guest_limit_per_dj is not None else None
        ),
        milestones=_to_milestones(row),
    )


def _to_milestones(row: models.Event) -> Milestones:
    return Milestones(**{name: getattr(row, name) for name in MILESTONE_COLUMNS})


def _apply_event_details(row: models.Event, event: Event) -> None:
    row.name = event.name
    row.date = event.date
    row.venue_name = event.venue.name
    row.venue_address = event.venue.address
    row.description = event.description
    row.hashtags = event.hashtags
    row.guest_list_deadline = event.deadlines.guest_list
    row.promo_materials_deadline = event.deadlines.promo_materials
    row.payment_amount = event.payment.amount.amount
    row.payment_per_dj = event.payment.per_dj.amount if event.payment.per_dj else None
    row.payment_currency = event.payment.currency
    row.payment_due_date = event.payment.due_date
    row.guest_limit_per_dj = (
        event.guest_limit_per_dj.value if event.guest_limit_per_dj is not None else None
    )
    row.updated_at = event.updated_at


def _to_timeslot(row: models.Timeslot) -> Timeslot:
    return Timeslot(
        id=TimeslotId(row.id),
        event_id=EventId(row.event_id),
        start_time=row.start_time,
        end_time=row.end_time,
        dj_name=row.dj_name,
        dj_instagram=row.dj_instagram,
        submission_token=row.submission_token,
        submission_id=SubmissionId(row.submission_ref) if row.submission_ref else None,
    )


def _dump_files(files: tuple[PromoFile, ...]) -> list[dict]:
    return [
        {
            "file_name": f.file_name,
            "mime_type": f.mime_type,
            "size": f.size,
            "storage_ref": f.storage_ref,
            "uploaded_at": f.uploaded_at.isoformat(),
        }
        for f in files
    ]


def _load_files(data: list[dict]) -> tuple[PromoFile, ...]:
    return tuple(
        PromoFile(
            file_name=item["file_name"],
            mime_type=item["mime_type"],
            size=item["size"],
            storage_ref=item["storage_ref"],
            uploaded_at=datetime.fromisoformat(item["uploaded_at"]),
        )
        for item in data
    )


class DjangoUserStore(UserStore):
    """PostgreSQL-backed user store using Django ORM."""

    @_guarded("get_user_by_email")
    def get_user_by_email(self, email: str) -> User | None:
        row = models.User.objects.filter(email=email).first()
        return _to_user(row) if row else None

    @_guarded("add_user")
    def add_user(self, user: User) -> User:
        try:
            with transaction.atomic():
                row = models.User.objects.create(
                    id=user.id.value,
                    email=user.email,
                    name=user.name,
                    created_at=user.created_at,
                    last_login_at=user.last_login_at,
                )
        except IntegrityError as exc:
            raise DuplicateRecordError("user_email") from exc
        return _to_user(row)

    @_guarded("record_login")
    def record_login(self, user_id: UserId, at: datetime, name: str | None = None) -> User:
        with transaction.atomic():
            row = models.User.objects.select_for_update().get(id=user_id.value)
            row.last_login_at = at
            update_fields = ["last_login_at"]
            if name is not None:
                row.name = name
                update_fields.append("name")
            row.save(update_fields=update_fields)
        return _to_user(row)


class DjangoEventStore(EventStore):
    """PostgreSQL-backed event store using Django ORM."""

    @_guarded("list_events")
    def list_events(self, organizer_id: UserId) -> list[Event]:
        rows = models.Event.objects.filter(organizer_id=organizer_id.value).order_by("-created_at")
        return [_to_event(row) for row in rows]

    @_guarded("get_event")
    def get_event(self, event_id: EventId) -> Event | None:
        row = models.Event.objects.filter(id=event_id.value).first()
        return _to_event(row) if row else None

    @_guarded("add_event")
    def add_event(self, event: Event) -> Event:
        row = models.Event(
            id=event.id.value,
            organizer_id=event.organizer_id.value,
            phase=event.phase.value,
            phase_entered_at=event.phase_record.entered_at,
            phase_entered_by_id=(
                event.phase_record.entered_by.value if event.phase_record.entered_by else None
            ),
            phase_reason=event.phase_record.reason,
            created_at=event.created_at,
        )
        _apply_event_details(row, event)
        with transaction.atomic():
            row.save(force_insert=True)
        return _to_event(row)

    @_guarded("update_event_details")
    def update_event_details(self, event: Event) -> Event:
        with transaction.atomic():
            row = models.Event.objects.select_for_update().get(id=event.id.value)
            _apply_event_details(row, event)
            row.save(update_fields=EVENT_DETAIL_FIELDS)
        return _to_event(row)

    @_guarded("transition_phase")
    def transition_phase(
        self,
        event_id: EventId,
        expected: EventPhase,
        target: EventPhase,
        record: PhaseRecord,
    ) -> Event | None:
        with transaction.atomic():
            row = (
                models.Event.objects.select_for_update()
                .filter(id=event_id.value, phase=expected.value)
                .first()
            )
            if row is None:
                return None
            row.phase = target.value
            row.phase_entered_at = record.entered_at
            row.phase_entered_by_id = record.entered_by.value if record.entered_by else None
            row.phase_reason = record.reason
            row.updated_at = record.entered_at
            milestones = _to_milestones(row).stamped(target, record.entered_at)
            for name in MILESTONE_COLUMNS:
                setattr(row, name, getattr(milestones, name))
            row.save(
                update_fields=[
                    "phase",
                    "phase_entered_at",
                    "phase_entered_by",
                    "phase_reason",
                    "updated_at",
                    *MILESTONE_COLUMNS,
                ]
            )
        return _to_event(row)


class DjangoTimeslotStore(TimeslotStore):
    """PostgreSQL-backed timeslot store using Django ORM."""

    @_guarded("get_timeslot")
    def get_timeslot(self, timeslot_id: TimeslotId) -> Timeslot | None:
        row = models.Timeslot.objects.filter(id=timeslot_id.value).first()
        return _to_timeslot(row) if row else None

    @_guarded("get_timeslot_by_token")
    def get_timeslot_by_token(self, token: str) -> Timeslot | None:
        if not token:
            return None
        row = models.Timeslot.objects.filter(submission_token=token).first()
        return _to_timeslot(row) if row else None

    @_guarded("token_exists")
    def token_exists(self, token: str) -> bool:
        return models.Timeslot.objects.filter(submission_token=token).exists()

    @_guarded("list_timeslots")
    def list_timeslots(self, event_id: EventId) -> list[Timeslot]:
        rows = models.Timeslot.objects.filter(event_id=event_id.value).order_by("start_time")
        return [_to_timeslot(row) for row in rows]

    @_guarded("list_timeslots_without_token")
    def list_timeslots_without_token(self) -> list[Timeslot]:
        rows = models.Timeslot.objects.filter(submission_token__isnull=True)
        return [_to_timeslot(row) for row in rows]

    @_guarded("add_timeslot")
    def add_timeslot(self, timeslot: Timeslot) -> Timeslot:
        try:
            with transaction.atomic():
                row = models.Timeslot.objects.create(
                    id=timeslot.id.value,
                    event_id=timeslot.event_id.value,
                    start_time=timeslot.start_time,
                    end_time=timeslot.end_time,
                    dj_name=timeslot.dj_name,
                    dj_instagram=timeslot.dj_instagram,
                    submission_token=timeslot.submission_token,
                )
        except IntegrityError as exc:
            raise DuplicateRecordError("timeslot_token") from exc
        return _to_timeslot(row)

    @_guarded("update_schedule")
    def update_schedule(self, timeslot: Timeslot) -> Timeslot:
        with transaction.atomic():
            row = models.Timeslot.objects.select_for_update().get(id=timeslot.id.value)
            row.start_time = timeslot.start_time
            row.end_time = timeslot.end_time
            row.dj_name = timeslot.dj_name
            row.dj_instagram = timeslot.dj_instagram
            row.save(update_fields=["start_time", "end_time", "dj_name", "dj_instagram"])
        return _to_timeslot(row)

    @_guarded("set_token")
    def set_token(self, timeslot_id: TimeslotId, token: str) -> Timeslot:
        try:
            with transaction.atomic():
                row = models.Timeslot.objects.select_for_update().get(id=timeslot_id.value)
                row.submission_token = token
                row.save(update_fields=["submission_token"])
        except IntegrityError as exc:
            raise DuplicateRecordError("timeslot_token") from exc
        return _to_timeslot(row)

    @_guarded("set_submission_ref")
    def set_submission_ref(self, timeslot_id: TimeslotId, submission_id: SubmissionId) -> None:
        with transaction.atomic():
            models.Timeslot.objects.filter(id=timeslot_id.value).update(
                submission_ref=submission_id.value
            )

    @_guarded("delete_timeslot")
    def delete_timeslot(self, timeslot_id: TimeslotId) -> None:
        try:
            with transaction.atomic():
                models.Timeslot.objects.filter(id=timeslot_id.value).delete()
        except RestrictedError as exc:
            raise ConflictError("Timeslot already has a submission") from exc


class DjangoSubmissionStore(SubmissionStore):
    """PostgreSQL-backed submission store; encrypts sensitive payment fields."""

    def __init__(self, cipher: FieldCipher) -> None:
        self._cipher = cipher

    def _to_submission(self, row: models.Submission) -> Submission:
        return Submission(
            id=SubmissionId(row.id),
            event_id=EventId(row.event_id),
            timeslot_id=TimeslotId(row.timeslot_id),
            unique_link=row.unique_link,
            promo_materials=PromoMaterials(
                files=_load_files(row.promo_files),
                description=row.promo_description,
            ),
            guest_list=tuple(
                Guest(name=item["name"], phone=item.get("phone")) for item in row.guest_list
            ),
            payment_info=PaymentInfo(
                account_holder=row.payment_account_holder,
                bank_name=row.payment_bank_name,
                account_number=self._cipher.decrypt(row.payment_account_number),
                resident_number=self._cipher.decrypt(row.payment_resident_number),
                prefer_direct_contact=row.payment_prefer_direct_contact,
            ),
            submitted_at=row.submitted_at,
            last_updated_at=row.last_updated_at,
        )

    def _apply_content(self, row: models.Submission, submission: Submission) -> None:
        row.promo_description = submission.promo_materials.description
        row.promo_files = _dump_files(submission.promo_materials.files)
        row.guest_list = [{"name": g.name, "phone": g.phone} for g in submission.guest_list]
        payment = submission.payment_info
        row.payment_account_holder = payment.account_holder
        row.payment_bank_name = payment.bank_name
        row.payment_account_number = self._cipher.encrypt(payment.account_number)
        row.payment_resident_number = self._cipher.encrypt(payment.resident_number)
        row.payment_prefer_direct_contact = payment.prefer_direct_contact
        row.last_updated_at = submission.last_updated_at

    @_guarded("get_submission_for_timeslot")
    def get_submission_for_timeslot(self, timeslot_id: TimeslotId) -> Submission | None:
        row = models.Submission.objects.filter(timeslot_id=timeslot_id.value).first()
        return self._to_submission(row) if row else None

    @_guarded("list_submissions")
    def list_submissions(self, event_id: EventId) -> list[Submission]:
        rows = models.Submission.objects.filter(event_id=event_id.value)
        return [self._to_submission(row) for row in rows]

    @_guarded("add_submission")
    def add_submission(self, submission: Submission) -> Submission:
        row = models.Submission(
            id=submission.id.value,
            event_id=submission.event_id.value,
            timeslot_id=submission.timeslot_id.value,
            unique_link=submission.unique_link,
            submitted_at=submission.submitted_at,
        )
        self._apply_content(row, submission)
        try:
            with transaction.atomic():
                row.save(force_insert=True)
        except IntegrityError as exc:
            raise DuplicateRecordError("submission_timeslot") from exc
        return submission

    @_guarded("replace_content")
    def replace_content(self, submission: Submission) -> Submission:
        with transaction.atomic():
            row = models.Submission.objects.select_for_update().get(id=submission.id.value)
            stored = row.last_updated_at
            self._apply_content(row, submission)
            row.last_updated_at = advance_update_time(stored, submission.last_updated_at)
            row.save(
                update_fields=[
                    "promo_description",
                    "promo_files",
                    "guest_list",
                    "payment_account_holder",
                    "payment_bank_name",
                    "payment_account_number",
                    "payment_resident_number",
                    "payment_prefer_direct_contact",
                    "last_updated_at",
                ]
            )
        return self._to_submission(row)
