"""Submission service: DJ uploads redeemed against a timeslot token."""

import logging
import uuid
from datetime import datetime

from events.domain import (
    Event,
    Guest,
    PaymentInfo,
    PromoFile,
    PromoMaterials,
    Submission,
    SubmissionId,
    Timeslot,
    UserId,
)
from events.domain.commands import SubmissionPayload
from events.domain.errors import (
    InvalidTokenError,
    PromoFileNotFoundError,
    StoreUnavailableError,
    TimeslotNotFoundError,
    ValidationError,
)
from events.domain.files import MAX_FILE_SIZE, validate_files
from events.domain.read_models import FileLink, SubmissionResult, UploadTicket
from events.services.access import load_owned_timeslot, parse_timeslot_id, utc_now
from events.services.token_issuer import is_well_formed, tokens_match
from events.stores.interfaces import (
    BlobStore,
    DuplicateRecordError,
    EventStore,
    SubmissionStore,
    TimeslotStore,
)

logger = logging.getLogger(__name__)


def validate_payload(payload: SubmissionPayload, event: Event, max_file_size: int) -> None:
    """Raise ValidationError for the first problem found in ``payload``."""
    validate_files(payload.files, max_file_size)

    for position, guest in enumerate(payload.guest_list, start=1):
        if not (guest.name or "").strip():
            raise ValidationError(f"Guest #{position} needs a name", field="guest_list")
    limit = event.guest_limit_per_dj
    if limit is not None and len(payload.guest_list) > limit.value:
        raise ValidationError(
            f"Guest list has {len(payload.guest_list)} entries; the limit is {limit.value}",
            field="guest_list",
        )

    payment = payload.payment
    for field in ("account_holder", "bank_name", "account_number", "resident_number"):
        if not (getattr(payment, field) or "").strip():
            raise ValidationError(f"payment {field} is required", field=f"payment.{field}")


class SubmissionService:
    """Service for saving and reading DJ submissions."""

    def __init__(
        self,
        events: EventStore,
        timeslots: TimeslotStore,
        submissions: SubmissionStore,
        blobs: BlobStore,
        clock=utc_now,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> None:
        self._events = events
        self._timeslots = timeslots
        self._submissions = submissions
        self._blobs = blobs
        self._clock = clock
        self._max_file_size = max_file_size

    def _authorize(self, timeslot_id: str, token: str) -> Timeslot:
        if not is_well_formed(token):
            raise InvalidTokenError()
        try:
            parsed = parse_timeslot_id(timeslot_id)
        except TimeslotNotFoundError as exc:
            raise InvalidTokenError() from exc
        timeslot = self._timeslots.get_timeslot(parsed)
        if timeslot is None or not tokens_match(timeslot.submission_token, token):
            raise InvalidTokenError()
        return timeslot

    def _content(
        self, payload: SubmissionPayload, now: datetime, previous: Submission | None
    ) -> dict:
        # Files carried over from an earlier save keep their original upload time.
        known = {}
        if previous is not None:
            known = {f.storage_ref: f.uploaded_at for f in previous.promo_materials.files}
        files = tuple(
            PromoFile(
                file_name=f.file_name.strip(),
                mime_type=f.mime_type.strip().lower(),
                size=f.size,
                storage_ref=f.storage_ref,
                uploaded_at=known.get(f.storage_ref, now),
            )
            for f in payload.files
        )
        payment = payload.payment
        return {
            "promo_materials": PromoMaterials(files=files, description=payload.description or ""),
            "guest_list": tuple(
                Guest(name=g.name.strip(), phone=(g.phone or "").strip() or None)
                for g in payload.guest_list
            ),
            "payment_info": PaymentInfo(
                account_holder=payment.account_holder.strip(),
                bank_name=payment.bank_name.strip(),
                account_number=payment.account_number.strip(),
                resident_number=payment.resident_number.strip(),
                prefer_direct_contact=bool(payment.prefer_direct_contact),
            ),
        }

    def save_submission(
        self, timeslot_id: str, token: str, payload: SubmissionPayload
    ) -> SubmissionResult:
        """Create or replace the submission for a timeslot.

        The first save inserts; later saves with the same token replace the
        materials, guest list and payment info in place and keep
        ``submitted_at``. The store's one-submission-per-timeslot constraint
        settles concurrent first saves: the loser updates the winner's record.
        The store moves ``last_updated_at`` past the stored value on replace.

        Raises:
            InvalidTokenError: If the token does not match the timeslot.
            ValidationError: If the payload breaks the upload or form rules.
        """
        timeslot = self._authorize(timeslot_id, token)
        event = self._events.get_event(timeslot.event_id)
        if event is None:
            raise InvalidTokenError()
        validate_payload(payload, event, self._max_file_size)

        now = self._clock()
        existing = self._submissions.get_submission_for_timeslot(timeslot.id)
        if existing is None:
            submission = Submission(
                id=SubmissionId(uuid.uuid4()),
                event_id=event.id,
                timeslot_id=timeslot.id,
                unique_link=timeslot.submission_token,
                submitted_at=now,
                last_updated_at=now,
                **self._content(payload, now, None),
            )
            try:
                saved = self._submissions.add_submission(submission)
            except DuplicateRecordError:
                logger.info("Concurrent first save for timeslot %s; updating instead", timeslot.id)
                existing = self._submissions.get_submission_for_timeslot(timeslot.id)
                if existing is None:
                    raise StoreUnavailableError("save_submission")
            else:
                self._timeslots.set_submission_ref(timeslot.id, saved.id)
                logger.info("Submission %s created for timeslot %s", saved.id, timeslot.id)
                return SubmissionResult(submission=saved, created=True)

        revised = Submission(
            id=existing.id,
            event_id=existing.event_id,
            timeslot_id=existing.timeslot_id,
            unique_link=existing.unique_link,
            submitted_at=existing.submitted_at,
            last_updated_at=now,
            **self._content(payload, now, existing),
        )
        saved = self._submissions.replace_content(revised)
        if timeslot.submission_id != saved.id:
            # Repairs a reference left behind by an earlier failed write.
            self._timeslots.set_submission_ref(timeslot.id, saved.id)
        logger.info("Submission %s updated for timeslot %s", saved.id, timeslot.id)
        return SubmissionResult(submission=saved, created=False)

    def get_submission(self, timeslot_id: str, requester_id: UserId) -> Submission | None:
        """Return the submission for an organizer's timeslot, if any."""
        timeslot, _ = load_owned_timeslot(self._events, self._timeslots, timeslot_id, requester_id)
        return self._submissions.get_submission_for_timeslot(timeslot.id)

    def generate_upload_reference(self) -> UploadTicket:
        """Ask the blob store for somewhere to upload one promo file."""
        return self._blobs.create_upload_ticket()

    def get_file_url(self, timeslot_id: str, storage_ref: str, requester_id: UserId) -> FileLink:
        """Return a view link for one promo file of an organizer's timeslot.

        Raises:
            TimeslotNotFoundError, AuthorizationError: As for get_submission.
            PromoFileNotFoundError: If the reference is not one of the
                submission's files.
        """
        submission = self.get_submission(timeslot_id, requester_id)
        files = submission.promo_materials.files if submission is not None else ()
        match = next((f for f in files if f.storage_ref == storage_ref), None)
        if match is None:
            raise PromoFileNotFoundError(storage_ref)
        url, expires_at = self._blobs.create_view_link(match.storage_ref)
        return FileLink(
            storage_ref=match.storage_ref,
            file_name=match.file_name,
            mime_type=match.mime_type,
            url=url,
            expires_at=expires_at,
        )
