"""Serializers for request parsing and for rendering domain models.

Input serializers check the request format only; business rules (money not
negative, start before end, file policy) are enforced by the services so the
same rules apply whatever the caller.
"""

from rest_framework import serializers

from events.domain.commands import (
    EVENT_PATCH_FIELDS,
    TIMESLOT_PATCH_FIELDS,
    EventSpec,
    FileUpload,
    GuestEntry,
    PaymentDetails,
    SubmissionPayload,
    TimeslotSpec,
)

MASK_CHAR = "*"
VISIBLE_TAIL = 4


def mask_tail(value: str, visible: int = VISIBLE_TAIL) -> str:
    """Hide all but the last ``visible`` characters of ``value``."""
    if len(value) <= visible:
        return MASK_CHAR * len(value)
    return MASK_CHAR * (len(value) - visible) + value[-visible:]


class StrictFieldsMixin:
    """Reject keys the serializer does not declare instead of dropping them."""

    def validate(self, attrs):
        unknown = sorted(set(self.initial_data) - set(self.fields))
        if unknown:
            raise serializers.ValidationError(
                {name: ["Unknown or read-only field."] for name in unknown}
            )
        return attrs


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


class EventInputSerializer(StrictFieldsMixin, serializers.Serializer):
    name = serializers.CharField(allow_blank=True)
    date = serializers.DateField()
    venue_name = serializers.CharField(allow_blank=True)
    venue_address = serializers.CharField(allow_blank=True)
    guest_list_deadline = serializers.DateField()
    promo_materials_deadline = serializers.DateField()
    payment_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    payment_currency = serializers.CharField(allow_blank=True, max_length=10)
    payment_due_date = serializers.DateField()
    payment_per_dj = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    hashtags = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    guest_limit_per_dj = serializers.IntegerField(required=False, allow_null=True)

    def to_spec(self) -> EventSpec:
        return EventSpec(**self.validated_data)

    def to_changes(self) -> dict:
        """Fields the caller actually sent, for a partial update."""
        return {k: v for k, v in self.validated_data.items() if k in EVENT_PATCH_FIELDS}


class TimeslotInputSerializer(StrictFieldsMixin, serializers.Serializer):
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    dj_name = serializers.CharField(allow_blank=True)
    dj_instagram = serializers.CharField(required=False, allow_blank=True)

    def to_spec(self) -> TimeslotSpec:
        return TimeslotSpec(**self.validated_data)

    def to_changes(self) -> dict:
        return {k: v for k, v in self.validated_data.items() if k in TIMESLOT_PATCH_FIELDS}


class PhaseChangeSerializer(serializers.Serializer):
    phase = serializers.CharField()
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class FileUploadSerializer(serializers.Serializer):
    file_name = serializers.CharField(allow_blank=True)
    mime_type = serializers.CharField(allow_blank=True)
    size = serializers.IntegerField()
    storage_ref = serializers.CharField(allow_blank=True)


class GuestSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class PaymentDetailsSerializer(serializers.Serializer):
    account_holder = serializers.CharField(allow_blank=True)
    bank_name = serializers.CharField(allow_blank=True)
    account_number = serializers.CharField(allow_blank=True)
    resident_number = serializers.CharField(allow_blank=True)
    prefer_direct_contact = serializers.BooleanField(required=False, default=False)


class SubmissionInputSerializer(serializers.Serializer):
    timeslot_id = serializers.CharField()
    files = FileUploadSerializer(many=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    guest_list = GuestSerializer(many=True)
    payment = PaymentDetailsSerializer()

    def to_payload(self) -> SubmissionPayload:
        data = self.validated_data
        return SubmissionPayload(
            files=tuple(FileUpload(**f) for f in data["files"]),
            description=data["description"],
            guest_list=tuple(
                GuestEntry(name=g["name"], phone=g.get("phone")) for g in data["guest_list"]
            ),
            payment=PaymentDetails(**data["payment"]),
        )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


class PublicEventSerializer(serializers.Serializer):
    """Event fields a DJ may see. No organizer identity."""

    id = serializers.CharField()
    name = serializers.CharField()
    date = serializers.DateField()
    venue_name = serializers.CharField(source="venue.name")
    venue_address = serializers.CharField(source="venue.address")
    description = serializers.CharField(allow_null=True)
    hashtags = serializers.CharField(allow_null=True)
    guest_list_deadline = serializers.DateField(source="deadlines.guest_list")
    promo_materials_deadline = serializers.DateField(source="deadlines.promo_materials")
    payment_amount = serializers.CharField(source="payment.amount")
    payment_per_dj = serializers.CharField(source="payment.per_dj", allow_null=True)
    payment_currency = serializers.CharField(source="payment.currency")
    payment_due_date = serializers.DateField(source="payment.due_date")
    guest_limit_per_dj = serializers.SerializerMethodField()
    phase = serializers.CharField(source="phase.value")

    def get_guest_limit_per_dj(self, obj) -> int | None:
        return obj.guest_limit_per_dj.value if obj.guest_limit_per_dj is not None else None


class MilestonesSerializer(serializers.Serializer):
    published_at = serializers.DateTimeField()
    finalized_at = serializers.DateTimeField()
    day_of_started_at = serializers.DateTimeField()
    completed_at = serializers.DateTimeField()
    cancelled_at = serializers.DateTimeField()


class EventSerializer(PublicEventSerializer):
    """Serializer for Event domain model, as its organizer sees it."""

    organizer_id = serializers.CharField()
    phase_entered_at = serializers.DateTimeField(source="phase_record.entered_at")
    phase_entered_by = serializers.CharField(source="phase_record.entered_by", allow_null=True)
    phase_reason = serializers.CharField(source="phase_record.reason", allow_null=True)
    milestones = MilestonesSerializer()
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()


class PublicTimeslotSerializer(serializers.Serializer):
    id = serializers.CharField()
    event_id = serializers.CharField()
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    dj_name = serializers.CharField()
    dj_instagram = serializers.CharField()


class TimeslotSerializer(PublicTimeslotSerializer):
    """Organizer view of a timeslot, including the link token to hand out."""

    submission_token = serializers.CharField(allow_null=True)
    submission_id = serializers.CharField(allow_null=True)


class SubmissionSerializer(serializers.Serializer):
    """Renders a submission.

    Pass ``context={"mask_sensitive": True}`` for DJ-facing responses: bank
    and national id numbers are then cut to their last four characters.
    """

    id = serializers.CharField()
    event_id = serializers.CharField()
    timeslot_id = serializers.CharField()
    promo_materials = serializers.SerializerMethodField()
    guest_list = serializers.SerializerMethodField()
    payment_info = serializers.SerializerMethodField()
    submitted_at = serializers.DateTimeField()
    last_updated_at = serializers.DateTimeField()

    def get_promo_materials(self, obj) -> dict:
        return {
            "description": obj.promo_materials.description,
            "files": [
                {
                    "file_name": f.file_name,
                    "mime_type": f.mime_type,
                    "size": f.size,
                    "storage_ref": f.storage_ref,
                    "uploaded_at": serializers.DateTimeField().to_representation(f.uploaded_at),
                }
                for f in obj.promo_materials.files
            ],
        }

    def get_guest_list(self, obj) -> list[dict]:
        return [{"name": g.name, "phone": g.phone} for g in obj.guest_list]

    def get_payment_info(self, obj) -> dict:
        payment = obj.payment_info
        account_number = payment.account_number
        resident_number = payment.resident_number
        if self.context.get("mask_sensitive"):
            account_number = mask_tail(account_number)
            resident_number = mask_tail(resident_number)
        return {
            "account_holder": payment.account_holder,
            "bank_name": payment.bank_name,
            "account_number": account_number,
            "resident_number": resident_number,
            "prefer_direct_contact": payment.prefer_direct_contact,
        }


class TokenResolutionSerializer(serializers.Serializer):
    timeslot = PublicTimeslotSerializer()
    event = PublicEventSerializer()
    existing_submission = SubmissionSerializer(allow_null=True)


class SubmissionResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    created = serializers.BooleanField()
    submission = SubmissionSerializer()


class TimeslotStatusSerializer(serializers.Serializer):
    timeslot_id = serializers.CharField()
    dj_name = serializers.CharField()
    dj_instagram = serializers.CharField()
    start_time = serializers.DateTimeField()
    end_time = serializers.DateTimeField()
    has_submitted = serializers.BooleanField()
    submitted_at = serializers.DateTimeField(allow_null=True)
    guest_count = serializers.IntegerField()
    file_count = serializers.IntegerField()


class AvailableActionSerializer(serializers.Serializer):
    action = serializers.CharField(source="action.value")
    target_phase = serializers.CharField(source="target.value")
    label = serializers.CharField()
    confirm_required = serializers.BooleanField()
    confirm_message = serializers.CharField(allow_null=True)
    destructive = serializers.BooleanField()


class UploadTicketSerializer(serializers.Serializer):
    storage_ref = serializers.CharField()
    upload_url = serializers.CharField()
    expires_at = serializers.DateTimeField()


class DJGuestsSerializer(serializers.Serializer):
    dj_name = serializers.CharField()
    dj_instagram = serializers.CharField()
    timeslot = serializers.CharField()
    guests = GuestSerializer(many=True)


class GuestListByDJSerializer(serializers.Serializer):
    """Guest list grouped by DJ, for printable layouts."""

    event = serializers.SerializerMethodField()
    summary = serializers.SerializerMethodField()
    djs = DJGuestsSerializer(many=True)

    def get_event(self, obj) -> dict:
        return {
            "name": obj.event.name,
            "date": obj.event.date.isoformat(),
            "venue_name": obj.event.venue.name,
            "venue_address": obj.event.venue.address,
        }

    def get_summary(self, obj) -> dict:
        return {
            "total_guests": obj.total_guests,
            "total_djs": obj.total_djs,
            "submitted_djs": obj.submitted_djs,
        }


class FileLinkSerializer(serializers.Serializer):
    storage_ref = serializers.CharField()
    file_name = serializers.CharField()
    mime_type = serializers.CharField()
    url = serializers.CharField()
    expires_at = serializers.DateTimeField()
