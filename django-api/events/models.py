"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

import uuid

from django.db import models

from events.domain.models import SUBMISSION_TOKEN_MAX_LENGTH
from events.domain.phases import EventPhase

PHASE_CHOICES = [(phase.value, phase.value.replace("_", " ").title()) for phase in EventPhase]


class User(models.Model):
    """Persistence model for users resolved from the identity provider."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(max_length=254, unique=True)
    name = models.CharField(max_length=255, blank=True, null=True)
    created_at = models.DateTimeField()
    last_login_at = models.DateTimeField(blank=True, null=True)

    def __str__(self) -> str:
        return self.email


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    organizer = models.ForeignKey(User, on_delete=models.PROTECT, related_name="events")
    name = models.CharField(max_length=255)
    date = models.DateField()
    venue_name = models.CharField(max_length=255)
    venue_address = models.CharField(max_length=500)
    description = models.TextField(blank=True, null=True)
    hashtags = models.CharField(max_length=500, blank=True, null=True)
    guest_list_deadline = models.DateField()
    promo_materials_deadline = models.DateField()
    payment_amount = models.DecimalField(max_digits=12, decimal_places=2)
    payment_per_dj = models.DecimalField(max_digits=12, decimal_places=2, blank=True, null=True)
    payment_currency = models.CharField(max_length=10)
    payment_due_date = models.DateField()
    guest_limit_per_dj = models.PositiveIntegerField(blank=True, null=True)

    phase = models.CharField(max_length=20, choices=PHASE_CHOICES, default=EventPhase.DRAFT.value)
    phase_entered_at = models.DateTimeField()
    phase_entered_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, blank=True, null=True, related_name="+"
    )
    phase_reason = models.TextField(blank=True, null=True)

    published_at = models.DateTimeField(blank=True, null=True)
    finalized_at = models.DateTimeField(blank=True, null=True)
    day_of_started_at = models.DateTimeField(blank=True, null=True)
    completed_at = models.DateTimeField(blank=True, null=True)
    cancelled_at = models.DateTimeField(blank=True, null=True)

    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["organizer", "-created_at"], name="event_organizer_created_idx"),
        ]

    def __str__(self) -> str:
        return self.name


class Timeslot(models.Model):
    """Persistence model for DJ timeslots."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="timeslots")
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    dj_name = models.CharField(max_length=255)
    dj_instagram = models.CharField(max_length=255, blank=True, default="")
    submission_token = models.CharField(
        max_length=SUBMISSION_TOKEN_MAX_LENGTH, unique=True, blank=True, null=True
    )
    # Denormalized pointer; Submission.timeslot is authoritative.
    submission_ref = models.UUIDField(blank=True, null=True)

    class Meta:
        ordering = ["start_time"]
        indexes = [
            models.Index(fields=["event", "start_time"], name="timeslot_event_start_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.dj_name} @ {self.start_time}"


class Submission(models.Model):
    """Persistence model for DJ submissions."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="submissions")
    timeslot = models.OneToOneField(
        Timeslot, on_delete=models.RESTRICT, related_name="submission_record"
    )
    unique_link = models.CharField(max_length=64)
    promo_description = models.TextField(blank=True, default="")
    promo_files = models.JSONField(default=list)
    guest_list = models.JSONField(default=list)
    payment_account_holder = models.CharField(max_length=255)
    payment_bank_name = models.CharField(max_length=255)
    payment_account_number = models.TextField()  # Fernet ciphertext
    payment_resident_number = models.TextField()  # Fernet ciphertext
    payment_prefer_direct_contact = models.BooleanField(default=False)
    submitted_at = models.DateTimeField()
    last_updated_at = models.DateTimeField()

    class Meta:
        indexes = [
            models.Index(fields=["event"], name="submission_event_idx"),
        ]

    def __str__(self) -> str:
        return f"Submission for {self.timeslot_id}"
