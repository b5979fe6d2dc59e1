"""Builds the store handles and services once per process."""

from dataclasses import dataclass

from django.apps import apps
from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from events.services.event_service import EventService
from events.services.identity_service import IdentityService
from events.services.phase_service import PhaseService
from events.services.submission_service import SubmissionService
from events.services.timeslot_service import TimeslotService
from events.services.token_issuer import TokenIssuer
from events.stores.blob_store import SignedUrlBlobStore
from events.stores.django_store import (
    DjangoEventStore,
    DjangoSubmissionStore,
    DjangoTimeslotStore,
    DjangoUserStore,
)
from events.stores.encryption import FieldCipher


@dataclass(frozen=True)
class ServiceRegistry:
    identity: IdentityService
    events: EventService
    timeslots: TimeslotService
    submissions: SubmissionService
    phases: PhaseService


def build_services() -> ServiceRegistry:
    """Wire the Django stores into the services using project settings."""
    users = DjangoUserStore()
    events = DjangoEventStore()
    timeslots = DjangoTimeslotStore()
    submissions = DjangoSubmissionStore(FieldCipher(settings.FIELD_ENCRYPTION_KEY))
    try:
        issuer = TokenIssuer(settings.SUBMISSION_TOKEN_LENGTH)
    except ValueError as exc:
        raise ImproperlyConfigured(f"SUBMISSION_TOKEN_LENGTH: {exc}") from exc
    blobs = SignedUrlBlobStore(
        upload_url_base=settings.UPLOAD_URL_BASE,
        ttl_seconds=settings.UPLOAD_TICKET_TTL_SECONDS,
        file_url_base=settings.FILE_URL_BASE,
        link_ttl_seconds=settings.FILE_LINK_TTL_SECONDS,
    )
    return ServiceRegistry(
        identity=IdentityService(users),
        events=EventService(events, timeslots, submissions),
        timeslots=TimeslotService(events, timeslots, submissions, issuer),
        submissions=SubmissionService(
            events, timeslots, submissions, blobs, max_file_size=settings.MAX_UPLOAD_BYTES
        ),
        phases=PhaseService(events, timeslots, submissions),
    )


def get_services() -> ServiceRegistry:
    return apps.get_app_config("events").services
