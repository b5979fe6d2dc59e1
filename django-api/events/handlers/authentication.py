"""Resolves the identity forwarded by the upstream identity provider.

The provider in front of the API verifies the login and forwards the email
(and display name, when known) in request headers. Requests without the
email header stay anonymous.
"""

from dataclasses import dataclass

from django.conf import settings
from rest_framework.authentication import BaseAuthentication
from rest_framework.request import Request

from events.domain import User
from events.domain.commands import ExternalIdentity
from events.wiring import get_services


def _meta_key(header: str) -> str:
    return "HTTP_" + header.upper().replace("-", "_")


@dataclass(frozen=True)
class OrganizerPrincipal:
    """The authenticated caller as seen by DRF."""

    user: User

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def id(self):
        return self.user.id


class TrustedHeaderAuthentication(BaseAuthentication):
    def authenticate(self, request: Request):
        email = request.META.get(_meta_key(settings.IDENTITY_EMAIL_HEADER), "").strip()
        if not email:
            return None
        name = request.META.get(_meta_key(settings.IDENTITY_NAME_HEADER)) or None
        user = get_services().identity.resolve(ExternalIdentity(email=email, name=name))
        return OrganizerPrincipal(user), None

    def authenticate_header(self, request: Request) -> str:
        return f'{settings.IDENTITY_EMAIL_HEADER} realm="api"'
