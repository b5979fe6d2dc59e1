"""Maps verified external identities to internal users."""

import logging
import uuid

from events.domain import User, UserId
from events.domain.commands import ExternalIdentity
from events.domain.errors import StoreUnavailableError, ValidationError
from events.services.access import utc_now
from events.stores.interfaces import DuplicateRecordError, UserStore

logger = logging.getLogger(__name__)


class IdentityService:
    """Service resolving identity-provider logins to User records."""

    def __init__(self, users: UserStore, clock=utc_now) -> None:
        self._users = users
        self._clock = clock

    def resolve(self, identity: ExternalIdentity) -> User:
        """Return the user for ``identity``, creating it on first sight.

        Existing users get their last-login refreshed, and their display name
        filled in if they had none.

        Raises:
            ValidationError: If the identity carries no email.
        """
        email = (identity.email or "").strip().lower()
        if not email:
            raise ValidationError("Email is required", field="email")
        name = (identity.name or "").strip() or None
        now = self._clock()

        existing = self._users.get_user_by_email(email)
        if existing is None:
            user = User(
                id=UserId(uuid.uuid4()),
                email=email,
                name=name,
                created_at=now,
                last_login_at=now,
            )
            try:
                created = self._users.add_user(user)
            except DuplicateRecordError:
                # Another request created the user first.
                existing = self._users.get_user_by_email(email)
                if existing is None:
                    raise StoreUnavailableError("resolve_user")
            else:
                logger.info("Created user %s on first login", created.id)
                return created

        fill_name = name if existing.name is None else None
        return self._users.record_login(existing.id, now, name=fill_name)
