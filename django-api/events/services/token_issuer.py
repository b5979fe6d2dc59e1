"""Submission token generation."""

import hmac
import secrets
import string

from events.domain.models import SUBMISSION_TOKEN_MAX_LENGTH

TOKEN_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits
DEFAULT_TOKEN_LENGTH = 16

_ALPHABET = frozenset(TOKEN_ALPHABET)


class TokenIssuer:
    """Draws bearer tokens from the OS CSPRNG.

    Uniqueness is not checked here; TimeslotService verifies it against the
    store before a token is attached to a timeslot.
    """

    def __init__(self, length: int = DEFAULT_TOKEN_LENGTH) -> None:
        if not 1 <= length <= SUBMISSION_TOKEN_MAX_LENGTH:
            raise ValueError(
                f"Token length must be between 1 and {SUBMISSION_TOKEN_MAX_LENGTH}, got {length}"
            )
        self.length = length

    def issue(self) -> str:
        return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(self.length))


def is_well_formed(token: str | None) -> bool:
    """Whether ``token`` could have been issued at all.

    Length is bounded by the column, not the configured length, so links
    issued before a length change keep working.
    """
    return (
        bool(token)
        and len(token) <= SUBMISSION_TOKEN_MAX_LENGTH
        and all(c in _ALPHABET for c in token)
    )


def tokens_match(stored: str | None, supplied: str | None) -> bool:
    """Constant-time exact comparison; a missing side never matches."""
    if not stored or not supplied:
        return False
    return hmac.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))
