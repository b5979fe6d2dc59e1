"""Signed URLs for the external file store.

The file bytes never pass through this service. An upload ticket names a
fresh storage reference; a view link points at an existing one. Both carry a
signature the blob store checks with the shared secret until it expires.
"""

import uuid
from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

from django.core import signing

from events.domain.read_models import UploadTicket
from events.stores.interfaces import BlobStore

SIGNING_SALT = "events.uploads"


class SignedUrlBlobStore(BlobStore):
    """Issues upload tickets and view links signed with the project secret.

    The signed payload is ``{"ref", "act", "exp"}``: the storage reference,
    ``put`` or ``get``, and the expiry as a unix timestamp.
    """

    def __init__(
        self,
        upload_url_base: str,
        ttl_seconds: int,
        clock=None,
        file_url_base: str | None = None,
        link_ttl_seconds: int | None = None,
    ) -> None:
        self._upload_url_base = upload_url_base.rstrip("/")
        self._file_url_base = (file_url_base or upload_url_base).rstrip("/")
        self._ttl = timedelta(seconds=ttl_seconds)
        self._link_ttl = timedelta(seconds=link_ttl_seconds or ttl_seconds)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _signed_url(self, base: str, storage_ref: str, action: str, ttl: timedelta):
        expires_at = self._clock() + ttl
        signature = signing.dumps(
            {"ref": storage_ref, "act": action, "exp": int(expires_at.timestamp())},
            salt=SIGNING_SALT,
        )
        query = urlencode({"signature": signature})
        return f"{base}/{storage_ref}?{query}", expires_at

    def create_upload_ticket(self) -> UploadTicket:
        storage_ref = uuid.uuid4().hex
        url, expires_at = self._signed_url(self._upload_url_base, storage_ref, "put", self._ttl)
        return UploadTicket(storage_ref=storage_ref, upload_url=url, expires_at=expires_at)

    def create_view_link(self, storage_ref: str) -> tuple[str, datetime]:
        return self._signed_url(self._file_url_base, storage_ref, "get", self._link_ttl)
