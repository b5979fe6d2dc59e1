"""Inputs to service operations.

Specs carry raw caller values; services validate them and build domain
models. Patches are sparse: a field is present only if the caller set it.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Mapping, Self


@dataclass(frozen=True)
class ExternalIdentity:
    """A verified identity handed over by the identity provider."""

    email: str
    name: str | None = None


@dataclass(frozen=True)
class EventSpec:
    name: str
    date: date
    venue_name: str
    venue_address: str
    guest_list_deadline: date
    promo_materials_deadline: date
    payment_amount: Decimal
    payment_currency: str
    payment_due_date: date
    payment_per_dj: Decimal | None = None
    description: str | None = None
    hashtags: str | None = None
    guest_limit_per_dj: int | None = None


@dataclass(frozen=True)
class TimeslotSpec:
    start_time: datetime
    end_time: datetime
    dj_name: str
    dj_instagram: str = ""


@dataclass(frozen=True)
class FileUpload:
    """A file descriptor as declared by the DJ after uploading."""

    file_name: str
    mime_type: str
    size: int
    storage_ref: str


@dataclass(frozen=True)
class GuestEntry:
    name: str
    phone: str | None = None


@dataclass(frozen=True)
class PaymentDetails:
    account_holder: str
    bank_name: str
    account_number: str
    resident_number: str
    prefer_direct_contact: bool = False


@dataclass(frozen=True)
class SubmissionPayload:
    files: tuple[FileUpload, ...]
    description: str
    guest_list: tuple[GuestEntry, ...]
    payment: PaymentDetails


@dataclass(frozen=True)
class Patch:
    """Explicit field -> new value mapping.

    Build with ``Patch.of`` from keyword arguments; only the keys passed are
    recorded, so an absent field can never be written as an empty value.
    """

    changes: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def of(cls, **changes: Any) -> Self:
        return cls(changes=MappingProxyType(dict(changes)))

    def __contains__(self, name: str) -> bool:
        return name in self.changes

    def __bool__(self) -> bool:
        return bool(self.changes)

    def get(self, name: str, default: Any = None) -> Any:
        return self.changes.get(name, default)

    def unknown_fields(self, allowed: frozenset[str]) -> list[str]:
        return sorted(set(self.changes) - allowed)


EVENT_PATCH_FIELDS = frozenset(
    {
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
    }
)

TIMESLOT_PATCH_FIELDS = frozenset({"start_time", "end_time", "dj_name", "dj_instagram"})
