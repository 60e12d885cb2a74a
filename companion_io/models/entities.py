from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

"""Typed domain records handled by the import/export engine.

Each record carries an opaque string identifier assigned at insert time. Field
names follow Python conventions; the human readable column headers live in the
schema adapters (companion_io.schemas), not here.
"""

__all__ = [
    "EntityKind",
    "Tag",
    "Client",
    "Booking",
    "Transaction",
    "SafetyContact",
    "SafetyCheck",
    "IncidentLog",
    "Venue",
    "ENTITY_TYPES",
    "new_id",
]


class EntityKind(Enum):
    """Collections that can be exported (and, for some, imported).

    The value doubles as the collection name in the record store and as the
    base name of exported files (``<kind>.<ext>``).
    """
    CLIENTS = "clients"
    BOOKINGS = "bookings"
    TRANSACTIONS = "transactions"
    SAFETY_CONTACTS = "safety_contacts"
    INCIDENTS = "incidents"
    SAFETY_CHECKS = "safety_checks"
    VENUES = "venues"

    @property
    def label(self) -> str:
        """Human label used in status messages ("safety contacts")."""
        return self.value.replace("_", " ")


def new_id() -> str:
    """Generate a fresh opaque identifier."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Tag:
    name: str
    color: str = "#8b5cf6"
    icon: str | None = None  # single grapheme (emoji)
    id: str = ""


@dataclass(frozen=True)
class Client:
    id: str
    alias: str  # case-insensitive unique within the store
    nickname: str | None = None
    phone: str | None = None
    email: str | None = None
    telegram: str | None = None
    signal: str | None = None
    whatsapp: str | None = None
    address: str | None = None
    preferred_contact: str = "Text"
    secondary_contact: str | None = None
    screening_status: str = "Unscreened"
    screening_method: str | None = None
    risk_level: str = "Unknown"
    is_blocked: bool = False
    notes: str = ""
    preferences: str = ""
    boundaries: str = ""
    reference_source: str | None = None
    verification_notes: str | None = None
    date_added: date | None = None
    last_seen: date | None = None
    birthday: date | None = None
    client_since: date | None = None
    tags: list[Tag] = field(default_factory=list)
    is_pinned: bool = False
    requires_safety_check: bool = True

    @property
    def is_active(self) -> bool:
        """Blocked clients do not count toward the free plan ceiling."""
        return not self.is_blocked


@dataclass(frozen=True)
class Booking:
    id: str
    date_time: datetime
    client_id: str | None = None
    duration: int = 60  # minutes
    location_type: str = "Incall"
    location_address: str | None = None
    location_notes: str | None = None
    status: str = "To Be Confirmed"
    base_rate: float = 0.0
    extras: float = 0.0
    travel_fee: float = 0.0
    deposit_amount: float = 0.0
    deposit_received: bool = False
    deposit_method: str | None = None
    payment_method: str | None = None
    payment_received: bool = False
    notes: str = ""
    created_at: datetime | None = None
    confirmed_at: datetime | None = None
    completed_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    cancelled_by: str | None = None
    deposit_outcome: str | None = None
    requires_safety_check: bool = True
    safety_check_minutes_after: int = 15
    safety_contact_id: str | None = None
    recurrence: str = "none"

    @property
    def total(self) -> float:
        return self.base_rate + self.extras + self.travel_fee


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: float
    date: date
    type: str = "income"
    category: str = "other"
    payment_method: str | None = None
    notes: str = ""
    booking_id: str | None = None
    payment_id: str | None = None


@dataclass(frozen=True)
class SafetyContact:
    id: str
    name: str
    phone: str
    relationship: str = ""
    is_primary: bool = False  # at most one primary contact per store
    is_active: bool = True


@dataclass(frozen=True)
class SafetyCheck:
    id: str
    booking_id: str
    scheduled_time: datetime
    safety_contact_id: str | None = None
    buffer_minutes: int = 15
    status: str = "pending"
    checked_in_at: datetime | None = None


@dataclass(frozen=True)
class IncidentLog:
    id: str
    date: date
    severity: str = "low"
    description: str = ""
    action_taken: str = ""
    client_id: str | None = None
    booking_id: str | None = None


@dataclass(frozen=True)
class Venue:
    id: str
    name: str
    venue_type: str = ""
    city: str = ""
    address: str = ""
    directions: str | None = None
    access_method: str | None = None
    access_notes: str | None = None
    booking_app: str | None = None
    booking_notes: str | None = None
    contact_name: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    cost_per_hour: float | None = None
    cost_per_day: float | None = None
    cost_notes: str | None = None
    hotel_friendly: bool = False
    is_favorite: bool = False
    is_archived: bool = False
    notes: str | None = None


ENTITY_TYPES: dict[EntityKind, type] = {
    EntityKind.CLIENTS: Client,
    EntityKind.BOOKINGS: Booking,
    EntityKind.TRANSACTIONS: Transaction,
    EntityKind.SAFETY_CONTACTS: SafetyContact,
    EntityKind.INCIDENTS: IncidentLog,
    EntityKind.SAFETY_CHECKS: SafetyCheck,
    EntityKind.VENUES: Venue,
}
