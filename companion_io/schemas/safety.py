from __future__ import annotations

from typing import Any

from companion_io.coercion import as_text, yes_no
from companion_io.models.entities import EntityKind, IncidentLog, SafetyCheck, SafetyContact

from .base import (
    ExportColumn,
    FieldRule,
    JoinMaps,
    SchemaAdapter,
    column,
    date_of,
    datetime_of,
    flag_of,
    value_of,
)

"""Safety schemas: contacts (importable) plus incident logs and safety checks
(export-only, both ordered chronologically)."""

__all__ = [
    "INCIDENT_SEVERITIES",
    "SAFETY_CHECK_STATUSES",
    "SAFETY_CONTACTS",
    "INCIDENTS",
    "SAFETY_CHECKS",
]

INCIDENT_SEVERITIES = ("low", "medium", "high", "critical")
SAFETY_CHECK_STATUSES = ("pending", "checkedIn", "overdue", "alert")


def _stripped(value: Any) -> str:
    return as_text(value).strip()


def _active(value: Any) -> bool:
    # 列自体が無い場合は有効扱い
    return True if value is None else yes_no(value)


def _check_contact_name(check: SafetyCheck, joins: JoinMaps) -> str:
    contact = joins.get(EntityKind.SAFETY_CONTACTS, check.safety_contact_id)
    return contact.name if contact is not None else ""


SAFETY_CONTACTS = SchemaAdapter(
    kind=EntityKind.SAFETY_CONTACTS,
    entity_type=SafetyContact,
    exclusive_flag="is_primary",
    columns=(
        ExportColumn("Name", value_of("name")),
        ExportColumn("Phone", value_of("phone")),
        ExportColumn("Relationship", value_of("relationship")),
        ExportColumn("Primary", flag_of("is_primary")),
        ExportColumn("Active", flag_of("is_active")),
    ),
    import_rules=(
        FieldRule("name", column("Name", "name"), _stripped, required=True),
        FieldRule("phone", column("Phone", "phone"), _stripped, required=True),
        FieldRule("relationship", column("Relationship", "relationship"), _stripped),
        FieldRule("is_primary", column("Primary", "isPrimary"), yes_no),
        FieldRule("is_active", column("Active", "isActive"), _active),
    ),
)

INCIDENTS = SchemaAdapter(
    kind=EntityKind.INCIDENTS,
    entity_type=IncidentLog,
    dependencies=(EntityKind.CLIENTS, EntityKind.BOOKINGS),
    sort_key="date",
    columns=(
        ExportColumn("Date", date_of("date")),
        ExportColumn("Severity", value_of("severity")),
        ExportColumn("Description", value_of("description")),
        ExportColumn("Action Taken", value_of("action_taken")),
        ExportColumn("Client", lambda i, joins: joins.client_alias(i.client_id)),
        ExportColumn("Booking Date", lambda i, joins: joins.booking_date(i.booking_id)),
    ),
    export_only_reason=(
        "Incident records are export-only. They are sensitive safety logs "
        "that should only be created within the app."
    ),
)

SAFETY_CHECKS = SchemaAdapter(
    kind=EntityKind.SAFETY_CHECKS,
    entity_type=SafetyCheck,
    dependencies=(EntityKind.SAFETY_CONTACTS, EntityKind.BOOKINGS, EntityKind.CLIENTS),
    sort_key="scheduled_time",
    columns=(
        ExportColumn("Scheduled Time", datetime_of("scheduled_time")),
        ExportColumn("Status", value_of("status")),
        ExportColumn("Checked In At", datetime_of("checked_in_at")),
        ExportColumn("Buffer (min)", value_of("buffer_minutes")),
        ExportColumn("Safety Contact", _check_contact_name),
        ExportColumn("Client", lambda sc, joins: joins.booking_client_alias(sc.booking_id)),
        ExportColumn("Booking Date", lambda sc, joins: joins.booking_date(sc.booking_id)),
    ),
    export_only_reason=(
        "Safety check records are export-only. They are generated automatically "
        "when bookings are created."
    ),
)
