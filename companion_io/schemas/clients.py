from __future__ import annotations

from datetime import date
from typing import Any

from companion_io.coercion import (
    as_text,
    format_tags,
    optional_enum,
    optional_text,
    parse_date,
    parse_tags,
    validate_enum,
    yes_no,
)
from companion_io.models.entities import Client, EntityKind

from .base import ExportColumn, FieldRule, SchemaAdapter, column, date_of, flag_of, value_of

"""Client schema: the only importable kind with a uniqueness key and a quota.

Headers written here are read back by the import rules; the camelCase
spellings are what hand-made sheets (and very old exports) tend to use.
"""

__all__ = [
    "CONTACT_METHODS",
    "SCREENING_STATUSES",
    "SCREENING_METHODS",
    "RISK_LEVELS",
    "LEGACY_SCREENING_STATUS",
    "remap_screening_status",
    "CLIENTS",
]

CONTACT_METHODS = ("Phone", "Text", "Email", "Telegram", "Signal", "WhatsApp", "Other")
SCREENING_STATUSES = ("Unscreened", "In Progress", "Screened")
SCREENING_METHODS = ("ID", "LinkedIn", "Provider Reference", "Employment", "Phone", "Deposit", "Other")
RISK_LEVELS = ("Unknown", "Low Risk", "Medium Risk", "High Risk")

# 旧 4 値ステータス -> 現行値
LEGACY_SCREENING_STATUS = {
    "Pending": "Unscreened",
    "Declined": "Unscreened",
    "Verified": "Screened",
}


def remap_screening_status(value: Any) -> str:
    text = as_text(value).strip()
    text = LEGACY_SCREENING_STATUS.get(text, text)
    return validate_enum(text, SCREENING_STATUSES, "Unscreened")


def _alias(value: Any) -> str:
    return as_text(value).strip()


def _preferred_contact(value: Any) -> str:
    text = as_text(value).strip() or "Text"
    return validate_enum(text, CONTACT_METHODS, "Text")


def _risk_level(value: Any) -> str:
    return validate_enum(as_text(value).strip(), RISK_LEVELS, "Unknown")


def _date_added(value: Any) -> date:
    return parse_date(value) or date.today()


def _default_yes(value: Any) -> bool:
    return True if value is None else yes_no(value)


CLIENTS = SchemaAdapter(
    kind=EntityKind.CLIENTS,
    entity_type=Client,
    key_field="alias",
    quota_limited=True,
    columns=(
        ExportColumn("Alias", value_of("alias")),
        ExportColumn("Nickname", value_of("nickname")),
        ExportColumn("Phone", value_of("phone")),
        ExportColumn("Email", value_of("email")),
        ExportColumn("Telegram", value_of("telegram")),
        ExportColumn("Signal", value_of("signal")),
        ExportColumn("WhatsApp", value_of("whatsapp")),
        ExportColumn("Address", value_of("address")),
        ExportColumn("Preferred Contact", value_of("preferred_contact")),
        ExportColumn("Secondary Contact", value_of("secondary_contact")),
        ExportColumn("Screening Status", value_of("screening_status")),
        ExportColumn("Screening Method", value_of("screening_method")),
        ExportColumn("Risk Level", value_of("risk_level")),
        ExportColumn("Blacklisted", flag_of("is_blocked")),
        ExportColumn("Preferences", value_of("preferences")),
        ExportColumn("Boundaries", value_of("boundaries")),
        ExportColumn("Notes", value_of("notes")),
        ExportColumn("Tags", lambda c, joins: format_tags(c.tags)),
        ExportColumn("Reference Source", value_of("reference_source")),
        ExportColumn("Verification Notes", value_of("verification_notes")),
        ExportColumn("Date Added", date_of("date_added")),
        ExportColumn("Last Seen", date_of("last_seen")),
        ExportColumn("Birthday", date_of("birthday")),
        ExportColumn("Client Since", date_of("client_since")),
        ExportColumn("Pinned", flag_of("is_pinned")),
        ExportColumn("Safety Check", flag_of("requires_safety_check")),
    ),
    import_rules=(
        FieldRule("alias", column("Alias", "alias"), _alias, required=True),
        FieldRule("nickname", column("Nickname", "nickname", "Real Name", "realName"), optional_text),
        FieldRule("phone", column("Phone", "phone"), optional_text),
        FieldRule("email", column("Email", "email"), optional_text),
        FieldRule("telegram", column("Telegram", "telegram"), optional_text),
        FieldRule("signal", column("Signal", "signal"), optional_text),
        FieldRule("whatsapp", column("WhatsApp", "whatsapp"), optional_text),
        FieldRule("address", column("Address", "address"), optional_text),
        FieldRule("preferred_contact", column("Preferred Contact", "preferredContact"), _preferred_contact),
        FieldRule(
            "secondary_contact",
            column("Secondary Contact", "secondaryContact"),
            lambda v: optional_enum(v, CONTACT_METHODS),
        ),
        FieldRule("screening_status", column("Screening Status", "screeningStatus"), remap_screening_status),
        FieldRule(
            "screening_method",
            column("Screening Method", "screeningMethod"),
            lambda v: optional_enum(v, SCREENING_METHODS),
        ),
        FieldRule("risk_level", column("Risk Level", "riskLevel"), _risk_level),
        FieldRule("is_blocked", column("Blacklisted", "Blocked", "isBlocked"), yes_no),
        FieldRule("preferences", column("Preferences", "preferences"), as_text),
        FieldRule("boundaries", column("Boundaries", "boundaries"), as_text),
        FieldRule("notes", column("Notes", "notes"), as_text),
        FieldRule("tags", column("Tags", "tags"), parse_tags),
        FieldRule("reference_source", column("Reference Source", "referenceSource"), optional_text),
        FieldRule("verification_notes", column("Verification Notes", "verificationNotes"), optional_text),
        FieldRule("date_added", column("Date Added", "dateAdded"), _date_added),
        FieldRule("last_seen", column("Last Seen", "lastSeen"), parse_date),
        FieldRule("birthday", column("Birthday", "birthday"), parse_date),
        FieldRule("client_since", column("Client Since", "clientSince"), parse_date),
        FieldRule("is_pinned", column("Pinned", "isPinned"), yes_no),
        FieldRule("requires_safety_check", column("Safety Check", "requiresSafetyCheck"), _default_yes),
    ),
)
