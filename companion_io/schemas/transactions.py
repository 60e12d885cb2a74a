from __future__ import annotations

from datetime import date
from typing import Any

from companion_io.coercion import as_number, as_text, parse_date, validate_enum
from companion_io.models.entities import EntityKind, Transaction

from .base import ExportColumn, FieldRule, SchemaAdapter, column, date_of, value_of

__all__ = [
    "TRANSACTION_TYPES",
    "TRANSACTION_CATEGORIES",
    "PAYMENT_METHODS",
    "TRANSACTIONS",
]

TRANSACTION_TYPES = ("income", "expense")
TRANSACTION_CATEGORIES = (
    "booking",
    "tip",
    "gift",
    "refund",
    "supplies",
    "travel",
    "advertising",
    "clothing",
    "health",
    "rent",
    "phone",
    "other",
)
PAYMENT_METHODS = ("Cash", "e-Transfer", "Crypto", "Venmo", "Cash App", "Zelle", "Gift Card", "Other")


def _amount(value: Any) -> float | None:
    # 0 / 非数値は必須欠落として扱う
    return as_number(value) or None


def _type(value: Any) -> str:
    return validate_enum(as_text(value).strip() or "income", TRANSACTION_TYPES, "income")


def _category(value: Any) -> str:
    return validate_enum(as_text(value).strip() or "other", TRANSACTION_CATEGORIES, "other")


def _payment_method(value: Any) -> str | None:
    raw = as_text(value).strip()
    return validate_enum(raw, PAYMENT_METHODS, "Other") if raw else None


def _date(value: Any) -> date:
    return parse_date(value) or date.today()


TRANSACTIONS = SchemaAdapter(
    kind=EntityKind.TRANSACTIONS,
    entity_type=Transaction,
    dependencies=(EntityKind.BOOKINGS, EntityKind.CLIENTS),
    columns=(
        ExportColumn("Date", date_of("date")),
        ExportColumn("Type", value_of("type")),
        ExportColumn("Category", value_of("category")),
        ExportColumn("Amount", value_of("amount")),
        ExportColumn("Payment Method", value_of("payment_method")),
        ExportColumn("Notes", value_of("notes")),
        ExportColumn("Client", lambda t, joins: joins.booking_client_alias(t.booking_id)),
        ExportColumn("Booking Date", lambda t, joins: joins.booking_date(t.booking_id)),
    ),
    import_rules=(
        FieldRule("amount", column("Amount", "amount"), _amount, required=True),
        FieldRule("type", column("Type", "type"), _type),
        FieldRule("category", column("Category", "category"), _category),
        FieldRule("payment_method", column("Payment Method", "paymentMethod"), _payment_method),
        FieldRule("date", column("Date", "date"), _date),
        FieldRule("notes", column("Notes", "notes"), as_text),
    ),
)
