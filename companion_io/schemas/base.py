from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from companion_io.coercion import format_date, format_datetime, yes_no_label
from companion_io.models.entities import EntityKind
from companion_io.store.base import RecordStore
from companion_io.tabular.codec import Row

"""Building blocks for the per-entity schema adapters.

An adapter is a static declaration:

- export: ordered ExportColumn list (header + extractor over entity and joins)
- import: FieldRule list (canonical field, header aliases, coercion, required)

Header aliases are tried in order and the first one whose cell is not None
wins, so files written by older exports (or edited by hand with camelCase
headers) still import. A present but empty cell counts: it shadows any later
alias.
"""

__all__ = [
    "UnsupportedImportError",
    "HeaderAliases",
    "column",
    "ExportColumn",
    "FieldRule",
    "JoinMaps",
    "SchemaAdapter",
    "value_of",
    "date_of",
    "datetime_of",
    "flag_of",
]


class UnsupportedImportError(Exception):
    """Import requested for an export-only entity kind."""

    def __init__(self, kind: EntityKind, reason: str) -> None:
        super().__init__(reason)
        self.kind = kind
        self.reason = reason


@dataclass(frozen=True)
class HeaderAliases:
    """Ordered header spellings for one field; calling it reads a row."""
    headers: tuple[str, ...]

    def __call__(self, row: Row) -> Any:
        for header in self.headers:
            value = row.get(header)
            if value is not None:
                return value
        return None

    def present(self, row: Row) -> bool:
        return any(h in row for h in self.headers)


def column(*headers: str) -> HeaderAliases:
    return HeaderAliases(tuple(headers))


@dataclass(frozen=True)
class ExportColumn:
    header: str
    extract: Callable[[Any, JoinMaps], Any]


@dataclass(frozen=True)
class FieldRule:
    field: str
    source: HeaderAliases
    coerce: Callable[[Any], Any]
    required: bool = False

    def read(self, row: Row) -> Any:
        return self.coerce(self.source(row))


@dataclass
class JoinMaps:
    """Id-keyed lookups built once per export from full collection scans."""
    maps: dict[EntityKind, dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def build(cls, store: RecordStore, kinds: Iterable[EntityKind]) -> JoinMaps:
        return cls({kind: {e.id: e for e in store.list(kind)} for kind in kinds})

    def get(self, kind: EntityKind, entity_id: str | None) -> Any | None:
        if not entity_id:
            return None
        return self.maps.get(kind, {}).get(entity_id)

    def client_alias(self, client_id: str | None) -> str:
        client = self.get(EntityKind.CLIENTS, client_id)
        return client.alias if client is not None else ""

    def booking_client_alias(self, booking_id: str | None) -> str:
        booking = self.get(EntityKind.BOOKINGS, booking_id)
        return self.client_alias(booking.client_id) if booking is not None else ""

    def booking_date(self, booking_id: str | None) -> str:
        booking = self.get(EntityKind.BOOKINGS, booking_id)
        return format_datetime(booking.date_time) if booking is not None else ""


@dataclass(frozen=True)
class SchemaAdapter:
    kind: EntityKind
    entity_type: type
    columns: tuple[ExportColumn, ...]
    dependencies: tuple[EntityKind, ...] = ()
    sort_key: str | None = None
    import_rules: tuple[FieldRule, ...] = ()
    export_only_reason: str | None = None
    key_field: str | None = None  # case-insensitive uniqueness key
    quota_limited: bool = False
    exclusive_flag: str | None = None  # boolean field at most one record may hold

    @property
    def sheet_name(self) -> str:
        return self.kind.value

    @property
    def headers(self) -> list[str]:
        return [c.header for c in self.columns]

    @property
    def importable(self) -> bool:
        return self.export_only_reason is None

    def ensure_importable(self) -> None:
        if self.export_only_reason is not None:
            raise UnsupportedImportError(self.kind, self.export_only_reason)

    def to_row(self, entity: Any, joins: JoinMaps) -> Row:
        return {c.header: c.extract(entity, joins) for c in self.columns}

    def read(self, row: Row) -> dict[str, Any]:
        """Apply every import rule to a raw row."""
        self.ensure_importable()
        return {rule.field: rule.read(row) for rule in self.import_rules}

    def key(self, row: Row) -> str:
        """Uniqueness key of a raw row (empty when blank or when the kind has none)."""
        for rule in self.import_rules:
            if rule.field == self.key_field:
                return str(rule.read(row) or "")
        return ""

    def missing_fields(self, values: dict[str, Any]) -> list[str]:
        return [
            rule.field
            for rule in self.import_rules
            if rule.required and values.get(rule.field) in (None, "")
        ]

    def build(self, values: dict[str, Any], entity_id: str) -> Any:
        return self.entity_type(id=entity_id, **values)


# Extractor helpers

def value_of(name: str) -> Callable[[Any, JoinMaps], Any]:
    def extract(entity: Any, joins: JoinMaps) -> Any:
        value = getattr(entity, name)
        return "" if value is None else value
    return extract


def date_of(name: str) -> Callable[[Any, JoinMaps], str]:
    return lambda entity, joins: format_date(getattr(entity, name))


def datetime_of(name: str) -> Callable[[Any, JoinMaps], str]:
    return lambda entity, joins: format_datetime(getattr(entity, name))


def flag_of(name: str, *, blank_when_false: bool = False) -> Callable[[Any, JoinMaps], str]:
    return lambda entity, joins: yes_no_label(bool(getattr(entity, name)), blank_when_false=blank_when_false)
