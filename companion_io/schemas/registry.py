from __future__ import annotations

from companion_io.models.entities import EntityKind

from .base import SchemaAdapter
from .bookings import BOOKINGS
from .clients import CLIENTS
from .safety import INCIDENTS, SAFETY_CHECKS, SAFETY_CONTACTS
from .transactions import TRANSACTIONS
from .venues import VENUES

__all__ = [
    "ADAPTERS",
    "EXPORT_ONLY_KINDS",
    "IMPORTABLE_KINDS",
    "get_adapter",
]

ADAPTERS: dict[EntityKind, SchemaAdapter] = {
    adapter.kind: adapter
    for adapter in (CLIENTS, BOOKINGS, TRANSACTIONS, SAFETY_CONTACTS, INCIDENTS, SAFETY_CHECKS, VENUES)
}

EXPORT_ONLY_KINDS = frozenset(k for k, a in ADAPTERS.items() if not a.importable)
IMPORTABLE_KINDS = frozenset(k for k, a in ADAPTERS.items() if a.importable)


def get_adapter(kind: EntityKind | str) -> SchemaAdapter:
    """Look up the adapter for ``kind`` (enum member or its string value)."""
    return ADAPTERS[EntityKind(kind)]
