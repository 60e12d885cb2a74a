from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol

from companion_io.models.entities import EntityKind

"""Record store interface.

The import/export engine only needs collection-level primitives: full scans
(optionally sorted on one field), single inserts, partial updates and deletes,
all keyed by an opaque string id.
"""

__all__ = [
    "StoreError",
    "RecordStore",
]


class StoreError(Exception):
    pass


class RecordStore(Protocol):
    def list(self, kind: EntityKind, sort_by: str | None = None) -> list[Any]:
        """All entities of ``kind``; ordered by ``sort_by`` when given (None last)."""
        ...

    def get(self, kind: EntityKind, entity_id: str) -> Any | None:
        ...

    def insert(self, kind: EntityKind, entity: Any) -> str:
        """Persist a new entity and return its id."""
        ...

    def update(self, kind: EntityKind, entity_id: str, **changes: Any) -> None:
        ...

    def delete(self, kind: EntityKind, entity_id: str) -> None:
        ...

    def count(self, kind: EntityKind, predicate: Callable[[Any], bool] | None = None) -> int:
        ...
