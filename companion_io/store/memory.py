from __future__ import annotations

import dataclasses
from collections.abc import Callable
from typing import Any

from companion_io.models.entities import EntityKind

from .base import StoreError

"""In-memory record store (insertion ordered).

Used by tests and as the fallback when no database is reachable.
"""

__all__ = [
    "MemoryStore",
]


class MemoryStore:
    def __init__(self) -> None:
        self._collections: dict[EntityKind, dict[str, Any]] = {kind: {} for kind in EntityKind}

    def list(self, kind: EntityKind, sort_by: str | None = None) -> list[Any]:
        items = list(self._collections[kind].values())
        if sort_by is not None:
            present = [e for e in items if getattr(e, sort_by, None) is not None]
            missing = [e for e in items if getattr(e, sort_by, None) is None]
            items = sorted(present, key=lambda e: getattr(e, sort_by)) + missing
        return items

    def get(self, kind: EntityKind, entity_id: str) -> Any | None:
        return self._collections[kind].get(entity_id)

    def insert(self, kind: EntityKind, entity: Any) -> str:
        collection = self._collections[kind]
        if entity.id in collection:
            raise StoreError(f"duplicate id in {kind.value}: {entity.id}")
        collection[entity.id] = entity
        return entity.id

    def update(self, kind: EntityKind, entity_id: str, **changes: Any) -> None:
        collection = self._collections[kind]
        if entity_id not in collection:
            raise StoreError(f"no {kind.value} record with id {entity_id}")
        collection[entity_id] = dataclasses.replace(collection[entity_id], **changes)

    def delete(self, kind: EntityKind, entity_id: str) -> None:
        self._collections[kind].pop(entity_id, None)

    def count(self, kind: EntityKind, predicate: Callable[[Any], bool] | None = None) -> int:
        items = self._collections[kind].values()
        if predicate is None:
            return len(items)
        return sum(1 for e in items if predicate(e))
