from __future__ import annotations

from typing import Protocol

from companion_io.models.config_models import FREE_CLIENT_LIMIT
from companion_io.models.entities import Client, EntityKind
from companion_io.store.base import RecordStore

"""Plan quota policies consulted by client import.

The reconciliation engine only asks three questions: is the plan unlimited,
what is the ceiling, and how many active clients exist right now. Plan and
billing state stay behind this interface.
"""

__all__ = [
    "QuotaPolicy",
    "StoreQuotaPolicy",
    "UnlimitedQuotaPolicy",
]


class QuotaPolicy(Protocol):
    @property
    def ceiling(self) -> int:
        ...

    def is_unlimited(self) -> bool:
        ...

    def active_count(self) -> int:
        ...


class StoreQuotaPolicy:
    """Free plan ceiling on non-blocked clients, counted from the store."""

    def __init__(self, store: RecordStore, paid: bool = False, ceiling: int = FREE_CLIENT_LIMIT) -> None:
        self._store = store
        self._paid = paid
        self._ceiling = ceiling

    @property
    def ceiling(self) -> int:
        return self._ceiling

    def is_unlimited(self) -> bool:
        return self._paid

    def active_count(self) -> int:
        return self._store.count(EntityKind.CLIENTS, lambda c: isinstance(c, Client) and c.is_active)


class UnlimitedQuotaPolicy:
    ceiling = 0

    def is_unlimited(self) -> bool:
        return True

    def active_count(self) -> int:
        return 0
