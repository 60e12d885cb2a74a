from __future__ import annotations

from datetime import date

import pytest

from companion_io.models.entities import Client, EntityKind, IncidentLog, SafetyContact
from companion_io.store.base import StoreError
from companion_io.store.memory import MemoryStore


def test_insert_get_list_preserve_order():
    store = MemoryStore()
    for i, alias in enumerate(["b", "a", "c"]):
        assert store.insert(EntityKind.CLIENTS, Client(id=str(i), alias=alias)) == str(i)
    assert [c.alias for c in store.list(EntityKind.CLIENTS)] == ["b", "a", "c"]
    assert store.get(EntityKind.CLIENTS, "1").alias == "a"
    assert store.get(EntityKind.CLIENTS, "nope") is None


def test_collections_are_separate():
    store = MemoryStore()
    store.insert(EntityKind.CLIENTS, Client(id="1", alias="a"))
    assert store.list(EntityKind.VENUES) == []
    assert store.count(EntityKind.CLIENTS) == 1


def test_duplicate_id_rejected():
    store = MemoryStore()
    store.insert(EntityKind.CLIENTS, Client(id="1", alias="a"))
    with pytest.raises(StoreError):
        store.insert(EntityKind.CLIENTS, Client(id="1", alias="b"))


def test_sort_by_puts_missing_last():
    store = MemoryStore()
    store.insert(EntityKind.CLIENTS, Client(id="1", alias="x", last_seen=None))
    store.insert(EntityKind.CLIENTS, Client(id="2", alias="y", last_seen=date(2024, 5, 1)))
    store.insert(EntityKind.CLIENTS, Client(id="3", alias="z", last_seen=date(2023, 5, 1)))
    assert [c.id for c in store.list(EntityKind.CLIENTS, sort_by="last_seen")] == ["3", "2", "1"]


def test_sort_by_date():
    store = MemoryStore()
    for d in (date(2024, 2, 1), date(2024, 1, 1)):
        store.insert(EntityKind.INCIDENTS, IncidentLog(id=d.isoformat(), date=d))
    assert [i.id for i in store.list(EntityKind.INCIDENTS, sort_by="date")] == ["2024-01-01", "2024-02-01"]


def test_update_replaces_fields():
    store = MemoryStore()
    store.insert(EntityKind.SAFETY_CONTACTS, SafetyContact(id="s", name="Sam", phone="1", is_primary=True))
    store.update(EntityKind.SAFETY_CONTACTS, "s", is_primary=False)
    contact = store.get(EntityKind.SAFETY_CONTACTS, "s")
    assert contact.is_primary is False
    assert contact.name == "Sam"


def test_update_unknown_id():
    with pytest.raises(StoreError):
        MemoryStore().update(EntityKind.CLIENTS, "missing", alias="x")


def test_delete_and_count_with_predicate():
    store = MemoryStore()
    store.insert(EntityKind.CLIENTS, Client(id="1", alias="a", is_blocked=True))
    store.insert(EntityKind.CLIENTS, Client(id="2", alias="b"))
    assert store.count(EntityKind.CLIENTS, lambda c: c.is_active) == 1
    store.delete(EntityKind.CLIENTS, "2")
    store.delete(EntityKind.CLIENTS, "2")  # 存在しない id は無視
    assert store.count(EntityKind.CLIENTS) == 1
