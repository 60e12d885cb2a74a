from __future__ import annotations

import json
import pathlib

import jsonschema
import pytest

from companion_io.models.entities import Client, EntityKind
from companion_io.models.error_record import ErrorRecord
from companion_io.services.quota import StoreQuotaPolicy
from companion_io.services.reconcile import import_rows
from companion_io.services.transfer import TransferService

"""Error log JSON Lines contract: fixed key set, UTC 'Z' timestamps, row=-1 for file-level errors."""

SCHEMA_PATH = pathlib.Path(__file__).parent / "schemas" / "error_log_schema.json"


@pytest.fixture(scope="module")
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_created_record_matches_schema(schema):
    record = ErrorRecord.create("clients.csv", "clients", 2, "DUPLICATE_KEY", "alias 'jane' already exists")
    jsonschema.validate(json.loads(record.to_json_line()), schema)


def test_schema_rejects_extra_key(schema):
    obj = json.loads(ErrorRecord.create("c.csv", "clients", 1, "X", "m").to_json_line())
    obj["sheet"] = "Sheet1"
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(obj, schema)


def test_every_engine_error_matches_schema(schema, store, error_log):
    store.insert(EntityKind.CLIENTS, Client(id="x", alias="Taken"))
    rows = [{"Alias": ""}, {"Alias": "taken"}, {"Alias": "a"}, {"Alias": "b"}]
    import_rows(EntityKind.CLIENTS, rows, store, StoreQuotaPolicy(store, ceiling=2), error_log=error_log, source="c.csv")
    path = error_log.flush()
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 3
    for line in lines:
        jsonschema.validate(json.loads(line), schema)


def test_file_level_errors_use_unknown_row(schema, store, error_log, tmp_path):
    service = TransferService(store, error_log=error_log)
    unreadable = tmp_path / "clients.xlsx"
    unreadable.write_bytes(b"not a workbook")
    export_only = tmp_path / "bookings.csv"
    export_only.write_text("Client\nJane\n", encoding="utf-8")

    service.import_file("clients", unreadable)
    service.import_file("bookings", export_only)

    (log_path,) = (tmp_path / "logs").iterdir()
    records = [json.loads(line) for line in log_path.read_text(encoding="utf-8").splitlines()]
    assert [(r["row"], r["error_type"]) for r in records] == [(-1, "UNREADABLE_FILE"), (-1, "UNSUPPORTED_IMPORT")]
    for r in records:
        jsonschema.validate(r, schema)
