from __future__ import annotations

from datetime import UTC, date, datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from companion_io.models.entities import Booking, Client, EntityKind, IncidentLog, Transaction
from companion_io.models.processing_result import ExportFormat, ExportResult
from companion_io.schemas.registry import ADAPTERS
from companion_io.services.exporter import export_all, export_kind, write_export
from companion_io.tabular.codec import UnsupportedFormatError


def test_empty_collection_is_a_no_op(store, fake_workbook):
    assert export_kind(EntityKind.CLIENTS, "csv", store) is None
    assert export_kind(EntityKind.CLIENTS, "xlsx", store, workbook=fake_workbook) is None
    assert fake_workbook.writes == []


def test_unknown_format_rejected(store):
    with pytest.raises(UnsupportedFormatError):
        export_kind(EntityKind.CLIENTS, "ods", store)


def test_csv_export_of_clients(store):
    store.insert(EntityKind.CLIENTS, Client(id="1", alias="Jane", phone="+1 555", notes="likes, commas"))
    result = export_kind("clients", "csv", store)
    assert isinstance(result, ExportResult)
    assert result.filename == "clients.csv"
    assert result.fmt is ExportFormat.CSV
    assert result.media_type == "text/csv"
    assert result.row_count == 1
    header, line = result.content.decode("utf-8").split("\n")
    assert header.startswith("Alias,Nickname,Phone,")
    assert line.startswith("Jane,,'+1 555,")
    assert '"likes, commas"' in line


def test_xlsx_export_uses_workbook_capability(store, fake_workbook):
    store.insert(EntityKind.CLIENTS, Client(id="1", alias="Jane"))
    result = export_kind(EntityKind.CLIENTS, ExportFormat.XLSX, store, workbook=fake_workbook)
    assert result.filename == "clients.xlsx"
    (sheet,) = fake_workbook.writes
    assert sheet["sheet"] == "clients"
    assert sheet["grid"][0][0] == "Alias"
    assert sheet["grid"][1][0] == "Jane"


def test_join_maps_built_once_per_dependency(store):
    store.insert(EntityKind.CLIENTS, Client(id="c1", alias="Jane"))
    store.insert(EntityKind.BOOKINGS, Booking(id="b1", date_time=datetime(2024, 1, 1, tzinfo=UTC), client_id="c1"))
    for i in range(5):
        store.insert(EntityKind.TRANSACTIONS, Transaction(id=f"t{i}", amount=10.0 + i, date=date(2024, 1, 1), booking_id="b1"))

    with patch.object(store, "list", wraps=store.list) as spy:
        result = export_kind(EntityKind.TRANSACTIONS, "csv", store)

    scanned = [c.args[0] for c in spy.call_args_list]
    assert sorted(k.value for k in scanned) == ["bookings", "clients", "transactions"]
    lines = result.content.decode("utf-8").splitlines()
    assert len(lines) == 6
    assert all(",Jane,2024-01-01T00:00:00.000Z" in line for line in lines[1:])


def test_sorted_by_adapter_sort_key(store):
    for d in (date(2024, 3, 1), date(2023, 1, 5), date(2024, 1, 9)):
        store.insert(EntityKind.INCIDENTS, IncidentLog(id=d.isoformat(), date=d))
    result = export_kind(EntityKind.INCIDENTS, "csv", store)
    dates = [line.split(",")[0] for line in result.content.decode("utf-8").splitlines()[1:]]
    assert dates == ["2023-01-05", "2024-01-09", "2024-03-01"]


class TestExportAll:
    def test_all_collections_empty_is_a_no_op(self, store, fake_workbook):
        assert export_all(store, workbook=fake_workbook) is None
        assert fake_workbook.writes == []

    def test_one_sheet_per_collection_in_registry_order(self, store, fake_workbook):
        store.insert(EntityKind.CLIENTS, Client(id="c1", alias="Jane"))
        store.insert(EntityKind.BOOKINGS, Booking(id="b1", date_time=datetime(2024, 1, 1, tzinfo=UTC), client_id="c1"))
        store.insert(EntityKind.TRANSACTIONS, Transaction(id="t1", amount=10.0, date=date(2024, 1, 2), booking_id="b1"))

        result = export_all(store, workbook=fake_workbook, today=date(2024, 5, 6))

        assert result.filename == "companion-export-2024-05-06.xlsx"
        assert result.fmt is ExportFormat.XLSX
        assert result.row_count == 3
        assert [s["sheet"] for s in fake_workbook.writes] == [k.value for k in ADAPTERS]
        sheets = {s["sheet"]: s["grid"] for s in fake_workbook.writes}
        assert sheets["clients"][1][0] == "Jane"
        # 空のコレクションもヘッダ行だけのシートになる
        assert sheets["venues"] == [ADAPTERS[EntityKind.VENUES].headers]
        header = sheets["transactions"][0]
        row = sheets["transactions"][1]
        assert row[header.index("Client")] == "Jane"
        assert row[header.index("Booking Date")] == "2024-01-01T00:00:00.000Z"

    def test_each_collection_scanned_once(self, store, fake_workbook):
        store.insert(EntityKind.CLIENTS, Client(id="c1", alias="Jane"))
        with patch.object(store, "list", wraps=store.list) as spy:
            export_all(store, workbook=fake_workbook)
        scanned = [c.args[0] for c in spy.call_args_list]
        assert sorted(k.value for k in scanned) == sorted(k.value for k in EntityKind)


def test_write_export_atomic(tmp_path: Path):
    result = ExportResult(filename="clients.csv", content=b"Alias\nJane", fmt=ExportFormat.CSV, row_count=1)
    out = write_export(result, tmp_path / "exports")
    assert out == tmp_path / "exports" / "clients.csv"
    assert out.read_bytes() == b"Alias\nJane"
    # 一時ファイルが残らない
    assert [p.name for p in out.parent.iterdir()] == ["clients.csv"]


def test_write_export_overwrites_existing(tmp_path: Path):
    (tmp_path / "clients.csv").write_bytes(b"old")
    result = ExportResult(filename="clients.csv", content=b"new", fmt=ExportFormat.CSV, row_count=1)
    write_export(result, tmp_path)
    assert (tmp_path / "clients.csv").read_bytes() == b"new"


def test_write_export_cleans_up_on_failure(tmp_path: Path):
    result = ExportResult(filename="clients.csv", content=b"x", fmt=ExportFormat.CSV, row_count=1)
    with patch("companion_io.services.exporter.os.replace", side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            write_export(result, tmp_path)
    assert list(tmp_path.iterdir()) == []
