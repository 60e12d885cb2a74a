from __future__ import annotations

from pathlib import Path

from companion_io.models.entities import EntityKind
from companion_io.models.processing_result import (
    ExportFormat,
    ExportResult,
    ImportOutcome,
    StatusType,
    TransferStatus,
)


def test_import_outcome_defaults_and_count():
    outcome = ImportOutcome()
    assert (outcome.imported, outcome.skipped, outcome.duplicates, outcome.invalid) == (0, 0, 0, 0)
    assert ImportOutcome(imported=3).count == 3


def test_media_types():
    assert ExportFormat.CSV.media_type == "text/csv"
    assert ExportFormat.XLSX.media_type == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    result = ExportResult(filename="clients.xlsx", content=b"", fmt=ExportFormat.XLSX, row_count=0)
    assert result.media_type == ExportFormat.XLSX.media_type


def test_transfer_status_constructors():
    ok = TransferStatus.success("done", outcome=ImportOutcome(imported=1), path=Path("x.csv"))
    assert ok.ok and ok.type is StatusType.SUCCESS
    err = TransferStatus.error("nope")
    assert not err.ok
    assert err.outcome is None and err.path is None


def test_kind_labels():
    assert EntityKind.SAFETY_CONTACTS.label == "safety contacts"
    assert EntityKind.CLIENTS.label == "clients"
