from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

"""Result models for import / export operations.

ImportOutcome aggregates the per-row reconciliation counters, ExportResult
carries the serialized bytes of one export, and TransferStatus is the terminal
summary handed back to the host (success with counts, or an error message).
"""

__all__ = [
    "ImportOutcome",
    "ExportFormat",
    "ExportResult",
    "StatusType",
    "TransferStatus",
]


@dataclass(frozen=True)
class ImportOutcome:
    """Counters for a single import call.

    For client imports ``imported + skipped + duplicates`` equals the number
    of input rows with a non-blank alias. Other kinds only use ``imported``.
    ``invalid`` counts rows dropped for a missing required field; it sits
    outside that sum.
    """
    imported: int = 0
    skipped: int = 0  # quota ceiling reached
    duplicates: int = 0  # key already present (case-insensitive)
    invalid: int = 0  # missing required field

    @property
    def count(self) -> int:
        return self.imported


class ExportFormat(Enum):
    CSV = "csv"
    XLSX = "xlsx"

    @property
    def media_type(self) -> str:
        if self is ExportFormat.CSV:
            return "text/csv"
        return "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(frozen=True)
class ExportResult:
    filename: str  # <kind>.<ext>, or companion-export-<date>.xlsx for the whole store
    content: bytes
    fmt: ExportFormat
    row_count: int

    @property
    def media_type(self) -> str:
        return self.fmt.media_type


class StatusType(Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class TransferStatus:
    """Terminal summary of an import or export action."""
    type: StatusType
    message: str
    outcome: ImportOutcome | None = None
    path: Path | None = None  # written export file, if any

    @property
    def ok(self) -> bool:
        return self.type is StatusType.SUCCESS

    @staticmethod
    def success(message: str, *, outcome: ImportOutcome | None = None, path: Path | None = None) -> TransferStatus:
        return TransferStatus(StatusType.SUCCESS, message, outcome=outcome, path=path)

    @staticmethod
    def error(message: str) -> TransferStatus:
        return TransferStatus(StatusType.ERROR, message)
