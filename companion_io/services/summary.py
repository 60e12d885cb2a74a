from __future__ import annotations

from companion_io.models.entities import EntityKind
from companion_io.models.processing_result import ExportFormat, ImportOutcome, TransferStatus

"""Status message and SUMMARY line rendering.

Two audiences:
- the user-facing status message ("Imported 3 clients from clients.csv (...)")
- the machine-greppable SUMMARY line logged for every terminal status:

    action=<import|export> kind=<kind|all> status=<success|error> imported=<n>
    duplicates=<n> skipped=<n> invalid=<n>

The counters are only present for imports that reached the row loop.
"""

__all__ = [
    "ALL_KINDS",
    "render_import_message",
    "render_export_message",
    "render_empty_export_message",
    "render_export_all_message",
    "render_empty_export_all_message",
    "render_summary_line",
]

ALL_KINDS = "all"  # SUMMARY kind for the whole-store workbook


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


def render_import_message(kind: EntityKind, outcome: ImportOutcome, filename: str) -> str:
    """Success message; clients get a suffix for duplicates and plan-limit skips.

    >>> render_import_message(EntityKind.CLIENTS, ImportOutcome(imported=2, duplicates=1), "c.csv")
    'Imported 2 clients from c.csv (1 duplicate skipped)'
    """
    parts: list[str] = []
    if outcome.duplicates > 0:
        parts.append(f"{_plural(outcome.duplicates, 'duplicate')} skipped")
    if outcome.skipped > 0:
        parts.append(f"{outcome.skipped} skipped: free plan limit reached")
    suffix = f" ({', '.join(parts)})" if parts else ""
    return f"Imported {outcome.imported} {kind.label} from {filename}{suffix}"


def render_export_message(kind: EntityKind, fmt: ExportFormat) -> str:
    return f"Exported {kind.label} as {fmt.value.upper()}"


def render_empty_export_message(kind: EntityKind) -> str:
    return f"No {kind.label} to export"


def render_export_all_message(row_count: int) -> str:
    return f"Exported {_plural(row_count, 'record')} from all collections as XLSX"


def render_empty_export_all_message() -> str:
    return "No records to export"


def render_summary_line(action: str, kind: EntityKind | str, status: TransferStatus) -> str:
    kind_value = kind.value if isinstance(kind, EntityKind) else kind
    line = f"action={action} kind={kind_value} status={status.type.value}"
    if status.outcome is not None:
        o = status.outcome
        line += f" imported={o.imported} duplicates={o.duplicates} skipped={o.skipped} invalid={o.invalid}"
    return line
