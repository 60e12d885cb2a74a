from __future__ import annotations

import logging
import os
import tempfile
from datetime import date
from pathlib import Path

from companion_io.models.entities import EntityKind
from companion_io.models.processing_result import ExportFormat, ExportResult
from companion_io.schemas.base import JoinMaps
from companion_io.schemas.registry import ADAPTERS, get_adapter
from companion_io.store.base import RecordStore
from companion_io.tabular.codec import WorkbookCodec, resolve_format, serialize, serialize_workbook

"""Export orchestrator.

One export = one collection scan (sorted when the adapter declares a sort
key), one scan per dependency collection for the join maps, one serialize
call. Nothing is produced for an empty collection.

export_all writes every collection into one workbook, one sheet each, with a
single scan per collection shared by the sheets and the join maps.
"""

__all__ = [
    "export_all",
    "export_kind",
    "write_export",
]

logger = logging.getLogger(__name__)


def export_kind(
    kind: EntityKind | str,
    fmt: ExportFormat | str,
    store: RecordStore,
    *,
    workbook: WorkbookCodec | None = None,
) -> ExportResult | None:
    """Serialize every entity of ``kind``; ``None`` when there is nothing to export.

    Raises:
        UnsupportedFormatError: ``fmt`` is neither csv nor xlsx
    """
    adapter = get_adapter(kind)
    fmt = resolve_format(fmt)
    entities = store.list(adapter.kind, sort_by=adapter.sort_key)
    if not entities:
        logger.debug("export %s: collection empty, nothing written", adapter.kind.value)
        return None

    joins = JoinMaps.build(store, adapter.dependencies)
    rows = [adapter.to_row(entity, joins) for entity in entities]
    content = serialize(rows, fmt, adapter.sheet_name, workbook=workbook)
    return ExportResult(
        filename=f"{adapter.kind.value}.{fmt.value}",
        content=content,
        fmt=fmt,
        row_count=len(rows),
    )


def export_all(
    store: RecordStore,
    *,
    workbook: WorkbookCodec | None = None,
    today: date | None = None,
) -> ExportResult | None:
    """Serialize every collection into one XLSX workbook; ``None`` when all are empty.

    Empty collections still get a sheet with just the header row.
    """
    scans = {kind: store.list(kind, sort_by=adapter.sort_key) for kind, adapter in ADAPTERS.items()}
    total = sum(len(entities) for entities in scans.values())
    if total == 0:
        logger.debug("export all: every collection empty, nothing written")
        return None

    joins = JoinMaps({kind: {e.id: e for e in entities} for kind, entities in scans.items()})
    sheets = [
        (adapter.sheet_name, adapter.headers, [adapter.to_row(e, joins) for e in scans[kind]])
        for kind, adapter in ADAPTERS.items()
    ]
    stamp = (today or date.today()).isoformat()
    return ExportResult(
        filename=f"companion-export-{stamp}.xlsx",
        content=serialize_workbook(sheets, workbook=workbook),
        fmt=ExportFormat.XLSX,
        row_count=total,
    )


def write_export(result: ExportResult, directory: Path) -> Path:
    """Write the export into ``directory`` atomically and return the final path.

    The bytes go to a temporary file in the same directory first and are then
    moved into place, so a reader never sees a half-written file and no
    temporary file survives the call.
    """
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / result.filename
    fd, tmp_name = tempfile.mkstemp(prefix=f".{result.filename}.", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(result.content)
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug("wrote %s (%d rows, %d bytes)", target, result.row_count, len(result.content))
    return target
