from __future__ import annotations

import logging
from pathlib import Path

from companion_io.logging.error_log import ErrorLogBuffer
from companion_io.logging.init import log_summary
from companion_io.models.entities import EntityKind
from companion_io.models.error_record import ErrorRecord
from companion_io.models.processing_result import ExportFormat, TransferStatus
from companion_io.schemas.registry import get_adapter
from companion_io.store.base import RecordStore, StoreError
from companion_io.tabular.codec import CodecError, UnsupportedFormatError, WorkbookCodec, deserialize, resolve_format

from .exporter import export_all as export_all_kinds
from .exporter import export_kind, write_export
from .quota import QuotaPolicy, UnlimitedQuotaPolicy
from .reconcile import import_rows
from .summary import (
    ALL_KINDS,
    render_empty_export_all_message,
    render_empty_export_message,
    render_export_all_message,
    render_export_message,
    render_import_message,
    render_summary_line,
)

"""Host-facing import / export entry point.

Turns every outcome into a terminal TransferStatus: a success message with
counts, or one error string. Row-level problems never surface here (they are
counted by the reconciliation engine); only structural failures do, and they
are caught before any row is persisted:

- unknown kind / format
- import on an export-only kind (message = the kind's reason)
- unreadable file or corrupt workbook
- file without data rows
- a second import while one is running

export_all is the whole-store backup: every collection in one dated workbook.
"""

__all__ = [
    "IMPORT_IN_PROGRESS",
    "EMPTY_FILE",
    "UNSUPPORTED_IMPORT",
    "UNREADABLE_FILE",
    "TransferService",
]

logger = logging.getLogger(__name__)

IMPORT_IN_PROGRESS = "An import is already in progress"
EMPTY_FILE = "File is empty or has no data rows"
UNSUPPORTED_IMPORT = "UNSUPPORTED_IMPORT"
UNREADABLE_FILE = "UNREADABLE_FILE"


class TransferService:
    """Import / export actions over one record store.

    Args:
        store: Record store to read from / write to
        policy: Plan quota policy for client import (unlimited when omitted)
        workbook: Workbook codec capability (pandas/openpyxl when omitted)
        error_log: Row-level error buffer, flushed after every import
    """

    def __init__(
        self,
        store: RecordStore,
        policy: QuotaPolicy | None = None,
        workbook: WorkbookCodec | None = None,
        error_log: ErrorLogBuffer | None = None,
    ) -> None:
        self.store = store
        self.policy = policy if policy is not None else UnlimitedQuotaPolicy()
        self.workbook = workbook
        self.error_log = error_log if error_log is not None else ErrorLogBuffer()
        self.importing = False

    # ------------------------------------------------------------------ export

    def export(self, kind: EntityKind | str, fmt: ExportFormat | str, directory: Path) -> TransferStatus:
        try:
            entity_kind = EntityKind(kind)
            export_format = resolve_format(fmt)
        except (ValueError, UnsupportedFormatError) as e:
            return self._report("export", kind, TransferStatus.error(f"Export failed: {e}"))

        try:
            result = export_kind(entity_kind, export_format, self.store, workbook=self.workbook)
            if result is None:
                status = TransferStatus.success(render_empty_export_message(entity_kind))
            else:
                path = write_export(result, Path(directory))
                status = TransferStatus.success(render_export_message(entity_kind, export_format), path=path)
        except (CodecError, StoreError, OSError) as e:
            status = TransferStatus.error(f"Export failed: {e}")
        return self._report("export", entity_kind, status)

    def export_all(self, directory: Path) -> TransferStatus:
        """Every collection into one dated XLSX workbook."""
        try:
            result = export_all_kinds(self.store, workbook=self.workbook)
            if result is None:
                status = TransferStatus.success(render_empty_export_all_message())
            else:
                path = write_export(result, Path(directory))
                status = TransferStatus.success(render_export_all_message(result.row_count), path=path)
        except (CodecError, StoreError, OSError) as e:
            status = TransferStatus.error(f"Export failed: {e}")
        return self._report("export", ALL_KINDS, status)

    # ------------------------------------------------------------------ import

    def import_file(self, kind: EntityKind | str, path: Path) -> TransferStatus:
        if self.importing:
            return self._report("import", kind, TransferStatus.error(IMPORT_IN_PROGRESS))

        self.importing = True
        try:
            status = self._import(kind, Path(path))
        finally:
            self.importing = False
            log_path = self.error_log.flush()
            if log_path is not None:
                logger.info("row errors written to %s", log_path)
        return self._report("import", kind, status)

    def _import(self, kind: EntityKind | str, path: Path) -> TransferStatus:
        try:
            entity_kind = EntityKind(kind)
        except ValueError as e:
            return TransferStatus.error(f"Import failed: {e}")

        adapter = get_adapter(entity_kind)
        if adapter.export_only_reason is not None:
            self.error_log.append(
                ErrorRecord.create(path.name, entity_kind.value, -1, UNSUPPORTED_IMPORT, adapter.export_only_reason)
            )
            return TransferStatus.error(adapter.export_only_reason)

        try:
            rows = deserialize(path.read_bytes(), path.name, workbook=self.workbook)
        except (OSError, CodecError) as e:
            self.error_log.append(ErrorRecord.create(path.name, entity_kind.value, -1, UNREADABLE_FILE, str(e)))
            return TransferStatus.error(f"Import failed: {e}")

        if not rows:
            return TransferStatus.error(EMPTY_FILE)

        try:
            outcome = import_rows(
                entity_kind,
                rows,
                self.store,
                self.policy,
                error_log=self.error_log,
                source=path.name,
            )
        except StoreError as e:
            return TransferStatus.error(f"Import failed: {e}")
        return TransferStatus.success(render_import_message(entity_kind, outcome, path.name), outcome=outcome)

    # ------------------------------------------------------------------ report

    def _report(self, action: str, kind: EntityKind | str, status: TransferStatus) -> TransferStatus:
        if status.ok:
            logger.info(status.message)
        else:
            logger.error(status.message)
        log_summary(render_summary_line(action, kind, status))
        return status
