from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from companion_io.logging.error_log import ErrorLogBuffer
from companion_io.models.entities import EntityKind, new_id
from companion_io.models.error_record import ErrorRecord
from companion_io.models.processing_result import ImportOutcome
from companion_io.schemas.registry import get_adapter
from companion_io.store.base import RecordStore
from companion_io.tabular.codec import Row

from .progress import ProgressTracker
from .quota import QuotaPolicy, UnlimitedQuotaPolicy

"""Reconciliation engine: validate, deduplicate and quota-limit incoming rows.

Per row, in input order:

1. key field blank          -> invalid (MISSING_REQUIRED_FIELD)
2. key already in the store -> duplicates (DUPLICATE_KEY), index untouched
3. plan ceiling reached     -> this and every later keyed row skipped, stop
4. required field missing   -> invalid (MISSING_REQUIRED_FIELD)
5. otherwise coerce, insert with a fresh id, extend the key index

Duplicate detection runs before the quota check so that a duplicate never
consumes quota, and the ceiling is re-evaluated for every row because later
rows may still fit after earlier ones turn out to be duplicates.

Steps 1-3 only apply to kinds whose adapter declares a key field / quota.
All state (key index, running active count) is local to one call.
"""

__all__ = [
    "MISSING_REQUIRED_FIELD",
    "DUPLICATE_KEY",
    "QUOTA_EXCEEDED",
    "import_rows",
]

logger = logging.getLogger(__name__)

MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
DUPLICATE_KEY = "DUPLICATE_KEY"
QUOTA_EXCEEDED = "QUOTA_EXCEEDED"


@dataclass
class _Counters:
    imported: int = 0
    skipped: int = 0
    duplicates: int = 0
    invalid: int = 0
    errors: list[ErrorRecord] = field(default_factory=list)

    def outcome(self) -> ImportOutcome:
        return ImportOutcome(
            imported=self.imported,
            skipped=self.skipped,
            duplicates=self.duplicates,
            invalid=self.invalid,
        )


def _clear_exclusive_flag(store: RecordStore, kind: EntityKind, flag: str) -> None:
    for entity in store.list(kind):
        if getattr(entity, flag):
            store.update(kind, entity.id, **{flag: False})


def import_rows(
    kind: EntityKind | str,
    rows: Sequence[Row],
    store: RecordStore,
    policy: QuotaPolicy | None = None,
    *,
    error_log: ErrorLogBuffer | None = None,
    source: str = "",
    id_factory: Callable[[], str] = new_id,
) -> ImportOutcome:
    """Import header-keyed rows of one kind into the store.

    Args:
        kind: Entity kind to import
        rows: Decoded rows (header -> cell value)
        store: Record store receiving the new entities
        policy: Plan quota policy (unlimited when omitted)
        error_log: Buffer receiving one record per dropped row
        source: File name used in error records
        id_factory: Identifier generator for new entities

    Returns:
        ImportOutcome with imported / skipped / duplicates / invalid counters

    Raises:
        UnsupportedImportError: kind is export-only (raised before any row is read)
    """
    adapter = get_adapter(kind)
    adapter.ensure_importable()
    kind = adapter.kind
    policy = policy if policy is not None else UnlimitedQuotaPolicy()
    counters = _Counters()

    def record(row_no: int, error_type: str, message: str) -> None:
        counters.errors.append(ErrorRecord.create(source, kind.value, row_no, error_type, message))

    keyed = adapter.key_field is not None
    index: set[str] = set()
    if keyed:
        index = {str(getattr(e, adapter.key_field)).casefold() for e in store.list(kind)}

    limited = adapter.quota_limited and not policy.is_unlimited()
    active = policy.active_count() if limited else 0

    with ProgressTracker(len(rows), description=f"Importing {kind.label}") as progress:
        for i, row in enumerate(rows):
            row_no = i + 1
            progress.advance()

            key = adapter.key(row) if keyed else ""
            if keyed:
                if not key:
                    counters.invalid += 1
                    record(row_no, MISSING_REQUIRED_FIELD, f"{adapter.key_field} is blank")
                    continue
                if key.casefold() in index:
                    counters.duplicates += 1
                    record(row_no, DUPLICATE_KEY, f"{adapter.key_field} already exists: {key}")
                    continue

            if limited and active >= policy.ceiling:
                remaining = 1 + sum(1 for later in rows[i + 1:] if not keyed or adapter.key(later))
                counters.skipped += remaining
                record(
                    row_no,
                    QUOTA_EXCEEDED,
                    f"plan limit of {policy.ceiling} reached; {remaining} remaining row(s) skipped",
                )
                break

            values: dict[str, Any] = adapter.read(row)
            missing = adapter.missing_fields(values)
            if missing:
                counters.invalid += 1
                record(row_no, MISSING_REQUIRED_FIELD, f"missing required field(s): {', '.join(missing)}")
                continue

            if adapter.exclusive_flag is not None and values.get(adapter.exclusive_flag):
                # 後勝ち: 同一バッチ内で複数あれば最後の行が唯一の primary になる
                _clear_exclusive_flag(store, adapter.kind, adapter.exclusive_flag)

            entity = adapter.build(values, id_factory())
            store.insert(kind, entity)
            counters.imported += 1
            if keyed:
                index.add(key.casefold())
            if limited and getattr(entity, "is_active", True):
                active += 1

            progress.set_postfix(imported=counters.imported)

    if error_log is not None:
        for err in counters.errors:
            error_log.append(err)

    outcome = counters.outcome()
    logger.debug(
        "import %s: rows=%d imported=%d duplicates=%d skipped=%d invalid=%d",
        kind.value,
        len(rows),
        outcome.imported,
        outcome.duplicates,
        outcome.skipped,
        outcome.invalid,
    )
    return outcome
