from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from companion_io.models.error_record import ErrorRecord

"""Row-level error log buffering.

- JSON Lines with a fixed key set (see ErrorRecord)
- one ``errors-YYYYMMDD-HHMMSS.log`` (UTC) per session, created lazily
- records are buffered and written on flush(); nothing touches disk for a
  clean import
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush appends JSON Lines.

    Single-threaded use only: one import runs at a time.
    """

    def __init__(self, directory: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._directory = directory if directory is not None else LOGS_DIR
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._directory.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._directory / f"errors-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, or None when empty."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
