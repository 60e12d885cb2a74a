from __future__ import annotations

import json
import re
from pathlib import Path

from companion_io.logging.error_log import ErrorLogBuffer
from companion_io.models.error_record import ErrorRecord


def test_flush_without_records_writes_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_flush_writes_json_lines(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path / "logs")
    buf.append(ErrorRecord.create("c.csv", "clients", 2, "DUPLICATE_KEY", "alias 'jane' already exists"))
    buf.append(ErrorRecord.create("c.csv", "clients", 3, "MISSING_REQUIRED_FIELD", "missing alias"))
    path = buf.flush()

    assert path is not None
    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["row"] for line in lines] == [2, 3]
    assert buf.records == []


def test_later_flushes_append_to_same_file(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    buf.append(ErrorRecord.create("a.csv", "clients", 1, "X", "first"))
    first = buf.flush()
    buf.append(ErrorRecord.create("b.csv", "clients", 1, "X", "second"))
    second = buf.flush()
    assert first == second
    assert len(first.read_text(encoding="utf-8").splitlines()) == 2


def test_records_returns_copy(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    buf.append(ErrorRecord.create("a.csv", "clients", 1, "X", "m"))
    buf.records.clear()
    assert len(buf.records) == 1


def test_non_ascii_kept_readable(tmp_path: Path):
    buf = ErrorLogBuffer(tmp_path)
    buf.append(ErrorRecord.create("顧客.csv", "clients", 1, "X", "💎"))
    text = buf.flush().read_text(encoding="utf-8")
    assert "顧客.csv" in text and "💎" in text
