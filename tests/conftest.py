# Shared pytest fixtures
from __future__ import annotations

import json
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest

from companion_io.logging.error_log import ErrorLogBuffer
from companion_io.logging.init import reset_logging
from companion_io.store.memory import MemoryStore
from companion_io.tabular.codec import CodecError


class FakeWorkbookCodec:
    """In-memory workbook capability: JSON grid instead of a real xlsx."""

    def __init__(self) -> None:
        self.writes: list[dict[str, Any]] = []

    def load(self, data: bytes) -> list[list[Any]]:
        try:
            return json.loads(data.decode("utf-8"))["grid"]
        except (ValueError, KeyError) as e:
            raise CodecError(f"unreadable workbook: {e}") from e

    def write(self, sheet_name: str, headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> bytes:
        sheet = {"sheet": sheet_name, "grid": [list(headers)] + [list(r) for r in rows]}
        self.writes.append(sheet)
        return json.dumps(sheet).encode("utf-8")

    def write_sheets(self, sheets: Sequence[tuple[str, Sequence[str], Sequence[Sequence[Any]]]]) -> bytes:
        book = [{"sheet": name, "grid": [list(headers)] + [list(r) for r in rows]} for name, headers, rows in sheets]
        self.writes.extend(book)
        # load は先頭シートだけ読む
        return json.dumps({"grid": book[0]["grid"] if book else [], "sheets": book}).encode("utf-8")


@pytest.fixture(autouse=True)
def _fresh_logging():
    # ハンドラが前のテストの stdout を掴んだままにならないように
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """output_directory: ./exports
logs_directory: ./logs
store:
  backend: memory
plan:
  paid: false
  client_limit: 5
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "companion.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def fake_workbook() -> FakeWorkbookCodec:
    return FakeWorkbookCodec()


@pytest.fixture()
def error_log(tmp_path: Path) -> ErrorLogBuffer:
    return ErrorLogBuffer(tmp_path / "logs")
