from __future__ import annotations

from pathlib import Path

import pytest

from companion_io.cli.__main__ import EXIT_ERROR_STATUS, EXIT_FATAL, EXIT_SUCCESS
from companion_io.cli.__main__ import main as cli_main
from companion_io.logging.init import reset_logging

"""Exit code contract: 0 success status, 1 fatal startup, 2 error status or unpersisted import."""


@pytest.fixture(autouse=True)
def memory_store_only(monkeypatch):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")
    reset_logging()
    yield
    reset_logging()


def test_exit_code_values():
    assert (EXIT_SUCCESS, EXIT_FATAL, EXIT_ERROR_STATUS) == (0, 1, 2)


def test_exit_code_fatal_startup(temp_workdir: Path, capsys):
    # config/companion.yml 無し → exit 1
    code = cli_main(["export", "clients"])
    assert code == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_success(write_config: Path):
    # デフォルトの config パス (cwd 相対) が使われる
    assert cli_main(["export", "clients"]) == 0


def test_exit_code_error_status(write_config: Path, temp_workdir: Path):
    empty = temp_workdir / "data" / "clients.csv"
    empty.write_text("Alias\n", encoding="utf-8")
    assert cli_main(["import", "clients", str(empty)]) == 2


def test_exit_code_missing_import_file(write_config: Path, temp_workdir: Path):
    assert cli_main(["import", "transactions", str(temp_workdir / "data" / "missing.csv")]) == 2


def test_exit_code_import_into_memory_store(write_config: Path, temp_workdir: Path):
    # 取り込み自体は成功しても保存先が無いので 2
    data = temp_workdir / "data" / "clients.csv"
    data.write_text("Alias\nJane\n", encoding="utf-8")
    assert cli_main(["import", "clients", str(data)]) == 2
