from __future__ import annotations

import re

from companion_io.logging.init import reset_logging
from companion_io.models.entities import Client, EntityKind
from companion_io.models.processing_result import ImportOutcome, TransferStatus
from companion_io.services.summary import render_summary_line
from companion_io.services.transfer import TransferService

"""SUMMARY 行フォーマット契約テスト

    action=<import|export> kind=<kind> status=<success|error>[ imported=N duplicates=N skipped=N invalid=N]
"""

SUMMARY_PATTERN = re.compile(
    r"^action=(import|export)\s+kind=([a-z_]+)\s+status=(success|error)"
    r"(\s+imported=([0-9]+)\s+duplicates=([0-9]+)\s+skipped=([0-9]+)\s+invalid=([0-9]+))?$"
)


def test_summary_pattern_example_line():
    line = render_summary_line("import", EntityKind.CLIENTS, TransferStatus.success("x", outcome=ImportOutcome(imported=4)))
    m = SUMMARY_PATTERN.match(line)
    assert m, "SUMMARY line should match contract regex"
    assert m.group(5) == "4"


def test_error_line_has_no_counters():
    m = SUMMARY_PATTERN.match(render_summary_line("export", EntityKind.VENUES, TransferStatus.error("boom")))
    assert m and m.group(4) is None


def test_logged_summary_lines_match(store, error_log, tmp_path, capsys):
    reset_logging()
    store.insert(EntityKind.CLIENTS, Client(id="1", alias="Jane"))
    service = TransferService(store, error_log=error_log)
    data = tmp_path / "clients.csv"
    data.write_text("Alias\nBob\n", encoding="utf-8")

    service.export("clients", "csv", tmp_path / "out")
    service.import_file("clients", data)
    service.import_file("venues", data)
    reset_logging()

    summaries = [line[len("SUMMARY "):] for line in capsys.readouterr().out.splitlines() if line.startswith("SUMMARY ")]
    assert len(summaries) == 3
    assert all(SUMMARY_PATTERN.match(s) for s in summaries)
    assert [SUMMARY_PATTERN.match(s).group(3) for s in summaries] == ["success", "success", "error"]
