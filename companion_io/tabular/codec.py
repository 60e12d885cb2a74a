from __future__ import annotations

import io
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

import pandas as pd
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from companion_io.coercion import as_text, is_missing
from companion_io.models.processing_result import ExportFormat

from .tokenizer import DELIMITER, QUOTE, parse_csv

"""Tabular codec: one sheet of header-keyed rows <-> file bytes.

Delimited text is handled here and in the tokenizer. Workbooks go through a
WorkbookCodec capability so callers (and tests) can substitute their own; the
default one reads with pandas and writes with pandas' openpyxl engine.

Format selection:
- serialize: explicit (csv | xlsx)
- serialize_workbook: always xlsx, one sheet per collection
- deserialize: from the file name (.csv / .tsv -> text, anything else -> workbook)
"""

__all__ = [
    "Row",
    "Sheet",
    "CodecError",
    "UnsupportedFormatError",
    "WorkbookCodec",
    "PandasWorkbookCodec",
    "FORMULA_TRIGGERS",
    "escape_csv_field",
    "serialize_csv_row",
    "unescape_csv_field",
    "column_width",
    "resolve_format",
    "rows_from_grid",
    "serialize",
    "serialize_workbook",
    "deserialize",
]

Row = dict[str, Any]
# (sheet name, headers, positional rows)
Sheet = tuple[str, Sequence[str], Sequence[Sequence[Any]]]

# Leading characters that make spreadsheet applications evaluate a cell.
FORMULA_TRIGGERS = ("=", "+", "-", "@", "\t", "\r")
ESCAPE_TRIGGERS = FORMULA_TRIGGERS + ("'",)
TEXT_SUFFIXES = (".csv", ".tsv")

MAX_COLUMN_WIDTH = 40
WIDTH_SAMPLE_ROWS = 50
SHEET_TITLE_LIMIT = 31  # Excel の制限


class CodecError(Exception):
    """Raised when file bytes cannot be read as a workbook at all."""


class UnsupportedFormatError(ValueError):
    pass


class WorkbookCodec(Protocol):
    """Workbook capability: first-sheet load, single- and multi-sheet write."""

    def load(self, data: bytes) -> list[list[Any]]:
        """Return the first sheet as positional rows of cell values."""
        ...

    def write(self, sheet_name: str, headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> bytes:
        """Write one sheet (bold header row) and return the workbook bytes."""
        ...

    def write_sheets(self, sheets: Sequence[Sheet]) -> bytes:
        """Write several (name, headers, rows) sheets, in order, into one workbook."""
        ...


def column_width(header: str, values: Sequence[Any]) -> int:
    """Display width: longest of header and the first sampled values, padded, capped."""
    widths = [len(header) + 2]
    widths.extend(len(as_text(v)) + 2 for v in values[:WIDTH_SAMPLE_ROWS])
    return min(max(widths), MAX_COLUMN_WIDTH)


class PandasWorkbookCodec:
    """Default workbook capability (pandas + openpyxl)."""

    def load(self, data: bytes) -> list[list[Any]]:
        try:
            frame = pd.read_excel(
                io.BytesIO(data),
                sheet_name=0,
                header=None,
                dtype=object,
                keep_default_na=False,
                engine="openpyxl",
            )
        except Exception as e:
            raise CodecError(f"unreadable workbook: {e}") from e
        return [
            [None if is_missing(v) else v for v in values]
            for values in frame.itertuples(index=False, name=None)
        ]

    def write(self, sheet_name: str, headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> bytes:
        return self.write_sheets([(sheet_name, headers, rows)])

    def write_sheets(self, sheets: Sequence[Sheet]) -> bytes:
        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            for sheet_name, headers, rows in sheets:
                title = sheet_name[:SHEET_TITLE_LIMIT]
                frame = pd.DataFrame([list(r) for r in rows], columns=list(headers), dtype=object)
                frame.to_excel(writer, sheet_name=title, index=False)
                _style_sheet(writer.sheets[title], headers, rows)
        return buffer.getvalue()


def _style_sheet(ws: Any, headers: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
    for idx, header in enumerate(headers, start=1):
        ws.cell(row=1, column=idx).font = Font(bold=True)
        ws.column_dimensions[get_column_letter(idx)].width = column_width(
            header, [r[idx - 1] for r in rows]
        )
    # openpyxl は "=" で始まる文字列を数式として保存するため文字列型に戻す
    for cells in ws.iter_rows(min_row=2):
        for cell in cells:
            if cell.data_type == "f":
                cell.data_type = "s"


def escape_csv_field(value: Any) -> str:
    """Render one CSV field.

    Text starting with a formula trigger or an apostrophe gets a leading
    apostrophe first, so unescape_csv_field can always strip exactly one. The
    result is then quoted if it contains the delimiter, a quote or a line
    break.
    """
    text = as_text(value)
    # 数値セルは対象外 (負数を "'-5" にしない)
    if text and text[0] in ESCAPE_TRIGGERS and not isinstance(value, (int, float)):
        text = "'" + text
    if any(c in text for c in (DELIMITER, QUOTE, "\n", "\r")):
        return QUOTE + text.replace(QUOTE, QUOTE * 2) + QUOTE
    return text


def serialize_csv_row(fields: Sequence[Any]) -> str:
    return DELIMITER.join(escape_csv_field(f) for f in fields)


def unescape_csv_field(text: str) -> str:
    """Drop the apostrophe escape_csv_field put in front of a trigger."""
    if len(text) > 1 and text[0] == "'" and text[1] in ESCAPE_TRIGGERS:
        return text[1:]
    return text


def rows_from_grid(grid: Sequence[Sequence[Any]]) -> list[Row]:
    """Turn positional workbook rows into header-keyed rows.

    Row 1 holds the headers; columns without a header are ignored, empty cells
    are left out, and rows with nothing under a named header are dropped.
    """
    if len(grid) < 2:
        return []
    headers = ["" if is_missing(h) else as_text(h).strip() for h in grid[0]]
    rows: list[Row] = []
    for cells in grid[1:]:
        row: Row = {}
        for header, value in zip(headers, cells):
            if header and not is_missing(value):
                row[header] = value
        if row:
            rows.append(row)
    return rows


def resolve_format(fmt: ExportFormat | str) -> ExportFormat:
    if isinstance(fmt, ExportFormat):
        return fmt
    try:
        return ExportFormat(str(fmt).lower())
    except ValueError as e:
        raise UnsupportedFormatError(f"unsupported export format: {fmt!r}") from e


def serialize(
    rows: Sequence[Row],
    fmt: ExportFormat | str,
    sheet_name: str,
    workbook: WorkbookCodec | None = None,
) -> bytes:
    """Serialize rows; headers come from the first row's key order."""
    fmt = resolve_format(fmt)
    headers = list(rows[0].keys()) if rows else []
    if fmt is ExportFormat.CSV:
        lines = [serialize_csv_row(headers)]
        lines.extend(serialize_csv_row([row.get(h) for h in headers]) for row in rows)
        return "\n".join(lines).encode("utf-8")

    codec = workbook if workbook is not None else PandasWorkbookCodec()
    return codec.write(sheet_name, headers, _cell_matrix(headers, rows))


def serialize_workbook(
    sheets: Sequence[tuple[str, Sequence[str], Sequence[Row]]],
    workbook: WorkbookCodec | None = None,
) -> bytes:
    """Serialize several (sheet name, headers, rows) collections into one workbook.

    Headers are passed explicitly so an empty collection still gets its
    header row.
    """
    codec = workbook if workbook is not None else PandasWorkbookCodec()
    return codec.write_sheets([(name, headers, _cell_matrix(headers, rows)) for name, headers, rows in sheets])


def _cell_matrix(headers: Sequence[str], rows: Sequence[Row]) -> list[list[Any]]:
    return [[None if row.get(h) == "" else row.get(h) for h in headers] for row in rows]


def deserialize(data: bytes, filename: str, workbook: WorkbookCodec | None = None) -> list[Row]:
    """Read rows back from file bytes, choosing the format by file name.

    Raises:
        CodecError: only when the workbook capability cannot open the bytes.
    """
    if Path(filename).suffix.lower() in TEXT_SUFFIXES:
        rows = parse_csv(data.decode("utf-8", errors="replace"))
        return [{k: unescape_csv_field(v) for k, v in row.items()} for row in rows]
    codec = workbook if workbook is not None else PandasWorkbookCodec()
    return rows_from_grid(codec.load(data))
