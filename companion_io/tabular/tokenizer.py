from __future__ import annotations

from typing import Any

"""Tokenizer for comma-delimited text.

Quoting follows the RFC 4180 conventions closely enough for files written by
spreadsheet applications and by this tool's own exporter:

- ``"`` opens/closes a quoted field; ``""`` inside quotes is one literal quote
- commas and line breaks inside quotes are data
- rows end at ``\\n`` or ``\\r\\n`` (the ``\\r`` is consumed); a lone ``\\r`` is data
- rows made only of blank fields are dropped wherever they appear
- an unterminated quote at end of input keeps the characters read so far
"""

__all__ = [
    "DELIMITER",
    "tokenize",
    "parse_csv",
]

DELIMITER = ","
QUOTE = '"'
_BOM = "\ufeff"


def _is_blank_row(fields: list[str]) -> bool:
    return not any(f.strip() for f in fields)


def tokenize(text: str) -> list[list[str]]:
    """Split delimited text into rows of raw (untrimmed) string fields."""
    if text.startswith(_BOM):
        text = text[1:]

    rows: list[list[str]] = []
    current: list[str] = []
    field: list[str] = []
    in_quotes = False
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if in_quotes:
            if ch == QUOTE:
                if i + 1 < n and text[i + 1] == QUOTE:
                    field.append(QUOTE)
                    i += 1
                else:
                    in_quotes = False
            else:
                field.append(ch)
        elif ch == QUOTE:
            in_quotes = True
        elif ch == DELIMITER:
            current.append("".join(field))
            field = []
        elif ch == "\n" or (ch == "\r" and i + 1 < n and text[i + 1] == "\n"):
            current.append("".join(field))
            field = []
            if not _is_blank_row(current):
                rows.append(current)
            current = []
            if ch == "\r":
                i += 1  # \r\n
        else:
            field.append(ch)
        i += 1

    # 最終行 (末尾改行なし / 閉じ引用符なし を含む)
    current.append("".join(field))
    if not _is_blank_row(current):
        rows.append(current)
    return rows


def parse_csv(text: str) -> list[dict[str, Any]]:
    """Parse delimited text into header-keyed rows.

    The first non-blank row supplies the headers. Values are aligned by
    position; a short row leaves its trailing headers unset and fields beyond
    the last header are ignored. Returns an empty list when there is no data
    row after the header.
    """
    lines = tokenize(text)
    if len(lines) < 2:
        return []
    headers = [h.strip() for h in lines[0]]
    rows: list[dict[str, Any]] = []
    for fields in lines[1:]:
        row: dict[str, Any] = {}
        for header, value in zip(headers, fields):
            row[header] = value.strip()
        rows.append(row)
    return rows
