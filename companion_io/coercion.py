from __future__ import annotations

import math
import re
import warnings
from collections.abc import Iterable, Sequence
from datetime import UTC, date, datetime
from typing import Any, TypeVar

import pandas as pd
import regex

from companion_io.models.entities import Tag, new_id

"""Field coercion library.

Pure conversions between typed values and their flat cell / text form. Every
function is total: bad input yields an empty value or the fallback, never an
exception, because a single garbled cell must not abort an import.

Calendar dates are plain ``datetime.date`` values. A strict ``YYYY-MM-DD``
string is turned into that date directly rather than through a timestamp, so
the same day comes back regardless of the local UTC offset.
"""

__all__ = [
    "DEFAULT_TAG_COLOR",
    "is_missing",
    "format_date",
    "parse_date",
    "format_datetime",
    "parse_datetime",
    "format_tags",
    "parse_tags",
    "yes_no",
    "yes_no_label",
    "validate_enum",
    "optional_enum",
    "as_text",
    "optional_text",
    "as_number",
]

T = TypeVar("T")

DEFAULT_TAG_COLOR = "#8b5cf6"

_YMD = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_TAG_SEPARATORS = re.compile(r"[;,]")
# 先頭の絵文字 (書記素クラスタ単位) + 後続空白
_LEADING_ICON = regex.compile(r"^(?=\p{Emoji_Presentation}|\p{Extended_Pictographic})(\X)\s*")


def is_missing(value: Any) -> bool:
    """True for None, NaN/NaT and blank strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _general_parse(text: str) -> datetime | None:
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            ts = pd.to_datetime(text, errors="coerce")
        except (TypeError, ValueError, OverflowError):
            return None
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def _local_date(dt: datetime) -> date:
    if dt.tzinfo is not None:
        dt = dt.astimezone()
    return dt.date()


def parse_date(value: Any) -> date | None:
    """Parse a cell into a calendar date, or None when it is not a date."""
    if is_missing(value):
        return None
    if isinstance(value, datetime):
        return _local_date(value)
    if isinstance(value, date):
        return value
    text = str(value).strip()
    m = _YMD.match(text)
    if m:
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError:
            return None
    parsed = _general_parse(text)
    return _local_date(parsed) if parsed is not None else None


def format_date(value: Any) -> str:
    """``YYYY-MM-DD`` or an empty string for missing / invalid input."""
    d = parse_date(value)
    return d.isoformat() if d is not None else ""


def parse_datetime(value: Any) -> datetime | None:
    """Parse a cell into an aware UTC datetime (naive input is local time)."""
    if is_missing(value):
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    else:
        parsed = _general_parse(str(value).strip())
        if parsed is None:
            return None
        dt = parsed
    if dt.tzinfo is None:
        dt = dt.astimezone()
    return dt.astimezone(UTC)


def format_datetime(value: Any) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. ``2024-01-01T10:00:00.000Z``."""
    dt = parse_datetime(value)
    if dt is None:
        return ""
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_tags(tags: Iterable[Tag] | None) -> str:
    if not tags:
        return ""
    return "; ".join(
        f"{t.icon or ''}{t.name}{'|' + t.color if t.color else ''}" for t in tags
    )


def parse_tags(value: Any) -> list[Tag]:
    """Parse ``icon? name|#color`` entries separated by ``;`` or ``,``.

    Both separators are accepted because CSV exports joined tags with "; "
    while older workbook exports used ", ".
    """
    if not isinstance(value, str) or not value.strip():
        return []
    tags: list[Tag] = []
    for piece in _TAG_SEPARATORS.split(value):
        entry = piece.strip()
        if not entry:
            continue
        color = DEFAULT_TAG_COLOR
        idx = entry.rfind("|#")
        if idx >= 0:
            color = entry[idx + 1:]
            entry = entry[:idx]
        m = _LEADING_ICON.match(entry)
        icon = m.group(1) if m else None
        name = entry[m.end():] if m else entry
        tags.append(Tag(id=new_id(), name=name, color=color, icon=icon))
    return tags


def yes_no(value: Any) -> bool:
    if is_missing(value):
        return False
    return str(value).strip().casefold() == "yes"


def yes_no_label(flag: bool, *, blank_when_false: bool = False) -> str:
    if flag:
        return "Yes"
    return "" if blank_when_false else "No"


def validate_enum(value: Any, allowed: Sequence[T], fallback: T) -> T:
    """Return ``value`` if it is one of ``allowed``, else ``fallback``."""
    return value if value in allowed else fallback


def optional_enum(value: Any, allowed: Sequence[T]) -> T | None:
    text = optional_text(value)
    return text if text in allowed else None  # type: ignore[return-value]


def as_text(value: Any) -> str:
    if is_missing(value):
        return "" if not isinstance(value, str) else value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return format_datetime(value)
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def optional_text(value: Any) -> str | None:
    text = as_text(value).strip()
    return text or None


def as_number(value: Any) -> float | None:
    if is_missing(value) or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    return None if math.isnan(number) else number
