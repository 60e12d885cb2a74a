from __future__ import annotations

import sys
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from functools import cache
from types import NoneType, UnionType
from typing import Any, Union, get_args, get_origin, get_type_hints

"""JSON document <-> entity conversion used by document-style record stores.

Dates and datetimes are stored as ISO strings, nested dataclasses (tags) as
objects. Unknown keys in a stored document are ignored so that older rows keep
loading after a field is removed.
"""

__all__ = [
    "to_document",
    "from_document",
]


def to_document(entity: Any) -> dict[str, Any]:
    """Convert a dataclass entity into a JSON-compatible dict."""
    return {f.name: _encode(getattr(entity, f.name)) for f in fields(entity)}


def _encode(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return to_document(value)
    if isinstance(value, list):
        return [_encode(v) for v in value]
    return value


@cache
def _hints(cls: type) -> dict[str, Any]:
    module = sys.modules[cls.__module__]
    return get_type_hints(cls, globalns=vars(module))


def from_document(cls: type, doc: dict[str, Any]) -> Any:
    """Rebuild a dataclass instance of ``cls`` from a stored document."""
    hints = _hints(cls)
    kwargs = {}
    for f in fields(cls):
        if f.name in doc:
            kwargs[f.name] = _decode(hints[f.name], doc[f.name])
    return cls(**kwargs)


def _decode(tp: Any, value: Any) -> Any:
    if value is None:
        return None
    origin = get_origin(tp)
    if origin is UnionType or origin is Union:
        inner = [a for a in get_args(tp) if a is not NoneType]
        return _decode(inner[0], value) if inner else value
    if origin is list:
        (item_type,) = get_args(tp)
        return [_decode(item_type, v) for v in value]
    # datetime は date のサブクラスなので先に判定
    if tp is datetime:
        return value if isinstance(value, datetime) else datetime.fromisoformat(value)
    if tp is date:
        if isinstance(value, datetime):
            return value.date()
        return value if isinstance(value, date) else date.fromisoformat(value)
    if isinstance(tp, type) and is_dataclass(tp) and isinstance(value, dict):
        return from_document(tp, value)
    return value
