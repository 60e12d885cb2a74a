from .base import (
    ExportColumn,
    FieldRule,
    HeaderAliases,
    JoinMaps,
    SchemaAdapter,
    UnsupportedImportError,
    column,
)
from .registry import ADAPTERS, EXPORT_ONLY_KINDS, IMPORTABLE_KINDS, get_adapter

__all__ = [
    "ExportColumn",
    "FieldRule",
    "HeaderAliases",
    "JoinMaps",
    "SchemaAdapter",
    "UnsupportedImportError",
    "column",
    "ADAPTERS",
    "EXPORT_ONLY_KINDS",
    "IMPORTABLE_KINDS",
    "get_adapter",
]
