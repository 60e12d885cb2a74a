"""Domain models for the companion import/export tool.

Typed records (clients, bookings, ...), configuration dataclasses, result
models and the error record used by the row-level error log.
"""

from .config_models import AppConfig, DatabaseConfig, PlanConfig
from .entities import (
    ENTITY_TYPES,
    Booking,
    Client,
    EntityKind,
    IncidentLog,
    SafetyCheck,
    SafetyContact,
    Tag,
    Transaction,
    Venue,
    new_id,
)
from .error_record import ErrorRecord
from .processing_result import ExportFormat, ExportResult, ImportOutcome, StatusType, TransferStatus

__all__ = [
    # Configuration models
    "AppConfig",
    "DatabaseConfig",
    "PlanConfig",
    # Entities
    "EntityKind",
    "ENTITY_TYPES",
    "Tag",
    "Client",
    "Booking",
    "Transaction",
    "SafetyContact",
    "SafetyCheck",
    "IncidentLog",
    "Venue",
    "new_id",
    # Results
    "ErrorRecord",
    "ExportFormat",
    "ExportResult",
    "ImportOutcome",
    "StatusType",
    "TransferStatus",
]
