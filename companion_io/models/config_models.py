from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the import/export tool.

These are the typed form of config/companion.yml after schema validation and
defaulting in companion_io.config.loader.
"""

__all__ = [
    "DatabaseConfig",
    "PlanConfig",
    "AppConfig",
]

FREE_CLIENT_LIMIT = 5


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class PlanConfig:
    """Usage tier. A paid plan lifts the active-client ceiling entirely."""
    paid: bool = False
    client_limit: int = FREE_CLIENT_LIMIT


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    output_directory: str  # where exports are written
    logs_directory: str = "./logs"
    store_backend: str = "memory"  # memory | postgres
    plan: PlanConfig = field(default_factory=PlanConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
