"""Database package for the dedicated portal services."""

from .connection import AsyncDatabaseConnection, TransactionScope, detect_database_dialect
from .migrations import ensure_schema, migrations_dir

__all__ = [
    "AsyncDatabaseConnection",
    "TransactionScope",
    "detect_database_dialect",
    "ensure_schema",
    "migrations_dir",
]
