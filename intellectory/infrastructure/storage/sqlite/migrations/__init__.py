"""Database migrations."""

from intellectory.infrastructure.storage.sqlite.migrations.migrator import (
    get_migration_status,
    initialize_database,
    verify_schema_integrity,
)

__all__ = ["initialize_database", "get_migration_status", "verify_schema_integrity"]
