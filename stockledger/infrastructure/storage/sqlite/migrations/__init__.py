"""Database migrations module."""

from stockledger.infrastructure.storage.sqlite.migrations.migrator import (
    IntegrityCheck,
    MigrationInfo,
    MigrationResult,
    SchemaStatus,
    discover_migrations,
    find_drifted_products,
    get_current_version,
    get_migration_status,
    initialize_database,
    pending_migrations,
    verify_schema_integrity,
)

__all__ = [
    "IntegrityCheck",
    "MigrationInfo",
    "MigrationResult",
    "SchemaStatus",
    "discover_migrations",
    "find_drifted_products",
    "get_current_version",
    "get_migration_status",
    "initialize_database",
    "pending_migrations",
    "verify_schema_integrity",
]
