"""
Versioned schema migrations for the stock ledger database.

Scripts named ``v<NNN>_<name>.sql`` beside this module are applied in version
order. Each script runs in one transaction together with its
``schema_migrations`` row, so a failed script leaves no trace. A script that
was edited after being applied is refused with SchemaError.

``verify_schema_integrity`` also checks what the ledger relies on at runtime:
the append-only triggers on the movement log, and cached stock agreeing with
the log it is derived from.
"""

import hashlib
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import aiosqlite

from stockledger.config import get_logger, get_settings
from stockledger.core.entities.stock_movement import MovementType
from stockledger.core.exceptions import SchemaError

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
MIGRATION_FILENAME = re.compile(r"v(\d+)_(\w+)\.sql")

LEDGER_TABLES = ("products", "stock_movements", "schema_migrations")
APPEND_ONLY_TRIGGERS = ("trg_stock_movements_no_update", "trg_stock_movements_no_delete")


@dataclass(frozen=True)
class MigrationInfo:
    """One migration script on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = MIGRATION_FILENAME.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        checksum = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=checksum)

    def transactional_script(self) -> str:
        # version and name are \d+ and \w+, safe to inline
        return (
            "BEGIN;\n"
            f"{self.path.read_text(encoding='utf-8')}\n"
            "INSERT INTO schema_migrations (version, name, checksum) "
            f"VALUES ('{self.version}', '{self.name}', '{self.checksum}');\n"
            "COMMIT;\n"
        )


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


@dataclass
class SchemaStatus:
    """Where a database file stands against the shipped migrations."""

    exists: bool
    current_version: str | None = None
    applied: list[str] = field(default_factory=list)
    pending: list[str] = field(default_factory=list)
    modified: list[str] = field(default_factory=list)  # applied, then edited

    @property
    def up_to_date(self) -> bool:
        return self.exists and not self.pending and not self.modified


@dataclass
class IntegrityCheck:
    check: str
    passed: bool
    details: dict[str, Any] = field(default_factory=dict)


def discover_migrations(directory: Path | None = None) -> list[MigrationInfo]:
    """Migration scripts in numeric version order; misnamed files are skipped."""
    migrations = []
    for path in (directory or MIGRATIONS_DIR).glob("v*.sql"):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return sorted(migrations, key=lambda m: int(m.version))


async def applied_checksums(conn: aiosqlite.Connection) -> dict[str, str]:
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations")
    except aiosqlite.OperationalError:
        # Fresh database, v001 creates the table
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await applied_checksums(conn)
    return max(applied, key=int) if applied else None


def pending_migrations(
    applied: dict[str, str], migrations: list[MigrationInfo]
) -> list[MigrationInfo]:
    """Migrations not yet applied. Raises SchemaError if an applied one was edited."""
    pending = []
    for migration in migrations:
        checksum = applied.get(migration.version)
        if checksum is None:
            pending.append(migration)
        elif checksum != migration.checksum:
            raise SchemaError(migration.version, "script changed after it was applied")
    return pending


async def apply_migration(
    conn: aiosqlite.Connection, migration: MigrationInfo
) -> MigrationResult:
    start = time.perf_counter()
    try:
        await conn.executescript(migration.transactional_script())
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error(
            "migration_failed",
            version=migration.version,
            name=migration.name,
            error=str(e),
        )
        return MigrationResult(
            version=migration.version,
            name=migration.name,
            success=False,
            execution_time_ms=int((time.perf_counter() - start) * 1000),
            error=str(e),
        )

    elapsed_ms = int((time.perf_counter() - start) * 1000)
    await conn.execute(
        "UPDATE schema_migrations SET execution_time_ms = ? WHERE version = ?",
        (elapsed_ms, migration.version),
    )
    await conn.commit()
    logger.info(
        "migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=elapsed_ms,
    )
    return MigrationResult(
        version=migration.version,
        name=migration.name,
        success=True,
        execution_time_ms=elapsed_ms,
    )


async def initialize_database(db_path: Path | None = None) -> list[MigrationResult]:
    """
    Apply pending migrations, stopping at the first failure.

    Returns one result per attempted migration; an up-to-date database
    returns an empty list.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)

    results: list[MigrationResult] = []
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")

        pending = pending_migrations(await applied_checksums(conn), discover_migrations())
        if not pending:
            logger.info("schema_up_to_date", db_path=str(db_path))
            return results

        for migration in pending:
            result = await apply_migration(conn, migration)
            results.append(result)
            if not result.success:
                break

    return results


async def get_migration_status(db_path: Path | None = None) -> SchemaStatus:
    db_path = db_path or get_settings().storage.db_path
    if not db_path.exists():
        return SchemaStatus(exists=False)

    async with aiosqlite.connect(db_path) as conn:
        applied = await applied_checksums(conn)
        current = await get_current_version(conn)

    discovered = discover_migrations()
    return SchemaStatus(
        exists=True,
        current_version=current,
        applied=sorted(applied, key=int),
        pending=[m.version for m in discovered if m.version not in applied],
        modified=[
            m.version for m in discovered
            if m.version in applied and applied[m.version] != m.checksum
        ],
    )


async def verify_schema_integrity(
    db_path: Path | None = None, tolerance: float | None = None
) -> list[IntegrityCheck]:
    """SQLite integrity, then the schema and data guarantees of the ledger."""
    settings = get_settings()
    db_path = db_path or settings.storage.db_path
    if tolerance is None:
        tolerance = settings.ledger.reconcile_tolerance

    checks = []
    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA integrity_check")
        result = (await cursor.fetchone())[0]
        checks.append(IntegrityCheck("integrity", result == "ok", {"result": result}))

        cursor = await conn.execute("PRAGMA foreign_key_check")
        violations = len(await cursor.fetchall())
        checks.append(IntegrityCheck("foreign_keys", violations == 0, {"violations": violations}))

        objects = await _schema_objects(conn)
        missing_tables = [t for t in LEDGER_TABLES if t not in objects["table"]]
        checks.append(
            IntegrityCheck("ledger_tables", not missing_tables, {"missing": missing_tables})
        )
        if missing_tables:
            return checks

        missing_triggers = [t for t in APPEND_ONLY_TRIGGERS if t not in objects["trigger"]]
        checks.append(
            IntegrityCheck("append_only", not missing_triggers, {"missing": missing_triggers})
        )

        drifted = await find_drifted_products(conn, tolerance)
        checks.append(
            IntegrityCheck("stock_projection", not drifted, {"drifted_products": drifted})
        )

    return checks


async def _schema_objects(conn: aiosqlite.Connection) -> dict[str, set[str]]:
    objects: dict[str, set[str]] = {"table": set(), "trigger": set()}
    cursor = await conn.execute(
        "SELECT type, name FROM sqlite_master WHERE type IN ('table', 'trigger')"
    )
    for kind, name in await cursor.fetchall():
        objects[kind].add(name)
    return objects


async def find_drifted_products(
    conn: aiosqlite.Connection, tolerance: float = 1e-6
) -> list[str]:
    """Product ids whose cached stock differs from max(0, signed sum of movements)."""
    inbound = [t.value for t in MovementType if t.is_inbound]
    placeholders = ", ".join("?" for _ in inbound)
    cursor = await conn.execute(
        f"""
        SELECT p.id
        FROM products p
        LEFT JOIN (
            SELECT product_id,
                   SUM(CASE WHEN movement_type IN ({placeholders})
                            THEN quantity ELSE -quantity END) AS total
            FROM stock_movements
            GROUP BY product_id
        ) m ON m.product_id = p.id
        WHERE ABS(p.stock_quantity - MAX(0.0, COALESCE(m.total, 0.0))) > ?
        ORDER BY p.id
        """,
        (*inbound, tolerance),
    )
    return [row[0] for row in await cursor.fetchall()]
