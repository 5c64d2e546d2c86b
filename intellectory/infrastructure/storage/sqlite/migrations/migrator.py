"""
Schema migrations for the local SQLite backend.

Each `v<version>_<name>.sql` file next to this module is one migration.
Applied versions are recorded in `schema_migrations` together with a
short checksum of the script. Before touching an existing database file
a copy is taken; it is put back if any migration fails and dropped once
everything has applied.
"""

import hashlib
import re
import shutil
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from intellectory.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
MIGRATION_FILE = re.compile(r"^v(?P<version>\d+)_(?P<name>.+)\.sql$")

REQUIRED_TABLES = [
    # teams and stock
    "teams",
    "team_members",
    "stock_items",
    "activity_log",
    "suppliers",
    "credit_transactions",
    # bin ledger
    "bin_types",
    "bin_parties",
    "bin_balances",
    "bin_status_counts",
    "bin_history_log",
    "our_bins",
    "daily_bin_totals",
    "schema_migrations",
]


@dataclass(frozen=True)
class MigrationInfo:
    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        found = MIGRATION_FILE.match(path.name)
        if found is None:
            raise ValueError(f"Invalid migration filename: {path.name}")
        digest = hashlib.sha256(path.read_bytes()).hexdigest()
        return cls(found["version"], found["name"], path, digest[:16])

    @property
    def script(self) -> str:
        return self.path.read_text(encoding="utf-8")


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def discover_migrations() -> list[MigrationInfo]:
    """Migration files in version order; badly named files are skipped."""
    found = []
    for path in MIGRATIONS_DIR.glob("v*.sql"):
        try:
            found.append(MigrationInfo.from_file(path))
        except ValueError:
            logger.warning("migration_file_ignored", path=str(path))
    return sorted(found, key=lambda m: int(m.version))


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Version -> checksum for every recorded migration; empty on a new file."""
    try:
        rows = await conn.execute_fetchall("SELECT version, checksum FROM schema_migrations")
    except aiosqlite.OperationalError:
        return {}
    return {version: checksum for version, checksum in rows}


async def apply_migration(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    started = time.perf_counter()
    try:
        await conn.executescript(migration.script)
        await conn.execute(
            "INSERT OR REPLACE INTO schema_migrations (version, name, checksum, execution_time_ms) "
            "VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, _elapsed_ms(started)),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, name=migration.name, error=str(e))
        return MigrationResult(migration.version, migration.name, False, _elapsed_ms(started), str(e))

    took = _elapsed_ms(started)
    logger.info("migration_applied", version=migration.version, name=migration.name, ms=took)
    return MigrationResult(migration.version, migration.name, True, took)


def _take_backup(db_path: Path) -> Path:
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    copy = db_path.with_suffix(f".backup_{stamp}.db")
    shutil.copy2(db_path, copy)
    logger.info("database_backup_created", backup_path=str(copy))
    return copy


def _restore(db_path: Path, backup: Path) -> None:
    shutil.copy2(backup, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup))


async def _migrate(db_path: Path) -> list[MigrationResult]:
    migrations = discover_migrations()
    if not migrations:
        logger.warning("no_migrations_found", directory=str(MIGRATIONS_DIR))
        return []

    results: list[MigrationResult] = []
    async with aiosqlite.connect(db_path) as conn:
        await conn.execute("PRAGMA journal_mode=WAL")
        await conn.execute("PRAGMA foreign_keys=ON")
        applied = await get_applied_migrations(conn)

        for migration in migrations:
            recorded = applied.get(migration.version)
            if recorded is not None:
                if recorded != migration.checksum:
                    logger.warning("migration_checksum_changed", version=migration.version)
                continue
            result = await apply_migration(conn, migration)
            results.append(result)
            if not result.success:
                break
    return results


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Bring the database at `db_path` (default: storage settings) up to date.

    Returns one result per migration attempted; a failed migration is the
    last entry and leaves the file as it was before the run.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    backup = _take_backup(db_path) if create_backup_before and db_path.exists() else None
    logger.info("initializing_database", db_path=str(db_path), backup=backup is not None)

    try:
        results = await _migrate(db_path)
    except (aiosqlite.Error, OSError) as e:
        logger.error("database_initialization_failed", error=str(e))
        if backup is not None:
            _restore(db_path, backup)
        raise

    if backup is not None:
        if not all(r.success for r in results):
            _restore(db_path, backup)
        backup.unlink()
    return results


async def get_migration_status(db_path: Path | None = None) -> dict[str, Any]:
    db_path = db_path or get_settings().storage.db_path
    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)
    known = discover_migrations()
    return {
        "exists": True,
        "current_version": max(applied, key=int) if applied else None,
        "applied_migrations": sorted(applied, key=int),
        "pending_migrations": [m.version for m in known if m.version not in applied],
        "total_migrations": len(known),
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict[str, Any]]:
    """Run foreign key, integrity and required-table checks; each is PASS or FAIL."""
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        violations = await conn.execute_fetchall("PRAGMA foreign_key_check")
        integrity = (await conn.execute_fetchall("PRAGMA integrity_check"))[0][0]
        tables = {
            row[0]
            for row in await conn.execute_fetchall(
                "SELECT name FROM sqlite_master WHERE type = 'table'"
            )
        }

    missing = [table for table in REQUIRED_TABLES if table not in tables]
    return [
        {"check": "foreign_keys", "status": "FAIL" if violations else "PASS", "violations": len(violations)},
        {"check": "integrity", "status": "PASS" if integrity == "ok" else "FAIL", "result": integrity},
        {"check": "required_tables", "status": "FAIL" if missing else "PASS", "missing": missing},
    ]
