"""
Versioned schema migrations for the ledger database.

Files named ``v<NNN>_<name>.sql`` in this directory are applied in version
order. Each file runs in its own transaction together with its
``schema_migrations`` row, so a failing file leaves the schema exactly at the
previous version. Applied files are pinned by checksum and must never be
edited; ship a new version instead.
"""

import asyncio
import hashlib
import re
import time
from dataclasses import dataclass
from pathlib import Path

import aiosqlite

from stockledger.config import get_logger, get_settings
from stockledger.core.exceptions import MigrationError

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent

REQUIRED_TABLES = [
    "products",
    "locations",
    "inventory_snapshots",
    "stock_movements",
    "stock_transfers",
    "stock_transfer_items",
    "purchase_orders",
    "purchase_order_items",
    "schema_migrations",
]

REQUIRED_TRIGGERS = [
    "trg_stock_movements_no_update",
    "trg_stock_movements_no_delete",
]

_FILENAME = re.compile(r"v(\d+)_(.+)\.sql")


@dataclass
class MigrationInfo:
    """A migration file on disk."""

    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")

        content = path.read_text(encoding="utf-8")
        return cls(
            version=match.group(1),
            name=match.group(2),
            path=path,
            checksum=hashlib.sha256(content.encode()).hexdigest()[:16],
        )


@dataclass
class MigrationResult:
    """Outcome of one applied migration."""

    version: str
    name: str
    execution_time_ms: int


def discover_migrations(directory: Path | None = None) -> list[MigrationInfo]:
    """Migration files in version order; badly named files are skipped."""
    migrations = []
    for path in sorted((directory or MIGRATIONS_DIR).glob("v*.sql")):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return migrations


async def _connect(db_path: Path) -> aiosqlite.Connection:
    # Autocommit mode: the only transactions are the ones opened explicitly below
    conn = await aiosqlite.connect(db_path, isolation_level=None)
    await conn.execute("PRAGMA journal_mode=WAL")
    await conn.execute("PRAGMA foreign_keys=ON")
    return conn


async def _ensure_migrations_table(conn: aiosqlite.Connection) -> None:
    await conn.execute(
        """
        CREATE TABLE IF NOT EXISTS schema_migrations (
            version TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            checksum TEXT NOT NULL,
            applied_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            execution_time_ms INTEGER
        )
        """
    )


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Applied versions mapped to their recorded checksums."""
    try:
        cursor = await conn.execute(
            "SELECT version, checksum FROM schema_migrations ORDER BY version"
        )
    except aiosqlite.OperationalError:
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied, default=None)


async def apply_migration(
    conn: aiosqlite.Connection,
    migration: MigrationInfo,
) -> MigrationResult:
    """
    Apply one migration atomically.

    The script and its ``schema_migrations`` row commit together. On any
    error the transaction is rolled back and ``MigrationError`` is raised.
    """
    logger.info("applying_migration", version=migration.version, name=migration.name)
    started = time.perf_counter()
    sql = migration.path.read_text(encoding="utf-8")

    try:
        # executescript commits anything pending before it runs, so the
        # transaction has to be opened by the script itself
        await conn.executescript(f"BEGIN IMMEDIATE;\n{sql}\n")
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        await conn.execute(
            """
            INSERT INTO schema_migrations (version, name, checksum, execution_time_ms)
            VALUES (?, ?, ?, ?)
            """,
            (migration.version, migration.name, migration.checksum, elapsed_ms),
        )

        cursor = await conn.execute("PRAGMA foreign_key_check")
        violations = await cursor.fetchall()
        if violations:
            raise MigrationError(
                migration.version, f"{len(violations)} foreign key violation(s)"
            )

        await conn.execute("COMMIT")
    except (aiosqlite.Error, MigrationError) as e:
        if conn.in_transaction:
            await conn.execute("ROLLBACK")
        logger.error(
            "migration_failed",
            version=migration.version,
            name=migration.name,
            error=str(e),
        )
        if isinstance(e, MigrationError):
            raise
        raise MigrationError(migration.version, str(e)) from e

    logger.info(
        "migration_applied",
        version=migration.version,
        name=migration.name,
        execution_time_ms=elapsed_ms,
    )
    return MigrationResult(
        version=migration.version, name=migration.name, execution_time_ms=elapsed_ms
    )


async def initialize_database(
    db_path: Path | None = None,
    migrations_dir: Path | None = None,
) -> list[MigrationResult]:
    """
    Bring the database up to the latest schema version.

    Returns the migrations applied by this call (empty when already current).
    Raises ``MigrationError`` when an applied file's checksum changed or a
    pending migration fails; later migrations are not attempted.
    """
    db_path = db_path or get_settings().storage.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("initializing_database", db_path=str(db_path))

    migrations = discover_migrations(migrations_dir)
    if not migrations:
        logger.warning("no_migrations_found")

    results: list[MigrationResult] = []
    conn = await _connect(db_path)
    try:
        await _ensure_migrations_table(conn)
        applied = await get_applied_migrations(conn)

        for migration in migrations:
            recorded = applied.get(migration.version)
            if recorded is None:
                results.append(await apply_migration(conn, migration))
            elif recorded != migration.checksum:
                logger.error(
                    "migration_checksum_changed",
                    version=migration.version,
                    recorded=recorded,
                    on_disk=migration.checksum,
                )
                raise MigrationError(
                    migration.version, "file changed after it was applied"
                )
    finally:
        await conn.close()

    logger.info(
        "database_ready",
        applied=[r.version for r in results],
        version=max((m.version for m in migrations), default=None),
    )
    return results


# Alias used by the API lifespan
run_migrations = initialize_database


async def get_migration_status(
    db_path: Path | None = None,
    migrations_dir: Path | None = None,
) -> dict:
    """Current, applied and pending versions."""
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

    discovered = discover_migrations(migrations_dir)
    return {
        "exists": True,
        "current_version": max(applied, default=None),
        "applied_migrations": list(applied),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "total_migrations": len(discovered),
    }


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """Check foreign keys, page integrity, required tables and the append-only triggers."""
    db_path = db_path or get_settings().storage.db_path

    async with aiosqlite.connect(db_path) as conn:
        cursor = await conn.execute("PRAGMA foreign_key_check")
        fk_violations = await cursor.fetchall()

        cursor = await conn.execute("PRAGMA integrity_check")
        integrity = (await cursor.fetchone())[0]

        cursor = await conn.execute("SELECT type, name FROM sqlite_master")
        objects = {(row[0], row[1]) for row in await cursor.fetchall()}

    missing_tables = [t for t in REQUIRED_TABLES if ("table", t) not in objects]
    missing_triggers = [t for t in REQUIRED_TRIGGERS if ("trigger", t) not in objects]

    return [
        {
            "check": "foreign_keys",
            "status": "FAIL" if fk_violations else "PASS",
            "violations": len(fk_violations),
        },
        {
            "check": "integrity",
            "status": "PASS" if integrity == "ok" else "FAIL",
            "result": integrity,
        },
        {
            "check": "required_tables",
            "status": "FAIL" if missing_tables else "PASS",
            "missing": missing_tables,
        },
        {
            "check": "append_only_triggers",
            "status": "FAIL" if missing_triggers else "PASS",
            "missing": missing_triggers,
        },
    ]


def main() -> None:
    """CLI entry point: migrate, or report status / integrity."""
    import argparse

    parser = argparse.ArgumentParser(description="Stock Ledger Database Migrator")
    parser.add_argument("--db-path", type=Path, help="Database path (default from settings)")
    parser.add_argument("--status", action="store_true", help="Show migration status")
    parser.add_argument("--verify", action="store_true", help="Verify schema integrity")
    args = parser.parse_args()

    async def run() -> int:
        if args.status:
            status = await get_migration_status(args.db_path)
            print(f"Database exists: {status['exists']}")
            print(f"Current version: {status['current_version'] or 'N/A'}")
            print(f"Applied migrations: {status['applied_migrations']}")
            print(f"Pending migrations: {status['pending_migrations']}")
            return 0

        if args.verify:
            checks = await verify_schema_integrity(args.db_path)
            for check in checks:
                print(f"[{check['status']}] {check['check']}")
                for key, value in check.items():
                    if check["status"] != "PASS" and key not in ("check", "status"):
                        print(f"       {key}: {value}")
            return 0 if all(c["status"] == "PASS" for c in checks) else 1

        try:
            results = await initialize_database(args.db_path)
        except MigrationError as e:
            print(f"[FAILED] {e.message}")
            return 1
        for result in results:
            print(f"[APPLIED] v{result.version}: {result.name} ({result.execution_time_ms}ms)")
        if not results:
            print("Schema is up to date")
        return 0

    raise SystemExit(asyncio.run(run()))


if __name__ == "__main__":
    main()
