"""Schema versioning on top of SQLite's `user_version` pragma."""

import logging
from pathlib import Path

import aiosqlite

logger = logging.getLogger(__name__)

SQL_DIR = Path(__file__).parent

# (version, script) in the order they must be applied
MIGRATIONS: list[tuple[int, str]] = [
    (1, "schema.sql"),
]


async def schema_version(db: aiosqlite.Connection) -> int:
    async with db.execute("PRAGMA user_version") as cursor:
        row = await cursor.fetchone()
        return int(row[0]) if row else 0


async def run_migrations(db_path: Path) -> int:
    """Apply every script newer than the database's recorded version.

    Scripts are written with IF NOT EXISTS, so re-applying one against a
    database created before versioning is harmless.

    Returns:
        The schema version after migrating
    """
    async with aiosqlite.connect(db_path) as db:
        current = await schema_version(db)

        for version, script in MIGRATIONS:
            if version <= current:
                continue
            sql = (SQL_DIR / script).read_text(encoding="utf-8")
            await db.executescript(sql)
            # PRAGMA does not accept bound parameters
            await db.execute(f"PRAGMA user_version = {int(version)}")
            await db.commit()
            logger.info(f"Applied migration {version} ({script}) to {db_path}")
            current = version

        return current
