"""SQLite connection setup for scan sessions and saved options."""

from __future__ import annotations

import logging
from pathlib import Path

import aiosqlite

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS scan_sessions (
    id TEXT PRIMARY KEY,
    files TEXT NOT NULL,
    batch_size INTEGER NOT NULL,
    exclude_patterns TEXT NOT NULL DEFAULT '[]',
    created_at REAL NOT NULL,
    stop_requested INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS options (
    name TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at REAL NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_sessions_created
    ON scan_sessions(created_at);
"""


async def get_db(db_path: str | Path) -> aiosqlite.Connection:
    """Open (or create) the database and bring its schema up to date."""
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    db = await aiosqlite.connect(str(db_path))
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA journal_mode=WAL")

    await _ensure_schema(db)
    return db


async def _ensure_schema(db: aiosqlite.Connection) -> None:
    cursor = await db.execute("PRAGMA user_version")
    row = await cursor.fetchone()
    current = row[0] if row else 0
    if current >= SCHEMA_VERSION:
        return

    # Every statement is idempotent, so older files are simply topped up
    await db.executescript(SCHEMA_SQL)
    await db.execute(f"PRAGMA user_version = {SCHEMA_VERSION:d}")
    await db.commit()
    logger.info(
        "Database schema at version %d (was %d)", SCHEMA_VERSION, current
    )
