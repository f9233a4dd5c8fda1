"""Repository classes for async CRUD operations on SQLite."""

from __future__ import annotations

import json
import time

import aiosqlite

from compatscan.session.models import ScanSession


class SqliteSessionStore:
    """SessionStore backed by the ``scan_sessions`` table."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def create(self, session: ScanSession) -> None:
        await self._db.execute(
            "INSERT INTO scan_sessions "
            "(id, files, batch_size, exclude_patterns, created_at, stop_requested) "
            "VALUES (?, ?, ?, ?, ?, 0)",
            (
                session.id,
                json.dumps(list(session.files)),
                session.batch_size,
                json.dumps(list(session.exclude_patterns)),
                session.created_at,
            ),
        )
        await self._db.commit()

    async def get(self, scan_id: str) -> ScanSession | None:
        cursor = await self._db.execute(
            "SELECT * FROM scan_sessions WHERE id = ?", (scan_id,)
        )
        row = await cursor.fetchone()
        if not row:
            return None
        return ScanSession(
            id=row["id"],
            files=tuple(json.loads(row["files"])),
            batch_size=row["batch_size"],
            exclude_patterns=tuple(json.loads(row["exclude_patterns"])),
            created_at=row["created_at"],
        )

    async def delete(self, scan_id: str) -> None:
        await self._db.execute("DELETE FROM scan_sessions WHERE id = ?", (scan_id,))
        await self._db.commit()

    async def sweep(self, cutoff: float, keep: str | None = None) -> int:
        cursor = await self._db.execute(
            "DELETE FROM scan_sessions WHERE created_at < ? AND id != ?",
            (cutoff, keep or ""),
        )
        await self._db.commit()
        return cursor.rowcount

    async def set_stop(self, scan_id: str) -> bool:
        cursor = await self._db.execute(
            "UPDATE scan_sessions SET stop_requested = 1 WHERE id = ?", (scan_id,)
        )
        await self._db.commit()
        return cursor.rowcount > 0

    async def is_stopped(self, scan_id: str) -> bool:
        cursor = await self._db.execute(
            "SELECT stop_requested FROM scan_sessions WHERE id = ?", (scan_id,)
        )
        row = await cursor.fetchone()
        return bool(row and row["stop_requested"])

    async def live_ids(self) -> list[str]:
        cursor = await self._db.execute(
            "SELECT id FROM scan_sessions ORDER BY created_at"
        )
        return [row["id"] async for row in cursor]


class OptionsRepo:
    """Key/value storage for persisted scan options."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def save(self, values: dict[str, str]) -> None:
        now = time.time()
        await self._db.executemany(
            "INSERT OR REPLACE INTO options (name, value, updated_at) "
            "VALUES (?, ?, ?)",
            [(name, value, now) for name, value in values.items()],
        )
        await self._db.commit()

    async def load(self) -> dict[str, str]:
        cursor = await self._db.execute("SELECT name, value FROM options")
        return {row["name"]: row["value"] async for row in cursor}
