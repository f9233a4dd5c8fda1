"""SessionStore protocol and the in-process implementation."""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

from compatscan.session.models import ScanSession


@runtime_checkable
class SessionStore(Protocol):
    """Keyed storage for scan sessions and their stop tokens."""

    async def create(self, session: ScanSession) -> None:
        """Persist a new session record."""
        ...

    async def get(self, scan_id: str) -> ScanSession | None:
        """Return the session, or None if absent."""
        ...

    async def delete(self, scan_id: str) -> None:
        """Remove the session; no error if absent."""
        ...

    async def sweep(self, cutoff: float, keep: str | None = None) -> int:
        """Delete sessions created before ``cutoff``; return how many."""
        ...

    async def set_stop(self, scan_id: str) -> bool:
        """Mark a session as stopped; False if it does not exist."""
        ...

    async def is_stopped(self, scan_id: str) -> bool:
        ...

    async def live_ids(self) -> list[str]:
        ...


class MemorySessionStore:
    """Dict-backed store for single-process deployments and the CLI."""

    def __init__(self) -> None:
        self._sessions: dict[str, ScanSession] = {}
        self._stopped: set[str] = set()
        self._lock = asyncio.Lock()

    async def create(self, session: ScanSession) -> None:
        async with self._lock:
            self._sessions[session.id] = session
            self._stopped.discard(session.id)

    async def get(self, scan_id: str) -> ScanSession | None:
        return self._sessions.get(scan_id)

    async def delete(self, scan_id: str) -> None:
        async with self._lock:
            self._sessions.pop(scan_id, None)
            self._stopped.discard(scan_id)

    async def sweep(self, cutoff: float, keep: str | None = None) -> int:
        async with self._lock:
            stale = [
                sid
                for sid, s in self._sessions.items()
                if s.created_at < cutoff and sid != keep
            ]
            for sid in stale:
                del self._sessions[sid]
                self._stopped.discard(sid)
            return len(stale)

    async def set_stop(self, scan_id: str) -> bool:
        async with self._lock:
            if scan_id not in self._sessions:
                return False
            self._stopped.add(scan_id)
            return True

    async def is_stopped(self, scan_id: str) -> bool:
        return scan_id in self._stopped

    async def live_ids(self) -> list[str]:
        return list(self._sessions)
