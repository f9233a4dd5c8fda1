"""Session manager — creates, slices, expires and stops scan sessions."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from compatscan.session.models import BatchSlice, ScanSession
from compatscan.session.store import SessionStore

logger = logging.getLogger(__name__)

SESSION_TTL = 3600.0

MSG_SESSION_NOT_FOUND = "Scan session not found or expired."
MSG_INVALID_BATCH = "Invalid batch number."


class ScanSessionManager:
    """The only component that reads or writes session storage.

    Stale sessions are reaped lazily, on each ``create`` call, rather than by
    a background timer.
    """

    def __init__(
        self,
        store: SessionStore,
        ttl: float = SESSION_TTL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self._ttl = ttl
        self._clock = clock

    async def create(
        self,
        files: Iterable[str],
        batch_size: int,
        exclude_patterns: Iterable[str] = (),
    ) -> str:
        """Persist a new session and sweep expired ones; return its id."""
        session = ScanSession(
            files=tuple(files),
            batch_size=batch_size,
            exclude_patterns=tuple(exclude_patterns),
            created_at=self._clock(),
        )
        await self._store.create(session)
        logger.info(
            "Created scan session %s: %d files in %d batches of %d",
            session.id,
            session.total_files,
            session.total_batches,
            batch_size,
        )

        reaped = await self._store.sweep(self._clock() - self._ttl, keep=session.id)
        if reaped:
            logger.info("Removed %d expired scan session(s)", reaped)

        return session.id

    async def get(self, scan_id: str) -> ScanSession | None:
        return await self._store.get(scan_id)

    async def get_batch(self, scan_id: str, batch_number: int) -> BatchSlice:
        """Slice one batch out of a session; failures come back as messages."""
        session = await self._store.get(scan_id)
        if session is None:
            return BatchSlice(
                files=[],
                batch_number=batch_number,
                total_batches=0,
                message=MSG_SESSION_NOT_FOUND,
            )

        total = session.total_batches
        if batch_number < 1 or batch_number > total:
            return BatchSlice(
                files=[],
                batch_number=batch_number,
                total_batches=total,
                message=MSG_INVALID_BATCH,
            )

        return BatchSlice(
            files=list(session.batch(batch_number)),
            batch_number=batch_number,
            total_batches=total,
            is_last_batch=batch_number >= total,
        )

    async def delete(self, scan_id: str) -> None:
        await self._store.delete(scan_id)
        logger.debug("Deleted scan session %s", scan_id)

    async def request_stop(self, scan_id: str | None = None) -> int:
        """Set the stop token of one session, or of every live session."""
        ids = [scan_id] if scan_id else await self._store.live_ids()
        marked = 0
        for sid in ids:
            if await self._store.set_stop(sid):
                marked += 1
        logger.info("Stop requested for %d scan session(s)", marked)
        return marked

    async def is_stop_requested(self, scan_id: str) -> bool:
        return await self._store.is_stopped(scan_id)
