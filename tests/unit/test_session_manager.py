"""Tests for scan session creation, batching and expiry."""

from __future__ import annotations

import asyncio

import pytest

from compatscan.session.manager import (
    MSG_INVALID_BATCH,
    MSG_SESSION_NOT_FOUND,
    ScanSessionManager,
)
from compatscan.session.models import ScanSession
from compatscan.session.store import MemorySessionStore


def run_async(coro):
    """Helper to run async functions in sync tests."""
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
    return loop.run_until_complete(coro)


class FakeClock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _files(n: int) -> list[str]:
    return [f"/plugin/file{i:03d}.php" for i in range(n)]


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()


@pytest.fixture
def manager(store: MemorySessionStore) -> ScanSessionManager:
    return ScanSessionManager(store)


class TestScanSession:
    @pytest.mark.parametrize(
        ("n", "b", "expected"),
        [(0, 1, 0), (1, 1, 1), (10, 3, 4), (50, 50, 1), (51, 50, 2), (100, 25, 4)],
    )
    def test_total_batches(self, n: int, b: int, expected: int):
        assert ScanSession(files=tuple(_files(n)), batch_size=b).total_batches == expected

    def test_rejects_non_positive_batch_size(self):
        with pytest.raises(ValueError):
            ScanSession(files=("a.php",), batch_size=0)

    def test_is_immutable(self):
        session = ScanSession(files=("a.php",), batch_size=1)
        with pytest.raises(AttributeError):
            session.batch_size = 2  # type: ignore[misc]


class TestGetBatch:
    @pytest.mark.parametrize(("n", "b"), [(1, 1), (7, 3), (10, 10), (11, 5), (100, 7)])
    def test_batches_reconstruct_file_list(self, manager: ScanSessionManager, n: int, b: int):
        files = _files(n)
        scan_id = run_async(manager.create(files, b))
        first = run_async(manager.get_batch(scan_id, 1))

        rebuilt: list[str] = []
        for number in range(1, first.total_batches + 1):
            batch = run_async(manager.get_batch(scan_id, number))
            assert batch.ok
            assert len(batch.files) <= b
            rebuilt.extend(batch.files)

        assert rebuilt == files

    def test_last_batch_flag(self, manager: ScanSessionManager):
        scan_id = run_async(manager.create(_files(5), 2))
        flags = [run_async(manager.get_batch(scan_id, i)).is_last_batch for i in (1, 2, 3)]
        assert flags == [False, False, True]

    def test_last_batch_is_shorter(self, manager: ScanSessionManager):
        scan_id = run_async(manager.create(_files(5), 2))
        assert run_async(manager.get_batch(scan_id, 3)).files == ["/plugin/file004.php"]

    @pytest.mark.parametrize("number", [0, -1, 4, 99])
    def test_out_of_range(self, manager: ScanSessionManager, number: int):
        scan_id = run_async(manager.create(_files(5), 2))
        batch = run_async(manager.get_batch(scan_id, number))
        assert batch.files == []
        assert batch.message == MSG_INVALID_BATCH
        assert batch.total_batches == 3

    def test_unknown_session(self, manager: ScanSessionManager):
        batch = run_async(manager.get_batch("scan_missing", 1))
        assert batch.files == []
        assert batch.total_batches == 0
        assert batch.message == MSG_SESSION_NOT_FOUND

    def test_out_of_range_on_unknown_session(self, manager: ScanSessionManager):
        batch = run_async(manager.get_batch("scan_missing", 0))
        assert batch.files == []
        assert batch.message is not None

    def test_batches_served_out_of_order(self, manager: ScanSessionManager):
        scan_id = run_async(manager.create(_files(6), 2))
        third = run_async(manager.get_batch(scan_id, 3))
        second = run_async(manager.get_batch(scan_id, 2))
        assert third.files == _files(6)[4:6]
        assert second.files == _files(6)[2:4]


class TestLifecycle:
    def test_create_returns_unique_ids(self, manager: ScanSessionManager):
        ids = {run_async(manager.create(_files(1), 1)) for _ in range(5)}
        assert len(ids) == 5
        assert all(i.startswith("scan_") for i in ids)

    def test_delete_is_idempotent(self, manager: ScanSessionManager):
        scan_id = run_async(manager.create(_files(3), 1))
        run_async(manager.delete(scan_id))
        run_async(manager.delete(scan_id))
        assert run_async(manager.get(scan_id)) is None

    def test_expired_sessions_swept_on_create(self, store: MemorySessionStore):
        clock = FakeClock()
        manager = ScanSessionManager(store, ttl=3600, clock=clock)

        old_id = run_async(manager.create(_files(3), 1))
        clock.now += 3601
        new_id = run_async(manager.create(_files(3), 1))

        assert run_async(manager.get(old_id)) is None
        assert run_async(manager.get(new_id)) is not None

    def test_fresh_sessions_survive_sweep(self, store: MemorySessionStore):
        clock = FakeClock()
        manager = ScanSessionManager(store, ttl=3600, clock=clock)

        first = run_async(manager.create(_files(3), 1))
        clock.now += 1800
        run_async(manager.create(_files(3), 1))

        assert run_async(manager.get(first)) is not None

    def test_no_sweep_without_create(self, store: MemorySessionStore):
        clock = FakeClock()
        manager = ScanSessionManager(store, ttl=3600, clock=clock)

        old_id = run_async(manager.create(_files(3), 1))
        clock.now += 7200
        # Lookups never reap; only create does
        assert run_async(manager.get_batch(old_id, 1)).ok


class TestStopToken:
    def test_new_session_not_stopped(self, manager: ScanSessionManager):
        scan_id = run_async(manager.create(_files(2), 1))
        assert not run_async(manager.is_stop_requested(scan_id))

    def test_stop_is_scoped_to_session(self, manager: ScanSessionManager):
        a = run_async(manager.create(_files(2), 1))
        b = run_async(manager.create(_files(2), 1))

        assert run_async(manager.request_stop(a)) == 1
        assert run_async(manager.is_stop_requested(a))
        assert not run_async(manager.is_stop_requested(b))

    def test_stop_all(self, manager: ScanSessionManager):
        ids = [run_async(manager.create(_files(2), 1)) for _ in range(3)]
        assert run_async(manager.request_stop()) == 3
        assert all(run_async(manager.is_stop_requested(i)) for i in ids)

    def test_stop_unknown_session(self, manager: ScanSessionManager):
        assert run_async(manager.request_stop("scan_missing")) == 0
