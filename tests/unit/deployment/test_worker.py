"""Tests for the background operation worker."""

import threading
import time

import pytest

from endfield.deployment.worker import OperationWorker


def test_returns_result() -> None:
    with OperationWorker() as worker:
        future = worker.submit("api", lambda a, b=0: a + b, 2, b=3)

        assert future.result(timeout=5) == 5


def test_exceptions_surface_from_result() -> None:
    def fail() -> None:
        raise RuntimeError("helm exploded")

    with OperationWorker() as worker:
        future = worker.submit("api", fail)

        with pytest.raises(RuntimeError, match="helm exploded"):
            future.result(timeout=5)


def test_same_resource_runs_one_at_a_time() -> None:
    active = 0
    peak = 0
    guard = threading.Lock()

    def operation() -> None:
        nonlocal active, peak
        with guard:
            active += 1
            peak = max(peak, active)
        time.sleep(0.02)
        with guard:
            active -= 1

    with OperationWorker(max_workers=4) as worker:
        futures = [worker.submit("cache", operation) for _ in range(4)]
        for future in futures:
            future.result(timeout=5)

    assert peak == 1


def test_different_resources_run_concurrently() -> None:
    barrier = threading.Barrier(2, timeout=5)

    with OperationWorker(max_workers=2) as worker:
        first = worker.submit("api", barrier.wait)
        second = worker.submit("cache", barrier.wait)

        # Both calls must be inside wait() at once for the barrier to release.
        assert {first.result(timeout=10), second.result(timeout=10)} == {0, 1}


def test_locks_are_dropped_after_operations_finish() -> None:
    release = threading.Event()

    with OperationWorker(max_workers=3) as worker:
        blocked = worker.submit("cache", release.wait, 5)
        queued = worker.submit("cache", lambda: None)
        done = [worker.submit(f"unit-{i}", lambda: None) for i in range(5)]
        for future in done:
            future.result(timeout=5)

        assert worker.pending_ids() == ["cache"]

        release.set()
        blocked.result(timeout=5)
        queued.result(timeout=5)

        assert worker.pending_ids() == []


def test_failed_operation_releases_its_lock() -> None:
    def fail() -> None:
        raise ValueError("bad chart")

    with OperationWorker() as worker:
        future = worker.submit("api", fail)
        with pytest.raises(ValueError):
            future.result(timeout=5)

        assert worker.pending_ids() == []
