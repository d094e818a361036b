"""Background execution of long-running deploy operations.

Operations for different resource ids run concurrently. Operations that
share a resource id run one at a time, so their external tool calls
never interleave.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, TypeVar

from loguru import logger

T = TypeVar("T")

DEFAULT_MAX_WORKERS = 4


class OperationWorker:
    """Thread pool with one lock per resource id.

    Example:
        >>> worker = OperationWorker()
        >>> future = worker.submit("redis", orchestrator.deploy, "redis", ns, target)
        >>> outcome = future.result()
    """

    def __init__(self, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="endfield-op"
        )
        # resource id -> (lock, number of operations queued or running on it)
        self._locks: dict[str, tuple[threading.Lock, int]] = {}
        self._locks_guard = threading.Lock()

    def _acquire_slot(self, resource_id: str) -> threading.Lock:
        with self._locks_guard:
            lock, users = self._locks.get(resource_id, (threading.Lock(), 0))
            self._locks[resource_id] = (lock, users + 1)
            return lock

    def _release_slot(self, resource_id: str) -> None:
        with self._locks_guard:
            lock, users = self._locks[resource_id]
            if users == 1:
                del self._locks[resource_id]
            else:
                self._locks[resource_id] = (lock, users - 1)

    def _run_locked(
        self,
        resource_id: str,
        lock: threading.Lock,
        fn: Callable[..., T],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> T:
        try:
            with lock:
                logger.debug(f"Running operation for {resource_id}")
                return fn(*args, **kwargs)
        finally:
            self._release_slot(resource_id)

    def submit(
        self, resource_id: str, fn: Callable[..., T], *args: Any, **kwargs: Any
    ) -> Future[T]:
        """Schedule ``fn(*args, **kwargs)`` on the pool under ``resource_id``'s lock.

        The lock for an id is dropped once no operation for it is pending.

        Returns:
            Future resolving to the operation's result value; exceptions
            raised by ``fn`` surface from ``Future.result()``
        """
        lock = self._acquire_slot(resource_id)
        try:
            return self._executor.submit(
                self._run_locked, resource_id, lock, fn, args, kwargs
            )
        except RuntimeError:
            self._release_slot(resource_id)
            raise

    def pending_ids(self) -> list[str]:
        """Resource ids with operations queued or running."""
        with self._locks_guard:
            return sorted(self._locks)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> OperationWorker:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
