"""ConcurrencyGuard: the single process-wide lock around every mutation."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

import structlog

from approvalflow.core.exceptions import BusyError

logger = structlog.get_logger(__name__)


class ConcurrencyGuard:
    """Global, non-reentrant mutual exclusion with a bounded acquire wait.

    Every mutating operation runs its whole critical section under ``hold``,
    so mutations are totally ordered. A timed-out wait raises ``BusyError``
    before the caller's body runs.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout
        self._lock = threading.Lock()

    @property
    def locked(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def hold(self, operation: str, actor: str = "") -> Iterator[None]:
        if not self._lock.acquire(timeout=self._timeout):
            logger.error("lock_acquire_timeout", operation=operation, actor=actor, timeout=self._timeout)
            raise BusyError(operation)
        try:
            yield
        finally:
            self._lock.release()
