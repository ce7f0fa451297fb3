"""Wall clock and request id generation."""

from __future__ import annotations

import threading
from datetime import datetime, timezone

from approvalflow.core.protocols import IClock


class SystemClock:
    """UTC wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class RequestIdGenerator:
    """Builds ``REQ-<form prefix>-<epoch ms>`` identifiers.

    Millisecond stamps are forced strictly increasing so two submissions in
    the same millisecond never share an id.
    """

    def __init__(self, clock: IClock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._last_ms = 0
        self._mutex = threading.Lock()

    def new_id(self, prefix: str) -> str:
        millis = int(self._clock.now().timestamp() * 1000)
        with self._mutex:
            if millis <= self._last_ms:
                millis = self._last_ms + 1
            self._last_ms = millis
        return f"REQ-{prefix}-{millis}"
