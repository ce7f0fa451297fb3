"""Shared test doubles: memory backends plus clock, notifier and failing cache fakes."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from approvalflow.core.exceptions import CacheError
from approvalflow.persistence.memory_backend import MemoryCacheBackend, MemoryStore

__all__ = [
    "FailingCacheBackend",
    "FailingNotifier",
    "FixedClock",
    "MemoryCacheBackend",
    "MemoryStore",
    "RecordingNotifier",
]


class FixedClock:
    """IClock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> None:
        self.current = self.current + timedelta(**delta)


class RecordingNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, dict[str, Any]]] = []

    def notify(self, recipient: str, message: Mapping[str, Any]) -> None:
        self.sent.append((recipient, dict(message)))

    def recipients(self) -> list[str]:
        return [r for r, _ in self.sent]


class FailingNotifier:
    def notify(self, recipient: str, message: Mapping[str, Any]) -> None:
        raise RuntimeError("smtp down")


class FailingCacheBackend:
    """ICacheBackend whose every call raises CacheError."""

    def get(self, key: str) -> str | None:
        raise CacheError("cache unavailable")

    def setex(self, key: str, ttl: int, value: str) -> None:
        raise CacheError("cache unavailable")

    def delete(self, key: str) -> None:
        raise CacheError("cache unavailable")
