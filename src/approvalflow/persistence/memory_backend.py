"""In-memory backends for unit tests: dict-backed fakes."""

from __future__ import annotations

import copy
import time
from typing import Any, Callable, Mapping

from approvalflow.core.exceptions import DuplicateRowError, StoreError
from approvalflow.models.schema import TABLE_KEYS


class MemoryStore:
    """Dict-backed IStore for unit tests.

    Tables keep insertion order so ``read_all`` mirrors sheet/scan order.
    """

    def __init__(self, keys: Mapping[str, str] | None = None) -> None:
        self._keys = dict(keys if keys is not None else TABLE_KEYS)
        self._tables: dict[str, dict[str, dict[str, Any]]] = {t: {} for t in self._keys}
        self.writes: list[tuple[str, str, dict[str, Any]]] = []

    def _table(self, table: str) -> dict[str, dict[str, Any]]:
        try:
            return self._tables[table]
        except KeyError:
            raise StoreError(f"Table {table!r} not found") from None

    def key_column(self, table: str) -> str:
        self._table(table)
        return self._keys[table]

    def read_all(self, table: str) -> list[dict[str, Any]]:
        return [copy.deepcopy(row) for row in self._table(table).values()]

    def read_row(self, table: str, key: str) -> dict[str, Any] | None:
        row = self._table(table).get(key)
        return copy.deepcopy(row) if row is not None else None

    def write_cell(self, table: str, key: str, column: str, value: Any) -> None:
        self.write_cells(table, key, {column: value})

    def write_cells(self, table: str, key: str, values: Mapping[str, Any]) -> None:
        rows = self._table(table)
        if key not in rows:
            raise StoreError(f"Row {key!r} not found in {table!r}")
        rows[key].update(copy.deepcopy(dict(values)))
        self.writes.append((table, key, dict(values)))

    def append_row(self, table: str, values: Mapping[str, Any]) -> None:
        rows = self._table(table)
        key = str(values[self._keys[table]])
        if key in rows:
            raise DuplicateRowError(table, key)
        rows[key] = copy.deepcopy(dict(values))
        self.writes.append((table, key, dict(values)))

    def delete_row(self, table: str, key: str) -> None:
        rows = self._table(table)
        if key not in rows:
            raise StoreError(f"Row {key!r} not found in {table!r}")
        del rows[key]
        self.writes.append((table, key, {}))


class MemoryCacheBackend:
    """Dict-backed ICacheBackend for unit tests, honouring TTLs."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._store: dict[str, tuple[str, float]] = {}

    def get(self, key: str) -> str | None:
        entry = self._store.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._store[key]
            return None
        return value

    def setex(self, key: str, ttl: int, value: str) -> None:
        self._store[key] = (value, self._clock() + ttl)

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._store)
