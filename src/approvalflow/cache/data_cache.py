"""Read-through cache over the routing reference datasets.

Each dataset is stored as JSON text under a fixed key with a TTL. Cache
backend failures are logged and bypassed: a broken or disabled cache only
costs a store read, never an operation failure.

Evictions are performed by the lock holder of the mutation that changed the
underlying table, before the lock is released.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Iterable, TypeVar

import structlog
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from approvalflow.core.exceptions import CacheError
from approvalflow.models.records import Approver, Department, ITReviewChain
from approvalflow.models.schema import APPROVERS, DEPARTMENTS, IT_REVIEWERS
from approvalflow.persistence.protocols import ICacheBackend, IStore

logger = structlog.get_logger(__name__)

T = TypeVar("T")

APPROVERS_CACHE_KEY = "approvers_data_v1"
DEPARTMENTS_DATA_CACHE_KEY = "departments_data_v2"
DEPARTMENTS_CACHE_KEY = "departments_list_v1"
SUB_DEPARTMENTS_CACHE_KEY = "sub_departments_map_v1"
DEPT_TO_DIVISION_MAP_CACHE_KEY = "dept_to_division_map_v1"
IT_REVIEWER_MAP_CACHE_KEY = "it_reviewer_map_v1"
VP_DIVISIONS_CACHE_KEY_PREFIX = "vp_divisions_"

ROSTER_KEYS = (APPROVERS_CACHE_KEY, DEPT_TO_DIVISION_MAP_CACHE_KEY, IT_REVIEWER_MAP_CACHE_KEY)


def vp_divisions_key(email: str) -> str:
    return f"{VP_DIVISIONS_CACHE_KEY_PREFIX}{email.strip().lower()}"


class DataCache:
    """Read-through, TTL-bounded cache of roster, department and IT-chain data."""

    CACHE_TTL = 300  # 5 minutes

    def __init__(self, store: IStore, backend: ICacheBackend | None = None,
                 ttl: int = CACHE_TTL, enabled: bool = True) -> None:
        self._store = store
        self._backend = backend
        self._ttl = ttl
        self._enabled = enabled and backend is not None

    @property
    def enabled(self) -> bool:
        return self._enabled

    def fetch(self, key: str, loader: Callable[[], T]) -> T:
        """Return the cached JSON value for ``key``, loading it on a miss."""
        if not self._enabled:
            return loader()

        try:
            cached = self._backend.get(key)
        except CacheError as exc:
            logger.warning("cache_read_failed", key=key, error=str(exc))
            return loader()

        if cached is not None:
            try:
                return json.loads(cached)
            except ValueError:
                logger.warning("cache_entry_corrupt", key=key)

        data = loader()
        if data is not None:
            try:
                self._backend.setex(key, self._ttl, json.dumps(data))
            except (CacheError, TypeError) as exc:
                logger.warning("cache_write_failed", key=key, error=str(exc))
        return data

    def evict(self, keys: Iterable[str]) -> None:
        if not self._enabled:
            return
        for key in keys:
            try:
                self._backend.delete(key)
            except CacheError as exc:
                logger.warning("cache_evict_failed", key=key, error=str(exc))

    # ---- datasets ----

    def approvers(self) -> list[Approver]:
        rows = self.fetch(APPROVERS_CACHE_KEY, lambda: self._load(APPROVERS, Approver))
        return [Approver.model_validate(r) for r in rows]

    def departments_data(self) -> list[Department]:
        rows = self.fetch(DEPARTMENTS_DATA_CACHE_KEY, lambda: self._load(DEPARTMENTS, Department))
        return [Department.model_validate(r) for r in rows]

    def department_names(self) -> list[str]:
        return self.fetch(
            DEPARTMENTS_CACHE_KEY,
            lambda: sorted({d.department for d in self.departments_data() if d.department.strip()}),
        )

    def sub_departments(self) -> dict[str, list[str]]:
        def load() -> dict[str, list[str]]:
            grouped: dict[str, set[str]] = {}
            for d in self.departments_data():
                if d.department and d.sub_department:
                    grouped.setdefault(d.department, set()).add(d.sub_department)
            return {dept: sorted(subs) for dept, subs in grouped.items()}

        return self.fetch(SUB_DEPARTMENTS_CACHE_KEY, load)

    def department_divisions(self) -> dict[str, str]:
        def load() -> dict[str, str]:
            mapping: dict[str, str] = {}
            for a in self.approvers():
                if a.department and a.division:
                    mapping[a.department] = a.division
            return mapping

        return self.fetch(DEPT_TO_DIVISION_MAP_CACHE_KEY, load)

    def it_review_chains(self) -> dict[str, ITReviewChain]:
        def load() -> dict[str, Any]:
            chains: dict[str, Any] = {}
            for row in self._load(IT_REVIEWERS, ITReviewChain):
                form_id = str(row.get("formId") or "").strip()
                if form_id:
                    chains[form_id] = row
            return chains

        raw = self.fetch(IT_REVIEWER_MAP_CACHE_KEY, load)
        return {form_id: ITReviewChain.model_validate(row) for form_id, row in raw.items()}

    def vp_divisions(self, email: str, loader: Callable[[], list[str]]) -> list[str]:
        return self.fetch(vp_divisions_key(email), loader)

    # ---- invalidation ----

    def invalidate_roster(self, vp_emails: Iterable[str] = ()) -> None:
        """Evict roster-derived datasets plus each listed user's VP entry."""
        keys = list(ROSTER_KEYS)
        keys.extend(vp_divisions_key(e) for e in vp_emails if e)
        self.evict(keys)
        logger.info("cache_roster_invalidated", keys=len(keys))

    def invalidate_it_chains(self) -> None:
        self.evict([IT_REVIEWER_MAP_CACHE_KEY])

    def _load(self, table: str, record: type[BaseModel]) -> list[dict[str, Any]]:
        """Read a table fresh and normalize rows through its record model."""
        rows: list[dict[str, Any]] = []
        for raw in self._store.read_all(table):
            try:
                rows.append(record.model_validate(raw).model_dump(by_alias=True, mode="json"))
            except PydanticValidationError as exc:
                logger.warning("reference_row_skipped", table=table, error=str(exc))
        return rows
