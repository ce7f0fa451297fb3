"""Declared table schema, validated once against the live store at startup."""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel

from approvalflow.core.exceptions import SchemaMismatchError, StoreError
from approvalflow.core.protocols import IStore
from approvalflow.models.records import (
    ApprovalRequest,
    Approver,
    Department,
    ITReviewChain,
    Setting,
)

REQUESTS = "requests"
APPROVERS = "approvers"
IT_REVIEWERS = "it_reviewers"
DEPARTMENTS = "departments"
SETTINGS = "settings"


@dataclass(frozen=True)
class TableSpec:
    name: str
    key: str
    record: type[BaseModel]

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(f.alias or n for n, f in self.record.model_fields.items())


TABLES: dict[str, TableSpec] = {
    table.name: table
    for table in (
        TableSpec(REQUESTS, "requestId", ApprovalRequest),
        TableSpec(APPROVERS, "email", Approver),
        TableSpec(IT_REVIEWERS, "formId", ITReviewChain),
        TableSpec(DEPARTMENTS, "departmentId", Department),
        TableSpec(SETTINGS, "name", Setting),
    )
}

TABLE_KEYS: dict[str, str] = {name: table.key for name, table in TABLES.items()}


def validate_store_schema(store: IStore) -> None:
    """Fail fast if any declared table is missing or keyed differently."""
    problems: list[str] = []
    for table in TABLES.values():
        try:
            live_key = store.key_column(table.name)
        except StoreError as exc:
            problems.append(f"{table.name}: {exc}")
            continue
        if live_key != table.key:
            problems.append(f"{table.name}: key column {live_key!r}, expected {table.key!r}")
    if problems:
        raise SchemaMismatchError("Store schema mismatch: " + "; ".join(problems))
