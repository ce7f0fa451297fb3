"""Protocol interfaces for all approvalflow abstractions.

All inter-layer communication uses these Protocols: structural typing,
no inheritance required, easy to swap for in-memory doubles in tests.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable

if TYPE_CHECKING:
    from approvalflow.models.records import ApprovalRequest


# ---------------------------------------------------------------------------
# Persistence: Store
# ---------------------------------------------------------------------------

@runtime_checkable
class IStore(Protocol):
    """Authoritative table store addressed by table name and row key."""

    def key_column(self, table: str) -> str: ...

    def read_all(self, table: str) -> list[dict[str, Any]]: ...

    def read_row(self, table: str, key: str) -> dict[str, Any] | None: ...

    def write_cell(self, table: str, key: str, column: str, value: Any) -> None: ...

    def write_cells(self, table: str, key: str, values: Mapping[str, Any]) -> None: ...

    def append_row(self, table: str, values: Mapping[str, Any]) -> None: ...

    def delete_row(self, table: str, key: str) -> None: ...


# ---------------------------------------------------------------------------
# Persistence: Cache Backend
# ---------------------------------------------------------------------------

@runtime_checkable
class ICacheBackend(Protocol):
    """Redis-compatible cache interface."""

    def get(self, key: str) -> str | None: ...

    def setex(self, key: str, ttl: int, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------

@runtime_checkable
class INotifier(Protocol):
    """Outbound notification dispatch (email)."""

    def notify(self, recipient: str, message: Mapping[str, Any]) -> None: ...


@runtime_checkable
class IDocumentRenderer(Protocol):
    """Renders a finalized request into a document."""

    def render(self, request: ApprovalRequest) -> bytes: ...


@runtime_checkable
class IClock(Protocol):
    def now(self) -> datetime: ...


@runtime_checkable
class IIdGenerator(Protocol):
    def new_id(self, prefix: str) -> str: ...
