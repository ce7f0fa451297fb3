"""approvalflow exception hierarchy.

Every error carries a numeric ``code`` that is echoed back in structured
operation results, grouped by range:

* 1000-1099 validation
* 1100-1199 authorization
* 1200-1299 data access
* 1400-1499 system
* 1500+     uncategorized
"""

from __future__ import annotations


class ApprovalFlowError(Exception):
    """Base exception for all approvalflow errors."""

    code = 1500


class ValidationError(ApprovalFlowError):
    """Missing or malformed input field."""

    code = 1001

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class AuthorizationError(ApprovalFlowError):
    """Actor is not allowed to perform the operation."""

    code = 1101


class NotFoundError(ApprovalFlowError):
    """Request, approver or IT-chain entry is absent."""

    code = 1201

    def __init__(self, resource: str, identifier: str | None = None, message: str | None = None) -> None:
        self.resource = resource
        self.identifier = identifier
        super().__init__(message or f"{resource} not found.")


class BusyError(ApprovalFlowError):
    """The global lock could not be acquired in time."""

    code = 1401

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__("System is currently busy. Please try again in a moment.")


class ConfigurationError(ApprovalFlowError):
    """Required configuration (e.g. an IT review chain) is missing."""

    code = 1402


class OperationFailed(ApprovalFlowError):
    """Uncategorized failure surfaced at the operation boundary."""

    code = 1501


class StoreError(ApprovalFlowError):
    """Underlying store read or write failed."""


class DuplicateRowError(StoreError):
    """A row with the same key already exists."""

    def __init__(self, table: str, key: str) -> None:
        self.table = table
        self.key = key
        super().__init__(f"Row {key!r} already exists in {table!r}")


class SchemaMismatchError(ConfigurationError):
    """Live store schema does not match the declared table schema."""


class CacheError(ApprovalFlowError):
    """Cache backend operation failed."""
