"""Structured results returned from the operation boundary."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from approvalflow.models.records import ApprovalRequest


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OperationResult(BaseModel):
    """Outcome of a mutating (or admin) operation; never an exception."""

    model_config = ConfigDict(populate_by_name=True)

    status: Literal["success", "error"]
    message: str
    request_id: Optional[str] = Field(default=None, alias="requestId")
    error_code: Optional[int] = Field(default=None, alias="errorCode")
    data: Any = None
    timestamp: datetime = Field(default_factory=_utcnow)

    @property
    def ok(self) -> bool:
        return self.status == "success"

    @classmethod
    def success(cls, message: str, *, request_id: str | None = None, data: Any = None) -> OperationResult:
        return cls(status="success", message=message, request_id=request_id, data=data)

    @classmethod
    def error(cls, message: str, code: int) -> OperationResult:
        return cls(status="error", message=message, error_code=code)


class RequestPage(BaseModel):
    requests: list[ApprovalRequest] = Field(default_factory=list)
    total: int = 0


class NavCounts(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    my_requests: int = Field(default=0, alias="myRequests")
    approvals: int = 0


class StatusCounts(BaseModel):
    pending: int = 0
    pending_it: int = 0
    approved: int = 0
    rejected: int = 0


class DashboardStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    statuses: StatusCounts = Field(default_factory=StatusCounts)
    by_form_type: dict[str, int] = Field(default_factory=dict, alias="byFormType")
    by_department: dict[str, int] = Field(default_factory=dict, alias="byDepartment")
    total: int = 0


class UserProfile(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    role: str
    is_admin: bool = Field(alias="isAdmin")
    it_review_forms: list[str] = Field(default_factory=list, alias="itReviewForms")
    disabled_forms: list[str] = Field(default_factory=list, alias="disabledForms")
    nav_counts: NavCounts = Field(default_factory=NavCounts, alias="navCounts")
