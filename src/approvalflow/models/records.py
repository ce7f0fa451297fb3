"""Persisted records: approval requests and the reference tables that route them.

Field names are fixed Python attributes; the camelCase alias of each field is
the store column name, so rows round-trip through ``model_validate`` and
``model_dump(by_alias=True)`` without any header lookups.
"""

from __future__ import annotations

import json
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RequestStatus(StrEnum):
    PENDING = "Pending"
    PENDING_IT_REVIEWER = "Pending IT Reviewer"
    PENDING_IT_MANAGER = "Pending IT Manager"
    PENDING_IT_DIRECTOR = "Pending IT Director"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.APPROVED, RequestStatus.REJECTED)


class ApprovalAction(StrEnum):
    APPROVE = "Approve"
    REJECT = "Reject"
    FORWARD = "Forward"

    @property
    def history_label(self) -> str:
        return _HISTORY_LABELS[self]

    @classmethod
    def parse(cls, value: str | None) -> ApprovalAction | None:
        """Case-insensitive lookup that also accepts the history labels."""
        text = (value or "").strip().lower()
        for action in cls:
            if text in (action.value.lower(), action.history_label.lower()):
                return action
        return None


_HISTORY_LABELS = {
    ApprovalAction.APPROVE: "Approved",
    ApprovalAction.REJECT: "Rejected",
    ApprovalAction.FORWARD: "Forwarded",
}


class ApproverRole(StrEnum):
    ADMIN = "Admin"
    APPROVER = "Approver"


class UserRole(StrEnum):
    ADMIN = "Admin"
    APPROVER = "Approver"
    USER = "User"


def _json_text(value: Any) -> str:
    if value is None or value == "":
        return "{}"
    if isinstance(value, str):
        return value
    return json.dumps(value)


class HistoryEntry(BaseModel):
    """One engine-owned envelope in a request's approval history."""

    model_config = ConfigDict(populate_by_name=True)

    approver_email: str = Field(alias="approverEmail")
    action: str
    notes: str = ""
    timestamp: datetime


class ApprovalRequest(BaseModel):
    """A single row of the ``requests`` table."""

    model_config = ConfigDict(populate_by_name=True)

    request_id: str = Field(alias="requestId")
    form_type: str = Field(alias="formType")
    request_timestamp: datetime = Field(alias="requestTimestamp")
    requester_name: str = Field(default="", alias="requesterName")
    requester_email: str = Field(default="", alias="requesterEmail")
    department: str = ""
    sub_department: str = Field(default="", alias="subDepartment")
    status: RequestStatus = RequestStatus.PENDING
    current_approver_email: str = Field(default="", alias="currentApproverEmail")
    approval_history: list[HistoryEntry] = Field(default_factory=list, alias="approvalHistory")
    details: str = "{}"  # opaque form document, JSON text
    it_review_details: str = Field(default="{}", alias="itReviewDetails")

    @field_validator("approval_history", mode="before")
    @classmethod
    def _parse_history(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return json.loads(value or "[]")
            except ValueError:
                return []
        return value or []

    @field_validator("details", "it_review_details", mode="before")
    @classmethod
    def _as_json_text(cls, value: Any) -> str:
        return _json_text(value)

    @field_validator("sub_department", "current_approver_email", "requester_name", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ApprovalRequest:
        return cls.model_validate(row)

    def to_row(self) -> dict[str, Any]:
        row = self.model_dump(by_alias=True, mode="json")
        row["approvalHistory"] = json.dumps(row["approvalHistory"])
        return row

    @property
    def form_prefix(self) -> str:
        return self.form_type.split(" - ")[0].strip()

    def has_actioned(self, email: str) -> bool:
        target = email.strip().lower()
        return any(h.approver_email.strip().lower() == target for h in self.approval_history)


class Approver(BaseModel):
    """A single row of the ``approvers`` roster."""

    model_config = ConfigDict(populate_by_name=True)

    approver_name: str = Field(default="", alias="approverName")
    email: str
    level: int = 0
    role: ApproverRole = ApproverRole.APPROVER
    position: str = ""
    department: str = ""
    sub_department: str = Field(default="", alias="subDepartment")
    division: str = ""

    @field_validator("level", mode="before")
    @classmethod
    def _blank_level(cls, value: Any) -> Any:
        return 0 if value in (None, "") else value

    @field_validator("role", mode="before")
    @classmethod
    def _normalize_role(cls, value: Any) -> Any:
        text = str(value or "").strip().lower()
        return ApproverRole.ADMIN if text == "admin" else ApproverRole.APPROVER

    @field_validator("sub_department", "division", "position", "approver_name", "department", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class ITReviewChain(BaseModel):
    """Reviewer, manager and director for one form type's IT review."""

    model_config = ConfigDict(populate_by_name=True)

    form_id: str = Field(alias="formId")
    reviewer_email: str = Field(default="", alias="reviewerEmail")
    manager_email: str = Field(default="", alias="managerEmail")
    director_email: str = Field(default="", alias="directorEmail")


class Department(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    department_id: str = Field(alias="departmentId")
    department: str
    sub_department: str = Field(default="", alias="subDepartment")

    @staticmethod
    def make_id(department: str, sub_department: str = "") -> str:
        return f"{department}#{sub_department}"


class Setting(BaseModel):
    name: str
    value: str  # JSON text
