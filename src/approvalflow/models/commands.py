"""Inbound payloads for mutating operations."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class ManageAction(StrEnum):
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"


class RequestDraft(BaseModel):
    """A new request as submitted by the requester."""

    model_config = ConfigDict(populate_by_name=True)

    requester_name: str = Field(default="", alias="requesterName")
    form_type: str = Field(default="", alias="formType")
    department: str = ""
    sub_department: str = Field(default="", alias="subDepartment")
    details: Any = None  # JSON text or a mapping; never interpreted


class ApproverInput(BaseModel):
    """Approver roster row as edited by an administrator."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = ""
    approver_name: str = Field(default="", alias="approverName")
    level: int = 0
    role: str = "Approver"
    position: str = ""
    department: str = ""
    sub_department: str = Field(default="", alias="subDepartment")
    division: str = ""
    original_email: str = Field(default="", alias="originalEmail")  # update only


class ITReviewChainInput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    form_id: str = Field(default="", alias="formId")
    reviewer_email: str = Field(default="", alias="reviewerEmail")
    manager_email: str = Field(default="", alias="managerEmail")
    director_email: str = Field(default="", alias="directorEmail")
    original_form_id: str = Field(default="", alias="originalFormId")  # update only


class SettingsUpdate(BaseModel):
    """Partial update of runtime settings; ``None`` leaves a value unchanged."""

    model_config = ConfigDict(populate_by_name=True)

    helpdesk_email: Optional[str] = Field(default=None, alias="helpdeskEmail")
    disabled_forms: Optional[list[str]] = Field(default=None, alias="disabledForms")
    it_review_forms: Optional[list[str]] = Field(default=None, alias="itReviewForms")
    it_review_flows: Optional[list[ITReviewChainInput]] = Field(default=None, alias="itReviewFlows")
