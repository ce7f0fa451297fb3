"""Tests for persisted record models."""

from __future__ import annotations

import json
from datetime import datetime, timezone

from approvalflow.models.records import (
    ApprovalAction,
    ApprovalRequest,
    Approver,
    ApproverRole,
    Department,
    RequestStatus,
)


def _row(**overrides):
    row = {
        "requestId": "REQ-ISMS-FM-010-1",
        "formType": "ISMS-FM-010 - Server Access",
        "requestTimestamp": "2024-01-15T09:00:00+00:00",
        "requesterName": "Jane",
        "requesterEmail": "jane@x.com",
        "department": "IT",
        "subDepartment": "",
        "status": "Pending",
        "currentApproverEmail": "a@x.com",
        "approvalHistory": "[]",
        "details": '{"server": "db01"}',
        "itReviewDetails": "{}",
    }
    row.update(overrides)
    return row


class TestApprovalRequest:
    def test_from_row_parses_history_text(self):
        history = [{"approverEmail": "a@x.com", "action": "Forwarded", "notes": "",
                    "timestamp": "2024-01-15T10:00:00+00:00"}]
        request = ApprovalRequest.from_row(_row(approvalHistory=json.dumps(history)))
        assert request.status is RequestStatus.PENDING
        assert request.approval_history[0].approver_email == "a@x.com"
        assert request.approval_history[0].timestamp == datetime(2024, 1, 15, 10, tzinfo=timezone.utc)

    def test_to_row_serializes_history_as_json_text(self):
        request = ApprovalRequest.from_row(_row())
        row = request.to_row()
        assert row["approvalHistory"] == "[]"
        assert row["status"] == "Pending"
        assert row["details"] == '{"server": "db01"}'

    def test_missing_optional_columns_become_empty(self):
        request = ApprovalRequest.from_row(_row(subDepartment=None, currentApproverEmail=None, itReviewDetails=""))
        assert request.sub_department == ""
        assert request.current_approver_email == ""
        assert request.it_review_details == "{}"

    def test_unparseable_history_is_empty(self):
        assert ApprovalRequest.from_row(_row(approvalHistory="not json")).approval_history == []

    def test_form_prefix(self):
        assert ApprovalRequest.from_row(_row()).form_prefix == "ISMS-FM-010"

    def test_has_actioned_is_case_insensitive(self):
        history = [{"approverEmail": "A@x.com", "action": "Approved", "notes": "",
                    "timestamp": "2024-01-15T10:00:00+00:00"}]
        request = ApprovalRequest.from_row(_row(approvalHistory=json.dumps(history)))
        assert request.has_actioned(" a@X.com ")
        assert not request.has_actioned("b@x.com")


class TestEnums:
    def test_terminal_statuses(self):
        assert {s for s in RequestStatus if s.is_terminal} == {RequestStatus.APPROVED, RequestStatus.REJECTED}

    def test_action_parse_accepts_labels_and_any_case(self):
        assert ApprovalAction.parse("approve") is ApprovalAction.APPROVE
        assert ApprovalAction.parse("Forwarded") is ApprovalAction.FORWARD
        assert ApprovalAction.parse(" REJECT ") is ApprovalAction.REJECT
        assert ApprovalAction.parse("escalate") is None
        assert ApprovalAction.parse(None) is None

    def test_history_labels(self):
        assert [a.history_label for a in ApprovalAction] == ["Approved", "Rejected", "Forwarded"]


class TestApprover:
    def test_role_normalized(self):
        assert Approver(email="a@x.com", role="admin").role is ApproverRole.ADMIN
        assert Approver(email="a@x.com", role="whatever").role is ApproverRole.APPROVER

    def test_blank_level_is_zero(self):
        assert Approver.model_validate({"email": "a@x.com", "level": ""}).level == 0


def test_department_id():
    assert Department.make_id("IT", "Infra") == "IT#Infra"
    assert Department.make_id("HR") == "HR#"
