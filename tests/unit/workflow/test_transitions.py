"""Tests for pure transition planning."""

from __future__ import annotations

import pytest

from approvalflow.core.exceptions import ConfigurationError, ValidationError
from approvalflow.models.records import ApprovalAction, ITReviewChain, RequestStatus
from approvalflow.workflow.transitions import (
    IT_REVIEW_STATUSES,
    SideEffect,
    plan_transition,
    requires_chain,
)

CHAIN = ITReviewChain(form_id="011", reviewer_email="rev@x.com", manager_email="mgr@x.com",
                      director_email="dir@x.com")
NON_TERMINAL = [s for s in RequestStatus if not s.is_terminal]


class TestApprove:
    def test_pending_without_it_review_finalizes(self):
        t = plan_transition(RequestStatus.PENDING, ApprovalAction.APPROVE)
        assert (t.next_status, t.next_approver, t.effect) == (
            RequestStatus.APPROVED, "", SideEffect.FINALIZE_APPROVED,
        )
        assert t.is_final

    def test_pending_with_it_review_goes_to_reviewer(self):
        t = plan_transition(RequestStatus.PENDING, ApprovalAction.APPROVE, it_review_required=True, chain=CHAIN)
        assert (t.next_status, t.next_approver, t.effect) == (
            RequestStatus.PENDING_IT_REVIEWER, "rev@x.com", SideEffect.NOTIFY_IT_APPROVER,
        )

    @pytest.mark.parametrize("status, expected, approver", [
        (RequestStatus.PENDING_IT_REVIEWER, RequestStatus.PENDING_IT_MANAGER, "mgr@x.com"),
        (RequestStatus.PENDING_IT_MANAGER, RequestStatus.PENDING_IT_DIRECTOR, "dir@x.com"),
        (RequestStatus.PENDING_IT_DIRECTOR, RequestStatus.APPROVED, ""),
    ])
    def test_it_chain_steps(self, status, expected, approver):
        t = plan_transition(status, ApprovalAction.APPROVE, it_review_required=True, chain=CHAIN)
        assert (t.next_status, t.next_approver) == (expected, approver)

    def test_missing_chain_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            plan_transition(RequestStatus.PENDING, ApprovalAction.APPROVE, it_review_required=True)

    def test_blank_stage_email_is_configuration_error(self):
        chain = CHAIN.model_copy(update={"manager_email": " "})
        with pytest.raises(ConfigurationError, match="manager"):
            plan_transition(RequestStatus.PENDING_IT_REVIEWER, ApprovalAction.APPROVE, chain=chain)


class TestReject:
    @pytest.mark.parametrize("status", NON_TERMINAL)
    def test_from_any_non_terminal(self, status):
        t = plan_transition(status, ApprovalAction.REJECT)
        assert (t.next_status, t.next_approver, t.effect) == (
            RequestStatus.REJECTED, "", SideEffect.FINALIZE_REJECTED,
        )


class TestForward:
    @pytest.mark.parametrize("status", NON_TERMINAL)
    def test_status_unchanged(self, status):
        t = plan_transition(status, ApprovalAction.FORWARD, forward_to=" valid@x.com ")
        assert (t.next_status, t.next_approver) == (status, "valid@x.com")
        assert not t.is_final

    def test_requires_target(self):
        with pytest.raises(ValidationError):
            plan_transition(RequestStatus.PENDING, ApprovalAction.FORWARD)


@pytest.mark.parametrize("status", [RequestStatus.APPROVED, RequestStatus.REJECTED])
@pytest.mark.parametrize("action", list(ApprovalAction))
def test_terminal_states_accept_nothing(status, action):
    with pytest.raises(ValidationError, match=f"already {status.value}"):
        plan_transition(status, action, forward_to="x@x.com")


class TestRequiresChain:
    def test_only_for_approve(self):
        for status in IT_REVIEW_STATUSES:
            assert requires_chain(status, ApprovalAction.APPROVE, False)
            assert not requires_chain(status, ApprovalAction.REJECT, True)
            assert not requires_chain(status, ApprovalAction.FORWARD, True)

    def test_pending_depends_on_form(self):
        assert requires_chain(RequestStatus.PENDING, ApprovalAction.APPROVE, True)
        assert not requires_chain(RequestStatus.PENDING, ApprovalAction.APPROVE, False)
