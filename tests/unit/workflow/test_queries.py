"""Tests for read-only queries."""

from __future__ import annotations

import pytest

from approvalflow.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from approvalflow.models.commands import RequestDraft
from approvalflow.models.records import RequestStatus
from approvalflow.workflow.engine import WorkflowEngine
from approvalflow.workflow.queries import RequestQueries
from tests.unit.conftest import ADMIN, INFRA_LEAD, IT_MANAGER, REQUESTER, VP, draft

PLAIN_FORM = "ISMS-FM-013 - VPN Access"


@pytest.fixture
def engine(ctx):
    return WorkflowEngine(ctx)


@pytest.fixture
def queries(ctx):
    return RequestQueries(ctx)


def _submit(engine, actor=REQUESTER, **kwargs):
    return engine.submit(actor, RequestDraft.model_validate(draft(form_type=PLAIN_FORM, **kwargs)))


class TestListApprovals:
    def test_current_approver_sees_pending(self, engine, queries):
        request = _submit(engine)
        assert [r.request_id for r in queries.list_approvals(IT_MANAGER)] == [request.request_id]
        assert queries.list_approvals(INFRA_LEAD) == []

    def test_vp_sees_pending_in_division(self, engine, queries):
        request = _submit(engine, sub_department="Infra")
        assert [r.request_id for r in queries.list_approvals(VP)] == [request.request_id]

    def test_vp_visibility_ends_when_request_leaves_pending(self, engine, queries):
        request = _submit(engine)
        engine.process_approval(IT_MANAGER, request.request_id, "Approve")
        assert queries.list_approvals(VP) == []

    def test_actioned_requests_stay_listed(self, engine, queries):
        approved = _submit(engine)
        engine.process_approval(IT_MANAGER, approved.request_id, "Approve")
        forwarded = _submit(engine)
        engine.process_approval(IT_MANAGER, forwarded.request_id, "Forward",
                                next_approver_email=INFRA_LEAD)
        engine.process_approval(INFRA_LEAD, forwarded.request_id, "Reject")

        assert {r.request_id for r in queries.list_approvals(IT_MANAGER)} == {
            approved.request_id, forwarded.request_id,
        }
        assert [r.request_id for r in queries.list_approvals(INFRA_LEAD)] == [forwarded.request_id]
        assert queries.nav_counts(IT_MANAGER).approvals == 0

    def test_newest_first(self, engine, queries, clock):
        first = _submit(engine)
        clock.advance(minutes=5)
        second = _submit(engine)
        assert [r.request_id for r in queries.list_approvals(IT_MANAGER)] == [
            second.request_id, first.request_id,
        ]


class TestListMyRequests:
    def test_pagination(self, engine, queries, clock):
        ids = []
        for _ in range(5):
            ids.append(_submit(engine).request_id)
            clock.advance(seconds=1)
        page = queries.list_my_requests(REQUESTER.upper(), page=2, page_size=2)
        assert page.total == 5
        assert [r.request_id for r in page.requests] == [ids[2], ids[1]]

    def test_page_past_end_is_empty(self, engine, queries):
        _submit(engine)
        page = queries.list_my_requests(REQUESTER, page=3)
        assert page.total == 1
        assert page.requests == []

    @pytest.mark.parametrize("page, size", [(0, 10), (1, 0), (1, 1000)])
    def test_invalid_paging(self, queries, page, size):
        with pytest.raises(ValidationError):
            queries.list_my_requests(REQUESTER, page, size)

    def test_only_own_requests(self, engine, queries):
        _submit(engine, actor="someone@x.com")
        assert queries.list_my_requests(REQUESTER).total == 0


class TestGetRequest:
    def test_requester_current_and_past_approvers_can_view(self, engine, queries):
        request = _submit(engine)
        engine.process_approval(IT_MANAGER, request.request_id, "Forward", None, "next@x.com")
        for actor in (REQUESTER, IT_MANAGER, "next@x.com"):
            assert queries.get_request(request.request_id, actor).request_id == request.request_id

    def test_vp_can_view_pending_in_division(self, engine, queries):
        request = _submit(engine)
        assert queries.get_request(request.request_id, VP).status is RequestStatus.PENDING

    def test_stranger_gets_not_found(self, engine, queries):
        request = _submit(engine)
        with pytest.raises(NotFoundError) as exc_info:
            queries.get_request(request.request_id, "stranger@x.com")
        with pytest.raises(NotFoundError) as missing:
            queries.get_request("REQ-NOPE-1", REQUESTER)
        assert str(exc_info.value) == str(missing.value)

    def test_empty_id(self, queries):
        with pytest.raises(ValidationError):
            queries.get_request(" ", REQUESTER)


class TestCountsAndStats:
    def test_nav_counts(self, engine, queries):
        _submit(engine)
        _submit(engine)
        counts = queries.nav_counts(REQUESTER)
        assert (counts.my_requests, counts.approvals) == (2, 0)
        assert queries.nav_counts(IT_MANAGER).approvals == 2

    def test_dashboard_requires_admin(self, queries):
        with pytest.raises(AuthorizationError):
            queries.dashboard_stats(REQUESTER)

    def test_dashboard_stats(self, engine, queries):
        a = _submit(engine)
        _submit(engine)
        engine.process_approval(IT_MANAGER, a.request_id, "Reject")
        stats = queries.dashboard_stats(ADMIN)
        assert stats.total == 2
        assert (stats.statuses.pending, stats.statuses.rejected) == (1, 1)
        assert stats.by_form_type == {"ISMS-FM-013": 2}
        assert stats.by_department == {"IT": 2}

    def test_user_profile(self, queries):
        profile = queries.user_profile(" Admin@x.com ")
        assert profile.email == "admin@x.com"
        assert profile.is_admin
        assert profile.role == "Admin"
        assert "011" in profile.it_review_forms
        assert queries.user_profile(REQUESTER).role == "User"


class TestReference:
    def test_departments(self, queries):
        assert queries.departments() == ["HR", "IT"]
        assert queries.sub_departments() == {"IT": ["Infra"]}

    def test_forwardable_approvers(self, queries):
        assert {a.email for a in queries.forwardable_approvers()} == {IT_MANAGER, VP}

    def test_approver_for_department(self, queries):
        assert queries.approver_for_department("IT", "Infra").email == INFRA_LEAD
