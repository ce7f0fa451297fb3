"""Read-only queries. None of these take the global guard."""

from __future__ import annotations

from collections import Counter

import structlog
from pydantic import ValidationError as PydanticValidationError

from approvalflow.core.emails import normalize_email, same_email
from approvalflow.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from approvalflow.models.records import Approver, ApprovalRequest, RequestStatus
from approvalflow.models.results import (
    DashboardStats,
    NavCounts,
    RequestPage,
    StatusCounts,
    UserProfile,
)
from approvalflow.models.schema import REQUESTS
from approvalflow.workflow.context import WorkflowContext
from approvalflow.workflow.transitions import IT_REVIEW_STATUSES

logger = structlog.get_logger(__name__)

_NOT_VISIBLE = "Request not found or you do not have permission to view it."


def _newest_first(requests: list[ApprovalRequest]) -> list[ApprovalRequest]:
    return sorted(requests, key=lambda r: r.request_timestamp, reverse=True)


def _awaiting(request: ApprovalRequest, actor: str) -> bool:
    return not request.status.is_terminal and same_email(request.current_approver_email, actor)


class RequestQueries:
    def __init__(self, ctx: WorkflowContext) -> None:
        self._ctx = ctx

    def _all_requests(self) -> list[ApprovalRequest]:
        requests = []
        for row in self._ctx.store.read_all(REQUESTS):
            try:
                requests.append(ApprovalRequest.from_row(row))
            except PydanticValidationError as exc:
                logger.warning("request_row_skipped", request_id=row.get("requestId"), error=str(exc))
        return requests

    def _vp_visible(self, request: ApprovalRequest, divisions: list[str]) -> bool:
        """Pending requests from a department in one of the viewer's VP divisions."""
        if not divisions or request.status is not RequestStatus.PENDING:
            return False
        return self._ctx.resolver.division_for_department(request.department) in divisions

    def list_approvals(self, actor: str) -> list[ApprovalRequest]:
        """Requests waiting on ``actor``, requests they already acted on, and
        pending requests visible to them as VP."""
        divisions = self._ctx.resolver.resolve_vp_divisions(actor)
        return _newest_first([
            r for r in self._all_requests()
            if _awaiting(r, actor)
            or (bool(normalize_email(actor)) and r.has_actioned(actor))
            or self._vp_visible(r, divisions)
        ])

    def list_my_requests(self, actor: str, page: int = 1, page_size: int | None = None) -> RequestPage:
        config = self._ctx.config
        page_size = config.default_page_size if page_size is None else page_size
        if page < 1:
            raise ValidationError("Page must be 1 or greater.", "page")
        if not 1 <= page_size <= config.max_page_size:
            raise ValidationError(f"Page size must be between 1 and {config.max_page_size}.", "pageSize")

        mine = _newest_first([r for r in self._all_requests() if same_email(r.requester_email, actor)])
        start = (page - 1) * page_size
        return RequestPage(requests=mine[start:start + page_size], total=len(mine))

    def get_request(self, request_id: str, actor: str) -> ApprovalRequest:
        request_id = (request_id or "").strip()
        if not request_id:
            raise ValidationError("Request ID is required.", "requestId")
        row = self._ctx.store.read_row(REQUESTS, request_id)
        if row is None:
            raise NotFoundError("Request", request_id, _NOT_VISIBLE)

        request = ApprovalRequest.from_row(row)
        visible = (
            same_email(request.requester_email, actor)
            or same_email(request.current_approver_email, actor)
            or (bool(normalize_email(actor)) and request.has_actioned(actor))
            or self._vp_visible(request, self._ctx.resolver.resolve_vp_divisions(actor))
        )
        if not visible:
            raise NotFoundError("Request", request_id, _NOT_VISIBLE)
        return request

    def nav_counts(self, actor: str) -> NavCounts:
        requests = self._all_requests()
        mine = sum(1 for r in requests if same_email(r.requester_email, actor))
        waiting = sum(1 for r in requests if _awaiting(r, actor))
        return NavCounts(my_requests=mine, approvals=waiting)

    def dashboard_stats(self, actor: str) -> DashboardStats:
        if not self._ctx.resolver.is_admin(actor):
            raise AuthorizationError("Admin access required.")

        requests = self._all_requests()
        statuses = Counter(r.status for r in requests)
        return DashboardStats(
            statuses=StatusCounts(
                pending=statuses[RequestStatus.PENDING],
                pending_it=sum(statuses[s] for s in IT_REVIEW_STATUSES),
                approved=statuses[RequestStatus.APPROVED],
                rejected=statuses[RequestStatus.REJECTED],
            ),
            by_form_type=dict(Counter(r.form_prefix for r in requests)),
            by_department=dict(Counter(r.department or "Unknown" for r in requests)),
            total=len(requests),
        )

    def user_profile(self, actor: str) -> UserProfile:
        resolver = self._ctx.resolver
        runtime = self._ctx.settings.load()
        role = resolver.role_for(actor)
        return UserProfile(
            email=normalize_email(actor),
            role=role.value,
            is_admin=resolver.is_admin(actor),
            it_review_forms=runtime.it_review_forms,
            disabled_forms=runtime.disabled_forms,
            nav_counts=self.nav_counts(actor),
        )

    # ---- reference data ----

    def departments(self) -> list[str]:
        return self._ctx.cache.department_names()

    def sub_departments(self) -> dict[str, list[str]]:
        return self._ctx.cache.sub_departments()

    def forwardable_approvers(self) -> list[Approver]:
        return self._ctx.resolver.forwardable_approvers()

    def approver_for_department(self, department: str, sub_department: str = "") -> Approver:
        return self._ctx.resolver.resolve_initial_approver(department, sub_department)
