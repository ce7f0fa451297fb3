"""ApprovalService: the operation boundary.

Every public method returns an ``OperationResult``. Read operations carry
their typed read model in ``data``. Nothing raised below this layer escapes
it: ``ApprovalFlowError`` subclasses become error results with their code,
malformed input payloads become ``ValidationError`` results,
anything else is logged with its traceback and reported as ``OperationFailed``.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

import structlog
from pydantic import ValidationError as PydanticValidationError

from approvalflow.core.config import AppSettings
from approvalflow.core.exceptions import ApprovalFlowError, OperationFailed, ValidationError
from approvalflow.core.logging import configure_logging
from approvalflow.core.protocols import INotifier
from approvalflow.models.commands import (
    ApproverInput,
    ITReviewChainInput,
    ManageAction,
    RequestDraft,
    SettingsUpdate,
)
from approvalflow.models.records import ApprovalAction
from approvalflow.models.results import OperationResult
from approvalflow.models.schema import validate_store_schema
from approvalflow.persistence import create_persistence
from approvalflow.workflow.admin import AdminOperations
from approvalflow.workflow.context import WorkflowContext
from approvalflow.workflow.engine import WorkflowEngine
from approvalflow.workflow.queries import RequestQueries

logger = structlog.get_logger(__name__)

_MANAGE_MESSAGES = {
    ManageAction.ADD: "added",
    ManageAction.UPDATE: "updated",
    ManageAction.DELETE: "deleted",
}


def _input_error_message(exc: PydanticValidationError) -> str:
    """Names each malformed field, e.g. ``level: Input should be a valid integer``."""
    parts = []
    for error in exc.errors():
        field = ".".join(str(p) for p in error["loc"]) or "input"
        parts.append(f"{field}: {error['msg']}")
    return "Invalid input. " + "; ".join(parts)


class ApprovalService:
    def __init__(self, ctx: WorkflowContext) -> None:
        self.ctx = ctx
        self.engine = WorkflowEngine(ctx)
        self.admin = AdminOperations(ctx)
        self.queries = RequestQueries(ctx)

    def _run(self, operation: str, actor: str | None, call: Callable[[], OperationResult]) -> OperationResult:
        try:
            return call()
        except ApprovalFlowError as exc:
            logger.warning("operation_error", operation=operation, actor=actor,
                           error_code=exc.code, error=str(exc))
            return OperationResult.error(str(exc), exc.code)
        except PydanticValidationError as exc:
            message = _input_error_message(exc)
            logger.warning("operation_error", operation=operation, actor=actor,
                           error_code=ValidationError.code, error=message)
            return OperationResult.error(message, ValidationError.code)
        except Exception:
            logger.exception("operation_failed", operation=operation, actor=actor)
            return OperationResult.error(
                f"An unexpected error occurred during {operation}.", OperationFailed.code
            )

    # ---- workflow ----

    def submit(self, actor: str, draft: RequestDraft | Mapping[str, Any]) -> OperationResult:
        def call() -> OperationResult:
            request = self.engine.submit(actor, RequestDraft.model_validate(draft))
            return OperationResult.success(
                "Request submitted successfully.", request_id=request.request_id, data=request
            )

        return self._run("submit", actor, call)

    def process_approval(
        self,
        actor: str,
        request_id: str,
        action: str | ApprovalAction,
        notes: str | None = None,
        next_approver_email: str | None = None,
        it_review_data: Mapping[str, Any] | None = None,
    ) -> OperationResult:
        def call() -> OperationResult:
            outcome = self.engine.process_approval(
                actor, request_id, action, notes, next_approver_email, it_review_data
            )
            return OperationResult.success(
                outcome.transition.message, request_id=outcome.request.request_id, data=outcome.request
            )

        return self._run("process_approval", actor, call)

    # ---- admin ----

    def manage_approver(self, actor: str, action: str, data: ApproverInput | Mapping[str, Any]) -> OperationResult:
        def call() -> OperationResult:
            approver = self.admin.manage_approver(actor, action, ApproverInput.model_validate(data))
            verb = _MANAGE_MESSAGES[ManageAction(action.strip().lower())]
            return OperationResult.success(f"Approver {verb} successfully.", data=approver)

        return self._run("manage_approver", actor, call)

    def manage_it_review_chain(self, actor: str, action: str,
                               data: ITReviewChainInput | Mapping[str, Any]) -> OperationResult:
        def call() -> OperationResult:
            chain = self.admin.manage_it_review_chain(actor, action, ITReviewChainInput.model_validate(data))
            verb = _MANAGE_MESSAGES[ManageAction(action.strip().lower())]
            return OperationResult.success(f"IT review chain {verb} successfully.", data=chain)

        return self._run("manage_it_review_chain", actor, call)

    def update_settings(self, actor: str, update: SettingsUpdate | Mapping[str, Any]) -> OperationResult:
        def call() -> OperationResult:
            saved = self.admin.update_settings(actor, SettingsUpdate.model_validate(update))
            return OperationResult.success("Settings saved successfully.", data=saved)

        return self._run("update_settings", actor, call)

    def get_settings(self, actor: str) -> OperationResult:
        return self._run("get_settings", actor,
                         lambda: OperationResult.success("OK", data=self.admin.get_settings(actor)))

    def list_approvers(self, actor: str) -> OperationResult:
        return self._run("list_approvers", actor,
                         lambda: OperationResult.success("OK", data=self.admin.list_approvers(actor)))

    def list_it_review_chains(self, actor: str) -> OperationResult:
        return self._run("list_it_review_chains", actor,
                         lambda: OperationResult.success("OK", data=self.admin.list_it_review_chains(actor)))

    # ---- queries ----

    def list_approvals(self, actor: str) -> OperationResult:
        return self._run("list_approvals", actor,
                         lambda: OperationResult.success("OK", data=self.queries.list_approvals(actor)))

    def list_my_requests(self, actor: str, page: int = 1, page_size: int | None = None) -> OperationResult:
        return self._run("list_my_requests", actor, lambda: OperationResult.success(
            "OK", data=self.queries.list_my_requests(actor, page, page_size)))

    def get_request(self, request_id: str, actor: str) -> OperationResult:
        def call() -> OperationResult:
            request = self.queries.get_request(request_id, actor)
            return OperationResult.success("OK", request_id=request.request_id, data=request)

        return self._run("get_request", actor, call)

    def nav_counts(self, actor: str) -> OperationResult:
        return self._run("nav_counts", actor,
                         lambda: OperationResult.success("OK", data=self.queries.nav_counts(actor)))

    def dashboard_stats(self, actor: str) -> OperationResult:
        return self._run("dashboard_stats", actor,
                         lambda: OperationResult.success("OK", data=self.queries.dashboard_stats(actor)))

    def user_profile(self, actor: str) -> OperationResult:
        return self._run("user_profile", actor,
                         lambda: OperationResult.success("OK", data=self.queries.user_profile(actor)))

    def departments(self) -> OperationResult:
        return self._run("departments", None,
                         lambda: OperationResult.success("OK", data=self.queries.departments()))

    def sub_departments(self) -> OperationResult:
        return self._run("sub_departments", None,
                         lambda: OperationResult.success("OK", data=self.queries.sub_departments()))

    def forwardable_approvers(self) -> OperationResult:
        return self._run("forwardable_approvers", None,
                         lambda: OperationResult.success("OK", data=self.queries.forwardable_approvers()))

    def approver_for_department(self, department: str, sub_department: str = "") -> OperationResult:
        return self._run("approver_for_department", None, lambda: OperationResult.success(
            "OK", data=self.queries.approver_for_department(department, sub_department)))


def create_service(settings: AppSettings | None = None, *, notifier: INotifier | None = None) -> ApprovalService:
    """Wire the production service from settings.

    Raises:
        SchemaMismatchError: if startup schema validation is enabled and the
            live store does not match the declared tables.
    """
    if settings is None:
        settings = AppSettings()
    configure_logging(settings.log_level, settings.log_json)

    store, cache_backend = create_persistence(settings)
    if settings.validate_schema_on_startup:
        validate_store_schema(store)

    ctx = WorkflowContext.build(store, cache_backend, settings=settings, notifier=notifier)
    logger.info("service_started", environment=settings.environment,
                cache=ctx.cache.enabled, notifier=type(ctx.notifier).__name__)
    return ApprovalService(ctx)
