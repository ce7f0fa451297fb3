"""WorkflowEngine: submission and approval transitions under the global lock."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, assert_never

import structlog

from approvalflow.core.emails import is_valid_email, same_email
from approvalflow.core.exceptions import AuthorizationError, NotFoundError
from approvalflow.models.commands import RequestDraft
from approvalflow.models.records import ApprovalAction, ApprovalRequest, RequestStatus
from approvalflow.models.schema import REQUESTS
from approvalflow.workflow.context import WorkflowContext
from approvalflow.workflow.transitions import SideEffect, Transition, plan_transition, requires_chain
from approvalflow.workflow.validation import form_id_of, validate_approval_input, validate_draft

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ApprovalOutcome:
    request: ApprovalRequest
    transition: Transition


def _merge_json(current: str, update: Mapping[str, Any] | None) -> str:
    """Shallow-merge ``update`` into the JSON object in ``current``."""
    if not update:
        return current
    try:
        base = json.loads(current or "{}")
    except ValueError:
        base = {}
    if not isinstance(base, dict):
        base = {}
    return json.dumps({**base, **dict(update)})


class WorkflowEngine:
    """Request state machine.

    Every public method holds the global guard for its whole read-decide-write
    sequence. The request row is always read fresh from the store; routing
    lookups go through the cache. All checks run before the single row write,
    so any failure leaves the row as it was. Notifications go out after the
    lock is released and never change the outcome.
    """

    def __init__(self, ctx: WorkflowContext) -> None:
        self._ctx = ctx

    def submit(self, actor: str, draft: RequestDraft) -> ApprovalRequest:
        ctx = self._ctx
        if not is_valid_email(actor):
            raise AuthorizationError("A signed-in user is required to submit a request.")

        with ctx.guard.hold("submit", actor):
            clean = validate_draft(draft, ctx.config, ctx.settings.load())
            approver = ctx.resolver.resolve_initial_approver(clean.department, clean.sub_department)
            approver_email = approver.email.strip()
            if not approver_email:
                raise NotFoundError("Approver", message=f"No approver found for department: {clean.department}")

            prefix = clean.form_type.split(" - ")[0].strip()
            request = ApprovalRequest(
                request_id=ctx.ids.new_id(prefix),
                form_type=clean.form_type,
                request_timestamp=ctx.clock.now(),
                requester_name=clean.requester_name,
                requester_email=actor.strip(),
                department=clean.department,
                sub_department=clean.sub_department,
                status=RequestStatus.PENDING,
                current_approver_email=approver_email,
                details=clean.details,
            )
            ctx.store.append_row(REQUESTS, request.to_row())
            ctx.audit.record(
                "submit", actor, "success",
                request_id=request.request_id, form_type=request.form_type, approver=approver_email,
            )

        self._notify(approver_email, ctx.messages.new_request(request))
        return request

    def process_approval(
        self,
        actor: str,
        request_id: str,
        action: str | ApprovalAction,
        notes: str | None = None,
        next_approver_email: str | None = None,
        it_review_data: Mapping[str, Any] | None = None,
    ) -> ApprovalOutcome:
        ctx = self._ctx
        parsed = validate_approval_input(request_id, action, next_approver_email)
        request_id = request_id.strip()

        with ctx.guard.hold("process_approval", actor):
            row = ctx.store.read_row(REQUESTS, request_id)
            if row is None:
                raise NotFoundError("Request", request_id, "Request ID not found.")
            request = ApprovalRequest.from_row(row)

            if not same_email(actor, request.current_approver_email):
                raise AuthorizationError("You are not the current approver for this request.")

            form_id = form_id_of(request.form_type, ctx.config.form_type_pattern)
            it_required = form_id is not None and form_id in ctx.settings.load().it_review_forms
            chain = None
            if requires_chain(request.status, parsed, it_required):
                chain = ctx.resolver.resolve_it_chain(form_id)

            transition = plan_transition(
                request.status,
                parsed,
                it_review_required=it_required,
                chain=chain,
                forward_to=next_approver_email or "",
            )

            entry = ctx.audit.entry(actor.strip(), parsed, notes, ctx.clock.now())
            updated = request.model_copy(update={
                "status": transition.next_status,
                "current_approver_email": transition.next_approver,
                "approval_history": ctx.audit.append(request, entry),
                "it_review_details": _merge_json(request.it_review_details, it_review_data),
            })
            new_row = updated.to_row()
            ctx.store.write_cells(REQUESTS, request_id, {
                column: new_row[column]
                for column in ("approvalHistory", "status", "currentApproverEmail", "itReviewDetails")
            })
            ctx.audit.record(
                "process_approval", actor, "success",
                request_id=request_id,
                action=parsed.history_label,
                from_status=request.status.value,
                to_status=transition.next_status.value,
                next_approver=transition.next_approver,
            )

        self._after_transition(updated, transition, entry.notes)
        return ApprovalOutcome(updated, transition)

    def _after_transition(self, request: ApprovalRequest, transition: Transition, notes: str) -> None:
        messages = self._ctx.messages
        match transition.effect:
            case SideEffect.NOTIFY_APPROVER:
                self._notify(transition.next_approver, messages.new_request(request))
            case SideEffect.NOTIFY_IT_APPROVER:
                self._notify(transition.next_approver, messages.new_request(request, it_review=True))
            case SideEffect.FINALIZE_REJECTED:
                self._notify(request.requester_email, messages.final_status(request, RequestStatus.REJECTED, notes))
            case SideEffect.FINALIZE_APPROVED:
                self._notify(request.requester_email, messages.final_status(request, RequestStatus.APPROVED, notes))
                self._dispatch_document(request)
            case _:
                assert_never(transition.effect)

    def _dispatch_document(self, request: ApprovalRequest) -> None:
        helpdesk = self._ctx.settings.load().helpdesk_email.strip()
        if not helpdesk:
            logger.error("helpdesk_email_not_configured", request_id=request.request_id)
            return
        try:
            document = self._ctx.renderer.render(request)
        except Exception:
            logger.exception("document_render_failed", request_id=request.request_id)
            return
        self._notify(helpdesk, self._ctx.messages.helpdesk_ticket(request, document))

    def _notify(self, recipient: str, message: Mapping[str, Any]) -> None:
        """Fire-and-forget: failures are logged and never block a transition."""
        if not recipient:
            return
        try:
            self._ctx.notifier.notify(recipient, message)
        except Exception:
            logger.exception("notification_failed", recipient=recipient, subject=message.get("subject"))
