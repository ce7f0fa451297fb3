"""Pure transition planning for the request state machine.

``plan_transition`` covers every (status, action) pair with ``match`` arms
ending in ``assert_never``, so adding a status or action without handling it
is a type-check failure rather than a silent fall-through.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import assert_never

from approvalflow.core.exceptions import ConfigurationError, ValidationError
from approvalflow.models.records import ApprovalAction, ITReviewChain, RequestStatus

IT_REVIEW_STATUSES = frozenset({
    RequestStatus.PENDING_IT_REVIEWER,
    RequestStatus.PENDING_IT_MANAGER,
    RequestStatus.PENDING_IT_DIRECTOR,
})


class SideEffect(Enum):
    NOTIFY_APPROVER = "notify_approver"
    NOTIFY_IT_APPROVER = "notify_it_approver"
    FINALIZE_APPROVED = "finalize_approved"
    FINALIZE_REJECTED = "finalize_rejected"


@dataclass(frozen=True)
class Transition:
    next_status: RequestStatus
    next_approver: str
    effect: SideEffect
    message: str

    @property
    def is_final(self) -> bool:
        return self.next_status.is_terminal


def requires_chain(status: RequestStatus, action: ApprovalAction, it_review_required: bool) -> bool:
    """Whether planning this step needs the form's IT review chain."""
    if action is not ApprovalAction.APPROVE:
        return False
    return status in IT_REVIEW_STATUSES or (status is RequestStatus.PENDING and it_review_required)


def _already_final(status: RequestStatus) -> ValidationError:
    return ValidationError(f"Request is already {status.value}; no further actions are possible.")


def plan_transition(
    status: RequestStatus,
    action: ApprovalAction,
    *,
    it_review_required: bool = False,
    chain: ITReviewChain | None = None,
    forward_to: str = "",
) -> Transition:
    if status.is_terminal:
        raise _already_final(status)

    match action:
        case ApprovalAction.REJECT:
            return Transition(RequestStatus.REJECTED, "", SideEffect.FINALIZE_REJECTED, "Request rejected.")
        case ApprovalAction.FORWARD:
            # Status is deliberately unchanged, including inside the IT sub-chain.
            target = forward_to.strip()
            if not target:
                raise ValidationError("Next approver email is required for forwarding.", "nextApproverEmail")
            return Transition(status, target, SideEffect.NOTIFY_APPROVER, f"Request forwarded to {target}.")
        case ApprovalAction.APPROVE:
            return _plan_approve(status, it_review_required, chain)
        case _:
            assert_never(action)


def _plan_approve(status: RequestStatus, it_review_required: bool,
                  chain: ITReviewChain | None) -> Transition:
    match status:
        case RequestStatus.PENDING:
            if not it_review_required:
                return Transition(
                    RequestStatus.APPROVED, "", SideEffect.FINALIZE_APPROVED, "Request approved and finalized.",
                )
            return _it_step(chain, RequestStatus.PENDING_IT_REVIEWER, "reviewer",
                            "Request forwarded to IT for review.")
        case RequestStatus.PENDING_IT_REVIEWER:
            return _it_step(chain, RequestStatus.PENDING_IT_MANAGER, "manager",
                            "Forwarded to IT Manager for review.")
        case RequestStatus.PENDING_IT_MANAGER:
            return _it_step(chain, RequestStatus.PENDING_IT_DIRECTOR, "director",
                            "Forwarded to IT Director for review.")
        case RequestStatus.PENDING_IT_DIRECTOR:
            return Transition(
                RequestStatus.APPROVED, "", SideEffect.FINALIZE_APPROVED, "Request approved and finalized.",
            )
        case RequestStatus.APPROVED | RequestStatus.REJECTED:
            # unreachable: plan_transition rejects terminal states first
            raise _already_final(status)
        case _:
            assert_never(status)


def _it_step(chain: ITReviewChain | None, next_status: RequestStatus, stage: str, message: str) -> Transition:
    if chain is None:
        raise ConfigurationError(f"IT approval chain not configured (missing {stage}).")
    approver = getattr(chain, f"{stage}_email").strip()
    if not approver:
        raise ConfigurationError(f"IT {stage} not configured for form {chain.form_id}.")
    return Transition(next_status, approver, SideEffect.NOTIFY_IT_APPROVER, message)
