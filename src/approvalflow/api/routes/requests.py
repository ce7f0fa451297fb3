"""Request submission, approval actions and per-user listings."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from approvalflow.api.deps import get_actor, get_service, respond
from approvalflow.models.commands import RequestDraft
from approvalflow.workflow.service import ApprovalService

router = APIRouter(tags=["requests"])


class ActionBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: str
    notes: str = ""
    next_approver_email: Optional[str] = Field(default=None, alias="nextApproverEmail")
    it_review_data: Optional[dict[str, Any]] = Field(default=None, alias="itReviewData")


@router.post("/requests")
def submit_request(draft: RequestDraft, actor: str = Depends(get_actor),
                   service: ApprovalService = Depends(get_service)):
    return respond(service.submit(actor, draft))


@router.get("/requests/mine")
def my_requests(page: int = Query(default=1), page_size: Optional[int] = Query(default=None, alias="pageSize"),
                actor: str = Depends(get_actor), service: ApprovalService = Depends(get_service)):
    return respond(service.list_my_requests(actor, page, page_size))


@router.get("/requests/{request_id}")
def get_request(request_id: str, actor: str = Depends(get_actor),
                service: ApprovalService = Depends(get_service)):
    return respond(service.get_request(request_id, actor))


@router.post("/requests/{request_id}/actions")
def process_action(request_id: str, body: ActionBody, actor: str = Depends(get_actor),
                   service: ApprovalService = Depends(get_service)):
    return respond(service.process_approval(
        actor, request_id, body.action, body.notes, body.next_approver_email, body.it_review_data,
    ))


@router.get("/approvals")
def approvals(actor: str = Depends(get_actor), service: ApprovalService = Depends(get_service)):
    return respond(service.list_approvals(actor))


@router.get("/me")
def me(actor: str = Depends(get_actor), service: ApprovalService = Depends(get_service)):
    return respond(service.user_profile(actor))
