"""Admin endpoints for roster, IT-review chain and settings management."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends

from approvalflow.api.deps import get_actor, get_service, respond
from approvalflow.models.commands import ApproverInput, ITReviewChainInput, SettingsUpdate
from approvalflow.workflow.service import ApprovalService

router = APIRouter(tags=["admin"])


@router.get("/approvers")
def list_approvers(actor: str = Depends(get_actor), service: ApprovalService = Depends(get_service)):
    return respond(service.list_approvers(actor))


@router.post("/approvers/{action}")
def manage_approver(action: str, data: ApproverInput = Body(...), actor: str = Depends(get_actor),
                    service: ApprovalService = Depends(get_service)):
    return respond(service.manage_approver(actor, action, data))


@router.get("/it-review-chains")
def list_it_review_chains(actor: str = Depends(get_actor), service: ApprovalService = Depends(get_service)):
    return respond(service.list_it_review_chains(actor))


@router.post("/it-review-chains/{action}")
def manage_it_review_chain(action: str, data: ITReviewChainInput = Body(...), actor: str = Depends(get_actor),
                           service: ApprovalService = Depends(get_service)):
    return respond(service.manage_it_review_chain(actor, action, data))


@router.get("/settings")
def get_settings(actor: str = Depends(get_actor), service: ApprovalService = Depends(get_service)):
    return respond(service.get_settings(actor))


@router.put("/settings")
def update_settings(update: SettingsUpdate, actor: str = Depends(get_actor),
                    service: ApprovalService = Depends(get_service)):
    return respond(service.update_settings(actor, update))


@router.get("/dashboard")
def dashboard(actor: str = Depends(get_actor), service: ApprovalService = Depends(get_service)):
    return respond(service.dashboard_stats(actor))
