"""Reference pick-lists for the request form."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from approvalflow.api.deps import get_service, respond
from approvalflow.workflow.service import ApprovalService

router = APIRouter(tags=["reference"])


@router.get("/departments")
def departments(service: ApprovalService = Depends(get_service)):
    return respond(service.departments())


@router.get("/sub-departments")
def sub_departments(service: ApprovalService = Depends(get_service)):
    return respond(service.sub_departments())


@router.get("/approvers")
def forwardable_approvers(service: ApprovalService = Depends(get_service)):
    return respond(service.forwardable_approvers())


@router.get("/department-approver")
def department_approver(department: str = Query(...), sub_department: str = Query(default="", alias="subDepartment"),
                        service: ApprovalService = Depends(get_service)):
    return respond(service.approver_for_department(department, sub_department))
