"""Health check endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from approvalflow.api.deps import get_service
from approvalflow.core.exceptions import StoreError
from approvalflow.models.schema import SETTINGS
from approvalflow.workflow.service import ApprovalService

router = APIRouter(tags=["health"])


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/ready")
def ready(service: ApprovalService = Depends(get_service)):
    try:
        service.ctx.store.key_column(SETTINGS)
    except StoreError as exc:
        return JSONResponse(status_code=503, content={"status": "unavailable", "detail": str(exc)})
    return {"status": "ready", "cache": "enabled" if service.ctx.cache.enabled else "disabled"}
