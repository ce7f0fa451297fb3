"""Request-scoped dependencies and result-to-response mapping."""

from __future__ import annotations

from fastapi import Header, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from approvalflow.core.exceptions import (
    AuthorizationError,
    BusyError,
    ConfigurationError,
    NotFoundError,
    ValidationError,
)
from approvalflow.models.results import OperationResult
from approvalflow.workflow.service import ApprovalService

_STATUS_BY_CODE = {
    ValidationError.code: 400,
    AuthorizationError.code: 403,
    NotFoundError.code: 404,
    BusyError.code: 503,
    ConfigurationError.code: 409,
}


def get_service(request: Request) -> ApprovalService:
    return request.app.state.service


def get_actor(x_user_email: str = Header(default="")) -> str:
    """Acting user's email, supplied by the fronting identity proxy."""
    actor = x_user_email.strip()
    if not actor:
        raise HTTPException(status_code=401, detail="X-User-Email header is required")
    return actor


def respond(result: OperationResult) -> JSONResponse:
    status_code = 200 if result.ok else _STATUS_BY_CODE.get(result.error_code, 500)
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(result.model_dump(by_alias=True, exclude_none=True)),
    )
