"""FastAPI application with lifespan and router mounting."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from approvalflow.api.routes import admin, health, reference, requests
from approvalflow.workflow.service import ApprovalService, create_service


def create_app(service: ApprovalService | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``service`` is built from ``AppSettings`` at startup unless one is given.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.service = service or create_service()
        yield

    app = FastAPI(
        title="Approval Workflow Service",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(health.router)
    app.include_router(requests.router)
    app.include_router(reference.router, prefix="/reference")
    app.include_router(admin.router, prefix="/admin")
    return app
