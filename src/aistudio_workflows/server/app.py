"""FastAPI app factory."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from aistudio_workflows import __version__
from aistudio_workflows.core.config import AIStudioConfig
from aistudio_workflows.errors import AIServiceError, WorkflowUnavailableError
from aistudio_workflows.server.models import ErrorBody
from aistudio_workflows.server.routes import router
from aistudio_workflows.workflows.bootstrap import initialize_workflows
from aistudio_workflows.workflows.registry import WorkflowRegistry

logger = logging.getLogger(__name__)


def _error_response(status_code: int, exc: AIServiceError) -> JSONResponse:
    body = ErrorBody(error=exc.message, code=exc.code, retryable=exc.retryable)
    return JSONResponse(status_code=status_code, content=body.to_wire())


def create_app(
    registry: WorkflowRegistry | None = None, config: AIStudioConfig | None = None
) -> FastAPI:
    config = config or AIStudioConfig()
    if registry is None:
        registry = initialize_workflows(config)

    app = FastAPI(
        title="AI Studio Workflows",
        version=__version__,
        description="REST API over the pluggable AI workflow registry.",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.state.registry = registry
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.parsed_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(WorkflowUnavailableError)
    async def workflow_unavailable(
        request: Request, exc: WorkflowUnavailableError
    ) -> JSONResponse:
        logger.warning(
            "Workflow unavailable", extra={"path": request.url.path, "error": exc.message}
        )
        return _error_response(503, exc)

    @app.exception_handler(AIServiceError)
    async def ai_service_error(request: Request, exc: AIServiceError) -> JSONResponse:
        logger.error(
            "AI service error",
            extra={"path": request.url.path, "code": exc.code, "error": exc.message},
        )
        return _error_response(502, exc)

    @app.exception_handler(ValueError)
    async def value_error(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc), "code": "BAD_REQUEST"})

    app.include_router(router, prefix="/api")
    return app
