"""FastAPI application factory.

Lifespan
--------
On startup the app configures logging, creates the in-memory exploration
registry (``request.app.state.explorations``) and installs the cloud API
client factory (``request.app.state.client_factory``).  Sessions are dropped
on shutdown.

Routers
-------
Both endpoint groups are mounted under ``/api/v1``:

    /lineage*, /get-process-and-job-details  one-shot lineage queries
    /explorations                            incremental graph exploration

Errors
------
``ValidationError`` becomes ``400 {message}``; ``BackendUnavailable`` becomes
``500 {message, details}``.  ``HTTPException`` (404, 409) is rendered as
``{message}`` as well.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lineage_explorer.api.routers import explorations as explorations_router
from lineage_explorer.api.routers import lineage as lineage_router
from lineage_explorer.client.http import LineageApiClient
from lineage_explorer.config import settings
from lineage_explorer.errors import BackendUnavailable, ValidationError
from lineage_explorer.graph.session import ExplorationRegistry
from lineage_explorer.log import configure_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Set up shared state on startup and drop live sessions on shutdown."""
    configure_logging(settings.log_level, json_format=settings.log_json)
    app.state.explorations = ExplorationRegistry()
    app.state.client_factory = LineageApiClient
    try:
        yield
    finally:
        app.state.explorations = ExplorationRegistry()


async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"message": exc.message})


async def _http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _backend_error_handler(request: Request, exc: BackendUnavailable) -> JSONResponse:
    cause = exc.__cause__
    logger.error(
        "api.backend_unavailable",
        path=request.url.path,
        operation=exc.operation,
        error=str(cause) if cause else exc.message,
    )
    return JSONResponse(
        status_code=500,
        content={"message": exc.message, "details": str(cause) if cause else exc.message},
    )


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Lineage Explorer API",
        description=(
            "Bidirectional data-lineage exploration over the Data Lineage API. "
            "Exposes directional link queries with process annotation, "
            "process drill-down, and incremental graph-exploration sessions."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(HTTPException, _http_error_handler)
    app.add_exception_handler(ValidationError, _validation_error_handler)
    app.add_exception_handler(BackendUnavailable, _backend_error_handler)

    app.include_router(lineage_router.router, prefix="/api/v1", tags=["lineage"])
    app.include_router(
        explorations_router.router, prefix="/api/v1/explorations", tags=["explorations"]
    )

    return app


# Module-level instance used by uvicorn:
#   uvicorn lineage_explorer.api.app:app --reload
app = create_app()
