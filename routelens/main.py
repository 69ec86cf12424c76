"""
RouteLens — FastAPI Application Factory
========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn routelens.main:app, or python -m routelens).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────────┐                   │
    │  │ Req ID   │→│  Logging        │                   │
    │  └──────────┘ └─────────────────┘                   │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────┐ ┌────────────────┐ ┌────────┐ │
    │  │ /api/annotations │ │ /api/documents │ │/health │ │
    │  └──────────────────┘ └────────────────┘ └────────┘ │
    │  ┌───────────────────────┐                          │
    │  │ /api/routes/regenerate│                          │
    │  └───────────────────────┘                          │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate the workspace (logged, not fatal)
    3. Generate the route dump if it does not exist yet (first run)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from routelens import __version__
from routelens.config import settings
from routelens.exceptions import (
    RouteLensError,
    ValidationError,
    RouteDumpError,
    ViewLookupError,
    ControllerPathError,
)
from routelens.middleware.request_id import RequestIDMiddleware, request_id_var
from routelens.middleware.logging import RequestLoggingMiddleware
from routelens.routes import documents, routes_dump, health
from routelens.services.route_dump_service import route_dump_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    When:   Called once during app startup (before any other initialization).
    """
    log_format = (
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stderr),  # editor plugins capture stderr
        ],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup sequence:
        1. Setup logging
        2. Validate the workspace (a broken workspace still serves /health)
        3. First run: regenerate the route dump when it is missing
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("RouteLens %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    workspace = settings.workspace_path
    logger.info("Workspace: %s", workspace)

    if settings.regenerate_on_startup:
        try:
            await route_dump_service.ensure_route_dump(workspace)
        except RouteDumpError as e:
            # Annotations stay empty (with a warning) until a regeneration succeeds
            logger.error("Initial route dump failed: %s | Context: %s", e.message, e.context)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("RouteLens shutting down.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError         → 400 Bad Request
        RouteDumpError          → 503 Service Unavailable (regenerate and retry)
        ControllerPathError     → 500 Internal Server Error (invariant violation)
        ViewLookupError         → 500 Internal Server Error
        RouteLensError (base)   → 500 Internal Server Error
        Exception (fallback)    → 500 Internal Server Error
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(RouteDumpError)
    async def handle_route_dump_error(request: Request, exc: RouteDumpError):
        rid = request_id_var.get("")
        logger.error("[%s] Route dump error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=503,
            content={
                "error": "route_dump_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(ControllerPathError)
    async def handle_controller_path_error(request: Request, exc: ControllerPathError):
        rid = request_id_var.get("")
        logger.error("[%s] Controller path invariant violated: %s", rid, exc.message)
        return JSONResponse(
            status_code=500,
            content={
                "error": "controller_path_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(ViewLookupError)
    async def handle_view_lookup_error(request: Request, exc: ViewLookupError):
        rid = request_id_var.get("")
        logger.error("[%s] View lookup error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "view_lookup_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(RouteLensError)
    async def handle_routelens_error(request: Request, exc: RouteLensError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error(
            "[%s] Unexpected error: %s",
            rid,
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    app = FastAPI(
        title="RouteLens API",
        description=(
            "Inline route annotations for Rails controllers. Maps `def <action>` lines "
            "to their URL, verb and route name, and links them to their view templates."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added runs first)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(documents.router)
    app.include_router(routes_dump.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
