"""
Employee Dashboard Backend — FastAPI Application Factory
=========================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error rendering
       and lifecycle management in one place.
How:   Factory pattern: create_app(settings) returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn app.main:app`) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌────────┐ ┌─────────┐ ┌──────┐ ┌──────┐ ┌──────┐  │
    │  │ Req ID │→│ Logging │→│ GZip │→│ CORS │→│ Auth │  │
    │  └────────┘ └─────────┘ └──────┘ └──────┘ └──────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌─────────┐ ┌──────────────┐ ┌──────────────────┐  │
    │  │ GET /   │ │ GET /health  │ │ /employees CRUD  │  │
    │  └─────────┘ └──────────────┘ └──────────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ App errors→status │ Schema→400 │ 404 │ 500   │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Settings are passed in once and everything is built from them: the bearer
token goes to BearerTokenMiddleware, the development flag to the error
renderer, and the database engine and EmployeeService (page sizes) onto
app.state. No request-time code reads the environment.
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import Settings, settings
from app.database import build_engine, build_session_factory
from app.exceptions import EmployeeDashboardError
from app.middleware.auth import BearerTokenMiddleware
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import employees, health
from app.services.employee_service import EmployeeService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Output: stdout (container runtimes collect it)
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access log replaces uvicorn's; SQL echo is enabled separately
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  configure logging, validate settings (log, don't exit).
    Shutdown: dispose the database engine.
    """
    app_settings: Settings = app.state.settings

    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("Employee Dashboard API %s starting up...", __version__)
    logger.info("Environment: %s", app_settings.environment)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: / and /health stay useful while the config is fixed
        logger.error("Configuration error: %s", str(e))

    logger.info(
        "Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port
    )
    logger.info("=" * 60)

    yield

    logger.info("Employee Dashboard API shutting down...")
    await app.state.engine.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int,
    message: str,
    exc: Optional[BaseException] = None,
    expose_stack: bool = False,
    headers: Optional[dict] = None,
) -> JSONResponse:
    """Render the standard error envelope."""
    content = {
        "error": True,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if expose_stack and exc is not None:
        content["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "Validation failed: " + "; ".join(parts) if parts else "Validation failed"


def register_exception_handlers(app: FastAPI, expose_stack: bool = False) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler map:
        EmployeeDashboardError  → exc.status_code (400/401/404/409/500)
        RequestValidationError  → 400 (bad JSON, non-integer id, negative salary)
        HTTPException 404/405   → 404 "Route not found"
        HTTPException (other)   → its own status
        Exception               → 500 generic message

    Stack traces are included only when `expose_stack` is set, i.e. in
    development deployments. They are always logged server-side for 5xx.
    """

    @app.exception_handler(EmployeeDashboardError)
    async def handle_app_error(request: Request, exc: EmployeeDashboardError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error(
                "[%s] %s: %s | Context: %s", rid, exc.error_code, exc.message, exc.context
            )
        else:
            logger.warning("[%s] %s: %s", rid, exc.error_code, exc.message)
        return error_response(exc.status_code, exc.message, exc, expose_stack)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        message = _describe_validation_errors(exc)
        logger.warning("[%s] Request validation error: %s", request_id_var.get(""), message)
        return error_response(400, message, exc, expose_stack)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # A known path with an unsupported method is still an unmatched route
        if exc.status_code in (404, 405):
            return error_response(404, "Route not found", exc, expose_stack)
        return error_response(
            exc.status_code,
            str(exc.detail),
            exc,
            expose_stack,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True
        )
        return error_response(500, "Internal Server Error", exc, expose_stack)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings to build the app from; defaults to the
                      process-wide `settings` loaded at import time.
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="Employee Dashboard API",
        description=(
            "Employee record management: validated CRUD with soft delete, "
            "pagination and search, protected by a static bearer token."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # ── Per-app Resources ─────────────────────────────────────────────────
    # Engines are lazy; nothing connects until the first request.
    app.state.engine = build_engine(app_settings)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.employee_service = EmployeeService(
        default_page_size=app_settings.default_page_size,
        max_page_size=app_settings.max_page_size,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first. Auth is added first so that it is innermost:
    # CORS must answer preflight requests before the gate sees them.
    app.add_middleware(
        BearerTokenMiddleware,
        token=app_settings.auth_token,
        protected_prefix="/employees",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app, expose_stack=app_settings.is_development)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(employees.router)

    return app


app = create_app()
