"""
SConf Backend - FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() assembles middleware, exception handlers and routers;
       the lifespan owns the database engine.
Who:   uvicorn (uvicorn sconf.main:app) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routes (under settings.api_prefix):                     │
    │    /scientists   /conferences   /participations  /health │
    │                                                          │
    │  Exception Handlers:                                     │
    │    Validation→400  NotFound→404  Constraint→400  DB→500  │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, create the engine and session factory,
              store both on app.state
    Shutdown: dispose the engine (close pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from sconf.config import settings
from sconf.database import create_db_engine, create_session_factory, dispose_engine
from sconf.exceptions import (
    ConstraintViolationError,
    DatabaseError,
    NotFoundError,
    SconfError,
    ValidationError,
)
from sconf.middleware.logging import RequestLoggingMiddleware
from sconf.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from sconf.routes import conferences, health, participations, scientists

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2024-01-15T12:00:00 [INFO] sconf.access: GET /api/scientists 200 ...
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Owns the database engine for the lifetime of the process.

    Request handlers reach the store only through
    database.get_db_session, which reads `app.state.session_factory`.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("SConf API %s starting up (%s)", settings.app_version, settings.environment)

    engine = create_db_engine()
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    logger.info("Database engine created (%s)", engine.url.render_as_string(hide_password=True))

    logger.info("Server ready at http://%s:%d%s", settings.api_host, settings.api_port, settings.api_prefix)
    logger.info("API docs: http://%s:%d/docs", settings.api_host, settings.api_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SConf API shutting down...")
    await dispose_engine(engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or request_id_var.get("")


def error_response(
    request: Request,
    status_code: int,
    message: str,
    code: str,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Builds the uniform error body {error, code, details?, request_id}."""
    content: Dict[str, Any] = {"error": message, "code": code}
    if details:
        content["details"] = details
    rid = _request_id(request)
    content["request_id"] = rid
    return JSONResponse(
        status_code=status_code,
        content=content,
        headers={REQUEST_ID_HEADER: rid} if rid else None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        ConstraintViolationError                 → 400
        NotFoundError                            → 404
        DatabaseError                            → 500 (generic message)
        SconfError (base)                        → 500
        HTTPException                            → its own status
        Exception (fallback)                     → 500 (generic message)

    Internal details (stack traces, SQL) are logged server-side only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", _request_id(request), exc.message)
        return error_response(request, 400, exc.message, exc.code, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Body/path/query schema failures use the same 400 body as ValidationError."""
        errors = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", _request_id(request), errors)
        return error_response(
            request, 400, "Request validation failed", ValidationError.code, {"errors": errors}
        )

    @app.exception_handler(ConstraintViolationError)
    async def handle_constraint_violation(request: Request, exc: ConstraintViolationError):
        logger.warning("[%s] Constraint violation: %s", _request_id(request), exc.context)
        return error_response(request, 400, exc.message, exc.code, exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(request, 404, exc.message, exc.code, exc.context)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s", _request_id(request), exc.message, exc.context
        )
        return error_response(request, 500, exc.message, exc.code)

    @app.exception_handler(SconfError)
    async def handle_sconf_error(request: Request, exc: SconfError):
        logger.error("[%s] Unhandled application error: %s", _request_id(request), exc.message)
        return error_response(request, 500, exc.message, exc.code)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(request, exc.status_code, str(exc.detail), "http_error")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", _request_id(request), str(exc), exc_info=True)
        return error_response(
            request,
            500,
            "An unexpected error occurred. Please try again or contact support.",
            "internal_error",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns a fresh instance each call; the test suite builds its own and
    attaches an in-memory session factory to `app.state`.
    """
    app = FastAPI(
        title="SConf API",
        description=(
            "Scientific conferences API: manage scientists, conferences and their "
            "participations, with shared pagination, filtering and sorting on every "
            "list endpoint, per-country statistics and metadata search."
        ),
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    for module in (scientists, conferences, participations, health):
        app.include_router(module.router, prefix=settings.api_prefix)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
