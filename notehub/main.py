"""
NoteHub Backend: FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: `create_app(settings)` wires the engine, session
       factory, note store, number registry, middleware, exception handlers
       and routers. `run()` is the console entry point.
Who:   `notehub` console script, `python -m notehub`, or
       `uvicorn notehub.main:create_app --factory`.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────┐ ┌──────────────────┐  │
    │  │  Req ID  │→│   Logging   │→│       CORS       │  │
    │  └──────────┘ └─────────────┘ └──────────────────┘  │
    │                                                     │
    │  app.state:                                         │
    │  settings · engine · session_factory                │
    │  note_store · registry · poem_reader                │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌──────────────────────────────────────────────┐   │
    │  │ Validation/Malformed→400 │ NotFound→404      │   │
    │  │ StoreUnavailable→503     │ other→500         │   │
    │  └──────────────────────────────────────────────┘   │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Configure logging
    2. Verify the database is reachable (fatal if not)
    3. Create the notes table if missing (DB_CREATE_TABLES)

    Shutdown:
    1. Dispose the database engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from notehub import __version__
from notehub.config import Settings, load_settings
from notehub.database import (
    check_connection,
    create_engine_from_settings,
    create_session_factory,
    create_tables,
    dispose_engine,
)
from notehub.exceptions import (
    MalformedRequestError,
    NoteHubError,
    StartupConfigurationError,
    StoreUnavailableError,
)
from notehub.middleware.logging import RequestLoggingMiddleware
from notehub.middleware.request_id import RequestIDMiddleware, request_id_var
from notehub.routes import documents, greetings, health, notes, numbers
from notehub.services.note_store import NoteStore
from notehub.services.number_registry import NumberRegistry
from notehub.services.poem_reader import PoemReader

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure root logging once for the whole process.

    Format: 2026-01-15T12:00:00 [INFO] notehub.access: GET /numbers 200 0.4ms ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are noisy at DEBUG/INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    engine = app.state.engine

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("NoteHub Backend %s starting up...", __version__)

    try:
        await check_connection(engine)
    except Exception as e:
        # An unreachable store at startup is fatal; uvicorn aborts on raise
        logger.error("Failed to connect to the database: %s", str(e))
        await dispose_engine(engine)
        raise

    logger.info("Connection to the database is successful")

    if settings.db_create_tables:
        await create_tables(engine)

    if settings.cache_url:
        logger.info("Ancillary cache store configured")
    else:
        logger.info("No ancillary cache store configured (CACHE_URL unset)")

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("NoteHub Backend shutting down...")
    await dispose_engine(engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status: int,
    error: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Build the JSON error envelope shared by every failure path."""
    content: Dict[str, Any] = {
        "status": status,
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    return JSONResponse(status_code=status, content=content, headers=headers)


def _describe_validation_errors(exc: RequestValidationError) -> list:
    described = []
    for err in exc.errors():
        described.append({
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": str(err.get("msg", "")),
            "type": str(err.get("type", "")),
        })
    return described


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the JSON envelope.

    Handler hierarchy:
        NoteHubError subclasses   → their own status_code (400/404/500)
        StoreUnavailableError     → 503, generic message, details logged only
        RequestValidationError    → 400 malformed_request (not FastAPI's 422)
        Starlette HTTPException   → its status (unknown route 404, 405)
        Exception (fallback)      → 500, stack trace logged only
    """

    @app.exception_handler(NoteHubError)
    async def handle_app_error(request: Request, exc: NoteHubError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
            return error_response(exc.status_code, exc.error_code, exc.message)
        if exc.status_code == 400:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        return error_response(exc.status_code, exc.error_code, exc.message, details=exc.context)

    @app.exception_handler(StoreUnavailableError)
    async def handle_store_unavailable(request: Request, exc: StoreUnavailableError):
        rid = request_id_var.get("")
        logger.error("[%s] Note store unavailable | Context: %s", rid, exc.context)
        return error_response(
            exc.status_code,
            exc.error_code,
            exc.message,
            headers={"Retry-After": "5"},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = _describe_validation_errors(exc)
        first = errors[0] if errors else {"loc": [], "msg": "invalid request"}
        location = ".".join(first["loc"]) or "request"
        malformed = MalformedRequestError(
            message=f"Malformed request at '{location}': {first['msg']}",
            context={"errors": errors},
        )
        logger.warning("[%s] %s", request_id_var.get(""), malformed.message)
        return error_response(
            malformed.status_code,
            malformed.error_code,
            malformed.message,
            details=malformed.context,
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        error = "not_found" if exc.status_code == 404 else "http_error"
        return error_response(
            exc.status_code,
            error,
            str(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Loaded configuration. When omitted it is loaded from the
            environment, which raises StartupConfigurationError if
            DATABASE_URL is missing.
    """
    if settings is None:
        settings = load_settings()

    app = FastAPI(
        title="NoteHub API",
        description=(
            "Note CRUD backed by a relational store, a shared in-memory number "
            "registry, and a few stateless responders."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # ── Shared components ─────────────────────────────────────────────────
    engine = create_engine_from_settings(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.note_store = NoteStore()
    app.state.registry = NumberRegistry()
    app.state.poem_reader = PoemReader(settings.poem_path)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(notes.router)
    app.include_router(numbers.router)
    app.include_router(health.router)
    app.include_router(greetings.router)
    app.include_router(greetings.kingkong)
    app.include_router(documents.router)

    return app


def run() -> None:
    """Console entry point: load settings, then serve with uvicorn."""
    try:
        settings = load_settings()
        setup_logging(settings.log_level)
        app = create_app(settings)
    except StartupConfigurationError as e:
        setup_logging()
        logger.critical("Startup aborted: %s", e.message)
        sys.exit(1)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
