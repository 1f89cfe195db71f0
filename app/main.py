"""
Jojárts API — FastAPI Application Factory
===========================================

What:  Builds and configures the FastAPI application.
How:   create_app() validates settings, constructs the components with
       explicit dependencies, registers middleware, exception handlers and
       routes. The module-level `app` is what uvicorn serves
       (uvicorn app.main:app), and run() is the `jojarts-api` entry point.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────┐ ┌─────────────┐ ┌────────┐ ┌──────────┐   │
    │  │ CORS │→│ Login limit │→│ Req ID │→│ Logging  │   │
    │  └──────┘ └─────────────┘ └────────┘ └──────────┘   │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ /api/health  │ │ /api/auth/*  │ │ /api/images │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  app.state: settings, database, token_service,      │
    │             credential_store                        │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Build (create_app):
    1. Validate settings → ConfigurationError stops the process
    2. Construct Database, TokenService, CredentialStore

    Startup (lifespan):
    1. Configure logging
    2. Ping the database → StorageUnavailableError stops the process
    3. Create missing tables (AUTO_CREATE_SCHEMA)
    4. Ensure the bootstrap administrator exists

    Shutdown:
    1. Dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import __version__
from app.config import Settings, get_settings
from app.database import Database
from app.exceptions import (
    MSG_INVALID_REQUEST,
    MSG_SERVER_ERROR,
    DatabaseError,
    JojartsError,
    NotFoundError,
    StorageUnavailableError,
    UnauthorizedError,
    ValidationError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.rate_limit import LoginRateLimitMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import auth, health, images
from app.services.credential_store import CredentialStore
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure process-wide logging.

    Format: 2024-01-15T12:00:00 [INFO] app.services.image_catalog: Image ... created
    Called once at startup, before any other initialization logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # uvicorn's own access log duplicates RequestLoggingMiddleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


def _error(status_code: int, message: str, headers: Optional[dict] = None) -> JSONResponse:
    """Every error body is exactly {"message": ...}."""
    return JSONResponse(status_code=status_code, content={"message": message}, headers=headers)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Connect, prepare the schema and bootstrap the admin; dispose on exit.

    Storage failures are not retried. The error is logged and re-raised,
    which makes uvicorn abort startup and exit non-zero.
    """
    settings: Settings = app.state.settings
    database: Database = app.state.database
    credential_store: CredentialStore = app.state.credential_store

    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("Jojárts API %s starting up...", __version__)

    try:
        await database.ping()

        if settings.auto_create_schema:
            await database.create_all()
            logger.info("Database schema ensured")

        async with database.session_factory() as session:
            await credential_store.ensure_bootstrap_admin(session)
            await session.commit()
    except StorageUnavailableError as e:
        logger.critical("Database unreachable at startup: %s", e.message)
        await database.dispose()
        raise
    except Exception:
        logger.critical("Startup failed", exc_info=True)
        await database.dispose()
        raise

    logger.info("Server ready on %s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    logger.info("Jojárts API shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to status codes and {"message": ...} bodies.

    Handler hierarchy:
        ValidationError         → 400
        RequestValidationError  → 400 (malformed JSON, wrong field types)
        UnauthorizedError       → 401 + WWW-Authenticate: Bearer
        NotFoundError           → 404
        DatabaseError           → 500 (generic message)
        JojartsError (base)     → 500
        HTTPException           → its own status (unknown route, bad method)
        Exception (fallback)    → 500, traceback logged server-side only

    429 is answered by LoginRateLimitMiddleware before the request reaches
    routing, so it has no handler here.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error(400, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        logger.warning(
            "[%s] Malformed request on %s: %d error(s)",
            request_id_var.get(""),
            request.url.path,
            len(exc.errors()),
        )
        return _error(400, MSG_INVALID_REQUEST)

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return _error(401, exc.message, headers={"WWW-Authenticate": "Bearer"})

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error(404, exc.message)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error(500, MSG_SERVER_ERROR)

    @app.exception_handler(JojartsError)
    async def handle_app_error(request: Request, exc: JojartsError):
        logger.error(
            "[%s] Unhandled application error %s: %s | Context: %s",
            request_id_var.get(""),
            type(exc).__name__,
            exc.message,
            exc.context,
        )
        return _error(500, MSG_SERVER_ERROR)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=exc,
        )
        return _error(500, MSG_SERVER_ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: injected configuration (tests pass their own); defaults
                  to the environment-derived singleton.

    Raises:
        ConfigurationError: DATABASE_URL or JWT_SECRET missing.
    """
    settings = settings or get_settings()
    settings.validate_required()

    app = FastAPI(
        title="Jojárts API",
        description="Admin login and photo gallery catalog for the Jojárts electrician site.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Components (explicit wiring, no hidden globals) ───────────────────
    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.token_service = TokenService.from_settings(settings)
    app.state.credential_store = CredentialStore.from_settings(settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: CORS → LoginRateLimit → RequestID → Logging → GZip
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        LoginRateLimitMiddleware,
        max_requests=settings.login_rate_limit_requests,
        window_seconds=settings.login_rate_limit_window,
    )
    cors_origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        # Bearer tokens travel in a header, not cookies; credentials mode
        # is not allowed together with the "*" origin anyway
        allow_credentials="*" not in cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(images.router)

    return app


def run() -> None:
    """Console entry point: serve with uvicorn on the configured host/port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn imports `app.main:app`; building it here means missing required
# configuration stops the process at import, before any socket is bound
app = create_app()


if __name__ == "__main__":
    run()
