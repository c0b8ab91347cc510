"""
Meetapp Backend: FastAPI Application Factory
=============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       lifespan() owns startup and shutdown.
Who:   uvicorn (`uvicorn meetapp.main:app`) and the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware:  Rate Limit → Request ID → Logging → GZip   │
    │               → CORS                                     │
    │                                                          │
    │  Routes:      /users  /sessions  /files  /meetups        │
    │               /organizing  /subscriptions  /health       │
    │                                                          │
    │  Background:  BackgroundTasks after the response         │
    │               (SubscriptionMail)                         │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → storage dir
    Shutdown: dispose database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from meetapp import __version__
from meetapp.config import settings
from meetapp.database import dispose_engine
from meetapp.exceptions import (
    AuthenticationError,
    DatabaseError,
    FileStorageError,
    MeetappError,
    NotFoundError,
    PermissionDeniedError,
    SubscriptionRejectedError,
    ValidationError,
)
from meetapp.middleware.logging import RequestLoggingMiddleware
from meetapp.middleware.rate_limit import RateLimitMiddleware
from meetapp.middleware.request_id import RequestIDMiddleware, request_id_var
from meetapp.routes import files, health, meetups, organizing, sessions, subscriptions, users
from meetapp.services.subscription_validator import ConflictReason

logger = logging.getLogger(__name__)

# HTTP status per subscription rejection reason
REJECTION_STATUS = {
    ConflictReason.SELF_SUBSCRIPTION.value: 400,
    ConflictReason.MEETUP_PAST.value: 400,
    ConflictReason.TIME_CONFLICT.value: 409,
}


# ══════════════════════════════════════════════════════════════════════════
# Logging
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure root logging once, to stdout.

    Format: 2026-11-03T18:00:00 [INFO] meetapp.services.meetup_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Meetapp Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Meetapp Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(error: str, message: str, details=None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the MeetappError hierarchy to HTTP responses.

        ValidationError            → 400
        AuthenticationError        → 401 (+ WWW-Authenticate)
        PermissionDeniedError      → 403
        NotFoundError              → 404
        SubscriptionRejectedError  → 400 / 409 (REJECTION_STATUS)
        FileStorageError           → 500
        DatabaseError              → 500 (generic message)
        MeetappError               → 500
        Exception                  → 500 (generic message)

    Handlers never put stack traces, SQL or file system paths in the body.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=error_body("authentication_error", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(PermissionDeniedError)
    async def handle_permission_denied(request: Request, exc: PermissionDeniedError):
        return JSONResponse(
            status_code=403,
            content=error_body("permission_denied", exc.message),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=error_body("not_found", exc.message),
        )

    @app.exception_handler(SubscriptionRejectedError)
    async def handle_subscription_rejected(request: Request, exc: SubscriptionRejectedError):
        logger.info("[%s] Subscription rejected: %s", request_id_var.get(""), exc.reason)
        return JSONResponse(
            status_code=REJECTION_STATUS.get(exc.reason, 400),
            content=error_body("subscription_rejected", exc.message, {"reason": exc.reason}),
        )

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        rid = request_id_var.get("")
        logger.error("[%s] File storage error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=error_body("server_error", exc.message),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(MeetappError)
    async def handle_meetapp_error(request: Request, exc: MeetappError):
        rid = request_id_var.get("")
        logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=error_body("server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body(
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Meetapp API",
        description=(
            "Meetup scheduling backend: organize meetups, upload banners and "
            "subscribe to other people's events. Organizers are e-mailed on "
            "every new subscription."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Last added runs first: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(users.router)
    app.include_router(sessions.router)
    app.include_router(files.router)
    app.include_router(meetups.router)
    app.include_router(organizing.router)
    app.include_router(subscriptions.router)
    app.include_router(health.router)

    return app


app = create_app()
