"""
SalesTrack Backend — FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() builds the document store and synchronizer, registers
       middleware, exception handlers and routers, and returns the app.
Who:   uvicorn (`uvicorn salestrack.main:app`) and the test suite, which
       passes its own synchronizer backed by an in-memory store.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                    FastAPI App                       │
    │  Middleware:  Request ID → Logging → CORS            │
    │  Routes:      /api/login  /api/products  /api/owner/*│
    │  Handlers:    Validation→400 │ Auth→401 │ 404 │ 500  │
    │  app.state.synchronizer ─▶ cache ─▶ document store   │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   configure logging, validate configuration (log, don't exit)
    Shutdown:  close the document store's HTTP client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from salestrack import __version__
from salestrack.config import settings
from salestrack.exceptions import (
    AuthenticationError,
    NotFoundError,
    PersistenceError,
    SalesTrackError,
    ValidationError,
)
from salestrack.middleware.logging import RequestLoggingMiddleware
from salestrack.middleware.request_id import RequestIDMiddleware, request_id_var
from salestrack.routes import auth, categories, health, products, sellers
from salestrack.services.cache import DocumentCache
from salestrack.services.file_store import FileDocumentStore
from salestrack.services.github_store import GitHubDocumentStore
from salestrack.services.store_base import DocumentStore
from salestrack.services.synchronizer import DocumentSynchronizer

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole application.

    Format: 2025-01-15T12:00:00 [INFO] salestrack.services.synchronizer: ...
    When:   Called once from the lifespan, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party request logs duplicate our own store logging.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Document Store Wiring
# ══════════════════════════════════════════════════════════════════════════

def build_store() -> DocumentStore:
    """The configured backend: GitHub contents API or a local JSON file."""
    if settings.store_backend == "file":
        return FileDocumentStore(settings.file_store_root)
    return GitHubDocumentStore()


def build_synchronizer(store: Optional[DocumentStore] = None) -> DocumentSynchronizer:
    return DocumentSynchronizer(
        store=store or build_store(),
        cache=DocumentCache(ttl_seconds=settings.cache_ttl_seconds),
        path=settings.document_path,
        max_retries=settings.write_max_retries,
        backoff_seconds=settings.write_backoff_seconds,
    )


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("SalesTrack backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Reads degrade to an empty document; health checks report it.
        logger.error("Configuration error: %s", str(e))

    synchronizer: DocumentSynchronizer = app.state.synchronizer
    logger.info(
        "Document store: %s, path=%s, cache ttl=%.0fs, write retries=%d",
        synchronizer.store.name,
        synchronizer.path,
        synchronizer.cache.ttl_seconds,
        synchronizer.max_retries,
    )
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("SalesTrack backend shutting down...")
    await synchronizer.store.aclose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, message: str, details: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": message,
            "details": details or {},
            "request_id": request_id_var.get(""),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to the error envelope.

    Handler hierarchy:
        ValidationError      → 400
        RequestValidationError → 400 (malformed JSON or wrong field types)
        AuthenticationError  → 401
        NotFoundError        → 404
        PersistenceError     → 500 (context logged, not returned)
        SalesTrackError      → 500
        Exception            → 500 (stack trace logged)
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ())[1:]),
                "message": error.get("msg", ""),
                "type": error.get("type", ""),
            }
            for error in exc.errors()
        ]
        logger.warning("[%s] Malformed request body: %s", request_id_var.get(""), errors)
        return _error_response(400, "Invalid request body", {"errors": errors})

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, exc.message, exc.context)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(401, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, exc.message, exc.context)

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        logger.error(
            "[%s] Persistence failure: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, exc.message)

    @app.exception_handler(SalesTrackError)
    async def handle_application_error(request: Request, exc: SalesTrackError):
        logger.error(
            "[%s] Application error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return _error_response(500, "An unexpected error occurred. Please try again.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(synchronizer: Optional[DocumentSynchronizer] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        synchronizer: Pre-built synchronizer (tests inject one over a fake
            store). Defaults to one built from settings.
    """
    app = FastAPI(
        title="SalesTrack API",
        description=(
            "Sales tracking backend for sellers and store owners. The whole "
            "dataset is one JSON document kept in a GitHub repository."
        ),
        version=__version__,
        lifespan=lifespan,
    )
    app.state.synchronizer = synchronizer or build_synchronizer()

    # Middleware executes in reverse order of addition.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(products.router)
    app.include_router(categories.router)
    app.include_router(sellers.router)

    return app


# uvicorn expects `salestrack.main:app`
app = create_app()
