"""
apidoc — FastAPI Application Factory
=====================================

What:  Wires the documentation subsystem into a FastAPI application.
How:   `install_documentation()` attaches a DocumentModelCache and the
       documentation router to any app; `create_app()` builds a complete
       standalone app around it.
Who:   Host apps call install_documentation(app); uvicorn serves
       `apidoc.main:app`.

Host usage:
    from apidoc.main import install_documentation

    app = FastAPI()
    app.include_router(users.router)
    install_documentation(app)
    # GET /api/info now lists every documented route of `app`

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │  Routes:      /api/version /api/info /api/example   │
    │               /api/refresh /health  (+ host routes) │
    │  State:       app.state.document_cache              │
    │  Handlers:    NotFound→404 │ ApiDocError→500        │
    └─────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Iterable, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from apidoc import __version__
from apidoc.config import Settings, settings
from apidoc.core.cache import DocumentModelCache
from apidoc.exceptions import (
    ApiDocError,
    ConfigurationError,
    DocumentBuildError,
    NotFoundError,
)
from apidoc.metadata import MetadataProvider
from apidoc.middleware.logging import RequestLoggingMiddleware
from apidoc.middleware.request_id import RequestIDMiddleware, request_id_var
from apidoc.registry import FastAPIRouteRegistry
from apidoc.routes import docs, health

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once from the lifespan, before anything else logs.
    """
    level = level or settings.log_level
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-request noise from the server and client libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging at the app's own level, then a summary of the
    documentation settings. The model itself is built lazily on the first
    documentation request.
    """
    app_settings: Settings = getattr(app.state, "settings", settings)
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("apidoc %s starting up...", __version__)

    cache: Optional[DocumentModelCache] = getattr(app.state, "document_cache", None)
    if cache is None or not cache.enabled:
        logger.info("API documentation is disabled")
    else:
        logger.info(
            "API documentation at %s/info (%d ignore rules)",
            cache.api_prefix,
            len(cache.copyright.ignore_url_set),
        )

    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("apidoc shutting down...")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map apidoc exceptions to JSON error responses.

    Handler hierarchy:
        NotFoundError        → 404 Not Found
        DocumentBuildError   → 500 (cache stays empty; next request retries)
        ConfigurationError   → 500
        ApiDocError (base)   → 500
        Exception (fallback) → 500, stack trace logged server-side only
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(DocumentBuildError)
    async def handle_build_error(request: Request, exc: DocumentBuildError):
        rid = request_id_var.get("")
        logger.error("[%s] Documentation build failed: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "build_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(ConfigurationError)
    async def handle_configuration_error(request: Request, exc: ConfigurationError):
        rid = request_id_var.get("")
        logger.error("[%s] Configuration error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "configuration_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(ApiDocError)
    async def handle_apidoc_error(request: Request, exc: ApiDocError):
        rid = request_id_var.get("")
        logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
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
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Installation & Factory
# ══════════════════════════════════════════════════════════════════════════

def install_documentation(
    app: FastAPI,
    app_settings: Optional[Settings] = None,
    provider: Optional[MetadataProvider] = None,
) -> DocumentModelCache:
    """
    Attach the documentation cache and router to `app`.

    Args:
        app:           The host application whose routes are documented
        app_settings:  Settings to read the copyright block from (default: singleton)
        provider:      Custom metadata provider (default: decorator markers)

    Returns:
        The cache, also stored on `app.state.document_cache`.
    """
    app_settings = app_settings or settings
    cache = DocumentModelCache(
        registry=FastAPIRouteRegistry(app),
        copyright=app_settings.document_copyright(),
        provider=provider,
        api_prefix=app_settings.api_prefix,
        example_path=app_settings.example_path,
        domain=app_settings.domain,
        group_suffix=app_settings.group_suffix,
    )
    app.state.document_cache = cache
    app.include_router(docs.create_router(app_settings.api_prefix, app_settings.example_path))
    return cache


def create_app(
    app_settings: Optional[Settings] = None,
    routers: Iterable[APIRouter] = (),
) -> FastAPI:
    """
    Create a standalone FastAPI app serving documentation for `routers`.

    Args:
        app_settings:  Settings override (tests pass their own)
        routers:       Extra routers to mount and document
    """
    app_settings = app_settings or settings
    app = FastAPI(
        title="apidoc",
        description="Browsable documentation of this server's JSON API.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    # Last added = first to execute
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    for router in routers:
        app.include_router(router)
    install_documentation(app, app_settings)

    return app


app = create_app()
