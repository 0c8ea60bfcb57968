"""
Mushroom Hunter Backend — FastAPI Application Factory
=======================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn mushroom_hunter.main:app`) and the API tests.

Application Architecture:
    ┌─────────────────────────────────────────────────────────┐
    │                     FastAPI App                         │
    │                                                         │
    │  Middleware Chain:                                      │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌──────┐            │
    │  │ Req ID   │→│ Logging  │→│ GZip │→│ CORS │            │
    │  └──────────┘ └──────────┘ └──────┘ └──────┘            │
    │                                                         │
    │  Routes:                                                │
    │  /api/auth  /api/taxonomy/*  /api/species               │
    │  /api/findings  /health                                 │
    │                                                         │
    │  Exception Handlers:                                    │
    │  MushroomHunterError → its status_code                  │
    │  IntegrityError      → 409 duplicate / 400 foreign key  │
    │  Exception           → 500                              │
    └─────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → wait for the database
    Shutdown: dispose the engine
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from mushroom_hunter import __version__
from mushroom_hunter.config import settings
from mushroom_hunter.database import dispose_engine, wait_for_database
from mushroom_hunter.exceptions import AuthenticationError, MushroomHunterError
from mushroom_hunter.logging_config import setup_logging
from mushroom_hunter.middleware.logging import RequestLoggingMiddleware
from mushroom_hunter.middleware.request_id import RequestIDMiddleware, request_id_var
from mushroom_hunter.routes import auth, findings, health, species, taxonomy

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Mushroom Hunter backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    # Don't exit when the database is down: /health keeps reporting it
    try:
        await wait_for_database()
        logger.info("Database connection established")
    except Exception as e:
        logger.error("Database not reachable after retries: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Mushroom Hunter backend shutting down...")
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
    Map exceptions to the JSON error envelope
    `{error, message, details?, request_id}`.

    Internal details (SQL, stack traces) are logged server-side only.
    """

    @app.exception_handler(MushroomHunterError)
    async def handle_app_error(request: Request, exc: MushroomHunterError):
        rid = request_id_var.get("")
        status = exc.status_code

        if status >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
            return JSONResponse(
                status_code=status,
                content=error_body(exc.error_code, "An internal error occurred. Please try again later."),
            )

        if status == 400:
            logger.warning("[%s] Validation error: %s", rid, exc.message)

        headers = None
        if isinstance(exc, AuthenticationError):
            headers = {"WWW-Authenticate": "Bearer"}

        return JSONResponse(
            status_code=status,
            content=error_body(exc.error_code, exc.message, exc.context),
            headers=headers,
        )

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError):
        rid = request_id_var.get("")
        detail = str(exc.orig).lower()
        logger.warning("[%s] Integrity error: %s", rid, exc.orig)

        if "foreign key" in detail:
            return JSONResponse(
                status_code=400,
                content=error_body("invalid_reference", "Referenced record does not exist or is still in use"),
            )
        return JSONResponse(
            status_code=409,
            content=error_body("conflict", "Resource already exists"),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
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
        title="Mushroom Hunter API",
        description=(
            "Record mushroom findings on a map and explore the fungus taxonomy "
            "(division → class → order → family → genus → species)."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → GZip → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(auth.router)
    for router in taxonomy.routers:
        app.include_router(router)
    app.include_router(species.router)
    app.include_router(findings.router)

    return app


app = create_app()
