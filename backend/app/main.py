"""
Natours Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) assembles middleware, the token service, the central
       error handler and the routers from one immutable Settings object.
Who:   uvicorn (`uvicorn app.main:app`) and the test-suite, which builds apps
       with its own Settings.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                     FastAPI App                      │
    │                                                      │
    │  Middleware Chain:                                   │
    │  ┌────────┐ ┌──────────────────┐ ┌──────┐ ┌──────┐   │
    │  │ Req ID │→│ Logging (dev)    │→│ GZip │→│ CORS │   │
    │  └────────┘ └──────────────────┘ └──────┘ └──────┘   │
    │                                                      │
    │  Routes:                                             │
    │  /api/v1/users  /api/v1/tours  /api/v1/reviews       │
    │  /api/v1/tours/{tourId}/reviews  /health  catch-all  │
    │                                                      │
    │  Exception Handlers (app/error_handlers.py):         │
    │  AppError · RequestValidationError · HTTPException   │
    └──────────────────────────────────────────────────────┘

Lifecycle:
    Startup:   configure logging, validate configuration, optionally create tables
    Shutdown:  dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from app import __version__
from app.config import Settings, settings as default_settings
from app.database import create_tables, dispose_engine
from app.error_handlers import register_exception_handlers
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware
from app.routes import fallback, health, reviews, tours, users
from app.services.token_service import TokenService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure the root logger once for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are noisy at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup fails fast on an unusable configuration (no JWT secret, or the
    development secret in production): nothing could be signed anyway.
    """
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("Natours API %s starting (%s)", __version__, config.environment)

    try:
        config.validate_required_for_production()
    except ValueError as e:
        logger.critical("Configuration error: %s", e)
        raise

    if config.auto_create_tables:
        await create_tables()
        logger.info("Database tables created (AUTO_CREATE_TABLES)")

    logger.info("Server ready at http://%s:%d", config.host, config.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Natours API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build a fully configured application.

    Args:
        settings: Immutable configuration. Defaults to the process-wide
                  Settings loaded from the environment.
    """
    config = settings or default_settings

    app = FastAPI(
        title="Natours API",
        description="Tour-booking REST API: tours, users and reviews.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.token_service = TokenService.from_settings(config)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS → route
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)

    if config.is_development:
        app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app, config)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(users.router)
    app.include_router(tours.router)
    app.include_router(reviews.tour_reviews)
    app.include_router(reviews.router)
    app.include_router(health.router)
    # Must stay last: it matches every path
    app.include_router(fallback.router)

    return app


# uvicorn expects `app.main:app` to be importable
app = create_app()
