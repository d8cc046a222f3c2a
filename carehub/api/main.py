"""
carehub/api/main.py — FastAPI application entry point.

Configures logging and middleware, registers error handlers, mounts all
routers and the attachment directory.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from carehub.api.deps import limiter
from carehub.api.errors import register_exception_handlers
from carehub.api.routers import (
    auth,
    complaints,
    dashboard,
    entry_exit,
    facilities,
    medical,
    medicine,
    notifications,
    scheduling,
    users,
)
from carehub.config import get_settings
from carehub.storage.uploads import PUBLIC_PREFIX

logger = structlog.get_logger()
settings = get_settings()

API_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: runs at startup and shutdown."""
    logger.info("event", message="Starting CareHub API", env=settings.environment)
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)
    yield
    logger.info("event", message="Shutting down API")


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    app = FastAPI(
        title="CareHub Facility & Complaint API",
        description=(
            "Complaint ticketing for residential and medical facilities, with "
            "medicine inventory, entry/exit logs and basic medical records."
        ),
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # ── Middleware ────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # ── Routers ───────────────────────────────────────────────────────────────
    API_PREFIX = "/api"
    app.include_router(auth.router,          prefix=f"{API_PREFIX}/auth",          tags=["Authentication"])
    app.include_router(users.router,         prefix=f"{API_PREFIX}/users",         tags=["Users"])
    app.include_router(facilities.router,    prefix=f"{API_PREFIX}/facilities",    tags=["Facilities"])
    app.include_router(complaints.router,    prefix=f"{API_PREFIX}/complaints",    tags=["Complaints"])
    app.include_router(notifications.router, prefix=f"{API_PREFIX}/notifications", tags=["Notifications"])
    app.include_router(dashboard.router,     prefix=f"{API_PREFIX}/dashboard",     tags=["Dashboard"])
    app.include_router(medicine.router,      prefix=f"{API_PREFIX}/medicine",      tags=["Medicine"])
    app.include_router(entry_exit.router,    prefix=f"{API_PREFIX}/entry-exit",    tags=["Entry/Exit"])
    app.include_router(medical.router,       prefix=f"{API_PREFIX}/medical",       tags=["Medical"])
    app.include_router(scheduling.router,    prefix=f"{API_PREFIX}/scheduling",    tags=["Scheduling"])

    app.mount(
        PUBLIC_PREFIX,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    # ── Health Check ──────────────────────────────────────────────────────────
    @app.get("/health", tags=["System"])
    async def health_check() -> dict:
        return {"status": "healthy", "version": API_VERSION, "environment": settings.environment}

    return app


app = create_app()
