from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from booktrack.core.errors import register_exception_handlers
from booktrack.core.logging import configure_logging
from booktrack.core.settings import AppSettings, get_settings
from booktrack.db.session import Database
from booktrack.routers.auth import router as auth_router
from booktrack.routers.books import router as books_router

logger = logging.getLogger(__name__)


def create_app(settings: Optional[AppSettings] = None, database: Optional[Database] = None) -> FastAPI:
    """Build the API. A ``database`` passed in is used as-is and left open at shutdown."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = database is None
        db = Database.from_settings(settings) if owned else database
        app.state.database = db
        if settings.database_create_tables:
            db.create_all()
        logger.info("%s started", settings.app_name)
        try:
            yield
        finally:
            if owned:
                db.dispose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    if database is not None:
        app.state.database = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info("%s %s -> %s (%.1f ms)", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    register_exception_handlers(app)

    @app.get("/health")
    def health():
        return {
            "success": True,
            "message": "BookTrack API is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    app.include_router(auth_router, prefix=settings.api_prefix)
    app.include_router(books_router, prefix=settings.api_prefix)
    return app


app = create_app()
