from __future__ import annotations

import logging
from collections.abc import Generator
from typing import Any

from fastapi import Request
from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from booktrack.core.settings import AppSettings
from booktrack.models import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine (and its connection pool) plus the session factory."""

    def __init__(self, url: str, *, echo: bool = False, **engine_kwargs: Any) -> None:
        self.url = url
        self.engine: Engine = create_engine(url, echo=echo, future=True, **engine_kwargs)
        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            autocommit=False,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "Database":
        if settings.is_sqlite:
            return cls(
                settings.database_url,
                echo=settings.database_echo,
                connect_args={"check_same_thread": False},
            )
        return cls(
            settings.database_url,
            echo=settings.database_echo,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            pool_pre_ping=True,
        )

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        logger.info("Closing database pool for %s", make_url(self.url).render_as_string(hide_password=True))
        self.engine.dispose()


def get_session(request: Request) -> Generator[Session, None, None]:
    """Yield a database session for request-scoped operations."""
    database: Database = request.app.state.database
    session: Session = database.session()
    try:
        yield session
    finally:
        session.close()
