"""Database configuration and session management."""

from __future__ import annotations

import logging
from typing import Iterator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sole_api.core.config import DatabaseSettings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""


def _is_in_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, db_settings: DatabaseSettings) -> None:
        url = db_settings.url
        engine_kwargs: dict = {"echo": db_settings.echo}

        if url.startswith("sqlite"):
            # Sync routes run in a threadpool, so connections cross threads
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if _is_in_memory_sqlite(url):
                engine_kwargs["poolclass"] = StaticPool
        else:
            engine_kwargs["pool_pre_ping"] = True

        self.engine: Engine = create_engine(url, **engine_kwargs)
        self.session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )

    def create_all(self) -> None:
        """Create all mapped tables that don't exist yet."""
        # Import models so they register on Base.metadata
        from sole_api.models import design, user  # noqa: F401

        Base.metadata.create_all(self.engine)
        logger.info("database.tables_ready")

    def dispose(self) -> None:
        self.engine.dispose()

    def session(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def check_connection(self) -> tuple[bool, str | None]:
        """Run ``SELECT 1`` and report (healthy, error message)."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True, None
        except SQLAlchemyError as exc:
            logger.error("database.check_failed", extra={"error_msg": str(exc)})
            return False, str(exc)


def get_db(request: Request) -> Iterator[Session]:
    """FastAPI dependency yielding a request-scoped session."""
    database: Database = request.app.state.database
    yield from database.session()
