"""
Database engine, session factory, and metadata shared across the application.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Generator, Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from inkmatch.core.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for all inkmatch models."""


def _sqlite_least(*values: Any) -> Any:
    present = [v for v in values if v is not None]
    return min(present) if present else None


def _null_safe(fn: Callable[[float], float]) -> Callable[[Optional[float]], Optional[float]]:
    def wrapper(value: Optional[float]) -> Optional[float]:
        return None if value is None else fn(value)

    return wrapper


def register_sqlite_functions(engine: Engine) -> None:
    """
    Register the math functions the haversine expression needs on SQLite.

    PostgreSQL ships sin/cos/asin/sqrt/least natively; SQLite builds frequently
    lack them, so they are installed per DBAPI connection.
    """

    @event.listens_for(engine, "connect")
    def _install_math(dbapi_connection: Any, _connection_record: Any) -> None:
        dbapi_connection.create_function("sin", 1, _null_safe(math.sin), deterministic=True)
        dbapi_connection.create_function("cos", 1, _null_safe(math.cos), deterministic=True)
        dbapi_connection.create_function("asin", 1, _null_safe(math.asin), deterministic=True)
        dbapi_connection.create_function("sqrt", 1, _null_safe(math.sqrt), deterministic=True)
        dbapi_connection.create_function("least", -1, _sqlite_least, deterministic=True)


def build_engine(url: str, *, echo: bool = False) -> Engine:
    """Create an engine for the profile store, wiring dialect-specific helpers."""
    if url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
        register_sqlite_functions(engine)
        return engine

    return create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=300,
        pool_size=5,
        max_overflow=5,
        pool_timeout=5,
    )


engine = build_engine(settings.database_url, echo=settings.database_echo)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding a request-scoped session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create all tables (local development and tests)."""
    # Import models so they register with the metadata.
    from inkmatch import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database schema ensured")


__all__ = ["Base", "SessionLocal", "build_engine", "engine", "get_db", "init_db"]
