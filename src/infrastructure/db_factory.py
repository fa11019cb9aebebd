"""
Database engine and session factory for the Blog Query Challenges.

Provides centralized management of SQLAlchemy engines (cached per URL) with
proper lifecycle management. The EngineManager singleton disposes every engine
on application exit.

Postgres is reached through the psycopg (v3) driver; SQLite URLs are accepted
for local runs and tests, with foreign-key enforcement and savepoints switched on.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

import atexit
import threading
from contextlib import contextmanager
from typing import Dict, Generator, Optional

from sqlalchemy import Engine, create_engine, event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.orm import Session, sessionmaker
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.config import get_settings
from src.domain.models import Base
from src.utils.logging import get_logger

log = get_logger(__name__)


def build_database_url(override: Optional[str] = None) -> str:
    """Resolve the database URL: explicit override first, then settings."""
    if override:
        return override
    return get_settings().database_url


def _configure_sqlite(engine: Engine) -> None:
    """
    Enforce foreign keys and hand transaction control from pysqlite to SQLAlchemy
    so SAVEPOINTs nest inside a real BEGIN.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:  # noqa: ARG001
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:
        conn.exec_driver_sql("BEGIN")


def create_db_engine(url: Optional[str] = None, echo: Optional[bool] = None) -> Engine:
    """
    Build a new (uncached) engine for the given URL.

    Parameters
    ----------
    url : str | None
        SQLAlchemy URL. Defaults to the configured database URL.
    echo : bool | None
        Log emitted SQL. Defaults to the SQL_ECHO setting.
    """
    resolved = build_database_url(url)
    settings = get_settings()
    engine = create_engine(
        resolved,
        echo=settings.sql_echo if echo is None else echo,
        future=True,
    )
    if make_url(resolved).get_backend_name() == "sqlite":
        _configure_sqlite(engine)
    return engine


class EngineManager:
    """
    Thread-safe singleton caching one engine per database URL.

    Handles lifecycle management with automatic cleanup via atexit hook.
    """

    _instance: Optional["EngineManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "EngineManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._engines: Dict[str, Engine] = {}
                # Register cleanup on exit
                atexit.register(cls._instance.dispose_all)
            return cls._instance

    def get_engine(self, url: Optional[str] = None) -> Engine:
        """
        Get or create the engine for `url` (defaults to the configured URL).
        """
        resolved = build_database_url(url)
        with self._lock:
            engine = self._engines.get(resolved)
            if engine is None:
                engine = create_db_engine(resolved)
                self._engines[resolved] = engine
                log.debug(
                    "Engine created",
                    extra={"backend": make_url(resolved).get_backend_name()},
                )
            return engine

    def dispose_all(self) -> None:
        """
        Dispose every cached engine and release pooled connections.

        This is called automatically on exit via atexit hook.
        """
        with self._lock:
            for engine in self._engines.values():
                engine.dispose()
            self._engines.clear()


def get_engine(url: Optional[str] = None) -> Engine:
    """Cached engine for `url` via EngineManager."""
    return EngineManager().get_engine(url)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((OperationalError, InterfaceError)),
    reraise=True,
)
def check_connection(engine: Engine) -> None:
    """
    Open a connection and run `SELECT 1`, retrying transient failures.

    Retries up to 3 times with exponential backoff.

    Raises
    ------
    sqlalchemy.exc.OperationalError
        If the database is still unreachable after all attempts.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def init_schema(engine: Engine, drop_first: bool = False) -> None:
    """Create all tables (optionally dropping them first)."""
    if drop_first:
        Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
    log.info("Schema ready", extra={"tables": sorted(Base.metadata.tables)})


def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(engine: Optional[Engine] = None) -> Generator[Session, None, None]:
    """
    Transactional scope: commit on success, roll back on error.

    Example
    -------
        with session_scope() as session:
            session.scalars(select(User)).all()
    """
    factory = session_factory(engine or get_engine())
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = [
    "EngineManager",
    "build_database_url",
    "create_db_engine",
    "get_engine",
    "check_connection",
    "init_schema",
    "session_factory",
    "session_scope",
]
