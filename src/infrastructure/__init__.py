"""
Infrastructure package for the Blog Query Challenges.

Centralizes database connectivity concerns (engine cache, sessions, schema
creation). Keep this layer focused on I/O and resource management, decoupled
from challenge/metrics logic.
"""

from src.infrastructure.db_factory import (
    EngineManager,
    build_database_url,
    check_connection,
    create_db_engine,
    get_engine,
    init_schema,
    session_scope,
)

__all__ = [
    "EngineManager",
    "build_database_url",
    "check_connection",
    "create_db_engine",
    "get_engine",
    "init_schema",
    "session_scope",
]
