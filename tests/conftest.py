"""
Pytest configuration for the Blog Query Challenges.

Provides fixtures for:
- A fresh in-memory SQLite engine per test (foreign keys enforced)
- A session bound to it
- The builder facade
- The canonical challenge fixture
"""

from __future__ import annotations

from typing import Generator

import pytest
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from src.factories import BlogFactory, reset_sequences
from src.infrastructure.db_factory import create_db_engine, init_schema, session_factory
from src.seeding import ChallengeFixture, seed_challenge_fixture

SQLITE_MEMORY_URL = "sqlite+pysqlite:///:memory:"
FACTORY_SEED = 42


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    """
    In-memory database with the blog schema.

    SQLite keeps one connection per thread for `:memory:`, so every session in
    the test sees the same database.
    """
    engine = create_db_engine(SQLITE_MEMORY_URL, echo=False)
    init_schema(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session(engine: Engine) -> Generator[Session, None, None]:
    session = session_factory(engine)()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def factory(session: Session) -> BlogFactory:
    """Builder facade with deterministic fake data and fresh sequences."""
    reset_sequences()
    return BlogFactory(session, seed=FACTORY_SEED)


@pytest.fixture()
def challenge_data(session: Session) -> ChallengeFixture:
    """
    Canonical fixture: John, Jane and Bob with five posts, five comments and
    tags Ruby, Rails, JavaScript, React and SQL.

    The identity map is cleared afterwards so solutions load from the database.
    """
    fixture = seed_challenge_fixture(session)
    session.commit()
    session.expunge_all()
    return fixture
