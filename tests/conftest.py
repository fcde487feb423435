"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from issue_chess.core.config import Settings
from issue_chess.db.schema import Base
from issue_chess.rules.engine import ChessEngine

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of repositories independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session_other(db_session_repo: Session) -> Generator[Session, None, None]:
    """Second connection to the same test database: mocks another process writing concurrently."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def chess_engine() -> ChessEngine:
    return ChessEngine()


@pytest.fixture
def settings() -> Settings:
    """Explicit settings, independent of the environment the tests run in."""
    return Settings(
        database_url=DATABASE_URL,
        privileged_players=["admin"],
        recent_moves_limit=4,
        leaderboard_limit=20,
        frontier_workers=1,
    )
