"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Iterator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from chessroom.core.config import Settings
from chessroom.db.schema import Base
from chessroom.rules.engine import ChessEngine
from chessroom.services.synchronizer import SessionSynchronizer
from doubles import FlakyStore, ManualScheduler, RecordingView

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)

# Same timer lengths as the defaults, independent of the environment the tests run in
TEST_SETTINGS = Settings(bot_delay_s=0.5, poll_interval_s=1.0, key_prefix="room:")


@pytest.fixture
def db_session_store() -> Iterator[Session]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of the store independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        Base.metadata.drop_all(bind=engine)
        db.close()


@pytest.fixture
def db_session_shared() -> Iterator[Session]:
    """A second connection to the same engine / database tables. Mocks two clients sharing one store."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def settings() -> Settings:
    return TEST_SETTINGS


@pytest.fixture
def chess_engine() -> ChessEngine:
    return ChessEngine()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def view() -> RecordingView:
    return RecordingView()


@pytest.fixture
def store() -> Iterator[FlakyStore]:
    """Ensures to clear the store between tests"""
    shared_store = FlakyStore()
    try:
        yield shared_store
    finally:
        shared_store.clear()


@pytest.fixture
def synchronizer(store: FlakyStore, chess_engine: ChessEngine) -> SessionSynchronizer:
    return SessionSynchronizer(store, chess_engine, key_prefix="room:")
