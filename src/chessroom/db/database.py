"""Generate database sessions"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import Engine, StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from chessroom.core.config import SETTINGS
from chessroom.db.schema import Base


def build_engine(url: str = SETTINGS.database_url, echo: bool = False) -> Engine:
    """SQLAlchemy engine for the store. In-memory SQLite gets a single shared connection."""
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo)
    if url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(url, echo=echo, connect_args={"check_same_thread": False})


def session_factory(engine: Engine) -> sessionmaker[Session]:
    # Ensure all tables are created
    Base.metadata.create_all(bind=engine)
    return sessionmaker(bind=engine, autoflush=False)


@contextmanager
def get_db(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Database session for one scope (e.g. one CLI run), closed on exit."""
    db = factory()
    try:
        yield db
    finally:
        db.close()
