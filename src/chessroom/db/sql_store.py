"""Implementation of KeyValueStore using SQLAlchemy"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chessroom.core.exceptions import StoreError
from chessroom.db.schema import DBEntry

logger = logging.getLogger(__name__)


class SQLKeyValueStore:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get(self, key: str) -> Optional[str]:
        """Value stored under key, if record exists."""
        # Select the column (not the entity) so the value always comes from the database, never from the identity map.
        query = select(DBEntry.value).where(DBEntry.key == key)
        try:
            value = self.db.scalar(query)
            self.db.commit()
        except SQLAlchemyError as exc:
            self._rollback()
            raise StoreError(f"Failed reading {key!r}: {exc}") from exc
        return value

    def set(self, key: str, value: str) -> None:
        """Create or overwrite the value stored under key."""
        try:
            entry = self.db.get(DBEntry, key)
            if entry is None:
                self.db.add(DBEntry(key=key, value=value))
            else:
                entry.value = value
            self.db.commit()
        except SQLAlchemyError as exc:
            self._rollback()
            raise StoreError(f"Failed writing {key!r}: {exc}") from exc

    def _rollback(self) -> None:
        try:
            self.db.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed")
