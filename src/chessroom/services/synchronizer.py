"""
Orchestration of communication between the local Coordinator and the shared store.

This is the only place that touches shared mutable state. Writes are plain overwrites (last writer wins):
if both participants push before either one polls, one of the pushes is silently lost.
The losing side picks up the winning position on its next poll.
"""

import logging
from typing import Optional

from chessroom.core.config import SETTINGS
from chessroom.core.exceptions import InvalidPositionError, SessionFullError, StoreError
from chessroom.core.models import JoinResult
from chessroom.core.records import SessionRecord
from chessroom.core.shared_types import FIRST_PLAYER_COLOR, SECOND_PLAYER_COLOR, Color
from chessroom.db.store import KeyValueStore
from chessroom.rules.engine import MoveLegalityEngine

logger = logging.getLogger(__name__)


class SessionSynchronizer:
    """Reads / writes Session Records for shared sessions."""

    def __init__(
        self,
        store: KeyValueStore,
        engine: MoveLegalityEngine,
        key_prefix: str = SETTINGS.key_prefix,
    ) -> None:
        self.store = store
        self.engine = engine
        self.key_prefix = key_prefix

    # -- Session lifecycle --
    def join_or_create(self, session_id: str, local_display_name: str) -> JoinResult:
        """
        Open a session identifier.
        ----

        1. No record yet? --> create it, caller gets the first seat and a fresh position.
        2. Second seat free? --> take it, caller inherits the position stored in the record.
           A stored position the engine cannot interpret raises InvalidPositionError and the seat stays free.
        3. Both seats taken? --> SessionFullError, the record is left untouched.

        NOTE store failures propagate here: unlike push/poll there is no next cycle to retry a join.
        """
        record = self._fetch_record(session_id)

        if record is None:
            new_record = SessionRecord(
                encoded_position=self.engine.start_position(),
                first_player_name=local_display_name,
                second_player_name=None,
                side_to_move=FIRST_PLAYER_COLOR,
            )
            self._store_record(session_id, new_record)
            logger.info("Created session %s for %r", session_id, local_display_name)
            return JoinResult(
                assigned_color=FIRST_PLAYER_COLOR,
                encoded_position=new_record.encoded_position,
                opponent_name=None,
            )

        if record.has_second_player:
            logger.info("Session %s is full, %r cannot join", session_id, local_display_name)
            raise SessionFullError(f"Session {session_id} already has two players.")

        try:
            self.engine.validate(record.encoded_position)
        except InvalidPositionError:
            logger.warning(
                "Session %s holds an unusable position, %r not seated",
                session_id,
                local_display_name,
            )
            raise

        joined = record.model_copy(update={"second_player_name": local_display_name})
        self._store_record(session_id, joined)
        logger.info("%r joined session %s", local_display_name, session_id)
        return JoinResult(
            assigned_color=SECOND_PLAYER_COLOR,
            encoded_position=joined.encoded_position,
            opponent_name=joined.first_player_name,
        )

    def push(self, session_id: str, encoded_position: str, side_to_move: Color) -> bool:
        """
        Overwrite the record's position (best effort).

        Returns False when the write did not happen. Nothing is retried: the next poll corrects local state.
        """
        try:
            record = self._fetch_record(session_id)
            if record is None:
                logger.warning("Cannot push to session %s: no record found", session_id)
                return False
            updated = record.model_copy(
                update={
                    "encoded_position": encoded_position,
                    "side_to_move": side_to_move,
                }
            )
            self._store_record(session_id, updated)
        except StoreError as exc:
            logger.warning("Push to session %s skipped: %s", session_id, exc)
            return False
        logger.debug("Pushed %s to session %s", encoded_position, session_id)
        return True

    def poll(self, session_id: str) -> Optional[SessionRecord]:
        """
        Retrieve the current record.
        ----
        Used in the reconciliation loop. A failed read returns None, so the cycle is skipped.
        """
        try:
            return self._fetch_record(session_id)
        except StoreError as exc:
            logger.warning("Poll of session %s skipped: %s", session_id, exc)
            return None

    # -- Internal helpers --
    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"

    def _fetch_record(self, session_id: str) -> Optional[SessionRecord]:
        raw = self.store.get(self._key(session_id))
        if raw is None:
            return None
        return SessionRecord.from_store(raw)

    def _store_record(self, session_id: str, record: SessionRecord) -> None:
        self.store.set(self._key(session_id), record.to_store())
