"""
Session mode strategies.

The Coordinator runs one Move Intent flow for every mode. What differs per mode is:
who may move (permission_check) and what happens once a local move went through (on_move_applied).

* LocalBotMode: the human plays white against a scripted opponent that answers after a short delay.
* SharedMode: two clients share one Session Record in a store and reconcile with it on a fixed interval.
"""

import logging
from typing import TYPE_CHECKING, Optional, Protocol

from chessroom.core.config import SETTINGS
from chessroom.core.shared_types import (
    FIRST_PLAYER_COLOR,
    Difficulty,
    SessionMode,
    SessionPhase,
)
from chessroom.rules.selector import MoveSelector
from chessroom.services.arbiter import TurnContext, is_permitted
from chessroom.services.scheduler import Scheduler, TimerHandle
from chessroom.services.synchronizer import SessionSynchronizer

if TYPE_CHECKING:
    from chessroom.services.coordinator import GameSessionCoordinator

logger = logging.getLogger(__name__)

WAITING_LABEL = "Waiting..."
OPPONENT_LABEL = "Opponent"


class SessionStrategy(Protocol):
    mode: SessionMode

    def start(self, session: "GameSessionCoordinator") -> SessionPhase:
        """Assign the local identity, load the initial position and acquire timers. Returns the first phase."""
        ...

    def permission_check(self, session: "GameSessionCoordinator") -> bool: ...

    def on_move_applied(self, session: "GameSessionCoordinator") -> None: ...

    def opponent_label(self, session: "GameSessionCoordinator") -> str: ...

    @property
    def opponent_thinking(self) -> bool: ...

    def stop(self) -> None:
        """Release every timer. Must be safe to call more than once."""
        ...


class LocalBotMode:
    """Human (always white) against the Move Selector."""

    mode = SessionMode.LOCAL
    human_color = FIRST_PLAYER_COLOR

    def __init__(
        self,
        selector: MoveSelector,
        scheduler: Scheduler,
        difficulty: Difficulty = Difficulty.EASY,
        delay: float = SETTINGS.bot_delay_s,
    ) -> None:
        self.selector = selector
        self.scheduler = scheduler
        self.difficulty = difficulty
        self.delay = delay
        self._reply: Optional[TimerHandle] = None

    @property
    def reply_pending(self) -> bool:
        return self._reply is not None

    @property
    def opponent_thinking(self) -> bool:
        return self.reply_pending

    def start(self, session: "GameSessionCoordinator") -> SessionPhase:
        session.identity.assign(self.human_color)
        session.identity.remote_display_name = f"Bot ({self.difficulty})"
        return SessionPhase.READY

    def permission_check(self, session: "GameSessionCoordinator") -> bool:
        context = TurnContext(
            mode=self.mode,
            side_to_move=session.position.side_to_move,
            assigned_color=session.identity.assigned_color,
            concluded=session.position.is_terminal,
            reply_pending=self.reply_pending,
        )
        return is_permitted(context)

    def on_move_applied(self, session: "GameSessionCoordinator") -> None:
        """Schedule the scripted reply if it is now the bot's turn."""
        if session.position.is_terminal or self.reply_pending:
            return
        if session.position.side_to_move == self.human_color:
            return
        self._reply = self.scheduler.call_later(
            self.delay, lambda: self._play_reply(session)
        )

    def opponent_label(self, session: "GameSessionCoordinator") -> str:
        return session.identity.remote_display_name or OPPONENT_LABEL

    def stop(self) -> None:
        if self._reply is not None:
            self._reply.cancel()
            self._reply = None

    def _play_reply(self, session: "GameSessionCoordinator") -> None:
        self._reply = None
        # Should not happen on a single timeline, but never ask the selector to move in a finished game.
        if session.position.is_terminal:
            logger.warning("Scripted reply skipped: game already concluded")
            return
        if session.position.side_to_move == self.human_color:
            logger.warning("Scripted reply skipped: it is the human's turn")
            return
        move = self.selector.select_move(session.position.encoded, self.difficulty)
        session.apply_scripted_move(move)


class SharedMode:
    """Two clients, one Session Record. Reconciliation is a poll every `interval` seconds."""

    mode = SessionMode.SHARED

    def __init__(
        self,
        synchronizer: SessionSynchronizer,
        scheduler: Scheduler,
        session_id: str,
        interval: float = SETTINGS.poll_interval_s,
    ) -> None:
        self.synchronizer = synchronizer
        self.scheduler = scheduler
        self.session_id = session_id
        self.interval = interval
        self.opponent_joined = False
        self._poll: Optional[TimerHandle] = None

    @property
    def opponent_thinking(self) -> bool:
        return False

    @property
    def polling(self) -> bool:
        return self._poll is not None

    def start(self, session: "GameSessionCoordinator") -> SessionPhase:
        """
        Join or create the session, then acquire the poll timer.

        NOTE the timer is acquired last, so a failed join (e.g. SessionFullError) leaves nothing running.
        """
        result = self.synchronizer.join_or_create(
            self.session_id, session.identity.local_display_name
        )
        session.identity.assign(result.assigned_color)
        session.identity.remote_display_name = result.opponent_name
        # A joiner inherits the game in progress instead of restarting it.
        session.position.replace(result.encoded_position)
        self.opponent_joined = result.opponent_name is not None

        self._poll = self.scheduler.call_every(
            self.interval, lambda: self.reconcile(session)
        )
        if self.opponent_joined:
            return SessionPhase.READY
        return SessionPhase.WAITING_FOR_OPPONENT

    def permission_check(self, session: "GameSessionCoordinator") -> bool:
        context = TurnContext(
            mode=self.mode,
            side_to_move=session.position.side_to_move,
            assigned_color=session.identity.assigned_color,
            concluded=session.position.is_terminal,
            opponent_joined=self.opponent_joined,
        )
        return is_permitted(context)

    def on_move_applied(self, session: "GameSessionCoordinator") -> None:
        """Push immediately, best effort. A lost push is corrected by a later poll."""
        self.synchronizer.push(
            self.session_id,
            session.position.encoded,
            session.position.side_to_move,
        )

    def opponent_label(self, session: "GameSessionCoordinator") -> str:
        if not self.opponent_joined:
            return WAITING_LABEL
        return session.identity.remote_display_name or OPPONENT_LABEL

    def reconcile(self, session: "GameSessionCoordinator") -> None:
        """One poll cycle: detect the second player joining, and converge to the stored position."""
        record = self.synchronizer.poll(self.session_id)
        if record is None:
            return

        changed = False
        if not self.opponent_joined and record.has_second_player:
            self.opponent_joined = True
            session.identity.remote_display_name = record.second_player_name
            session.mark_ready()
            logger.info(
                "%r joined session %s", record.second_player_name, self.session_id
            )
            changed = True

        # Our own push comes back as an identical position: nothing to do.
        if not session.position.matches(record.encoded_position):
            changed = session.reconcile_position(record.encoded_position) or changed

        if changed:
            session.refresh()

    def stop(self) -> None:
        if self._poll is not None:
            self._poll.cancel()
            self._poll = None
