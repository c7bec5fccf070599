"""
The GameSessionCoordinator is the entrypoint for the Board View.

It is the single per-client orchestrator of one game session:
input intents come in, the Turn Arbiter (via the mode strategy) decides if they may be acted upon,
the engine applies the move, and the mode strategy takes it from there (scripted reply or push to the store).
Every state change ends with a fresh render directive sent to the Board View.
"""

import logging
from types import TracebackType
from typing import Optional, Self

from chessroom.core.config import SETTINGS, Settings
from chessroom.core.exceptions import (
    ContractViolationError,
    GameError,
    IllegalMoveError,
    InvalidPositionError,
    InvalidRequestError,
)
from chessroom.core.models import MoveIntent, ParticipantIdentity, RenderDirective
from chessroom.core.shared_types import Color, Difficulty, SessionMode, SessionPhase
from chessroom.rules.engine import PROMOTION_PIECE, MoveLegalityEngine, build_uci
from chessroom.rules.position import PositionState
from chessroom.rules.selector import DifficultySelector, MoveSelector
from chessroom.services.modes import LocalBotMode, SessionStrategy, SharedMode
from chessroom.services.scheduler import Scheduler
from chessroom.services.synchronizer import SessionSynchronizer
from chessroom.view.board_view import BoardView

logger = logging.getLogger(__name__)


class GameSessionCoordinator:
    """Owns Position State, Move Intent and Participant Identity of one client."""

    def __init__(
        self,
        engine: MoveLegalityEngine,
        scheduler: Scheduler,
        view: Optional[BoardView] = None,
        selector: Optional[MoveSelector] = None,
        synchronizer: Optional[SessionSynchronizer] = None,
        settings: Settings = SETTINGS,
    ) -> None:
        self.engine = engine
        self.scheduler = scheduler
        self.view = view
        self.selector = selector or DifficultySelector(engine)
        self.synchronizer = synchronizer
        self.settings = settings

        self.position = PositionState(engine)
        self.identity = ParticipantIdentity()
        self.intent = MoveIntent()
        self.session_id: Optional[str] = None
        self.strategy: Optional[SessionStrategy] = None
        self._phase = SessionPhase.UNINITIALIZED

    # -- Scoped session: timers are released on every exit path --
    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.end_session()

    # -- Properties --
    @property
    def mode(self) -> Optional[SessionMode]:
        return self.strategy.mode if self.strategy else None

    @property
    def phase(self) -> SessionPhase:
        if self._phase != SessionPhase.UNINITIALIZED and self.position.is_terminal:
            return SessionPhase.CONCLUDED
        return self._phase

    # -- Operations used by the Board View / CLI --
    def start_session(
        self,
        mode: SessionMode | str,
        session_id: Optional[str] = None,
        local_display_name: str = "",
        difficulty: Optional[Difficulty | str] = None,
    ) -> None:
        """
        Start a (new) session.
        ----

        * local: fresh start position, human plays white against the scripted opponent.
        * shared: join or create the record for 'session_id' and start the reconciliation poll.

        An already running session is ended first. SessionFullError (and other GameErrors) propagate to the caller.
        """
        session_mode = self._parse_mode(mode)
        strategy = self._build_strategy(session_mode, session_id, difficulty)
        self.end_session()

        self.position = PositionState(self.engine)
        self.identity = ParticipantIdentity(local_display_name=local_display_name)
        self.intent.clear()
        self.session_id = session_id if session_mode == SessionMode.SHARED else None

        try:
            self._phase = strategy.start(self)
        except GameError:
            strategy.stop()
            self.session_id = None
            self._phase = SessionPhase.UNINITIALIZED
            raise

        self.strategy = strategy
        logger.info(
            "Started %s session %s as %s (%s)",
            session_mode,
            self.session_id or "-",
            self.identity.assigned_color,
            self.phase,
        )
        self.refresh()

    def end_session(self) -> None:
        """Tear the session down: cancel the poll and any pending scripted reply."""
        if self.strategy is None:
            return
        self.strategy.stop()
        self.strategy = None
        self.intent.clear()
        self._phase = SessionPhase.UNINITIALIZED
        logger.info("Ended session %s", self.session_id or "-")

    def is_local_user_permitted_to_move(self) -> bool:
        if self.strategy is None:
            return False
        return self.strategy.permission_check(self)

    def handle_square_intent(self, square: str) -> None:
        """
        Two-phase select / target interaction.
        ----

        1. Not permitted? --> ignore the input.
        2. Nothing selected, or the square is not one of the highlighted targets? --> (re)select it.
           Squares without legal moves clear the selection.
        3. Square is a highlighted target? --> play the move (promoting to a queen).
           If the engine rejects it after all, fall back to (2).
        """
        if not self.is_local_user_permitted_to_move():
            logger.debug("Ignoring square intent on %s: not permitted", square)
            return

        square = square.lower()
        move = self.intent.move_to(square) if self.intent.is_active else None
        if move is None:
            self._select(square)
            self.refresh()
            return

        try:
            self._apply_local_move(move)
        except IllegalMoveError:
            logger.debug("Engine rejected candidate %s, reselecting %s", move, square)
            self._select(square)
            self.refresh()

    def handle_direct_move(self, origin: str, target: Optional[str]) -> bool:
        """
        Drag-and-drop path: one attempt, no pivoting. Returns True if the move was played.

        A rejected attempt still ends any pending selection.
        """
        if target is None or not self.is_local_user_permitted_to_move():
            return False

        move = self._resolve_move(origin.lower(), target.lower())
        try:
            self._apply_local_move(move)
        except IllegalMoveError:
            logger.debug("Rejected direct move %s", move)
            self.intent.clear()
            self.refresh()
            return False
        return True

    # -- Called by the mode strategies --
    def apply_scripted_move(self, move: str) -> None:
        """Apply the scripted opponent's move. The selector is trusted to return a legal move."""
        try:
            self.position.apply(move)
        except IllegalMoveError as exc:
            raise ContractViolationError(
                f"Move selector returned an illegal move: {move}"
            ) from exc
        self.intent.clear()
        self._log_if_concluded()
        self.refresh()

    def reconcile_position(self, encoded_position: str) -> bool:
        """
        Replace the local position wholesale with the one in the shared record.

        The remote move was validated by the remote Coordinator, so the engine's apply path is bypassed.
        An uninterpretable position is skipped for this cycle.
        """
        try:
            changed = self.position.replace(encoded_position)
        except InvalidPositionError as exc:
            logger.warning("Reconciliation skipped: %s", exc)
            return False
        if changed:
            logger.info("Reconciled session %s to %s", self.session_id, encoded_position)
            self.intent.clear()
            self._log_if_concluded()
        return changed

    def mark_ready(self) -> None:
        if self._phase == SessionPhase.WAITING_FOR_OPPONENT:
            self._phase = SessionPhase.READY

    # -- Rendering --
    def render_directive(self) -> RenderDirective:
        side_to_move = self.position.side_to_move
        assigned = self.identity.assigned_color
        highlighted = set(self.intent.candidate_targets)
        if self.intent.origin is not None:
            highlighted.add(self.intent.origin)

        return RenderDirective(
            position=self.position.encoded,
            highlighted_squares=frozenset(highlighted),
            interaction_enabled=self.is_local_user_permitted_to_move(),
            board_orientation=assigned or Color.WHITE,
            side_to_move=side_to_move,
            phase=self.phase,
            local_name=self.identity.shown_name,
            opponent_name=(
                self.strategy.opponent_label(self) if self.strategy else ""
            ),
            is_my_turn=assigned is not None and assigned == side_to_move,
            opponent_thinking=(
                self.strategy.opponent_thinking if self.strategy else False
            ),
            session_id=self.session_id,
            selected_square=self.intent.origin,
            capture_squares=frozenset(self.intent.captures),
            result=self.position.result,
        )

    def refresh(self) -> None:
        if self.view is not None:
            self.view.render(self.render_directive())

    # -- Internal helpers --
    def _parse_mode(self, mode: SessionMode | str) -> SessionMode:
        try:
            return SessionMode(mode)
        except ValueError as exc:
            raise InvalidRequestError(
                f"Unknown session mode {mode!r}. Pick one from {', '.join(SessionMode)}."
            ) from exc

    def _build_strategy(
        self,
        mode: SessionMode,
        session_id: Optional[str],
        difficulty: Optional[Difficulty | str],
    ) -> SessionStrategy:
        if mode == SessionMode.LOCAL:
            try:
                level = Difficulty(difficulty or Difficulty.EASY)
            except ValueError as exc:
                raise InvalidRequestError(
                    f"Unknown difficulty {difficulty!r}. Pick one from {', '.join(Difficulty)}."
                ) from exc
            return LocalBotMode(
                self.selector, self.scheduler, level, delay=self.settings.bot_delay_s
            )

        if not session_id:
            raise InvalidRequestError("A shared session needs a session identifier.")
        if self.synchronizer is None:
            raise InvalidRequestError("A shared session needs a session synchronizer.")
        return SharedMode(
            self.synchronizer,
            self.scheduler,
            session_id,
            interval=self.settings.poll_interval_s,
        )

    def _candidates(self, origin: str) -> tuple[dict[str, str], set[str]]:
        """Legal targets from 'origin' (target square -> move), and which of them are captures."""
        candidates: dict[str, str] = {}
        captures: set[str] = set()
        for move in self.position.legal_moves_from(origin):
            target, promotion = move[2:4], move[4:]
            # A promotion shows up once per piece type, only the queen is offered.
            if promotion and promotion != PROMOTION_PIECE:
                continue
            candidates[target] = move
            if self.position.is_capture(move):
                captures.add(target)
        return candidates, captures

    def _select(self, square: str) -> None:
        candidates, captures = self._candidates(square)
        if not candidates:
            self.intent.clear()
            return
        self.intent.arm(square, candidates, captures)

    def _resolve_move(self, origin: str, target: str) -> str:
        candidates, _ = self._candidates(origin)
        return candidates.get(target, build_uci(origin, target))

    def _apply_local_move(self, move: str) -> None:
        # Raises IllegalMoveError before anything changes
        self.position.apply(move)
        self.intent.clear()
        self._log_if_concluded()
        if self.strategy is not None:
            self.strategy.on_move_applied(self)
        self.refresh()

    def _log_if_concluded(self) -> None:
        if self.position.is_terminal:
            logger.info("Game concluded: %s", self.position.result)
