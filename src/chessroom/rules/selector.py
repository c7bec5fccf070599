"""
Move Selector: picks the scripted opponent's move.

- easy: a uniformly random legal move.
- medium: the first capturing move, or the first legal move when nothing can be captured.
- hard: currently plays like easy. The tier is kept as its own label so a stronger selector can be slotted in.
"""

import logging
import random
from typing import Optional, Protocol

from chessroom.core.exceptions import ContractViolationError
from chessroom.core.shared_types import Difficulty
from chessroom.rules.engine import MoveLegalityEngine

logger = logging.getLogger(__name__)


class MoveSelector(Protocol):
    def select_move(self, position: str, difficulty: Difficulty) -> str:
        """Return one legal move for the side to move. Must not be called on a terminal position."""
        ...


class DifficultySelector:
    """MoveSelector with one strategy per difficulty level."""

    def __init__(
        self, engine: MoveLegalityEngine, rng: Optional[random.Random] = None
    ) -> None:
        self.engine = engine
        self.rng = rng or random.Random()

    def select_move(self, position: str, difficulty: Difficulty) -> str:
        if self.engine.is_terminal(position):
            raise ContractViolationError(
                f"Cannot select a move in a finished game: {position!r}"
            )
        moves = self.engine.legal_moves(position)

        if difficulty == Difficulty.MEDIUM:
            move = self._first_capture(position, moves)
        else:
            move = self.rng.choice(moves)

        logger.debug("Selected %s (%s) in %s", move, difficulty, position)
        return move

    def _first_capture(self, position: str, moves: list[str]) -> str:
        return next(
            (move for move in moves if self.engine.is_capture(position, move)),
            moves[0],
        )
