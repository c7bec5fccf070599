"""Position State: the encoded position owned by one Coordinator, mutated only through the engine."""

from typing import Optional

from chessroom.core.shared_types import Color
from chessroom.rules.engine import MoveLegalityEngine


class PositionState:
    """Authoritative encoded position (plus the derived side to move) of one client."""

    def __init__(
        self, engine: MoveLegalityEngine, encoded_position: Optional[str] = None
    ) -> None:
        self.engine = engine
        self._encoded = (
            engine.validate(encoded_position)
            if encoded_position is not None
            else engine.start_position()
        )

    @property
    def encoded(self) -> str:
        return self._encoded

    @property
    def side_to_move(self) -> Color:
        return self.engine.side_to_move(self._encoded)

    @property
    def is_terminal(self) -> bool:
        return self.engine.is_terminal(self._encoded)

    @property
    def result(self) -> str:
        return self.engine.result(self._encoded)

    def legal_moves_from(self, square: str) -> list[str]:
        return self.engine.legal_moves_from(self._encoded, square)

    def is_capture(self, move: str) -> bool:
        return self.engine.is_capture(self._encoded, move)

    def apply(self, move: str) -> str:
        """Apply a move through the engine. The position is left untouched if the engine rejects it."""
        self._encoded = self.engine.apply(self._encoded, move)
        return self._encoded

    def replace(self, encoded_position: str) -> bool:
        """
        Load a position wholesale (reconciliation with the shared store).

        Returns True if the position actually changed.
        """
        if encoded_position == self._encoded:
            return False
        self._encoded = self.engine.validate(encoded_position)
        return True

    def matches(self, encoded_position: str) -> bool:
        return self._encoded == encoded_position
