"""
Move-Legality Engine: the single source of truth for what is legal.

Positions are FEN strings, moves are UCI strings ("e2e4", "e7e8q"), squares are algebraic names ("e2").
Callers treat positions as opaque values and only compare them for equality.
"""

from typing import Optional, Protocol

import chess

from chessroom.core.exceptions import IllegalMoveError, InvalidPositionError
from chessroom.core.shared_types import Color

# Pawns reaching the last rank always become queens
PROMOTION_PIECE = "q"


class MoveLegalityEngine(Protocol):
    """What the Coordinator needs from a rules engine."""

    def start_position(self) -> str:
        """Encoded position of a fresh game."""
        ...

    def validate(self, position: str) -> str:
        """Return the position if it can be interpreted, raise InvalidPositionError otherwise."""
        ...

    def legal_moves(self, position: str) -> list[str]:
        """All legal moves for the side to move."""
        ...

    def legal_moves_from(self, position: str, square: str) -> list[str]:
        """Legal moves starting on 'square' (empty if none or not occupied by the side to move)."""
        ...

    def apply(self, position: str, move: str) -> str:
        """Resulting position, raises IllegalMoveError if the move is not legal in 'position'."""
        ...

    def is_capture(self, position: str, move: str) -> bool: ...

    def is_terminal(self, position: str) -> bool: ...

    def side_to_move(self, position: str) -> Color: ...

    def result(self, position: str) -> str:
        """'1-0', '0-1', '1/2-1/2' or '*' while the game is still going."""
        ...


def build_uci(
    from_square: str, to_square: str, promotion: Optional[str] = None
) -> str:
    """Concatenate squares (and optional promotion piece) into UCI notation."""
    return f"{from_square}{to_square}{promotion or ''}".lower()


class ChessEngine:
    """MoveLegalityEngine implemented with python-chess."""

    def start_position(self) -> str:
        return chess.STARTING_FEN

    def validate(self, position: str) -> str:
        self._board(position)
        return position

    def legal_moves(self, position: str) -> list[str]:
        board = self._board(position)
        return [move.uci() for move in board.legal_moves]

    def legal_moves_from(self, position: str, square: str) -> list[str]:
        board = self._board(position)
        origin = self._parse_square(square)
        if origin is None:
            return []
        return [
            move.uci() for move in board.legal_moves if move.from_square == origin
        ]

    def apply(self, position: str, move: str) -> str:
        board = self._board(position)
        parsed = self._parse_move(board, move)
        board.push(parsed)
        return board.fen()

    def is_capture(self, position: str, move: str) -> bool:
        board = self._board(position)
        return board.is_capture(self._parse_move(board, move))

    def is_terminal(self, position: str) -> bool:
        return self._board(position).is_game_over()

    def side_to_move(self, position: str) -> Color:
        board = self._board(position)
        return Color.WHITE if board.turn == chess.WHITE else Color.BLACK

    def result(self, position: str) -> str:
        return self._board(position).result()

    # -- Internal helpers --
    def _board(self, position: str) -> chess.Board:
        try:
            return chess.Board(position)
        except ValueError as exc:
            raise InvalidPositionError(
                f"Cannot interpret position {position!r}: {exc}"
            ) from exc

    def _parse_square(self, square: str) -> Optional[chess.Square]:
        try:
            return chess.parse_square(square.lower())
        except ValueError:
            return None

    def _parse_move(self, board: chess.Board, move: str) -> chess.Move:
        try:
            parsed = chess.Move.from_uci(move.lower())
        except ValueError as exc:
            raise IllegalMoveError(f"Cannot interpret move: {move!r}") from exc
        if parsed not in board.legal_moves:
            raise IllegalMoveError(f"Move not allowed: {move}")
        return parsed
