"""Board View for a terminal: prints the board from the player's side plus a status block."""

import sys
from typing import Optional, TextIO

import chess

from chessroom.core.models import RenderDirective
from chessroom.core.shared_types import Color, SessionPhase

FILES = "abcdefgh"
EMPTY_SQUARE = "."


class TerminalBoardView:
    """Render directives as text. Keeps the last directive so it can be shown again on request."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream or sys.stdout
        self.last: Optional[RenderDirective] = None

    def render(self, directive: RenderDirective) -> None:
        self.last = directive
        self.stream.write(self.format(directive) + "\n")
        self.stream.flush()

    def show(self) -> None:
        if self.last is not None:
            self.render(self.last)

    def format(self, directive: RenderDirective) -> str:
        return "\n".join(self.status_lines(directive) + self.board_lines(directive))

    def status_lines(self, directive: RenderDirective) -> list[str]:
        lines = [f"{directive.local_name} vs {directive.opponent_name}"]
        if directive.session_id:
            lines.append(
                f"Room: {directive.session_id} | You are: {directive.board_orientation}"
            )
        if directive.phase == SessionPhase.WAITING_FOR_OPPONENT:
            lines.append("Waiting for opponent to join... Share this link!")

        turn = f"Turn: {directive.side_to_move.capitalize()}"
        if directive.is_my_turn:
            turn += " (Your turn)"
        if directive.opponent_thinking:
            turn += " (Bot is thinking...)"
        lines.append(turn)

        if directive.phase == SessionPhase.CONCLUDED:
            lines.append(f"Game over: {directive.result}")
        return lines

    def board_lines(self, directive: RenderDirective) -> list[str]:
        board = chess.Board(directive.position)
        white_side = directive.board_orientation == Color.WHITE
        ranks = range(8, 0, -1) if white_side else range(1, 9)
        files = FILES if white_side else FILES[::-1]

        lines = []
        for rank in ranks:
            cells = [
                self._cell(board, f"{file}{rank}", directive) for file in files
            ]
            lines.append(f"{rank} {''.join(cells)}")
        lines.append("  " + "".join(f"{file} " for file in files))
        return lines

    def _cell(self, board: chess.Board, square: str, directive: RenderDirective) -> str:
        piece = board.piece_at(chess.parse_square(square))
        symbol = piece.symbol() if piece else EMPTY_SQUARE
        if square == directive.selected_square:
            return f"{symbol}<"
        if square in directive.capture_squares:
            return f"{symbol}x"
        if square in directive.highlighted_squares:
            return f"{symbol}*"
        return f"{symbol} "
