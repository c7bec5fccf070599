"""Unit tests for src/chessroom/view/terminal.py"""

import io
from dataclasses import replace

import chess
import pytest

from chessroom.core.models import RenderDirective
from chessroom.core.shared_types import Color, SessionPhase
from chessroom.view.terminal import TerminalBoardView


@pytest.fixture
def directive() -> RenderDirective:
    return RenderDirective(
        position=chess.STARTING_FEN,
        highlighted_squares=frozenset(),
        interaction_enabled=True,
        board_orientation=Color.WHITE,
        side_to_move=Color.WHITE,
        phase=SessionPhase.READY,
        local_name="Alice",
        opponent_name="Bot (easy)",
        is_my_turn=True,
    )


def test_board_from_white_side(directive: RenderDirective) -> None:
    lines = TerminalBoardView().board_lines(directive)
    assert lines[0] == "8 r n b q k b n r "
    assert lines[6] == "2 P P P P P P P P "
    assert lines[-1] == "  a b c d e f g h "


def test_board_from_black_side(directive: RenderDirective) -> None:
    lines = TerminalBoardView().board_lines(replace(directive, board_orientation=Color.BLACK))
    assert lines[0] == "1 R N B K Q B N R "
    assert lines[-1] == "  h g f e d c b a "


def test_selection_markers(directive: RenderDirective) -> None:
    selected = replace(
        directive,
        selected_square="e2",
        highlighted_squares=frozenset({"e2", "e3", "e4"}),
    )
    rank_2, rank_3, rank_4 = (
        TerminalBoardView().board_lines(selected)[row] for row in (6, 5, 4)
    )
    assert rank_2 == "2 P P P P P<P P P "
    assert rank_3 == "3 . . . . .*. . . "
    assert rank_4 == "4 . . . . .*. . . "


def test_capture_marker(directive: RenderDirective) -> None:
    position = "4k3/8/8/3p4/4P3/8/8/4K3 w - - 0 1"
    selected = replace(
        directive,
        position=position,
        selected_square="e4",
        highlighted_squares=frozenset({"e4", "e5", "d5"}),
        capture_squares=frozenset({"d5"}),
    )
    lines = TerminalBoardView().board_lines(selected)
    assert lines[3] == "5 . . . px.*. . . "


def test_status_local_game(directive: RenderDirective) -> None:
    lines = TerminalBoardView().status_lines(replace(directive, opponent_thinking=True))
    assert lines == ["Alice vs Bot (easy)", "Turn: White (Your turn) (Bot is thinking...)"]


def test_status_shared_waiting(directive: RenderDirective) -> None:
    waiting = replace(
        directive,
        phase=SessionPhase.WAITING_FOR_OPPONENT,
        opponent_name="Waiting...",
        session_id="ABC123",
        is_my_turn=False,
    )
    lines = TerminalBoardView().status_lines(waiting)
    assert lines == [
        "Alice vs Waiting...",
        "Room: ABC123 | You are: white",
        "Waiting for opponent to join... Share this link!",
        "Turn: White",
    ]


def test_status_game_over(directive: RenderDirective) -> None:
    over = replace(directive, phase=SessionPhase.CONCLUDED, result="0-1", is_my_turn=False)
    assert TerminalBoardView().status_lines(over)[-1] == "Game over: 0-1"


def test_render_and_show(directive: RenderDirective) -> None:
    stream = io.StringIO()
    view = TerminalBoardView(stream)

    view.show()
    assert stream.getvalue() == ""

    view.render(directive)
    first = stream.getvalue()
    assert view.last == directive
    assert first.startswith("Alice vs Bot (easy)\n")

    view.show()
    assert stream.getvalue() == first * 2
