"""Tests for src/chessroom/cli.py: argument parsing, command handling and full runs of `main`."""

import io
from pathlib import Path
from typing import Iterator
from unittest.mock import patch

import pytest
from sqlalchemy import Engine

from chessroom import cli
from chessroom.core.config import Settings
from chessroom.core.shared_types import SessionMode
from chessroom.db.database import build_engine, session_factory
from chessroom.db.sql_store import SQLKeyValueStore
from chessroom.rules.engine import ChessEngine
from chessroom.services.coordinator import GameSessionCoordinator
from chessroom.services.synchronizer import SessionSynchronizer
from chessroom.view.terminal import TerminalBoardView
from doubles import ManualScheduler


@pytest.fixture
def terminal() -> TerminalBoardView:
    return TerminalBoardView(io.StringIO())


@pytest.fixture
def local_game(
    chess_engine: ChessEngine,
    scheduler: ManualScheduler,
    terminal: TerminalBoardView,
    settings: Settings,
) -> GameSessionCoordinator:
    session = GameSessionCoordinator(chess_engine, scheduler, view=terminal, settings=settings)
    session.start_session(SessionMode.LOCAL, local_display_name="Alice")
    return session


def scripted_input(monkeypatch: pytest.MonkeyPatch, lines: list[str]) -> None:
    remaining: Iterator[str] = iter(lines)

    def fake_input(prompt: str = "") -> str:
        try:
            return next(remaining)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)


# --- PARSER ---
def test_parse_play_defaults() -> None:
    args = cli.build_parser().parse_args(["play"])
    assert args.mode is None
    assert args.name == ""
    assert args.difficulty == "easy"
    assert args.room is None
    assert args.link is None


def test_parse_shared_room() -> None:
    args = cli.build_parser().parse_args(["play", "--room", "ABC123", "--name", "Bob"])
    assert args.room == "ABC123"
    assert args.name == "Bob"


@pytest.mark.parametrize(
    "argv",
    [
        [],
        ["play", "--difficulty", "grandmaster"],
        ["play", "--mode", "correspondence"],
        ["play", "--room", "A", "--link", "chessroom://play?room=B"],
    ],
)
def test_parse_rejects(argv: list[str]) -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(argv)


# --- COMMANDS ---
def test_square_command_selects(local_game: GameSessionCoordinator, terminal: TerminalBoardView) -> None:
    assert cli.handle_command(local_game, terminal, "E2")
    assert local_game.intent.origin == "e2"


def test_move_command_plays(local_game: GameSessionCoordinator, terminal: TerminalBoardView, chess_engine: ChessEngine) -> None:
    assert cli.handle_command(local_game, terminal, " e2e4 ")
    assert local_game.position.encoded == chess_engine.apply(chess_engine.start_position(), "e2e4")


def test_rejected_move_command(
    local_game: GameSessionCoordinator, terminal: TerminalBoardView, capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.handle_command(local_game, terminal, "e2e5")
    assert "Move not played." in capsys.readouterr().out


def test_unknown_command_prints_help(
    local_game: GameSessionCoordinator, terminal: TerminalBoardView, capsys: pytest.CaptureFixture[str]
) -> None:
    assert cli.handle_command(local_game, terminal, "resign")
    assert cli.HELP in capsys.readouterr().out


def test_show_redraws(local_game: GameSessionCoordinator, terminal: TerminalBoardView) -> None:
    assert isinstance(terminal.stream, io.StringIO)
    before = terminal.stream.getvalue()
    assert cli.handle_command(local_game, terminal, "show")
    assert terminal.stream.getvalue() == before * 2


@pytest.mark.parametrize("command", ["quit", "exit", "QUIT"])
def test_quit_commands(local_game: GameSessionCoordinator, terminal: TerminalBoardView, command: str) -> None:
    assert not cli.handle_command(local_game, terminal, command)


def test_blank_line_is_ignored(local_game: GameSessionCoordinator, terminal: TerminalBoardView) -> None:
    assert cli.handle_command(local_game, terminal, "   ")
    assert not local_game.intent.is_active


# --- MAIN ---
def test_main_local_game(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    scripted_input(monkeypatch, ["e2", "e2e4", "quit"])
    assert cli.main(["play", "--name", "Alice", "--difficulty", "medium"]) == 0
    out = capsys.readouterr().out
    assert "Alice vs Bot (medium)" in out
    assert "Turn: Black" in out


def test_main_creates_shared_room(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    scripted_input(monkeypatch, [])
    url = f"sqlite:///{tmp_path / 'rooms.db'}"
    with patch.object(Engine, "dispose", autospec=True) as dispose:
        assert cli.main(["play", "--mode", "shared", "--name", "Alice", "--database-url", url]) == 0
    dispose.assert_called_once()

    out = capsys.readouterr().out
    assert "Share this link: chessroom://play?room=" in out
    assert "Alice vs Waiting..." in out


def test_main_room_full(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    url = f"sqlite:///{tmp_path / 'rooms.db'}"
    db = session_factory(build_engine(url))()
    try:
        synchronizer = SessionSynchronizer(
            SQLKeyValueStore(db),
            ChessEngine(),
            key_prefix=Settings.from_env().key_prefix,
        )
        _ = synchronizer.join_or_create("ROOM01", "Alice")
        _ = synchronizer.join_or_create("ROOM01", "Bob")
    finally:
        db.close()

    scripted_input(monkeypatch, [])
    with patch.object(Engine, "dispose", autospec=True) as dispose:
        assert cli.main(["play", "--link", "chessroom://play?room=ROOM01", "--name", "Carol", "--database-url", url]) == 1
    # Released on the error path as well
    dispose.assert_called_once()
    assert "Room is full!" in capsys.readouterr().err
