"""
Command line entrypoint: play a session in the terminal.

    chessroom play --name Alice                       # against the scripted opponent
    chessroom play --mode shared --name Alice         # create a room, prints the room id to share
    chessroom play --room ABC123 --name Bob           # join that room (same --database-url)

At the prompt: a square ('e2') selects / targets, a move ('e2e4') is played directly,
'show' redraws the board, 'quit' leaves the session.
"""

import argparse
import asyncio
import logging
import re
import sys
from contextlib import ExitStack
from typing import Optional, Sequence

from chessroom.core.config import Settings
from chessroom.core.exceptions import GameError, SessionFullError
from chessroom.core.shared_types import Difficulty, SessionMode
from chessroom.db.database import build_engine, get_db, session_factory
from chessroom.db.sql_store import SQLKeyValueStore
from chessroom.rules.engine import ChessEngine
from chessroom.services.coordinator import GameSessionCoordinator
from chessroom.services.scheduler import AsyncioScheduler
from chessroom.services.session_ids import (
    new_session_id,
    session_id_from_query,
    share_link,
)
from chessroom.services.synchronizer import SessionSynchronizer
from chessroom.view.terminal import TerminalBoardView

logger = logging.getLogger(__name__)

PROMPT = "> "
SQUARE_RE = re.compile(r"^[a-h][1-8]$")
MOVE_RE = re.compile(r"^([a-h][1-8])([a-h][1-8])$")
HELP = "Commands: <square> (e.g. e2), <move> (e.g. e2e4), show, help, quit"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chessroom", description=__doc__.splitlines()[1])
    subcommands = parser.add_subparsers(dest="command", required=True)

    play = subcommands.add_parser("play", help="play a session in this terminal")
    play.add_argument("--mode", choices=[m.value for m in SessionMode], default=None)
    play.add_argument("--name", default="", help="your display name")
    play.add_argument(
        "--difficulty",
        choices=[d.value for d in Difficulty],
        default=Difficulty.EASY.value,
        help="scripted opponent level (local mode)",
    )
    room = play.add_mutually_exclusive_group()
    room.add_argument("--room", help="session identifier to join or create")
    room.add_argument("--link", help="share link containing ?room=<id>")
    play.add_argument("--database-url", default=None, help="shared store location")
    play.add_argument(
        "--base-url", default="chessroom://play", help="prefix of printed share links"
    )
    play.add_argument("--log-level", default=None)
    return parser


def handle_command(
    coordinator: GameSessionCoordinator, view: TerminalBoardView, command: str
) -> bool:
    """Translate one line of input into an intent. Returns False when the user wants to leave."""
    command = command.strip().lower()
    if command in ("quit", "exit"):
        return False
    if not command:
        return True
    if command == "show":
        view.show()
    elif SQUARE_RE.match(command):
        coordinator.handle_square_intent(command)
    elif match := MOVE_RE.match(command):
        if not coordinator.handle_direct_move(match.group(1), match.group(2)):
            print("Move not played.")
    else:
        print(HELP)
    return True


async def command_loop(
    coordinator: GameSessionCoordinator, view: TerminalBoardView
) -> None:
    """Read input without blocking the event loop, so the poll / scripted reply timers keep firing."""
    loop = asyncio.get_running_loop()
    print(HELP)
    while True:
        try:
            line = await loop.run_in_executor(None, input, PROMPT)
        except EOFError:
            break
        if not handle_command(coordinator, view, line):
            break


async def play(args: argparse.Namespace, settings: Settings) -> int:
    engine = ChessEngine()
    view = TerminalBoardView()
    session_id: Optional[str] = args.room or (
        session_id_from_query(args.link) if args.link else None
    )
    # Opening a room link always means a shared session
    mode = SessionMode(args.mode) if args.mode else None
    if mode is None:
        mode = SessionMode.SHARED if session_id else SessionMode.LOCAL

    with ExitStack() as resources:
        synchronizer: Optional[SessionSynchronizer] = None
        if mode == SessionMode.SHARED:
            sql_engine = build_engine(args.database_url or settings.database_url)
            resources.callback(sql_engine.dispose)
            db = resources.enter_context(get_db(session_factory(sql_engine)))
            synchronizer = SessionSynchronizer(
                SQLKeyValueStore(db), engine, key_prefix=settings.key_prefix
            )
            if not session_id:
                session_id = new_session_id()
                print(f"Share this link: {share_link(args.base_url, session_id)}")

        coordinator = GameSessionCoordinator(
            engine,
            AsyncioScheduler(),
            view=view,
            synchronizer=synchronizer,
            settings=settings,
        )
        with coordinator:
            coordinator.start_session(mode, session_id, args.name, args.difficulty)
            await command_loop(coordinator, view)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    level_name = (args.log_level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        return asyncio.run(play(args, settings))
    except SessionFullError:
        print("Room is full!", file=sys.stderr)
        return 1
    except GameError as exc:
        logger.debug("Session aborted", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
