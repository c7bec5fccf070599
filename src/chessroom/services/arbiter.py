"""Turn Arbiter: may the local user act right now?"""

from dataclasses import dataclass
from typing import Optional

from chessroom.core.shared_types import Color, SessionMode


@dataclass(frozen=True)
class TurnContext:
    """Snapshot of everything the decision depends on. The arbiter itself holds no state."""

    mode: SessionMode
    side_to_move: Color
    assigned_color: Optional[Color]
    concluded: bool
    reply_pending: bool = False
    opponent_joined: bool = False


def is_permitted(context: TurnContext) -> bool:
    """
    Decide if the local user may move.
    ----

    * Nobody moves in a finished game, and nobody moves before a color was assigned.
    * local: it must be the human's side to move and the scripted opponent must not be "thinking".
    * shared: it must be your color to move and the second seat must be taken.
    """
    if context.concluded or context.assigned_color is None:
        return False

    if context.side_to_move != context.assigned_color:
        return False

    if context.mode == SessionMode.LOCAL:
        return not context.reply_pending

    return context.opponent_joined
