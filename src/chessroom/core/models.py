"""
Boundary layer data model(s).

These objects are passed between the Coordinator, its collaborators and the Board View.
(The Session Record that crosses the boundary to the shared store lives in records.py.)
"""

from dataclasses import dataclass, field
from typing import Optional

from chessroom.core.exceptions import GameStateError
from chessroom.core.shared_types import Color, SessionPhase

# Type aliases to make the models easier to read
SquareName = str
MoveUCI = str

DEFAULT_DISPLAY_NAME = "You"


@dataclass
class MoveIntent:
    """Selected-but-not-yet-completed move: one origin square and the squares it may move to."""

    origin: Optional[SquareName] = None
    candidates: dict[SquareName, MoveUCI] = field(default_factory=dict)
    captures: set[SquareName] = field(default_factory=set)

    @property
    def is_active(self) -> bool:
        return self.origin is not None

    @property
    def candidate_targets(self) -> frozenset[SquareName]:
        return frozenset(self.candidates)

    def move_to(self, target: SquareName) -> Optional[MoveUCI]:
        """The move recorded for this target square, if it is one of the candidates."""
        return self.candidates.get(target)

    def arm(
        self,
        origin: SquareName,
        candidates: dict[SquareName, MoveUCI],
        captures: set[SquareName],
    ) -> None:
        """Replace whatever was selected before (only one origin at a time)."""
        self.origin = origin
        self.candidates = dict(candidates)
        self.captures = set(captures)

    def clear(self) -> None:
        self.origin = None
        self.candidates = {}
        self.captures = set()


@dataclass
class ParticipantIdentity:
    """Who is playing on this client, and against whom."""

    local_display_name: str = ""
    assigned_color: Optional[Color] = None
    remote_display_name: Optional[str] = None

    @property
    def shown_name(self) -> str:
        return self.local_display_name or DEFAULT_DISPLAY_NAME

    def assign(self, color: Color) -> None:
        """Once determined, a color is fixed for the lifetime of the session."""
        if self.assigned_color is not None and self.assigned_color != color:
            raise GameStateError(
                f"Color already assigned: {self.assigned_color}. Cannot reassign to {color}."
            )
        self.assigned_color = color


@dataclass(frozen=True)
class JoinResult:
    """Outcome of opening a session identifier in the shared store."""

    assigned_color: Color
    encoded_position: str
    opponent_name: Optional[str]


@dataclass(frozen=True)
class RenderDirective:
    """Everything the Board View needs to draw the board and the status line."""

    position: str
    highlighted_squares: frozenset[SquareName]
    interaction_enabled: bool
    board_orientation: Color
    side_to_move: Color
    phase: SessionPhase
    local_name: str
    opponent_name: str
    is_my_turn: bool
    opponent_thinking: bool = False
    session_id: Optional[str] = None
    selected_square: Optional[SquareName] = None
    capture_squares: frozenset[SquareName] = frozenset()
    result: str = "*"
