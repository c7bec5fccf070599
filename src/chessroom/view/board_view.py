"""Contract between the Coordinator and whatever draws the board."""

from typing import Protocol

from chessroom.core.models import RenderDirective


class BoardView(Protocol):
    def render(self, directive: RenderDirective) -> None:
        """Draw the position, highlights and status described by the directive."""
        ...
