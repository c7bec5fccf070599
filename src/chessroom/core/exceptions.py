"""
Exceptions raised across the layers.

Every exception derives from GameError, so a caller (e.g. the CLI) can catch any of them with a single except clause.
"""


class GameError(Exception):
    """Top-level exception of the package."""


class GameStateError(GameError):
    """The game (or session) is not in a state that allows the requested operation."""


class InvalidPositionError(GameStateError):
    """An encoded position could not be interpreted by the rules engine."""


class ContractViolationError(GameStateError):
    """A collaborator was used outside of its contract (e.g. asking for a move in a finished game)."""


class IllegalMoveError(GameError):
    """The rules engine rejected a move."""


class SessionFullError(GameError):
    """Both seats of a shared session are already taken."""


class InvalidRequestError(GameError):
    """Input that cannot be interpreted (unknown difficulty, missing session id, bad config value, ...)"""


class StoreError(GameError):
    """Reading from / writing to the shared store failed."""
