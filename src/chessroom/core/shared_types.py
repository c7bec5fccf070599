"""
Type definitions used across layers
"""

from enum import StrEnum


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"


class SessionMode(StrEnum):
    LOCAL = "local"
    SHARED = "shared"


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class SessionPhase(StrEnum):
    UNINITIALIZED = "uninitialized"
    WAITING_FOR_OPPONENT = "waiting for opponent"
    READY = "ready"
    CONCLUDED = "concluded"


# --- NOTE the first player to open a session always gets the white pieces, the joiner gets black.
FIRST_PLAYER_COLOR = Color.WHITE
SECOND_PLAYER_COLOR = Color.BLACK
