"""Session Record stored in the shared key/value store"""

import json
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from chessroom.core.exceptions import StoreError
from chessroom.core.shared_types import Color

# --- the record is stored as a flat JSON object: {"fen": ..., "player1": ..., "player2": ..., "turn": "w" | "b"}
TURN_TO_COLOR = {"w": Color.WHITE, "b": Color.BLACK}
COLOR_TO_TURN = {color: turn for turn, color in TURN_TO_COLOR.items()}


class SessionRecord(BaseModel):
    """One shared game: the position everybody converges to, plus the (at most) two seats."""

    model_config = ConfigDict(populate_by_name=True)

    encoded_position: str = Field(alias="fen")
    first_player_name: str = Field(alias="player1")
    second_player_name: Optional[str] = Field(default=None, alias="player2")
    side_to_move: Color = Field(alias="turn")

    @field_validator("encoded_position")
    @classmethod
    def validate_encoded_position(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Encoded position cannot be empty.")
        return value.strip()

    @field_validator("side_to_move", mode="before")
    @classmethod
    def validate_side_to_move(cls, value: object) -> object:
        """Accept both the short FEN notation ('w' / 'b') and the full color name."""
        if isinstance(value, str) and value in TURN_TO_COLOR:
            return TURN_TO_COLOR[value]
        return value

    @property
    def has_second_player(self) -> bool:
        return self.second_player_name is not None

    def to_store(self) -> str:
        """Serialize into the flat field map persisted in the store."""
        fields = self.model_dump(by_alias=True)
        fields["turn"] = COLOR_TO_TURN[self.side_to_move]
        return json.dumps(fields)

    @classmethod
    def from_store(cls, raw: str) -> "SessionRecord":
        """Parse a stored value. A malformed value is reported as a StoreError."""
        try:
            return cls.model_validate_json(raw)
        except ValidationError as exc:
            raise StoreError(f"Cannot interpret stored session record: {exc}") from exc
