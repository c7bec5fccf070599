"""Unit tests for src/chessroom/core/records.py"""

import json

import pytest
from pydantic import ValidationError

from chessroom.core.exceptions import StoreError
from chessroom.core.records import SessionRecord
from chessroom.core.shared_types import Color

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def test_record_is_stored_as_flat_field_map() -> None:
    """Stored value uses the short field names and 'w'/'b' for the side to move."""
    record = SessionRecord(
        encoded_position=STARTING_FEN,
        first_player_name="Alice",
        second_player_name=None,
        side_to_move=Color.WHITE,
    )
    stored = json.loads(record.to_store())
    assert stored == {
        "fen": STARTING_FEN,
        "player1": "Alice",
        "player2": None,
        "turn": "w",
    }


def test_record_from_store() -> None:
    raw = json.dumps(
        {"fen": STARTING_FEN, "player1": "Alice", "player2": "Bob", "turn": "b"}
    )
    record = SessionRecord.from_store(raw)
    assert record.encoded_position == STARTING_FEN
    assert record.first_player_name == "Alice"
    assert record.second_player_name == "Bob"
    assert record.side_to_move == Color.BLACK
    assert record.has_second_player


def test_missing_second_player_is_optional() -> None:
    raw = json.dumps({"fen": STARTING_FEN, "player1": "Alice", "turn": "w"})
    record = SessionRecord.from_store(raw)
    assert record.second_player_name is None
    assert not record.has_second_player


def test_full_color_name_is_accepted() -> None:
    raw = json.dumps({"fen": STARTING_FEN, "player1": "Alice", "turn": "black"})
    assert SessionRecord.from_store(raw).side_to_move == Color.BLACK


@pytest.mark.parametrize(
    "raw",
    [
        "not json at all",
        json.dumps({"player1": "Alice", "turn": "w"}),
        json.dumps({"fen": STARTING_FEN, "player1": "Alice", "turn": "x"}),
        json.dumps({"fen": "   ", "player1": "Alice", "turn": "w"}),
    ],
)
def test_malformed_stored_value_is_a_store_error(raw: str) -> None:
    """Whatever is wrong with the stored value, the synchronizer only needs to deal with StoreError."""
    with pytest.raises(StoreError):
        _ = SessionRecord.from_store(raw)


def test_empty_position_rejected_on_construction() -> None:
    with pytest.raises(ValidationError):
        _ = SessionRecord(
            encoded_position="",
            first_player_name="Alice",
            side_to_move=Color.WHITE,
        )
