from __future__ import annotations

import pytest

from gambit.engine.move import KNIGHT, QUEEN, Move, Position, parse_move, parse_square, square_name


def test_square_names_use_rank_8_on_row_0() -> None:
    assert parse_square("a8") == Position(0, 0)
    assert parse_square("h1") == Position(7, 7)
    assert parse_square("e2") == Position(6, 4)
    assert square_name(Position(4, 3)) == "d4"


@pytest.mark.parametrize("bad", ["", "i1", "a9", "a0", "e22"])
def test_parse_square_rejects_invalid(bad: str) -> None:
    with pytest.raises(ValueError):
        parse_square(bad)


def test_square_name_rejects_off_board() -> None:
    with pytest.raises(ValueError):
        square_name(Position(8, 0))


def test_parse_move_with_promotion() -> None:
    assert parse_move("e2e4") == Move(parse_square("e2"), parse_square("e4"))
    m = parse_move("e7e8n")
    assert m.promotion == KNIGHT
    assert m.to_coords() == "e7e8n"
    assert Move(parse_square("a7"), parse_square("a8"), QUEEN).to_coords() == "a7a8q"


@pytest.mark.parametrize("bad", ["e2", "e2e4qq", "e7e8k", "z2e4"])
def test_parse_move_rejects_invalid(bad: str) -> None:
    with pytest.raises(ValueError):
        parse_move(bad)
