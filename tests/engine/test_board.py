from __future__ import annotations

import pytest

from gambit.engine.board import Board, Piece, STARTPOS_PLACEMENT
from gambit.engine.move import BLACK, KING, KNIGHT, PAWN, ROOK, WHITE, Position, parse_square


def test_startpos_layout() -> None:
    b = Board.startpos()
    assert b.get_piece(Position(0, 4)) == Piece(KING, BLACK)
    assert b.get_piece(Position(7, 4)) == Piece(KING, WHITE)
    assert b.get_piece(Position(7, 0)) == Piece(ROOK, WHITE)
    assert b.get_piece(Position(0, 6)) == Piece(KNIGHT, BLACK)
    assert all(b.get_piece(Position(6, c)) == Piece(PAWN, WHITE) for c in range(8))
    assert all(b.get_piece(Position(1, c)) == Piece(PAWN, BLACK) for c in range(8))
    assert sum(1 for _ in b.pieces()) == 32
    assert b.to_fen() == STARTPOS_PLACEMENT


@pytest.mark.parametrize("pos", [Position(-1, 0), Position(0, 8), Position(8, 8), Position(3, -2)])
def test_out_of_range_accessors_do_not_fault(pos: Position) -> None:
    b = Board.startpos()
    before = b.copy()
    assert b.get_piece(pos) is None
    b.set_piece(pos, Piece(ROOK, WHITE))
    assert b == before


def test_copy_is_independent() -> None:
    b = Board.startpos()
    c = b.copy()
    c.set_piece(parse_square("e2"), None)
    assert b.get_piece(parse_square("e2")) == Piece(PAWN, WHITE)
    assert b != c


def test_from_fen_rejects_bad_placement() -> None:
    with pytest.raises(ValueError):
        Board.from_fen("8/8/8")
    with pytest.raises(ValueError):
        Board.from_fen("rnbqkbnr/pppppppp/9/8/8/8/PPPPPPPP/RNBQKBNR")
    with pytest.raises(ValueError):
        Board.from_fen("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNX")


def test_find_king_and_render() -> None:
    b = Board.from_fen("8/8/8/8/8/8/8/k3K3")
    assert b.find_king(WHITE) == parse_square("e1")
    assert b.find_king(BLACK) == parse_square("a1")
    text = b.render().splitlines()
    assert text[0].startswith("8 ")
    assert text[7] == "1 k . . . K . . ."


def test_square_attack_queries() -> None:
    # White rook a1 attacks along the first rank up to the blocking knight on d1
    b = Board.from_fen("4k3/8/8/8/8/8/8/R2n3K")
    assert b.is_square_attacked(parse_square("c1"), BLACK)
    assert b.is_square_attacked(parse_square("a8"), BLACK)
    assert not b.is_square_attacked(parse_square("e1"), BLACK)
    # Pawns attack diagonally only
    b = Board.from_fen("4k3/8/8/8/4P3/8/8/4K3")
    assert b.is_square_attacked(parse_square("d5"), BLACK)
    assert b.is_square_attacked(parse_square("f5"), BLACK)
    assert not b.is_square_attacked(parse_square("e5"), BLACK)


def test_is_in_check_without_king_is_false() -> None:
    b = Board.from_fen("8/8/8/8/8/8/8/R6K")
    assert b.is_in_check(BLACK) is False


def test_empty_board_has_no_pieces() -> None:
    board = Board.empty()
    assert list(board.pieces()) == []
    assert board.to_fen() == "8/8/8/8/8/8/8/8"
    assert board == Board.from_fen("8/8/8/8/8/8/8/8")
