from __future__ import annotations

import pytest

from gambit.engine.board import Piece
from gambit.engine.game import Game
from gambit.engine.move import BLACK, KNIGHT, PAWN, WHITE, parse_square as sq


def test_white_en_passant_after_black_double_push() -> None:
    g = Game.from_fen("4k3/3p4/8/4P3/8/8/8/4K3 b - - 0 1")
    assert g.make_move(sq("d7"), sq("d5"))
    assert g.en_passant_target == sq("d6")
    assert sq("d6") in g.get_valid_moves(sq("e5"))

    assert g.make_move(sq("e5"), sq("d6"))
    assert g.get_piece(sq("d6")) == Piece(PAWN, WHITE)
    assert g.get_piece(sq("d5")) is None
    assert g.get_piece(sq("e5")) is None
    assert g.captured_pieces[BLACK] == [PAWN]
    assert g.en_passant_target is None


def test_black_en_passant_after_white_double_push() -> None:
    g = Game.from_fen("4k3/8/8/8/3p4/8/4P3/4K3 w - - 0 1")
    assert g.make_move(sq("e2"), sq("e4"))
    assert g.en_passant_target == sq("e3")
    assert sq("e3") in g.get_valid_moves(sq("d4"))

    assert g.make_move(sq("d4"), sq("e3"))
    assert g.get_piece(sq("e3")) == Piece(PAWN, BLACK)
    assert g.get_piece(sq("e4")) is None
    assert g.captured_pieces[WHITE] == [PAWN]


def test_en_passant_expires_after_one_ply() -> None:
    g = Game.from_fen("4k3/3p4/8/4P3/8/8/8/4K3 b - - 0 1")
    assert g.make_move(sq("d7"), sq("d5"))
    assert g.make_move(sq("e1"), sq("f1"))
    assert g.make_move(sq("e8"), sq("f8"))
    assert g.en_passant_target is None
    assert sq("d6") not in g.get_valid_moves(sq("e5"))


def test_single_push_does_not_set_target() -> None:
    g = Game.new()
    assert g.make_move(sq("e2"), sq("e3"))
    assert g.en_passant_target is None


def test_en_passant_exposing_king_on_rank_is_illegal() -> None:
    # Removing both pawns from the fifth rank would open the rook's line to a5
    g = Game.from_fen("8/8/8/KPp4r/8/8/8/4k3 w - c6 0 1")
    dests = g.get_valid_moves(sq("b5"))
    assert sq("c6") not in dests
    assert sq("b6") in dests


def test_en_passant_undo_restores_captured_pawn() -> None:
    g = Game.from_fen("4k3/8/8/3pP3/8/8/8/4K3 w - d6 0 1")
    before = g.board.copy()
    assert g.make_move(sq("e5"), sq("d6"))
    g.undo_move()
    assert g.board == before
    assert g.en_passant_target == sq("d6")
    assert g.captured_pieces == {WHITE: [], BLACK: []}


def test_en_passant_requires_enemy_pawn_beside_mover() -> None:
    # d5 holds a white knight, so d6 is no capture square for the e5 pawn
    g = Game.from_fen("4k3/8/8/3NP3/8/8/8/4K3 w - d6 0 1")
    assert sq("d6") not in g.get_valid_moves(sq("e5"))
    assert g.make_move(sq("e5"), sq("d6")) is False
    assert g.get_piece(sq("d5")) == Piece(KNIGHT, WHITE)
    assert g.captured_pieces == {WHITE: [], BLACK: []}

    # A black piece other than a pawn is not an en passant victim either
    g = Game.from_fen("4k3/8/8/3nP3/8/8/8/4K3 w - d6 0 1")
    assert sq("d6") not in g.get_valid_moves(sq("e5"))


@pytest.mark.parametrize(
    "fen",
    [
        "4k3/8/8/8/8/8/4PP2/4K3 w - e3 0 1",
        "4k3/4pp2/8/8/8/8/8/4K3 b - e6 0 1",
    ],
)
def test_target_on_movers_own_side_rejected(fen: str) -> None:
    with pytest.raises(ValueError):
        Game.from_fen(fen)


def test_black_target_on_third_rank_accepted() -> None:
    g = Game.from_fen("4k3/8/8/8/4Pp2/8/8/4K3 b - e3 0 1")
    assert g.en_passant_target == sq("e3")
    assert g.make_move(sq("f4"), sq("e3"))
    assert g.get_piece(sq("e4")) is None
    assert g.captured_pieces[WHITE] == [PAWN]
