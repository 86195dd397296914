from __future__ import annotations

from gambit.engine.board import Piece
from gambit.engine.game import Game
from gambit.engine.move import (
    BISHOP,
    BLACK,
    KNIGHT,
    PAWN,
    QUEEN,
    ROOK,
    WHITE,
    parse_square as sq,
)


FEN = "1r2k3/P7/8/8/8/8/8/4K3 w - - 0 1"


def test_default_promotion_is_queen() -> None:
    g = Game.from_fen(FEN)
    assert g.make_move(sq("a7"), sq("a8"))
    assert g.get_piece(sq("a8")) == Piece(QUEEN, WHITE)
    assert g.move_history[-1].move.promotion == QUEEN
    assert g.move_history[-1].notation == "a7-a8"


def test_underpromotion_on_capture() -> None:
    g = Game.from_fen(FEN)
    assert g.make_move(sq("a7"), sq("b8"), KNIGHT)
    assert g.get_piece(sq("b8")) == Piece(KNIGHT, WHITE)
    assert g.get_piece(sq("a7")) is None
    assert g.captured_pieces[BLACK] == [ROOK]


def test_invalid_promotion_piece_is_rejected_without_mutation() -> None:
    g = Game.from_fen(FEN)
    assert g.make_move(sq("a7"), sq("a8"), "king") is False
    assert g.make_move(sq("a7"), sq("a8"), PAWN) is False
    assert g.to_fen() == FEN
    assert g.move_history == []


def test_legal_moves_expand_promotions() -> None:
    g = Game.from_fen(FEN)
    promos = [m for m in g.legal_moves() if m.from_pos == sq("a7")]
    assert len(promos) == 8
    assert {m.promotion for m in promos} == {QUEEN, ROOK, BISHOP, KNIGHT}
    assert promos[0].promotion == QUEEN


def test_black_promotes_on_first_rank() -> None:
    g = Game.from_fen("4k3/8/8/8/8/8/p7/4K3 b - - 0 1")
    assert g.make_move(sq("a2"), sq("a1"), ROOK)
    assert g.get_piece(sq("a1")) == Piece(ROOK, BLACK)


def test_undo_promotion_restores_pawn_and_victim() -> None:
    g = Game.from_fen(FEN)
    before = g.board.copy()
    assert g.make_move(sq("a7"), sq("b8"))
    g.undo_move()
    assert g.board == before
    assert g.get_piece(sq("a7")) == Piece(PAWN, WHITE)
    assert g.captured_pieces[BLACK] == []
