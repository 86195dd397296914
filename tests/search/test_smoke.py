from __future__ import annotations

import pytest

from gambit.engine.game import Game
from gambit.search.service import DIFFICULTY_DEPTHS, SearchService


def test_returns_legal_move_from_start() -> None:
    game = Game.new()
    res = SearchService(seed=1).search(game, depth=2)
    assert res.best_move is not None
    assert res.best_move in game.legal_moves()
    assert res.depth == 2
    assert res.nodes > 20
    assert res.time_ms >= 0


def test_in_check_best_move_resolves_check_at_depth_1() -> None:
    # White to move, in check from a rook on h1
    fen = "4k3/8/8/8/8/8/8/4K2r w - - 0 1"
    game = Game.from_fen(fen)
    assert game.is_in_check() is True

    res = SearchService().search(game, depth=1)
    assert res.best_move is not None

    # Apply on a fresh copy to validate check is resolved
    game2 = Game.from_fen(fen)
    assert game2.apply_move(res.best_move)
    assert game2.is_in_check(game2.move_history[-1].color) is False


def test_captures_hanging_queen() -> None:
    game = Game.from_fen("4k3/8/8/3q4/4P3/8/8/4K3 w - - 0 1")
    move = SearchService(2).select_move(game)
    assert move is not None
    assert move.to_coords() == "e4d5"


def test_search_leaves_game_untouched() -> None:
    fen = "r3k2r/1P6/8/3pP3/8/8/8/R3K2R w KQkq d6 0 1"
    game = Game.from_fen(fen)
    SearchService(seed=3).search(game, depth=2)
    assert game.to_fen() == fen
    assert game.move_history == []
    assert game.captured_pieces == {"white": [], "black": []}
    with pytest.raises(ValueError):
        game.pop()


def test_same_seed_same_choice() -> None:
    a = SearchService(1, seed=42).select_move(Game.new())
    b = SearchService(1, seed=42).select_move(Game.new())
    assert a == b


def test_unshuffled_search_is_deterministic() -> None:
    svc = SearchService(1, shuffle=False)
    assert svc.select_move(Game.new()) == svc.select_move(Game.new())


def test_difficulty_depths() -> None:
    assert DIFFICULTY_DEPTHS == {"easy": 2, "medium": 3, "hard": 4}
    for name, depth in DIFFICULTY_DEPTHS.items():
        assert SearchService.for_difficulty(name).depth == depth
    assert SearchService().depth == 3


def test_unknown_difficulty_rejected() -> None:
    with pytest.raises(ValueError):
        SearchService.for_difficulty("impossible")


@pytest.mark.parametrize("depth", [0, -1])
def test_depth_must_be_positive(depth: int) -> None:
    with pytest.raises(ValueError):
        SearchService(depth)
    with pytest.raises(ValueError):
        SearchService().search(Game.new(), depth=depth)
