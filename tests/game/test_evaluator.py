"""Tests for hand evaluation."""

import pytest

from solvermatch.game.cards import parse_cards, parse_hole_cards
from solvermatch.game.evaluator import HandEvaluator, get_evaluator


class TestHandEvaluator:
    """Rank ordering and hand classes."""

    def test_stronger_hand_has_lower_rank(self):
        evaluator = HandEvaluator()
        board = parse_cards("2c7d9h")
        pair = evaluator.evaluate(parse_hole_cards("AhAc"), board)
        high = evaluator.evaluate(parse_hole_cards("AsKh"), board)
        assert pair < high

    @pytest.mark.parametrize(
        "hole,board,expected",
        [
            ("AhKh", "QhJhTh", 1),
            ("7c7d", "7h7s2c", 2),
            ("7c7d", "7h2s2c", 3),
            ("AhKh", "2h7h9h", 4),
            ("8c9d", "TsJh7c", 5),
            ("7c7d", "7hKs2c", 6),
            ("Kc7d", "7hKs2c", 7),
            ("AhAc", "2c7d9h", 8),
            ("AsKh", "2c7d9h", 9),
        ],
    )
    def test_hand_class(self, hole, board, expected):
        evaluator = HandEvaluator()
        rank = evaluator.evaluate(parse_hole_cards(hole), parse_cards(board))
        assert evaluator.hand_class(rank) == expected

    def test_board_too_small(self):
        with pytest.raises(ValueError, match="at least 3"):
            HandEvaluator().evaluate(parse_hole_cards("AhKh"), parse_cards("2c7d"))

    def test_wrong_hole_count(self):
        with pytest.raises(ValueError, match="exactly 2"):
            HandEvaluator().evaluate(parse_cards("Ah"), parse_cards("2c7d9h"))

    def test_compare_hands(self):
        evaluator = HandEvaluator()
        board = parse_cards("2c7d9hJsQs")
        assert evaluator.compare_hands(parse_hole_cards("AhAc"), parse_hole_cards("KhKc"), board) == -1
        assert evaluator.compare_hands(parse_hole_cards("KhKc"), parse_hole_cards("AhAc"), board) == 1
        assert evaluator.compare_hands(parse_hole_cards("3h4c"), parse_hole_cards("3d4s"), board) == 0

    def test_shared_instance(self):
        assert get_evaluator() is get_evaluator()
