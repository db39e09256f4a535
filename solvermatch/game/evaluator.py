"""
Hand evaluation using eval7.

Ranks are inverted so that lower values are stronger hands, which keeps
"sort ascending = best first" comparisons natural throughout analysis code.
"""

from typing import Sequence

import eval7

from solvermatch.game.cards import Card

HAND_CLASSES = {
    "Straight Flush": 1,
    "Quads": 2,
    "Full House": 3,
    "Flush": 4,
    "Straight": 5,
    "Trips": 6,
    "Two Pair": 7,
    "Pair": 8,
    "High Card": 9,
}


class HandEvaluator:
    """Texas Hold'em evaluator over 5-7 cards."""

    def __init__(self):
        self._eval7_cards = [eval7.Card(repr(card)) for card in Card.get_full_deck()]

    def evaluate(self, hole_cards: Sequence[Card], board: Sequence[Card]) -> int:
        """
        Evaluate hand strength.

        Returns:
            Rank where lower values are stronger

        Raises:
            ValueError: On fewer than 3 board cards or not exactly 2 hole cards.
        """
        if len(board) < 3:
            raise ValueError("Board must have at least 3 cards for evaluation")
        if len(hole_cards) != 2:
            raise ValueError("Must have exactly 2 hole cards")
        return -eval7.evaluate([self._eval7_cards[c.index] for c in (*board, *hole_cards)])

    def hand_class(self, rank: int) -> int:
        """Hand class 1 (straight flush) .. 9 (high card) for a rank from :meth:`evaluate`."""
        hand_type = eval7.handtype(-rank if rank < 0 else rank)
        try:
            return HAND_CLASSES[hand_type]
        except KeyError as exc:
            raise ValueError(f"Unknown hand type: {hand_type}") from exc

    def compare_hands(
        self, hole_cards1: Sequence[Card], hole_cards2: Sequence[Card], board: Sequence[Card]
    ) -> int:
        """-1 if hand1 wins, 1 if hand2 wins, 0 on a tie."""
        rank1 = self.evaluate(hole_cards1, board)
        rank2 = self.evaluate(hole_cards2, board)
        if rank1 < rank2:
            return -1
        if rank1 > rank2:
            return 1
        return 0


_evaluator_instance = None


def get_evaluator() -> HandEvaluator:
    """Shared evaluator instance."""
    global _evaluator_instance
    if _evaluator_instance is None:
        _evaluator_instance = HandEvaluator()
    return _evaluator_instance
