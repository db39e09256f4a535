"""
Showdown equity for a hand or a range against a range.

Runouts are enumerated exactly when the work (matchups x runouts) stays under
``exact_enumeration_limit``; otherwise a seeded Monte Carlo estimate is used.
Seeds are derived from the inputs, so repeated calls give identical results.
"""

from __future__ import annotations

import logging
from itertools import combinations
from math import comb
from typing import List, Sequence, Tuple

import numpy as np
import xxhash

from solvermatch.analysis.ranges import WeightedCombo
from solvermatch.game.cards import Card, cards_to_str
from solvermatch.game.evaluator import get_evaluator
from solvermatch.shared.config import AnalysisConfig

logger = logging.getLogger(__name__)

Matchup = Tuple[Tuple[Card, Card], Tuple[Card, Card], float]


class EquityCalculator:
    """
    Range equity on a 3-5 card board.

    Args:
        config: Sample count and exact-enumeration limit
        seed: Base seed mixed into every per-call seed
    """

    def __init__(self, config: AnalysisConfig | None = None, seed: int = 0):
        self.config = config or AnalysisConfig()
        self.seed = seed
        self.evaluator = get_evaluator()
        self.full_deck = Card.get_full_deck()

    def hand_vs_range(
        self,
        hole: Tuple[Card, Card],
        villain: Sequence[WeightedCombo],
        board: Sequence[Card],
    ) -> float:
        """Equity (0-1) of ``hole`` against ``villain``."""
        return self.range_vs_range([WeightedCombo(hole, 1.0)], villain, board)[0]

    def range_vs_range(
        self,
        hero: Sequence[WeightedCombo],
        villain: Sequence[WeightedCombo],
        board: Sequence[Card],
    ) -> Tuple[float, float]:
        """
        ``(hero_equity, villain_equity)``, each 0-1 and summing to 1.

        Raises:
            ValueError: Board outside 3-5 cards, or no pair of combos that
                can coexist with each other and the board.
        """
        if not 3 <= len(board) <= 5:
            raise ValueError(f"Board must have 3-5 cards, got {len(board)}")

        board_set = set(board)
        matchups: List[Matchup] = []
        for h in hero:
            if h.blocks(board_set):
                continue
            for v in villain:
                if v.blocks(board_set) or v.blocks(h.cards):
                    continue
                weight = h.weight * v.weight
                if weight > 0:
                    matchups.append((h.cards, v.cards, weight))
        if not matchups:
            raise ValueError("No compatible hero/villain combos on this board")

        to_come = 5 - len(board)
        runouts = comb(52 - len(board) - 4, to_come)
        if len(matchups) * runouts <= self.config.exact_enumeration_limit:
            equity = self._exact(matchups, tuple(board), to_come)
        else:
            equity = self._monte_carlo(matchups, tuple(board), to_come)
        return equity, 1.0 - equity

    def _showdown(self, hole1, hole2, board) -> float:
        result = self.evaluator.compare_hands(hole1, hole2, board)
        if result < 0:
            return 1.0
        if result == 0:
            return 0.5
        return 0.0

    def _exact(self, matchups: List[Matchup], board: Tuple[Card, ...], to_come: int) -> float:
        won = 0.0
        total = 0.0
        for hero_cards, villain_cards, weight in matchups:
            dead = set(board) | set(hero_cards) | set(villain_cards)
            deck = [c for c in self.full_deck if c not in dead]
            for extra in combinations(deck, to_come):
                won += weight * self._showdown(hero_cards, villain_cards, board + extra)
                total += weight
        return won / total

    def _monte_carlo(self, matchups: List[Matchup], board: Tuple[Card, ...], to_come: int) -> float:
        rng = np.random.default_rng(self._seed_for(matchups, board))
        weights = np.array([m[2] for m in matchups], dtype=np.float64)
        picks = rng.choice(len(matchups), size=self.config.equity_samples, p=weights / weights.sum())

        won = 0.0
        for pick in picks:
            hero_cards, villain_cards, _ = matchups[pick]
            extra: Tuple[Card, ...] = ()
            if to_come:
                dead = set(board) | set(hero_cards) | set(villain_cards)
                deck = [c for c in self.full_deck if c not in dead]
                chosen = rng.choice(len(deck), size=to_come, replace=False)
                extra = tuple(deck[i] for i in chosen)
            won += self._showdown(hero_cards, villain_cards, board + extra)
        logger.debug(f"Monte Carlo equity over {len(picks)} samples, {len(matchups)} matchups")
        return won / len(picks)

    def _seed_for(self, matchups: List[Matchup], board: Tuple[Card, ...]) -> int:
        h = xxhash.xxh32(seed=self.seed & 0xFFFFFFFF)
        h.update(cards_to_str(board).encode())
        for hero_cards, villain_cards, weight in matchups:
            h.update(f"{cards_to_str(hero_cards)}{cards_to_str(villain_cards)}{weight:.6f}".encode())
        return h.intdigest()
