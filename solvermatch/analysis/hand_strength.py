"""
Hand categories relative to a board.

Each hand gets the first category that applies, in ``CATEGORIES`` order:
made hands first, then draws, then unimproved holdings.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

from solvermatch.analysis.ranges import WeightedCombo, total_weight
from solvermatch.game.cards import RANKS, Card
from solvermatch.game.evaluator import get_evaluator

CATEGORIES = (
    "straightFlush",
    "quads",
    "fullHouse",
    "flush",
    "straight",
    "set",
    "trips",
    "twoPair",
    "overPair",
    "topPair",
    "middlePair",
    "weakPair",
    "underPair",
    "flushDraw",
    "oesd",
    "gutshot",
    "aceHigh",
    "air",
)

VALUE_CATEGORIES = frozenset(
    {
        "straightFlush",
        "quads",
        "fullHouse",
        "flush",
        "straight",
        "set",
        "trips",
        "twoPair",
        "overPair",
        "topPair",
    }
)
BLUFF_CATEGORIES = frozenset({"flushDraw", "oesd", "gutshot", "aceHigh", "air"})

MADE_TIERS = {
    "straightFlush": "Straight Flush",
    "quads": "Quads",
    "fullHouse": "Full House",
    "flush": "Flush",
    "straight": "Straight",
    "set": "Set",
    "trips": "Trips",
    "twoPair": "Two Pair",
    "overPair": "Overpair",
    "topPair": "Top Pair",
    "middlePair": "Middle Pair",
    "weakPair": "Weak Pair",
    "underPair": "Underpair",
    "aceHigh": "Ace High",
}

_ACE = RANKS.index("A")

# Evaluator hand classes
_STRAIGHT_FLUSH, _QUADS, _FULL_HOUSE, _FLUSH, _STRAIGHT, _TRIPS = 1, 2, 3, 4, 5, 6


@dataclass(frozen=True)
class HandStrength:
    category: str
    made_tier: str
    draws: Tuple[str, ...]

    @property
    def is_value(self) -> bool:
        return self.category in VALUE_CATEGORIES


def _has_straight(ranks: set[int]) -> bool:
    values = set(ranks)
    if _ACE in values:
        values.add(-1)
    run = 0
    for r in range(-1, 13):
        run = run + 1 if r in values else 0
        if run >= 5:
            return True
    return False


def straight_outs(hole: Sequence[Card], board: Sequence[Card]) -> int:
    """Number of ranks that would complete a straight using a hole card."""
    all_ranks = {c.rank for c in (*hole, *board)}
    board_ranks = {c.rank for c in board}
    if _has_straight(all_ranks):
        return 0
    return sum(
        1
        for r in range(13)
        if r not in all_ranks and _has_straight(all_ranks | {r}) and not _has_straight(board_ranks | {r})
    )


def draw_flags(hole: Sequence[Card], board: Sequence[Card]) -> Tuple[str, ...]:
    """
    Draws available with cards still to come: ``flushDraw``, ``oesd``,
    ``gutshot``, and ``backdoorFlushDraw`` on the flop. Empty on the river.
    """
    if len(board) >= 5:
        return ()

    flags: List[str] = []
    suits = Counter(c.suit for c in (*hole, *board))
    hole_suits = {c.suit for c in hole}
    if any(suits[s] == 4 for s in hole_suits):
        flags.append("flushDraw")

    outs = straight_outs(hole, board)
    if outs >= 2:
        flags.append("oesd")
    elif outs == 1:
        flags.append("gutshot")

    if len(board) == 3 and "flushDraw" not in flags and any(suits[s] == 3 for s in hole_suits):
        flags.append("backdoorFlushDraw")
    return tuple(flags)


def _pair_category(hole: Sequence[Card], board: Sequence[Card]) -> str | None:
    r1, r2 = hole[0].rank, hole[1].rank
    board_ranks = sorted({c.rank for c in board}, reverse=True)

    if r1 == r2:
        if r1 in board_ranks:
            return None
        if r1 > board_ranks[0]:
            return "overPair"
        if r1 < board_ranks[-1]:
            return "underPair"
        return "weakPair"

    paired = [r for r in (r1, r2) if r in board_ranks]
    if len(paired) == 2:
        return "twoPair"
    if not paired:
        return None
    if paired[0] == board_ranks[0]:
        return "topPair"
    if len(board_ranks) > 1 and paired[0] == board_ranks[1]:
        return "middlePair"
    return "weakPair"


def categorize(hole: Sequence[Card], board: Sequence[Card]) -> str:
    """Category of ``hole`` on ``board`` (3-5 cards)."""
    evaluator = get_evaluator()
    hand_class = evaluator.hand_class(evaluator.evaluate(hole, board))

    if hand_class == _STRAIGHT_FLUSH:
        return "straightFlush"
    if hand_class == _QUADS:
        return "quads"
    if hand_class == _FULL_HOUSE:
        return "fullHouse"
    if hand_class == _FLUSH:
        return "flush"
    if hand_class == _STRAIGHT:
        return "straight"

    board_counts = Counter(c.rank for c in board)
    if hand_class == _TRIPS:
        if hole[0].rank == hole[1].rank and board_counts[hole[0].rank] == 1:
            return "set"
        if any(board_counts[c.rank] == 2 for c in hole):
            return "trips"

    pair = _pair_category(hole, board)
    if pair is not None:
        return pair

    draws = draw_flags(hole, board)
    for draw in ("flushDraw", "oesd", "gutshot"):
        if draw in draws:
            return draw
    if any(c.rank == _ACE for c in hole):
        return "aceHigh"
    return "air"


def analyze_hand(hole: Sequence[Card], board: Sequence[Card]) -> HandStrength:
    category = categorize(hole, board)
    return HandStrength(
        category=category,
        made_tier=MADE_TIERS.get(category, "High Card"),
        draws=draw_flags(hole, board),
    )


def categorize_range(
    combos: Iterable[WeightedCombo], board: Sequence[Card]
) -> dict[str, List[WeightedCombo]]:
    """Group combos by category, keeping ``CATEGORIES`` order."""
    groups: dict[str, List[WeightedCombo]] = defaultdict(list)
    for combo in combos:
        groups[categorize(combo.cards, board)].append(combo)
    return {name: groups[name] for name in CATEGORIES if name in groups}


def value_share(combos: Sequence[WeightedCombo], board: Sequence[Card]) -> float:
    """Weighted percentage (0-100) of ``combos`` in value categories."""
    total = total_weight(combos)
    if total <= 0:
        return 0.0
    value = sum(c.weight for c in combos if categorize(c.cards, board) in VALUE_CATEGORIES)
    return 100.0 * value / total


def range_breakdown(combos: Sequence[WeightedCombo], board: Sequence[Card]) -> dict:
    """
    ``{"totalCombos", "categories": [{"category", "comboCount", "frequency",
    "percentOfRange"}]}`` with weighted combo counts.
    """
    total = total_weight(combos)
    categories = []
    for name, members in categorize_range(combos, board).items():
        weight = total_weight(members)
        share = weight / total if total > 0 else 0.0
        categories.append(
            {
                "category": name,
                "comboCount": round(weight, 2),
                "frequency": round(share, 4),
                "percentOfRange": round(100.0 * share, 2),
            }
        )
    return {"totalCombos": round(total, 2), "categories": categories}
