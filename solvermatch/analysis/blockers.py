"""Card-removal effect of hero's hole cards on the villain's range."""

from __future__ import annotations

from typing import Sequence, Tuple

from solvermatch.analysis.hand_strength import BLUFF_CATEGORIES, VALUE_CATEGORIES, categorize_range
from solvermatch.analysis.ranges import WeightedCombo, remove_blocked, total_weight
from solvermatch.game.cards import Card

EXAMPLES_PER_CATEGORY = 3

DEFAULT_BLOCKER_IMPACT = {
    "combosBlockedPct": 0.0,
    "valueBlockedPct": 0.0,
    "bluffsUnblockedPct": 0.0,
    "cardRemoval": [],
    "topBlocked": [],
}


def _pct(part: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return round(min(max(100.0 * part / whole, 0.0), 100.0), 2)


def blocker_impact(
    hero_cards: Tuple[Card, Card],
    villain: Sequence[WeightedCombo],
    board: Sequence[Card],
    top_n: int = 5,
) -> dict:
    """
    How much of ``villain`` (already filtered against the board) hero's
    cards remove.

    Returns ``{"combosBlockedPct", "valueBlockedPct", "bluffsUnblockedPct",
    "cardRemoval": [{"card", "percentage"}], "topBlocked": [{"name",
    "combosBlocked", "percentage", "examples"}]}``; every percentage is 0-100.
    """
    villain = remove_blocked(villain, board)
    total = total_weight(villain)
    if total <= 0:
        return dict(DEFAULT_BLOCKER_IMPACT)

    groups = categorize_range(villain, board)
    blocked_w = 0.0
    value_w = value_blocked_w = 0.0
    bluff_w = bluff_unblocked_w = 0.0
    top_blocked = []

    for name, members in groups.items():
        weight = total_weight(members)
        blocked = [c for c in members if c.blocks(hero_cards)]
        weight_blocked = total_weight(blocked)
        blocked_w += weight_blocked

        if name in VALUE_CATEGORIES:
            value_w += weight
            value_blocked_w += weight_blocked
        elif name in BLUFF_CATEGORIES:
            bluff_w += weight
            bluff_unblocked_w += weight - weight_blocked

        if blocked:
            top_blocked.append(
                {
                    "name": name,
                    "combosBlocked": round(weight_blocked, 2),
                    "percentage": _pct(weight_blocked, weight),
                    "examples": [c.hand for c in blocked[:EXAMPLES_PER_CATEGORY]],
                }
            )

    top_blocked.sort(key=lambda item: item["combosBlocked"], reverse=True)
    card_removal = [
        {
            "card": repr(card),
            "percentage": _pct(sum(c.weight for c in villain if card in c.cards), total),
        }
        for card in hero_cards
    ]

    return {
        "combosBlockedPct": _pct(blocked_w, total),
        "valueBlockedPct": _pct(value_blocked_w, value_w),
        "bluffsUnblockedPct": _pct(bluff_unblocked_w, bluff_w),
        "cardRemoval": card_removal,
        "topBlocked": top_blocked[:top_n],
    }
