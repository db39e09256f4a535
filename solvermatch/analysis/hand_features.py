"""Hero hand features: strength, draws, equity and next-card sensitivity."""

from __future__ import annotations

import logging
from typing import Sequence, Tuple

import numpy as np

from solvermatch.analysis.equity import EquityCalculator
from solvermatch.analysis.hand_strength import analyze_hand
from solvermatch.analysis.ranges import WeightedCombo, remove_blocked
from solvermatch.game.cards import Card

logger = logging.getLogger(__name__)

# Equity swing (percentage points) beyond which a card counts as a gain or loss
IMPACT_THRESHOLD = 2.0

DEFAULT_HAND_FEATURES = {
    "madeTier": "Unknown",
    "category": "Unknown",
    "drawFlags": [],
    "equityVsRange": 50.0,
    "nextStreetAnalysis": None,
}


def _impact(delta: float) -> str:
    if delta > IMPACT_THRESHOLD:
        return "gain"
    if delta < -IMPACT_THRESHOLD:
        return "loss"
    return "neutral"


def next_card_analysis(
    hero_cards: Tuple[Card, Card],
    board: Sequence[Card],
    villain: Sequence[WeightedCombo],
    calculator: EquityCalculator,
    starting_equity: float,
) -> dict | None:
    """
    Equity after every possible next card (percent), with a summary of the
    swings. None on the river.
    """
    if len(board) >= 5:
        return None

    dead = set(board) | set(hero_cards)
    impacts = []
    for card in calculator.full_deck:
        if card in dead:
            continue
        remaining = remove_blocked(villain, [card])
        if not remaining:
            continue
        after = 100.0 * calculator.hand_vs_range(hero_cards, remaining, (*board, card))
        delta = after - starting_equity
        impacts.append(
            {
                "card": repr(card),
                "equityAfter": round(after, 2),
                "equityDelta": round(delta, 2),
                "impact": _impact(delta),
            }
        )

    if not impacts:
        return None

    deltas = np.array([i["equityDelta"] for i in impacts])
    equities = np.array([i["equityAfter"] for i in impacts])
    best = impacts[int(np.argmax(deltas))]
    worst = impacts[int(np.argmin(deltas))]
    return {
        "startingEquity": round(starting_equity, 2),
        "cardImpacts": impacts,
        "summary": {
            "bestCard": best["card"],
            "worstCard": worst["card"],
            "avgEquity": round(float(equities.mean()), 2),
            "stdDev": round(float(deltas.std()), 2),
            "variance": round(float(deltas.var()), 2),
            "gains": sum(1 for i in impacts if i["impact"] == "gain"),
            "neutral": sum(1 for i in impacts if i["impact"] == "neutral"),
            "losses": sum(1 for i in impacts if i["impact"] == "loss"),
        },
    }


def analyze_hand_features(
    hero_cards: Tuple[Card, Card],
    board: Sequence[Card],
    villain: Sequence[WeightedCombo],
    calculator: EquityCalculator,
) -> dict:
    """
    ``{"madeTier", "category", "drawFlags", "equityVsRange",
    "nextStreetAnalysis"}``; equities are percentages.
    """
    strength = analyze_hand(hero_cards, board)
    equity = 100.0 * calculator.hand_vs_range(hero_cards, villain, board)
    return {
        "madeTier": strength.made_tier,
        "category": strength.category,
        "drawFlags": list(strength.draws),
        "equityVsRange": round(equity, 2),
        "nextStreetAnalysis": next_card_analysis(hero_cards, board, villain, calculator, equity),
    }
