"""
Acting-seat strategy and hero's combo strategy.

Combo tables can also arrive as text, one string per hand::

    "B 9.75:10.0:21.15;X:0.0:20.9"     action:frequency%:ev entries
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from solvermatch.analysis.bet_sizing import parse_action_sizing
from solvermatch.analysis.hand_strength import analyze_hand, categorize
from solvermatch.game.cards import Card, cards_to_str, parse_cards, parse_hole_cards
from solvermatch.shared.config import AnalysisConfig
from solvermatch.shared.errors import ValidationError
from solvermatch.storage.node import ActionStat, SeatStrategy, combo_key

logger = logging.getLogger(__name__)

DEFAULT_RECOMMENDED = {"action": "Check", "ev": 0.0, "frequency": 1.0, "actionType": "check", "sizing": None}


@dataclass(frozen=True)
class ComboRow:
    """Per-combo strategy; frequencies in percent."""

    cards: Tuple[Card, Card]
    weight: float
    actions: Tuple[ActionStat, ...]


def parse_combo_actions(text: str) -> Tuple[ActionStat, ...]:
    """
    ``"B 9.75:10.0:21.15;X:0.0:20.9"`` -> action stats (frequency in percent).

    Raises:
        ValidationError: On entries without three ``:``-separated fields.
    """
    stats = []
    for entry in text.split(";"):
        entry = entry.strip()
        if not entry:
            continue
        parts = entry.rsplit(":", 2)
        if len(parts) != 3:
            raise ValidationError(f"Invalid combo action entry {entry!r}")
        try:
            stats.append(ActionStat(parts[0].strip(), float(parts[1]), float(parts[2])))
        except ValueError as exc:
            raise ValidationError(f"Invalid number in combo action entry {entry!r}") from exc
    return tuple(stats)


def format_combo_actions(actions: Iterable[ActionStat]) -> str:
    return ";".join(f"{a.action}:{a.frequency:g}:{a.ev:g}" for a in actions)


def rows_from_seat(seat: SeatStrategy) -> List[ComboRow]:
    labels = seat.labels
    rows = []
    for combo in seat.combos:
        cards = tuple(Card.from_index(i) for i in combo.cards)
        actions = tuple(
            ActionStat(label, 100.0 * freq, ev)
            for label, freq, ev in zip(labels, combo.frequencies, combo.evs)
        )
        rows.append(ComboRow(cards, combo.weight, actions))  # type: ignore[arg-type]
    return rows


def rows_from_table(table: Mapping[str, str]) -> List[ComboRow]:
    """Rows from ``{"AhKh": "B 9.75:10.0:21.15;X:90.0:20.9", ...}``."""
    return [
        ComboRow(parse_hole_cards(hand), 1.0, parse_combo_actions(actions))
        for hand, actions in table.items()
    ]


def _action_dict(stat: ActionStat, solver_pot: float, live_pot: float, bb_size: float) -> dict:
    parsed = parse_action_sizing(stat.action, solver_pot, live_pot, bb_size)
    return {
        "action": stat.action,
        "frequency": round(stat.frequency, 4),
        "ev": round(stat.ev, 4),
        "actionType": parsed.action_type,
        "sizing": parsed.sizing.to_dict() if parsed.sizing else None,
    }


def optimal_strategy(
    actions: Sequence[ActionStat], solver_pot: float, live_pot: float, bb_size: float = 2.0
) -> dict:
    """
    ``{"recommendedAction", "actionFrequencies"}`` for the acting seat;
    recommended is the most frequent action (first on ties).
    """
    if not actions:
        return {"recommendedAction": dict(DEFAULT_RECOMMENDED), "actionFrequencies": []}

    frequencies = [_action_dict(a, solver_pot, live_pot, bb_size) for a in actions]
    best = frequencies[0]
    for item in frequencies[1:]:
        if item["frequency"] > best["frequency"]:
            best = item
    return {"recommendedAction": dict(best), "actionFrequencies": frequencies}


def _average(rows: Sequence[ComboRow]) -> Tuple[ActionStat, ...]:
    """Weight-averaged actions across rows that share the first row's labels."""
    labels = [a.action for a in rows[0].actions]
    rows = [r for r in rows if [a.action for a in r.actions] == labels]
    weights = [r.weight for r in rows]
    if sum(weights) <= 0:
        weights = [1.0] * len(rows)
    total = sum(weights)
    return tuple(
        ActionStat(
            label,
            sum(w * r.actions[i].frequency for w, r in zip(weights, rows)) / total,
            sum(w * r.actions[i].ev for w, r in zip(weights, rows)) / total,
        )
        for i, label in enumerate(labels)
    )


def _confidence(top_frequency_pct: float, config: AnalysisConfig) -> str:
    share = top_frequency_pct / 100.0
    if share >= config.confidence_high:
        return "high"
    if share >= config.confidence_medium:
        return "medium"
    return "low"


def combo_strategy(
    hero_cards: Tuple[Card, Card],
    board: Sequence[Card],
    solver_board: Sequence[str],
    rows: Sequence[ComboRow],
    config: AnalysisConfig | None = None,
    solver_pot: float = 0.0,
    live_pot: float = 0.0,
    bb_size: float = 2.0,
) -> dict:
    """
    Hero's strategy: the exact combo if the solver has it, else the average of
    combos in hero's category (classified on the solver board), else the
    range-wide average. Only the two most frequent actions are kept.

    Raises:
        ValueError: No rows with actions.
    """
    config = config or AnalysisConfig()
    rows = [r for r in rows if r.actions]
    if not rows:
        raise ValueError("No combo strategy rows")

    strength = analyze_hand(hero_cards, board)
    key = combo_key(hero_cards)
    exact = [r for r in rows if combo_key(r.cards) == key]

    if exact:
        actions, source = exact[0].actions, "exact"
    else:
        solver_cards = parse_cards(list(solver_board))
        playable = [r for r in rows if not set(r.cards) & set(solver_cards)]
        same = [r for r in playable if categorize(r.cards, solver_cards) == strength.category]
        if same:
            actions, source = _average(same), "category"
        else:
            actions, source = _average(rows), "range"
        logger.debug(f"Combo {cards_to_str(hero_cards)} not solved; using {source} average")

    top = sorted(actions, key=lambda a: a.frequency, reverse=True)[:2]
    top_actions = [_action_dict(a, solver_pot, live_pot, bb_size) for a in top]
    return {
        "heroHand": cards_to_str(hero_cards),
        "category": strength.category,
        "madeTier": strength.made_tier,
        "drawFlags": list(strength.draws),
        "topActions": top_actions,
        "recommendedAction": top_actions[0]["action"],
        "confidence": _confidence(top[0].frequency, config),
        "source": source,
    }


def default_combo_strategy(hero_hand: Optional[str]) -> dict:
    return {
        "heroHand": hero_hand or "",
        "category": "Unknown",
        "madeTier": "Unknown",
        "drawFlags": [],
        "topActions": [{"action": "Check", "frequency": 100.0, "ev": 0.0, "actionType": "check", "sizing": None}],
        "recommendedAction": "Check",
        "confidence": "low",
        "source": "default",
    }
