"""
Weighted range strings.

Grammar (comma separated, optional ``:weight`` with weight in [0, 1], or
``@percent``)::

    AA          every pair combo
    AKs / AKo   suited / offsuit combos
    AK          both
    AhKh        one specific combo

Later tokens override earlier ones for the same combo.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Iterable, List, Sequence, Tuple

from solvermatch.game.cards import RANKS, SUITS, Card, cards_to_str
from solvermatch.shared.errors import ValidationError
from solvermatch.storage.node import combo_key


@dataclass(frozen=True)
class WeightedCombo:
    """Two hole cards (higher index first) and their range weight."""

    cards: Tuple[Card, Card]
    weight: float = 1.0

    @property
    def key(self) -> Tuple[int, int]:
        return combo_key(self.cards)

    @property
    def hand(self) -> str:
        return cards_to_str(self.cards)

    def blocks(self, dead: Iterable[Card]) -> bool:
        """True if any of ``dead`` is one of this combo's cards."""
        return any(card in self.cards for card in dead)


def _ordered(a: Card, b: Card) -> Tuple[Card, Card]:
    return (a, b) if a.index > b.index else (b, a)


def expand_hand_class(token: str) -> List[Tuple[Card, Card]]:
    """
    All combos for ``AA``, ``AKs``, ``AKo``, ``AK`` or a specific ``AhKh``.

    Raises:
        ValidationError: On anything else.
    """
    text = token.strip()
    if len(text) == 4:
        a, b = Card.new(text[:2]), Card.new(text[2:])
        if a == b:
            raise ValidationError(f"Duplicate card in combo {token!r}")
        return [_ordered(a, b)]

    if len(text) not in (2, 3):
        raise ValidationError(f"Invalid range token {token!r}")
    r1, r2 = text[0].upper(), text[1].upper()
    if r1 not in RANKS or r2 not in RANKS:
        raise ValidationError(f"Invalid range token {token!r}")
    suffix = text[2].lower() if len(text) == 3 else ""
    if suffix not in ("", "s", "o"):
        raise ValidationError(f"Invalid range token {token!r}")

    if r1 == r2:
        if suffix:
            raise ValidationError(f"Pairs cannot be suited or offsuit: {token!r}")
        cards = [Card.new(r1 + s) for s in SUITS]
        return [_ordered(a, b) for a, b in combinations(cards, 2)]

    combos = []
    for s1 in SUITS:
        for s2 in SUITS:
            suited = s1 == s2
            if (suffix == "s" and not suited) or (suffix == "o" and suited):
                continue
            combos.append(_ordered(Card.new(r1 + s1), Card.new(r2 + s2)))
    return combos


def _split_weight(token: str) -> Tuple[str, float]:
    try:
        if ":" in token:
            hand, raw = token.split(":", 1)
            weight = float(raw)
        elif "@" in token:
            hand, raw = token.split("@", 1)
            weight = float(raw) / 100.0
        else:
            hand, weight = token, 1.0
    except ValueError as exc:
        raise ValidationError(f"Invalid weight in range token {token!r}") from exc
    if not 0.0 <= weight <= 1.0:
        raise ValidationError(f"Weight out of [0, 1] in range token {token!r}")
    return hand, weight


def parse_range(text: str, dead: Sequence[Card] = ()) -> List[WeightedCombo]:
    """
    Parse a range string into weighted combos, dropping combos that use any
    ``dead`` card and combos with zero weight.

    Raises:
        ValidationError: On malformed tokens or weights.
    """
    if not text or not text.strip():
        return []

    weights: dict[Tuple[int, int], Tuple[Tuple[Card, Card], float]] = {}
    for token in text.split(","):
        token = token.strip()
        if not token:
            continue
        hand, weight = _split_weight(token)
        for cards in expand_hand_class(hand):
            weights[combo_key(cards)] = (cards, weight)

    dead_set = set(dead)
    return [
        WeightedCombo(cards, weight)
        for cards, weight in weights.values()
        if weight > 0 and not (cards[0] in dead_set or cards[1] in dead_set)
    ]


def total_weight(combos: Iterable[WeightedCombo]) -> float:
    return sum(c.weight for c in combos)


def remove_blocked(combos: Iterable[WeightedCombo], dead: Iterable[Card]) -> List[WeightedCombo]:
    dead_set = set(dead)
    return [c for c in combos if not (c.cards[0] in dead_set or c.cards[1] in dead_set)]
