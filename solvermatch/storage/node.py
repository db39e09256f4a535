"""Decoded solver node."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Optional, Sequence, Tuple

from solvermatch.game.cards import Card, cards_to_str


@dataclass(frozen=True)
class ActionStat:
    """Aggregate frequency (0-1) and EV (big blinds) of one action."""

    action: str
    frequency: float
    ev: float


@dataclass(frozen=True)
class ComboStrategy:
    """
    Strategy of one hole-card combo.

    Attributes:
        cards: Dense card indices, higher index first
        weight: Range weight of the combo (0-1)
        frequencies: Per-action frequency (0-1), aligned with the seat's actions
        evs: Per-action EV in big blinds
    """

    cards: Tuple[int, int]
    weight: float
    frequencies: Tuple[float, ...]
    evs: Tuple[float, ...]

    def __post_init__(self):
        if self.cards[0] < self.cards[1]:
            object.__setattr__(self, "cards", (self.cards[1], self.cards[0]))

    @property
    def hand(self) -> str:
        return cards_to_str(Card.from_index(i) for i in self.cards)


def combo_key(cards: Sequence[Card]) -> Tuple[int, int]:
    """Order-independent key for two hole cards."""
    a, b = cards[0].index, cards[1].index
    return (a, b) if a > b else (b, a)


@dataclass(frozen=True)
class SeatStrategy:
    """Actions available to one seat, their aggregates and per-combo tables."""

    actions: Tuple[ActionStat, ...] = ()
    combos: Tuple[ComboStrategy, ...] = ()

    @property
    def labels(self) -> Tuple[str, ...]:
        return tuple(a.action for a in self.actions)

    def combo(self, cards: Sequence[Card]) -> Optional[ComboStrategy]:
        key = combo_key(cards)
        for combo in self.combos:
            if combo.cards == key:
                return combo
        return None


@dataclass(frozen=True)
class SolverNode:
    """
    One solved decision point.

    ``oop_range``/``ip_range`` are weighted range strings
    (``"AA:1.0,AKs:0.5"``) as used when the node was solved.
    """

    node_id: str
    street: str
    next_to_act: Literal["ip", "oop"]
    positions_oop: str
    positions_ip: str
    game_type: str
    pot_type: str
    pot: float
    stack_oop: float
    stack_ip: float
    board: Tuple[str, ...]
    action_history: Tuple[str, ...]
    oop_range: str
    ip_range: str
    oop: SeatStrategy = field(default_factory=SeatStrategy)
    ip: SeatStrategy = field(default_factory=SeatStrategy)
    children: Tuple[str, ...] = ()

    @property
    def acting(self) -> SeatStrategy:
        return self.oop if self.next_to_act == "oop" else self.ip

    @property
    def acting_range(self) -> str:
        return self.oop_range if self.next_to_act == "oop" else self.ip_range

    @property
    def other_range(self) -> str:
        return self.ip_range if self.next_to_act == "oop" else self.oop_range

    def range_for(self, seat: Literal["ip", "oop"]) -> str:
        return self.ip_range if seat == "ip" else self.oop_range

    def strategy_for(self, seat: Literal["ip", "oop"]) -> SeatStrategy:
        return self.ip if seat == "ip" else self.oop
