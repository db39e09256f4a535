"""
Replay state for a multi-way hand.

``GameState`` values are immutable; every transition (an action, or a street
change that reveals board cards) returns a new state. Callers that need the
state "as of" some point keep the returned values rather than mutating one
shared object.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Optional, Sequence, Tuple

from solvermatch.game.actions import Action, ActionType
from solvermatch.game.cards import Card
from solvermatch.shared.errors import ValidationError


# Importer street labels outside the four betting rounds
BLIND_POSTS_LABEL = "posts"
SHOWDOWN_LABEL = "showdown"
_STREET_ALIASES = {"POSTS": "PREFLOP"}


class Street(Enum):
    """Betting rounds in Texas Hold'em."""

    PREFLOP = auto()
    FLOP = auto()
    TURN = auto()
    RIVER = auto()

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> "Street":
        """
        Parse ``"flop"``, ``"FLOP"``, ``"Flop"``... Blind posts (``"posts"``)
        belong to preflop. ``"showdown"`` is not a betting round and raises;
        check :meth:`is_showdown_label` first.
        """
        try:
            name = label.strip().upper()
            return cls[_STREET_ALIASES.get(name, name)]
        except (KeyError, AttributeError) as exc:
            raise ValidationError(f"Unknown street: {label!r}") from exc

    @staticmethod
    def is_showdown_label(label: str) -> bool:
        return isinstance(label, str) and label.strip().lower() == SHOWDOWN_LABEL

    @staticmethod
    def is_blind_post_label(label: str) -> bool:
        return isinstance(label, str) and label.strip().lower() == BLIND_POSTS_LABEL

    @property
    def code(self) -> int:
        """0 for preflop through 3 for river."""
        return self.value - 1

    @property
    def board_size(self) -> int:
        return (0, 3, 4, 5)[self.code]

    def is_preflop(self) -> bool:
        return self == Street.PREFLOP

    def is_postflop(self) -> bool:
        return self != Street.PREFLOP

    def next_street(self) -> Optional["Street"]:
        """Get the next street, or None if this is the river."""
        if self == Street.RIVER:
            return None
        return Street(self.value + 1)


class SeatStatus(Enum):
    ACTIVE = "active"
    FOLDED = "folded"


@dataclass(frozen=True)
class SeatAction:
    """One action in the replay, tagged with its street and the pot it faced."""

    seat: int
    action: Action
    street: Street
    pot_before: float


@dataclass(frozen=True)
class GameState:
    """
    Immutable replay state.

    Attributes:
        street: Current betting round
        board: Revealed community cards, in deal order
        pot: Chips in the pot
        stacks: Remaining chips per seat (indexed by seat)
        statuses: Active/folded per seat
        history: Every action applied so far, all streets, in order
    """

    street: Street
    board: Tuple[Card, ...]
    pot: float
    stacks: Tuple[float, ...]
    statuses: Tuple[SeatStatus, ...]
    history: Tuple[SeatAction, ...] = ()

    def __post_init__(self):
        if len(self.stacks) != len(self.statuses):
            raise ValidationError(
                f"stacks ({len(self.stacks)}) and statuses ({len(self.statuses)}) differ in length"
            )
        if self.pot < 0:
            raise ValidationError(f"Negative pot: {self.pot}")
        if len(self.board) != self.street.board_size:
            raise ValidationError(
                f"Board should have {self.street.board_size} cards on {self.street}, "
                f"got {len(self.board)}"
            )

    @classmethod
    def initial(
        cls,
        stacks: Sequence[float],
        small_blind: float = 0.0,
        big_blind: float = 0.0,
        ante: float = 0.0,
    ) -> "GameState":
        """Preflop state: blinds plus one ante per seat already in the pot."""
        return cls(
            street=Street.PREFLOP,
            board=(),
            pot=small_blind + big_blind + ante * len(stacks),
            stacks=tuple(float(s) for s in stacks),
            statuses=tuple(SeatStatus.ACTIVE for _ in stacks),
        )

    @property
    def num_seats(self) -> int:
        return len(self.stacks)

    @property
    def street_actions(self) -> Tuple[SeatAction, ...]:
        """Actions taken on the current street."""
        return tuple(a for a in self.history if a.street == self.street)

    def is_active(self, seat: int) -> bool:
        return self.statuses[seat] == SeatStatus.ACTIVE

    def active_seats(self) -> Tuple[int, ...]:
        return tuple(i for i, status in enumerate(self.statuses) if status == SeatStatus.ACTIVE)

    def __str__(self) -> str:
        board_str = "".join(repr(c) for c in self.board) or "-"
        return (
            f"GameState({self.street} | Pot: {self.pot:g} | Board: {board_str} | "
            f"Active: {list(self.active_seats())})"
        )


def apply_action(state: GameState, seat: int, action: Action) -> GameState:
    """
    Apply one seat's action and return the next state.

    Fold marks the seat folded; bet, raise and call move ``action.amount``
    from the seat's stack into the pot (stacks floor at zero); check changes
    nothing but is still recorded in the history.
    """
    if not 0 <= seat < state.num_seats:
        raise ValidationError(f"Seat {seat} out of range for {state.num_seats} seats")
    if not state.is_active(seat):
        raise ValidationError(f"Seat {seat} acted after folding ({action})")

    record = SeatAction(seat=seat, action=action, street=state.street, pot_before=state.pot)
    pot = state.pot
    stacks = state.stacks
    statuses = state.statuses

    if action.type is ActionType.FOLD:
        statuses = statuses[:seat] + (SeatStatus.FOLDED,) + statuses[seat + 1 :]
    elif action.type.moves_chips() and action.amount > 0:
        pot += action.amount
        stacks = stacks[:seat] + (max(stacks[seat] - action.amount, 0.0),) + stacks[seat + 1 :]

    return replace(
        state,
        pot=pot,
        stacks=stacks,
        statuses=statuses,
        history=state.history + (record,),
    )


def advance_street(state: GameState, street: Street, full_board: Sequence[Card]) -> GameState:
    """
    Move to ``street`` and reveal its board cards from ``full_board``.

    Streets only move forward; a marker for the current street is a no-op.
    """
    if street == state.street:
        return state
    if street.value < state.street.value:
        raise ValidationError(f"Cannot move from {state.street} back to {street}")
    if len(full_board) < street.board_size:
        raise ValidationError(
            f"{street} needs {street.board_size} board cards, hand has {len(full_board)}"
        )
    return replace(state, street=street, board=tuple(full_board[: street.board_size]))
