"""
Poker action representations and canonicalization.

Actions from a recorded hand are a tagged variant (check, fold, call, bet,
raise) carrying the chips the seat put in. Canonicalization turns them into
size-independent tokens: a display token in big blinds (``"Bet 4.00"``), a
single-letter sequence symbol (``"B"``) and a pot-bucketed hash token
(``"B100"``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Sequence

from solvermatch.shared.errors import ValidationError


class ActionType(Enum):
    """Action kinds that appear in a hand's action script."""

    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    RAISE = "raise"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_label(cls, label: str) -> "ActionType":
        """Parse a raw label such as ``"bet"``, ``"Raises"`` or ``"folds"``."""
        if not isinstance(label, str):
            raise ValidationError(f"Action type must be a string, got {label!r}")
        normalized = label.strip().lower()
        normalized = _LABEL_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValidationError(f"Unknown action type: {label!r}") from exc

    @property
    def symbol(self) -> str:
        """Single-letter symbol used in action sequences (X, B, R, C, F)."""
        return _SYMBOLS[self]

    def is_aggressive(self) -> bool:
        """Bet or raise."""
        return self in (ActionType.BET, ActionType.RAISE)

    def moves_chips(self) -> bool:
        """Whether the action adds chips to the pot."""
        return self in (ActionType.BET, ActionType.RAISE, ActionType.CALL)


_LABEL_ALIASES = {
    "folds": "fold",
    "checks": "check",
    "calls": "call",
    "bets": "bet",
    "raises": "raise",
    "f": "fold",
    "x": "check",
    "c": "call",
    "b": "bet",
    "r": "raise",
}

# Script entries that settle the pot rather than act in it
NON_DECISION_LABELS = frozenset({"collect", "bet-returned"})

_SYMBOLS = {
    ActionType.CHECK: "X",
    ActionType.BET: "B",
    ActionType.RAISE: "R",
    ActionType.CALL: "C",
    ActionType.FOLD: "F",
}


@dataclass(frozen=True)
class Action:
    """
    Immutable action taken by a seat.

    Attributes:
        type: The action kind
        amount: Chips added to the pot by this action (0 for check/fold)
    """

    type: ActionType
    amount: float = 0.0

    def __post_init__(self):
        if self.amount < 0:
            raise ValidationError(f"Action amount cannot be negative: {self.amount}")
        if self.type in (ActionType.FOLD, ActionType.CHECK) and self.amount != 0:
            raise ValidationError(f"{self.type} must have amount=0, got {self.amount}")

    def is_aggressive(self) -> bool:
        return self.type.is_aggressive()

    def to_token(self, big_blind: float = 1.0) -> str:
        """
        Display token with the size in big blinds.

        Returns:
            ``"Check"``, ``"Fold"``, ``"Call"``, ``"Bet 4.00"`` or ``"Raise 12.50"``.
            A bet or raise without a recorded amount is just ``"Bet"``/``"Raise"``.
        """
        if self.type is ActionType.CHECK:
            return "Check"
        if self.type is ActionType.FOLD:
            return "Fold"
        if self.type is ActionType.CALL:
            return "Call"
        label = self.type.value.capitalize()
        if self.amount <= 0:
            return label
        bb = big_blind if big_blind > 0 else 1.0
        return f"{label} {self.amount / bb:.2f}"

    def pot_fraction(self, pot_before: float) -> float:
        """Size of a bet/raise relative to the pot it was made into (0 otherwise)."""
        if not self.type.is_aggressive() or pot_before <= 0:
            return 0.0
        return self.amount / pot_before

    def __str__(self) -> str:
        if self.amount > 0:
            return f"{self.type.name}({self.amount:g})"
        return self.type.name


def fold() -> Action:
    return Action(ActionType.FOLD)


def check() -> Action:
    return Action(ActionType.CHECK)


def call(amount: float = 0.0) -> Action:
    return Action(ActionType.CALL, amount)


def bet(amount: float) -> Action:
    return Action(ActionType.BET, amount)


def raises(amount: float) -> Action:
    return Action(ActionType.RAISE, amount)


# ---------------------------------------------------------------------------
# Display tokens
# ---------------------------------------------------------------------------

_TOKEN_RE = re.compile(r"^(Check|Fold|Call|Bet|Raise)(?:\s+(\d+(?:\.\d+)?))?$", re.IGNORECASE)


def parse_token(token: str) -> tuple[ActionType, float]:
    """
    Parse a display token back into ``(type, amount_bb)``.

    Raises:
        ValidationError: For tokens that are not in the display format.
    """
    match = _TOKEN_RE.match(token.strip()) if isinstance(token, str) else None
    if match is None:
        raise ValidationError(f"Unrecognized action token: {token!r}")
    action_type = ActionType.from_label(match.group(1))
    amount = float(match.group(2)) if match.group(2) else 0.0
    return action_type, amount


def token_symbol(token: str) -> str:
    """Sequence symbol for a display token or solver label, ``"U"`` if unknown."""
    lowered = token.strip().lower()
    for prefix, symbol in (("check", "X"), ("bet", "B"), ("raise", "R"), ("call", "C"), ("fold", "F")):
        if lowered.startswith(prefix):
            return symbol
    # Solver labels use the bare symbol, e.g. "B 9.75" or "X"
    head = lowered.split(" ", 1)[0].upper()
    if head in {"X", "B", "R", "C", "F"}:
        return head
    return "U"


def action_sequence(tokens: Iterable[str]) -> str:
    """Collapse tokens to a symbol sequence, e.g. ``["Check", "Bet 4.00", "Call"] -> "X-B-C"``."""
    return "-".join(token_symbol(token) for token in tokens)


# ---------------------------------------------------------------------------
# Pot-relative buckets
# ---------------------------------------------------------------------------

# (inclusive upper bound in % of pot, bucket label). Anything above the last
# bound lands in OVERBET_LABEL.
POT_BUCKETS: tuple[tuple[float, int], ...] = (
    (0.0, 0),
    (5.0, 5),
    (15.0, 10),
    (28.0, 25),
    (40.0, 33),
    (58.0, 50),
    (70.0, 66),
    (85.0, 75),
    (115.0, 100),
    (137.0, 125),
    (175.0, 150),
    (225.0, 200),
    (250.0, 250),
)
OVERBET_LABEL = 300


def pot_bucket(fraction: float) -> int:
    """Map a pot fraction (0.75 = 75% pot) to its bucket label."""
    pct = round(max(fraction, 0.0) * 100.0, 6)
    for upper, label in POT_BUCKETS:
        if pct <= upper:
            return label
    return OVERBET_LABEL


def canonical_token(token: str, pot_fraction: float) -> str:
    """
    Pot-bucketed token used for hashing: ``"X"``, ``"C"``, ``"F"``, ``"B100"``, ``"R300"``.
    """
    symbol = token_symbol(token)
    if symbol in ("B", "R"):
        return f"{symbol}{pot_bucket(pot_fraction)}"
    return symbol


def canonical_history(tokens: Sequence[str], pot_fractions: Sequence[float]) -> str:
    """Join canonical tokens with ``-``; fractions are aligned with tokens."""
    if len(tokens) != len(pot_fractions):
        raise ValidationError(
            f"History has {len(tokens)} tokens but {len(pot_fractions)} pot fractions"
        )
    return "-".join(canonical_token(t, f) for t, f in zip(tokens, pot_fractions))
