"""
Solver action labels with bet sizing.

Labels come in two formats: an amount in big blinds (``"Bet 9.75"``,
relative to the solver's pot) or a pot fraction (``"Bet 0.75x"``, applied to
the live pot). Short labels (``"B 9.75"``, ``"X"``) are accepted too.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_TYPES = {
    "bet": "bet",
    "b": "bet",
    "raise": "raise",
    "r": "raise",
    "check": "check",
    "x": "check",
    "call": "call",
    "c": "call",
    "fold": "fold",
    "f": "fold",
}
_SIZED_RE = re.compile(r"^(Bet|Raise|B|R)\s+(\d+(?:\.\d+)?)(x)?$", re.IGNORECASE)


@dataclass(frozen=True)
class Sizing:
    bb: float
    pot_fraction: float
    chips: int
    category: str

    def to_dict(self) -> dict:
        return {
            "bb": self.bb,
            "potFraction": self.pot_fraction,
            "chips": self.chips,
            "category": self.category,
        }


@dataclass(frozen=True)
class ParsedAction:
    action: str
    action_type: Optional[str]
    sizing: Optional[Sizing] = None


def sizing_category(pot_fraction: float) -> str:
    if pot_fraction < 0.33:
        return "small"
    if pot_fraction < 0.5:
        return "medium-small"
    if pot_fraction < 0.75:
        return "medium"
    if pot_fraction < 1.0:
        return "large"
    if pot_fraction < 1.5:
        return "overbet"
    return "massive-overbet"


def parse_action_sizing(
    label: str, solver_pot_bb: float, actual_pot_bb: float, bb_size: float = 2.0
) -> ParsedAction:
    """
    Parse a solver label. Unrecognized labels come back with ``action_type``
    None rather than raising.
    """
    text = label.strip()
    plain = _TYPES.get(text.lower())
    if plain in ("check", "call", "fold"):
        return ParsedAction(label, plain)

    match = _SIZED_RE.match(text)
    if match is None:
        return ParsedAction(label, plain)

    action_type = _TYPES[match.group(1).lower()]
    value = float(match.group(2))
    if match.group(3):
        pot_fraction = value
        amount_bb = pot_fraction * actual_pot_bb
    else:
        amount_bb = value
        pot_fraction = amount_bb / solver_pot_bb if solver_pot_bb > 0 else 0.0

    return ParsedAction(
        label,
        action_type,
        Sizing(
            bb=round(amount_bb, 2),
            pot_fraction=round(pot_fraction, 3),
            chips=int(round(pot_fraction * actual_pot_bb * bb_size)),
            category=sizing_category(pot_fraction),
        ),
    )


def format_sizing(parsed: ParsedAction, unit: str = "fraction") -> str:
    """Render as ``"Bet 0.75x"``, ``"Bet 9.75"`` (bb) or ``"Bet 195"`` (chips)."""
    if parsed.sizing is None or parsed.action_type is None:
        return parsed.action
    name = parsed.action_type.capitalize()
    if unit == "bb":
        return f"{name} {parsed.sizing.bb}"
    if unit == "chips":
        return f"{name} {parsed.sizing.chips}"
    return f"{name} {parsed.sizing.pot_fraction}x"
