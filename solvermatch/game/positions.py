"""
Table positions: postflop acting order, in/out of position, and buckets.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

# Postflop acting order, first to act first. Later in this list = in position.
POSTFLOP_ORDER = ("bb", "sb", "utg", "utg+1", "mp", "mp+1", "co", "btn", "bu")

POSITION_BUCKETS: dict[str, tuple[str, ...]] = {
    "EARLY": ("utg", "utg+1", "utg+2", "utg+3"),
    "MP": ("mp", "mp+1", "mp+2", "lj"),
    "LP": ("hj", "co", "bu", "btn"),
    "BLINDS": ("sb", "bb"),
}
_POSITION_TO_BUCKET = {pos: bucket for bucket, names in POSITION_BUCKETS.items() for pos in names}

RelativePosition = Literal["ip", "oop"]


@dataclass(frozen=True)
class HeadsUpPositions:
    """Positions of the modeled two-player subgame."""

    ip: str
    oop: str
    hero: RelativePosition

    @property
    def villain(self) -> RelativePosition:
        return "oop" if self.hero == "ip" else "ip"


def resolve_positions(
    hero_position: str, villain_position: str, hero_seat: int, villain_seat: int
) -> HeadsUpPositions:
    """
    Decide who is in position between hero and villain.

    Uses the postflop acting order when both names are known; otherwise the
    higher seat index is treated as in position.
    """
    hero_pos = hero_position.lower()
    villain_pos = villain_position.lower()

    if hero_pos in POSTFLOP_ORDER and villain_pos in POSTFLOP_ORDER:
        hero_is_ip = POSTFLOP_ORDER.index(hero_pos) > POSTFLOP_ORDER.index(villain_pos)
    else:
        hero_is_ip = hero_seat > villain_seat

    if hero_is_ip:
        return HeadsUpPositions(ip=hero_pos, oop=villain_pos, hero="ip")
    return HeadsUpPositions(ip=villain_pos, oop=hero_pos, hero="oop")


def position_bucket(position: str) -> Optional[str]:
    """EARLY / MP / LP / BLINDS, or None for unknown names."""
    return _POSITION_TO_BUCKET.get(position.lower())
