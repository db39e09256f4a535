"""
Primary villain selection and per-snapshot relevance.

A hand's postflop spots are modeled heads-up against one opposing seat,
chosen once from the first postflop decision point.
"""

from __future__ import annotations

from typing import Optional

from solvermatch.game.state import GameState, SeatStatus
from solvermatch.snapshots.decision_points import DecisionPoint


def select_primary_villain(state: GameState, hero_seat: int) -> Optional[int]:
    """
    Pick the seat to model against.

    Order of preference with two or more live opponents:
      1. the most recent bettor/raiser on the current street who is still in
      2. the first live seat after the hero by seat index, wrapping around

    Returns:
        Seat index, or None when nobody but the hero is left.
    """
    candidates = [seat for seat in state.active_seats() if seat != hero_seat]
    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]

    for record in reversed(state.street_actions):
        if (
            record.action.is_aggressive()
            and record.seat != hero_seat
            and record.seat in candidates
        ):
            return record.seat

    ordered = sorted(candidates)
    for seat in ordered:
        if seat > hero_seat:
            return seat
    return ordered[0]


def is_villain_relevant(point: DecisionPoint, villain_seat: int, hero_seat: int) -> bool:
    """
    Whether a decision point can still be modeled against ``villain_seat``.

    The check only looks at the current street: a third seat betting or
    raising earlier on this street means the villain is no longer the
    street's sole aggressor. Earlier streets are not inspected.
    """
    state = point.state
    if state.statuses[villain_seat] != SeatStatus.ACTIVE:
        return False
    if state.street.is_preflop():
        return False
    for record in state.street_actions:
        if record.seat not in (hero_seat, villain_seat) and record.action.is_aggressive():
            return False
    return True
