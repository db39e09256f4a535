"""Turn a hand into its list of modelable snapshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List

from solvermatch.game.hand import Hand
from solvermatch.snapshots.assembler import SnapshotInput, assemble_snapshot_input
from solvermatch.snapshots.decision_points import DecisionPoint, detect_decision_points
from solvermatch.snapshots.villain import is_villain_relevant, select_primary_villain

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedSnapshot:
    index: int
    decision_point: DecisionPoint
    primary_villain: int
    primary_villain_position: str
    snapshot_input: SnapshotInput


def generate_snapshots(hand: Hand | dict[str, Any]) -> List[GeneratedSnapshot]:
    """
    Replay ``hand`` and build one snapshot per relevant hero decision.

    ``index`` is the decision point's position among all detected points, so
    indices can have gaps where points were dropped as no longer modelable.

    Raises:
        ValidationError: If the hand payload is malformed.
    """
    if not isinstance(hand, Hand):
        hand = Hand.parse(hand)

    hero = hand.hero_seat
    points = detect_decision_points(hand)
    if not points:
        return []

    villain = select_primary_villain(points[0].state, hero)
    if villain is None:
        logger.debug("No opponent left at the first postflop decision; no snapshots")
        return []
    villain_position = hand.position_of(villain)

    snapshots: List[GeneratedSnapshot] = []
    for index, point in enumerate(points):
        if not is_villain_relevant(point, villain, hero):
            logger.debug(f"Dropping decision point {index}: villain seat {villain} not modelable")
            continue
        snapshots.append(
            GeneratedSnapshot(
                index=index,
                decision_point=point,
                primary_villain=villain,
                primary_villain_position=villain_position,
                snapshot_input=assemble_snapshot_input(point, hand, hero, villain),
            )
        )
    return snapshots
