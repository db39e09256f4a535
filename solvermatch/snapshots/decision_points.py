"""Detect the hero's postflop decision points in a replayed hand."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from solvermatch.game.actions import Action
from solvermatch.game.hand import Hand
from solvermatch.game.state import GameState, SeatAction
from solvermatch.snapshots.replay import GameStateTracker


@dataclass(frozen=True)
class DecisionPoint:
    """
    A hero action together with the state it was taken from.

    Attributes:
        script_index: Position of the hero action in the hand's action script
        state: Game state just before the hero acted
        hero_action: What the hero did
        prior_actions: Every action (all streets, all seats) before this one
    """

    script_index: int
    state: GameState
    hero_action: Action

    @property
    def prior_actions(self) -> Tuple[SeatAction, ...]:
        return self.state.history


def detect_decision_points(
    hand: Hand, tracker: Optional[GameStateTracker] = None
) -> List[DecisionPoint]:
    """
    Single forward pass over the action script.

    Every hero action on the flop, turn or river becomes a decision point.
    Preflop hero actions still update the replay but are not emitted.
    """
    tracker = tracker or GameStateTracker(hand)
    hero = hand.hero_seat
    points: List[DecisionPoint] = []

    for step in tracker.replay():
        if step.seat != hero:
            continue
        before = tracker.state_before(step)
        if before.street.is_preflop():
            continue
        points.append(
            DecisionPoint(script_index=step.script_index, state=before, hero_action=step.action)
        )

    return points
