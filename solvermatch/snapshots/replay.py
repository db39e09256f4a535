"""
Hand replay.

The tracker walks a hand's action script and keeps every intermediate
``GameState`` in an append-only arena. Each replayed action remembers the
arena index of the state it was applied to, so the pre-action state of any
action can be looked up after the fact without re-running the replay.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from solvermatch.game.actions import Action
from solvermatch.game.hand import Hand, ScriptEntry
from solvermatch.game.state import GameState, Street, advance_street, apply_action

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReplayStep:
    """One applied action: where it came from and which arena states bracket it."""

    script_index: int
    seat: int
    action: Action
    state_before: int
    state_after: int


class GameStateTracker:
    """
    Replays a hand into an arena of immutable states.

    ``states[0]`` is the preflop state with blinds and antes in the pot.
    """

    def __init__(self, hand: Hand):
        self.hand = hand
        self._full_board = hand.board_cards()
        header = hand.header
        self.states: List[GameState] = [
            GameState.initial(
                stacks=[p.chips for p in hand.player_chips],
                small_blind=header.small_blind,
                big_blind=header.big_blind,
                ante=header.ante,
            )
        ]
        self.steps: List[ReplayStep] = []

    @property
    def current(self) -> GameState:
        return self.states[-1]

    @property
    def current_index(self) -> int:
        return len(self.states) - 1

    def state(self, index: int) -> GameState:
        return self.states[index]

    def state_before(self, step: ReplayStep) -> GameState:
        """State captured just before ``step``'s action was applied."""
        return self.states[step.state_before]

    def change_street(self, street: Street) -> GameState:
        """Advance to ``street`` (no-op if already there)."""
        nxt = advance_street(self.current, street, self._full_board)
        if nxt is not self.current:
            self.states.append(nxt)
            logger.debug(f"Street -> {street}: {nxt}")
        return nxt

    def apply(self, script_index: int, entry: ScriptEntry) -> ReplayStep | None:
        """
        Apply one script entry. Street markers only move the street;
        action entries also move the street first when they are tagged
        with a later one. Showdown entries, blind posts, pot collection and
        returned bets leave the state untouched.
        """
        if entry.street is not None:
            if Street.is_showdown_label(entry.street):
                return None
            self.change_street(Street.from_label(entry.street))
        if not entry.is_action:
            return None

        action = self.hand.action_of(entry)
        before = self.current_index
        self.states.append(apply_action(self.current, entry.player_index, action))
        step = ReplayStep(
            script_index=script_index,
            seat=entry.player_index,
            action=action,
            state_before=before,
            state_after=self.current_index,
        )
        self.steps.append(step)
        return step

    def replay(self) -> List[ReplayStep]:
        """Apply the whole action script and return the replayed steps."""
        for i, entry in enumerate(self.hand.action_script):
            self.apply(i, entry)
        return list(self.steps)
