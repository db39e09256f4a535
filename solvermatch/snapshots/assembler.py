"""
SnapshotInput assembly.

A ``SnapshotInput`` is the canonical, chip-size-independent description of
one hero decision: amounts in big blinds, positions reduced to the heads-up
pair, and an action history pruned to hero and villain postflop actions.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from solvermatch.game.hand import Hand, canonical_pot_type
from solvermatch.game.positions import resolve_positions
from solvermatch.game.state import Street
from solvermatch.snapshots.decision_points import DecisionPoint


class PositionPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    ip: str
    oop: str


class SnapshotInput(BaseModel):
    """
    Canonical description of one postflop hero decision.

    ``action_history`` holds display tokens (``"Bet 4.00"``); the parallel
    ``action_pot_fractions`` holds each token's size relative to the pot it
    was made into (0 for non-aggressive actions), which feature encoding
    uses for pot-relative bucketing.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    street: Literal["FLOP", "TURN", "RIVER"]
    board: tuple[str, ...]
    pot_bb: float = Field(ge=0)
    stack_bb: float = Field(ge=0)
    positions: PositionPair
    action_history: tuple[str, ...] = ()
    action_pot_fractions: tuple[float, ...] = ()
    game_type: Literal["cash", "mtt"] = "cash"
    pot_type: str = "srp"
    next_to_act: Literal["ip", "oop"]
    hero_cards: Optional[str] = Field(default=None, alias="heroCards")

    @field_validator("street", mode="before")
    @classmethod
    def upper_street(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator("pot_type", mode="before")
    @classmethod
    def canonical_pot(cls, value):
        return canonical_pot_type(value) if isinstance(value, str) else value

    @computed_field
    @property
    def positions_ip(self) -> str:
        return self.positions.ip

    @computed_field
    @property
    def positions_oop(self) -> str:
        return self.positions.oop

    @property
    def street_enum(self) -> Street:
        return Street.from_label(self.street)


def assemble_snapshot_input(
    point: DecisionPoint, hand: Hand, hero_seat: int, villain_seat: int
) -> SnapshotInput:
    """Build the SnapshotInput for one decision point against the chosen villain."""
    state = point.state
    bb = hand.big_blind

    positions = resolve_positions(
        hand.position_of(hero_seat), hand.position_of(villain_seat), hero_seat, villain_seat
    )

    pruned = [
        record
        for record in point.prior_actions
        if record.street.is_postflop() and record.seat in (hero_seat, villain_seat)
    ]

    return SnapshotInput(
        street=state.street.name,
        board=tuple(repr(card) for card in state.board),
        pot_bb=state.pot / bb,
        stack_bb=min(state.stacks[hero_seat], state.stacks[villain_seat]) / bb,
        positions=PositionPair(ip=positions.ip, oop=positions.oop),
        action_history=tuple(record.action.to_token(bb) for record in pruned),
        action_pot_fractions=tuple(
            round(record.action.pot_fraction(record.pot_before), 6) for record in pruned
        ),
        game_type=hand.game_type,
        pot_type=hand.pot_type,
        next_to_act=positions.hero,
        hero_cards=hand.hero_cards(),
    )
