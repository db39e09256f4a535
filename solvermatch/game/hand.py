"""
Structured hand record consumed by snapshot generation.

The record is produced upstream by a hand-history importer and is treated
as read-only here. Field names follow the importer's camelCase payload;
Python attributes are snake_case via aliases.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from solvermatch.game.actions import NON_DECISION_LABELS, Action, ActionType
from solvermatch.game.cards import Card, parse_cards
from solvermatch.game.state import Street
from solvermatch.shared.errors import ValidationError


POT_TYPES = ("limped", "srp", "3bp", "4bp", "5bp")
_POT_TYPE_ALIASES = {
    "limp": "limped",
    "3bet": "3bp",
    "4bet": "4bp",
    "5bet": "5bp",
    "5bp+": "5bp",
    # All-in preflop: grouped with the most committed raised pots
    "aipf": "5bp",
}


def canonical_pot_type(pot_type: str) -> str:
    """Importer pot-type label -> one of :data:`POT_TYPES`, or the lowercased label if unknown."""
    name = pot_type.strip().lower()
    return _POT_TYPE_ALIASES.get(name, name)


class HandModel(BaseModel):
    """Base for hand payload models: immutable, camelCase aliases accepted."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class HandHeader(HandModel):
    small_blind: float = Field(default=0.0, alias="sb", ge=0)
    big_blind: float = Field(default=1.0, alias="bb", gt=0)
    ante: float = Field(default=0.0, ge=0)
    game_type: str = Field(default="cash", alias="gametype")


class PlayerChips(HandModel):
    chips: float = Field(ge=0)
    position: Optional[str] = Field(default=None, alias="pos")
    hero: bool = False


class ActionPayload(HandModel):
    type: str
    amount: float = Field(default=0.0, ge=0)

    @model_validator(mode="before")
    @classmethod
    def pick_amount(cls, data: Any) -> Any:
        # Importers disagree on the amount key
        if isinstance(data, dict) and not data.get("amount"):
            for key in ("chips", "bet"):
                if data.get(key):
                    return {**data, "amount": data[key]}
        return data


class ScriptEntry(HandModel):
    """Either a street marker (``isNewStreet``) or one seat's action."""

    street: Optional[str] = None
    player_index: Optional[int] = Field(default=None, alias="playerIndex", ge=0)
    action: Optional[ActionPayload] = None
    is_new_street: bool = Field(default=False, alias="isNewStreet")

    @property
    def is_bookkeeping(self) -> bool:
        """Blind posts, showdown entries, pot collection and returned bets."""
        if self.street is not None and (
            Street.is_blind_post_label(self.street) or Street.is_showdown_label(self.street)
        ):
            return True
        return self.action is not None and self.action.type.strip().lower() in NON_DECISION_LABELS

    @property
    def is_action(self) -> bool:
        return (
            not self.is_new_street
            and self.action is not None
            and self.player_index is not None
            and not self.is_bookkeeping
        )


class HandInfo(HandModel):
    hero_seat_index: Optional[int] = Field(default=None, alias="heroSeatIndex", ge=0)
    pot_type: str = Field(default="srp", alias="potType")


class HoleCards(HandModel):
    card1: str
    card2: str


class PreflopSummary(HandModel):
    cards: Optional[HoleCards] = None


class Hand(HandModel):
    """
    A recorded hand.

    Invariants (checked on construction): exactly one hero seat, every action
    references an existing seat, board cards are valid and distinct.
    """

    header: HandHeader = Field(default_factory=HandHeader)
    player_chips: list[PlayerChips] = Field(alias="playerChips", min_length=2)
    action_script: list[ScriptEntry] = Field(default_factory=list, alias="actionScript")
    board: list[str] = Field(default_factory=list)
    info: HandInfo = Field(default_factory=HandInfo)
    preflop_summary: Optional[PreflopSummary] = Field(default=None, alias="preflopSummary")

    @field_validator("board", mode="before")
    @classmethod
    def board_as_list(cls, value: Any) -> Any:
        # {card1: "8d", card2: "9s", ...} -> ["8d", "9s", ...]
        if isinstance(value, dict):
            return [value[k] for k in sorted(value) if value[k]]
        if isinstance(value, str):
            text = value.replace(" ", "")
            return [text[i : i + 2] for i in range(0, len(text), 2)]
        return value

    @model_validator(mode="after")
    def check_consistency(self) -> "Hand":
        seats = len(self.player_chips)
        flagged = [i for i, p in enumerate(self.player_chips) if p.hero]
        if self.info.hero_seat_index is None:
            if len(flagged) != 1:
                raise ValueError(f"Expected exactly one hero seat, found {len(flagged)}")
        elif self.info.hero_seat_index >= seats:
            raise ValueError(f"heroSeatIndex {self.info.hero_seat_index} out of range")

        for i, entry in enumerate(self.action_script):
            if entry.player_index is not None and entry.player_index >= seats:
                raise ValueError(f"actionScript[{i}] references seat {entry.player_index}")
            if entry.is_action:
                ActionType.from_label(entry.action.type)
            if entry.street is not None and not Street.is_showdown_label(entry.street):
                Street.from_label(entry.street)

        if len(self.board) > 5:
            raise ValueError(f"Board has {len(self.board)} cards")
        parse_cards(self.board)
        return self

    @classmethod
    def parse(cls, data: dict[str, Any]) -> "Hand":
        """
        Validate a raw payload.

        Raises:
            ValidationError: With the pydantic error summary as the message.
        """
        try:
            return cls.model_validate(data)
        except pydantic.ValidationError as exc:
            raise ValidationError(f"Invalid hand: {exc}") from exc

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    @property
    def hero_seat(self) -> int:
        if self.info.hero_seat_index is not None:
            return self.info.hero_seat_index
        return next(i for i, p in enumerate(self.player_chips) if p.hero)

    @property
    def big_blind(self) -> float:
        return self.header.big_blind

    @property
    def game_type(self) -> Literal["cash", "mtt"]:
        return "mtt" if self.header.game_type.lower() in ("tournament", "mtt") else "cash"

    @property
    def pot_type(self) -> str:
        return canonical_pot_type(self.info.pot_type)

    def board_cards(self) -> tuple[Card, ...]:
        return parse_cards(self.board)

    def hero_cards(self) -> Optional[str]:
        """Hero hole cards as ``"AhKh"``, or None when not recorded."""
        if self.preflop_summary is None or self.preflop_summary.cards is None:
            return None
        cards = self.preflop_summary.cards
        return f"{cards.card1}{cards.card2}"

    def position_of(self, seat: int) -> str:
        """Lowercase position name for a seat, ``seat<N>`` when unknown."""
        pos = self.player_chips[seat].position
        return pos.lower() if pos else f"seat{seat}"

    def action_of(self, entry: ScriptEntry) -> Action:
        """Convert a script entry's payload to a typed :class:`Action`."""
        if entry.action is None:
            raise ValidationError("Script entry has no action")
        action_type = ActionType.from_label(entry.action.type)
        amount = entry.action.amount
        if action_type in (ActionType.FOLD, ActionType.CHECK):
            amount = 0.0
        return Action(action_type, amount)
