"""
Card representation for hand replay and solver-node analysis.

Cards wrap treys integers so hand evaluation stays fast, and additionally
expose a dense 0-51 index (``rank * 4 + suit``) used by the binary node
format and by numpy-based combo tables.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from treys import Card as TreysCard

from solvermatch.shared.errors import ValidationError

RANKS = "23456789TJQKA"
SUITS = "shdc"

# Module-level caches
_CARD_CACHE: dict[str, "Card"] = {}
_FULL_DECK_CACHE: List["Card"] | None = None


class Card:
    """
    A single playing card backed by a treys integer.

    Instances are interned: ``Card.new("As") is Card.new("As")``.
    """

    __slots__ = ("card_int", "rank", "suit", "index", "_text")

    def __init__(self, card_int: int):
        self.card_int = card_int
        self._text = TreysCard.int_to_str(card_int)
        self.rank = RANKS.index(self._text[0])
        self.suit = SUITS.index(self._text[1])
        self.index = self.rank * 4 + self.suit

    @classmethod
    def new(cls, card_str: str) -> "Card":
        """
        Create (or fetch the cached) card from text like ``"As"`` or ``"td"``.

        Raises:
            ValidationError: If the text is not a rank followed by a suit.
        """
        text = _normalize_card_text(card_str)
        card = _CARD_CACHE.get(text)
        if card is None:
            card = cls(TreysCard.new(text))
            _CARD_CACHE[text] = card
        return card

    @classmethod
    def from_index(cls, index: int) -> "Card":
        """Create a card from its dense 0-51 index."""
        if not 0 <= index < 52:
            raise ValidationError(f"Card index out of range: {index}")
        return cls.new(f"{RANKS[index // 4]}{SUITS[index % 4]}")

    @classmethod
    def get_full_deck(cls) -> List["Card"]:
        """Return a copy of the 52-card deck ordered by index."""
        global _FULL_DECK_CACHE

        if _FULL_DECK_CACHE is None:
            _FULL_DECK_CACHE = [cls.from_index(i) for i in range(52)]
        return _FULL_DECK_CACHE.copy()

    @property
    def rank_char(self) -> str:
        return self._text[0]

    @property
    def suit_char(self) -> str:
        return self._text[1]

    @property
    def rank_value(self) -> int:
        """Rank as a poker value (2..14, ace high)."""
        return self.rank + 2

    def __repr__(self) -> str:
        return self._text

    def __str__(self) -> str:
        return self._text

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Card):
            return NotImplemented
        return self.card_int == other.card_int

    def __hash__(self) -> int:
        return self.index

    def __lt__(self, other: "Card") -> bool:
        return self.index < other.index


def _normalize_card_text(card_str: str) -> str:
    if not isinstance(card_str, str) or len(card_str.strip()) != 2:
        raise ValidationError(f"Invalid card: {card_str!r}")
    text = card_str.strip()
    rank, suit = text[0].upper(), text[1].lower()
    if rank not in RANKS or suit not in SUITS:
        raise ValidationError(f"Invalid card: {card_str!r}")
    return f"{rank}{suit}"


def parse_cards(cards: str | Iterable[str]) -> Tuple[Card, ...]:
    """
    Parse a board or card list.

    Accepts either a concatenated string (``"AhKd7c"``) or an iterable of
    two-character strings. Duplicate cards are rejected.
    """
    if isinstance(cards, str):
        text = cards.replace(" ", "").replace(",", "")
        if len(text) % 2:
            raise ValidationError(f"Odd-length card string: {cards!r}")
        tokens: Sequence[str] = [text[i : i + 2] for i in range(0, len(text), 2)]
    else:
        tokens = list(cards)

    parsed = tuple(Card.new(token) for token in tokens)
    if len(set(parsed)) != len(parsed):
        raise ValidationError(f"Duplicate cards in {cards!r}")
    return parsed


def parse_hole_cards(text: str) -> Tuple[Card, Card]:
    """Parse exactly two hole cards, e.g. ``"AhKh"``."""
    cards = parse_cards(text)
    if len(cards) != 2:
        raise ValidationError(f"Hole cards must be exactly 2 cards, got {text!r}")
    return cards[0], cards[1]


def cards_to_str(cards: Iterable[Card]) -> str:
    """Concatenate cards back to text (``"AhKh"``)."""
    return "".join(repr(card) for card in cards)
