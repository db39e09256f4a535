"""
Board texture bytes and coarse board names used for indexing.

The 8-byte texture layout (stored raw in node metadata, normalized in the
feature vector):

    0  paired flag            any rank repeated on the board
    1  monotone flag          flop cards share one suit
    2  two-tone flag          flop cards use exactly two suits
    3  connected flag         three distinct flop ranks spanning <= 4
    4  rank archetype code    index into ARCHETYPES
    5  secondary bitfield     bit0 one-gap, bit1 wheel potential, bit2 broadway potential
    6  ace-present flag
    7  max rank               0 (deuce) .. 12 (ace)
"""

from __future__ import annotations

from collections import Counter
from typing import Sequence, Tuple

from solvermatch.game.cards import RANKS, Card, parse_cards

ARCHETYPES = ("HHH", "HHL", "HHM", "HLL", "HLM", "HMM", "LLL", "LLM", "LMM", "MMM")

TEXTURE_BYTES = 8
BITFIELD_MAX = 0b111

_GAPPED = 0b001
_WHEEL = 0b010
_BROADWAY = 0b100


def _as_cards(board: Sequence[Card] | Sequence[str]) -> Tuple[Card, ...]:
    if board and isinstance(board[0], Card):
        return tuple(board)  # type: ignore[arg-type]
    return parse_cards(list(board))  # type: ignore[arg-type]


def flop_archetype(board: Sequence[Card] | Sequence[str]) -> str:
    """
    Rank mix of the flop: each card is H (T and up), M (6-9) or L (5 and
    below), letters sorted, e.g. ``"HLM"``. ``"Unknown"`` before the flop.
    """
    if len(board) < 3:
        return "Unknown"
    letters = []
    for card in _as_cards(board)[:3]:
        if card.rank >= 8:
            letters.append("H")
        elif card.rank >= 4:
            letters.append("M")
        else:
            letters.append("L")
    return "".join(sorted(letters))


def texture_name(board: Sequence[Card] | Sequence[str]) -> str:
    """``monotone`` / ``two-tone`` / ``rainbow`` from the flop suits."""
    if len(board) < 3:
        return "Unknown"
    suits = {card.suit for card in _as_cards(board)[:3]}
    if len(suits) == 1:
        return "monotone"
    if len(suits) == 2:
        return "two-tone"
    return "rainbow"


def extract_board_texture(board: Sequence[Card] | Sequence[str]) -> Tuple[int, ...]:
    """Compute the 8 texture bytes. Boards with fewer than 3 cards are all zero."""
    if len(board) < 3:
        return (0,) * TEXTURE_BYTES

    cards = _as_cards(board)
    flop = cards[:3]
    rank_counts = Counter(card.rank for card in cards)
    flop_suits = {card.suit for card in flop}
    flop_ranks = sorted({card.rank for card in flop})

    paired = int(max(rank_counts.values()) >= 2)
    monotone = int(len(flop_suits) == 1)
    two_tone = int(len(flop_suits) == 2)
    connected = int(len(flop_ranks) == 3 and _span(flop_ranks) <= 4)
    archetype = ARCHETYPES.index(flop_archetype(flop))

    unique_ranks = sorted(rank_counts)
    bits = 0
    if any(b - a == 2 for a, b in zip(unique_ranks, unique_ranks[1:])):
        bits |= _GAPPED
    if sum(1 for r in unique_ranks if r <= RANKS.index("5") or r == RANKS.index("A")) >= 2:
        bits |= _WHEEL
    if sum(1 for r in unique_ranks if r >= RANKS.index("T")) >= 2:
        bits |= _BROADWAY

    ace = int(RANKS.index("A") in rank_counts)
    max_rank = max(rank_counts)

    return (paired, monotone, two_tone, connected, archetype, bits, ace, max_rank)


def _span(ranks: Sequence[int]) -> int:
    """Rank span, also trying the ace as a low card."""
    span = ranks[-1] - ranks[0]
    if ranks[-1] == RANKS.index("A"):
        low = sorted([-1] + list(ranks[:-1]))
        span = min(span, low[-1] - low[0])
    return span


def normalize_texture(texture: Sequence[int]) -> Tuple[float, ...]:
    """Scale texture bytes into [0, 1] for the feature vector."""
    paired, monotone, two_tone, connected, archetype, bits, ace, max_rank = texture
    return (
        float(paired),
        float(monotone),
        float(two_tone),
        float(connected),
        archetype / (len(ARCHETYPES) - 1),
        bits / BITFIELD_MAX,
        float(ace),
        max_rank / (len(RANKS) - 1),
    )
