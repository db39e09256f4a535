"""Descriptive board analysis for solver blocks."""

from __future__ import annotations

from collections import Counter
from typing import List, Sequence

from solvermatch.features.board_texture import extract_board_texture, texture_name
from solvermatch.game.cards import RANKS, Card

_TEN = RANKS.index("T")
_SIX = RANKS.index("6")


def _wetness(texture: str, connected: bool, gapped: bool, paired: bool) -> str:
    score = {"monotone": 2, "two-tone": 1}.get(texture, 0)
    if connected:
        score += 2
    elif gapped:
        score += 1
    if paired:
        score -= 1
    if score >= 3:
        return "wet"
    if score >= 1:
        return "semi-wet"
    return "dry"


def analyze_board(board: Sequence[Card]) -> dict:
    """
    ``{"texture", "isPaired", "pairType", "archetype": {"high", "mid", "low"},
    "highCard", "wetness", "textureTags"}`` for a 3-5 card board.

    Raises:
        ValueError: Fewer than three cards.
    """
    if len(board) < 3:
        raise ValueError(f"Board analysis needs at least 3 cards, got {len(board)}")

    paired, _, _, connected, _, bits, ace, max_rank = extract_board_texture(board)
    texture = texture_name(board)
    counts = Counter(card.rank for card in board)
    top_count = max(counts.values())
    pair_type = "trips" if top_count >= 3 else "paired" if top_count == 2 else "none"

    archetype = {"high": 0, "mid": 0, "low": 0}
    for card in board:
        if card.rank >= _TEN:
            archetype["high"] += 1
        elif card.rank >= _SIX:
            archetype["mid"] += 1
        else:
            archetype["low"] += 1

    wetness = _wetness(texture, bool(connected), bool(bits & 0b001), bool(paired))

    tags: List[str] = [texture]
    if pair_type != "none":
        tags.append(pair_type)
    if connected:
        tags.append("connected")
    if ace:
        tags.append("ace-high")
    elif max_rank >= _TEN:
        tags.append("broadway-high")
    elif archetype["mid"] == 0:
        tags.append("low")
    if bits & 0b100:
        tags.append("broadway-heavy")
    if bits & 0b010:
        tags.append("wheel-possible")
    tags.append(wetness)

    return {
        "texture": texture,
        "isPaired": bool(paired),
        "pairType": pair_type,
        "archetype": archetype,
        "highCard": RANKS[max_rank],
        "wetness": wetness,
        "textureTags": tags,
    }


DEFAULT_BOARD_ANALYSIS = {
    "texture": "Unknown",
    "isPaired": False,
    "pairType": "none",
    "archetype": {"high": 0, "mid": 0, "low": 0},
    "highCard": "",
    "wetness": "dry",
    "textureTags": [],
}
