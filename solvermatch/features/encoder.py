"""
Fixed-layout feature vector for similarity search.

Layout (61 float32 values, every one in [0, 1]):

    0        street code (flop 1/3, turn 2/3, river 1)
    1        game type (cash 0, mtt 1)
    2        pot type (limped, srp, 3bp, 4bp, 5bp -> 0, .25, .5, .75, 1)
    3-16     one-hot OOP position
    17-30    one-hot IP position
    31-38    board texture bytes, normalized
    39       hero is in position
    40       effective stack / max_stack_bb, clipped
    41       pot / max_pot_bb, clipped
    42-57    tag slots
    58-60    action-history hash bytes / 255
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

import numpy as np

from solvermatch.features.action_history import action_hash_bytes
from solvermatch.features.board_texture import extract_board_texture, normalize_texture
from solvermatch.features.tags import TAG_SLOTS, encode_tags
from solvermatch.game.hand import POT_TYPES, canonical_pot_type
from solvermatch.shared.config import FeatureConfig
from solvermatch.snapshots.assembler import SnapshotInput

logger = logging.getLogger(__name__)

VECTOR_DIM = 61

POSITION_SLOTS = (
    "empty",
    "utg",
    "utg+1",
    "utg+2",
    "utg+3",
    "lj",
    "mp",
    "mp+1",
    "mp+2",
    "hj",
    "co",
    "bu",
    "sb",
    "bb",
)
_POSITION_ALIASES = {"btn": "bu", "button": "bu", "ep": "utg", "": "empty"}

GAME_TYPES = ("cash", "mtt")

# Slice offsets
STREET_DIM = 0
GAME_TYPE_DIM = 1
POT_TYPE_DIM = 2
OOP_SLICE = slice(3, 3 + len(POSITION_SLOTS))
IP_SLICE = slice(OOP_SLICE.stop, OOP_SLICE.stop + len(POSITION_SLOTS))
TEXTURE_SLICE = slice(IP_SLICE.stop, IP_SLICE.stop + 8)
POSITION_FLAG_DIM = TEXTURE_SLICE.stop
STACK_DIM = POSITION_FLAG_DIM + 1
POT_DIM = STACK_DIM + 1
TAG_SLICE = slice(POT_DIM + 1, POT_DIM + 1 + TAG_SLOTS)
HASH_SLICE = slice(TAG_SLICE.stop, TAG_SLICE.stop + 3)

assert HASH_SLICE.stop == VECTOR_DIM


def position_slot(position: str) -> int:
    """Slot index for a position name; unknown names map to ``empty``."""
    name = position.strip().lower()
    name = _POSITION_ALIASES.get(name, name)
    try:
        return POSITION_SLOTS.index(name)
    except ValueError:
        return 0


def pot_type_code(pot_type: str) -> int:
    name = canonical_pot_type(pot_type)
    if name not in POT_TYPES:
        logger.debug(f"Unknown pot type {pot_type!r}, encoding as srp")
        name = "srp"
    return POT_TYPES.index(name)


class FeatureVectorEncoder:
    """Deterministic SnapshotInput -> 61-float vector."""

    def __init__(self, config: FeatureConfig | None = None):
        self.config = config or FeatureConfig()

    def encode(self, snapshot: SnapshotInput, tags: Iterable[str] = ()) -> np.ndarray:
        vector = np.zeros(VECTOR_DIM, dtype=np.float32)

        vector[STREET_DIM] = snapshot.street_enum.code / 3.0
        vector[GAME_TYPE_DIM] = float(GAME_TYPES.index(snapshot.game_type))
        vector[POT_TYPE_DIM] = pot_type_code(snapshot.pot_type) / (len(POT_TYPES) - 1)

        vector[OOP_SLICE.start + position_slot(snapshot.positions.oop)] = 1.0
        vector[IP_SLICE.start + position_slot(snapshot.positions.ip)] = 1.0

        vector[TEXTURE_SLICE] = normalize_texture(extract_board_texture(snapshot.board))

        vector[POSITION_FLAG_DIM] = 1.0 if snapshot.next_to_act == "ip" else 0.0
        vector[STACK_DIM] = min(snapshot.stack_bb / self.config.max_stack_bb, 1.0)
        vector[POT_DIM] = min(snapshot.pot_bb / self.config.max_pot_bb, 1.0)

        vector[TAG_SLICE] = encode_tags(tags)
        vector[HASH_SLICE] = [b / 255.0 for b in action_hash_bytes(snapshot)]

        return vector

    def encode_many(self, snapshots: Sequence[SnapshotInput]) -> np.ndarray:
        """Stack encodings into an ``(n, 61)`` matrix."""
        if not snapshots:
            return np.zeros((0, VECTOR_DIM), dtype=np.float32)
        return np.stack([self.encode(s) for s in snapshots])


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine similarity, 0.0 when either vector is all zeros."""
    norm = float(np.linalg.norm(a)) * float(np.linalg.norm(b))
    if norm == 0.0:
        return 0.0
    return float(np.dot(a, b) / norm)
