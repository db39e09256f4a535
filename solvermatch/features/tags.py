"""
Strategic tag vocabulary.

The feature vector reserves one slot per tag. Tags are attached to indexed
nodes by the corpus builder; live snapshots usually carry none, in which
case the slots stay zero.
"""

from __future__ import annotations

from typing import Iterable, Tuple

TAG_VOCABULARY: Tuple[str, ...] = (
    "cbet",
    "delayed_cbet",
    "donk",
    "probe",
    "check_raise",
    "float",
    "barrel",
    "triple_barrel",
    "overbet",
    "small_bet",
    "block_bet",
    "check_back",
    "facing_raise",
    "all_in",
    "low_spr",
    "deep_stack",
)
TAG_SLOTS = len(TAG_VOCABULARY)
_TAG_INDEX = {tag: i for i, tag in enumerate(TAG_VOCABULARY)}


def tag_ids(tags: Iterable[str]) -> Tuple[int, ...]:
    """Indices of known tags, sorted and de-duplicated. Unknown tags are ignored."""
    return tuple(sorted({_TAG_INDEX[t] for t in tags if t in _TAG_INDEX}))


def encode_tags(tags: Iterable[str]) -> Tuple[float, ...]:
    """Multi-hot vector over the tag vocabulary."""
    slots = [0.0] * TAG_SLOTS
    for i in tag_ids(tags):
        slots[i] = 1.0
    return tuple(slots)
