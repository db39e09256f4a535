"""Pot-bucketed action history and its compact hash."""

from __future__ import annotations

from typing import Tuple

import xxhash

from solvermatch.game.actions import action_sequence, canonical_history
from solvermatch.snapshots.assembler import SnapshotInput

HASH_BYTES = 3


def canonical_action_string(snapshot: SnapshotInput) -> str:
    """e.g. ``"X-B50-C-X-X"``; empty string for an empty history."""
    return canonical_history(snapshot.action_history, snapshot.action_pot_fractions)


def action_hash(canonical: str) -> int:
    """32-bit xxhash of the canonical string; 0 for an empty history."""
    if not canonical:
        return 0
    return xxhash.xxh32(canonical.encode("utf-8"), seed=0).intdigest()


def action_hash_bytes(snapshot: SnapshotInput) -> Tuple[int, ...]:
    """Low three bytes of :func:`action_hash`, least significant first."""
    digest = action_hash(canonical_action_string(snapshot))
    return tuple((digest >> (8 * i)) & 0xFF for i in range(HASH_BYTES))


def snapshot_action_sequence(snapshot: SnapshotInput) -> str:
    """Symbol sequence used as an exact-match index filter, e.g. ``"X-B-C"``."""
    return action_sequence(snapshot.action_history)
