"""Tests for canonical action strings and their hash."""

from solvermatch.features.action_history import (
    action_hash,
    action_hash_bytes,
    canonical_action_string,
    snapshot_action_sequence,
)


def test_canonical_string(river_snapshot):
    assert canonical_action_string(river_snapshot) == "X-B50-C-X-X-B75"


def test_sequence(river_snapshot):
    assert snapshot_action_sequence(river_snapshot) == "X-B-C-X-X-B"


def test_empty_history_hashes_to_zero(river_snapshot):
    empty = river_snapshot.model_copy(update={"action_history": (), "action_pot_fractions": ()})
    assert action_hash("") == 0
    assert action_hash_bytes(empty) == (0, 0, 0)


def test_hash_is_stable_and_size_bucketed(river_snapshot):
    # 0.52 and 0.5 land in the same bucket
    nearby = river_snapshot.model_copy(
        update={"action_pot_fractions": (0.0, 0.52, 0.0, 0.0, 0.0, 0.75)}
    )
    assert action_hash_bytes(river_snapshot) == action_hash_bytes(nearby)
    assert all(0 <= b <= 255 for b in action_hash_bytes(river_snapshot))


def test_different_sizes_hash_differently(river_snapshot):
    overbet = river_snapshot.model_copy(
        update={"action_pot_fractions": (0.0, 0.5, 0.0, 0.0, 0.0, 1.5)}
    )
    assert action_hash(canonical_action_string(overbet)) != action_hash(
        canonical_action_string(river_snapshot)
    )
