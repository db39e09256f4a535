"""End-to-end snapshot generation for recorded hands."""

import numpy as np
import pytest

from solvermatch.features.encoder import POSITION_FLAG_DIM, STREET_DIM, FeatureVectorEncoder
from solvermatch.game.hand import Hand
from solvermatch.shared.errors import ValidationError
from solvermatch.snapshots.generator import generate_snapshots
from tests.conftest import scenario_payload

DOCUMENTED_RIVER_HISTORY = ["Check", "Bet 4.00", "Call", "Check", "Check"]


def multiway_payload():
    """
    Three seats see the flop. Hero (BB) is modeled against the CO; the BTN's
    flop bet makes the flop call unmodelable.
    """
    return {
        "header": {"sb": 50, "bb": 100},
        "playerChips": [
            {"chips": 10000, "pos": "SB"},
            {"chips": 10000, "pos": "BB", "hero": True},
            {"chips": 10000, "pos": "CO"},
            {"chips": 10000, "pos": "BTN"},
        ],
        "board": ["Ah", "8c", "3d", "Ts"],
        "actionScript": [
            {"street": "preflop", "playerIndex": 2, "action": {"type": "call", "amount": 100}},
            {"street": "preflop", "playerIndex": 3, "action": {"type": "call", "amount": 100}},
            {"street": "preflop", "playerIndex": 0, "action": {"type": "fold"}},
            {"street": "preflop", "playerIndex": 1, "action": {"type": "check"}},
            {"street": "flop", "isNewStreet": True},
            {"street": "flop", "playerIndex": 1, "action": {"type": "check"}},
            {"street": "flop", "playerIndex": 2, "action": {"type": "check"}},
            {"street": "flop", "playerIndex": 3, "action": {"type": "bet", "amount": 150}},
            {"street": "flop", "playerIndex": 1, "action": {"type": "call", "amount": 150}},
            {"street": "flop", "playerIndex": 2, "action": {"type": "call", "amount": 150}},
            {"street": "turn", "isNewStreet": True},
            {"street": "turn", "playerIndex": 1, "action": {"type": "check"}},
            {"street": "turn", "playerIndex": 2, "action": {"type": "bet", "amount": 400}},
            {"street": "turn", "playerIndex": 3, "action": {"type": "fold"}},
            {"street": "turn", "playerIndex": 1, "action": {"type": "call", "amount": 400}},
        ],
    }


def showdown_payload():
    """Scenario hand as the importer records it: blind posts, a river call, showdown."""
    payload = scenario_payload()
    script = payload["actionScript"][:-1]
    script[:0] = [
        {"street": "posts", "playerIndex": 0, "action": {"type": "bet", "amount": 50}},
        {"street": "posts", "playerIndex": 1, "action": {"type": "bet", "amount": 100}},
    ]
    script += [
        {"street": "river", "playerIndex": 1, "action": {"type": "call", "amount": 1200}},
        {"street": "showdown", "isNewStreet": True},
        {"street": "showdown", "playerIndex": 3, "action": {"type": "collect", "amount": 4000}},
    ]
    payload["actionScript"] = script
    return payload


def letter_payload():
    """Scenario hand with single-letter action types."""
    payload = scenario_payload()
    letters = {"check": "X", "bet": "B", "call": "C", "fold": "F", "raise": "R"}
    for entry in payload["actionScript"]:
        if "action" in entry:
            entry["action"]["type"] = letters[entry["action"]["type"]]
    return payload


class TestScenario:
    """BB vs BTN single-raised pot, hero folds the river."""

    def test_four_snapshots(self, scenario_hand):
        snapshots = generate_snapshots(scenario_hand)

        assert [s.index for s in snapshots] == [0, 1, 2, 3]
        assert [s.decision_point.hero_action.to_token(100) for s in snapshots] == [
            "Check",
            "Call",
            "Check",
            "Fold",
        ]
        assert [s.snapshot_input.street for s in snapshots] == ["FLOP", "FLOP", "TURN", "RIVER"]

    def test_villain_is_button_throughout(self, scenario_hand):
        snapshots = generate_snapshots(scenario_hand)
        assert {s.primary_villain for s in snapshots} == {3}
        assert {s.primary_villain_position for s in snapshots} == {"btn"}

    def test_river_snapshot(self, scenario_hand):
        river = generate_snapshots(scenario_hand)[-1].snapshot_input

        assert list(river.action_history[:5]) == DOCUMENTED_RIVER_HISTORY
        assert river.action_history[5] == "Bet 12.00"
        assert river.action_pot_fractions == (0.0, 0.5, 0.0, 0.0, 0.0, 0.75)
        assert river.board == ("Kd", "7s", "2c", "9h", "4d")
        assert river.pot_bb == pytest.approx(28.0)
        assert river.stack_bb == pytest.approx(80.25)
        assert river.positions.ip == "btn"
        assert river.positions.oop == "bb"
        assert river.next_to_act == "oop"
        assert river.hero_cards == "QhJh"

    def test_river_vector(self, scenario_hand):
        river = generate_snapshots(scenario_hand)[-1].snapshot_input
        vector = FeatureVectorEncoder().encode(river)

        assert vector[STREET_DIM] == pytest.approx(1.0)
        assert vector[POSITION_FLAG_DIM] == 0.0

    def test_histories_are_prefixes(self, scenario_hand):
        histories = [s.snapshot_input.action_history for s in generate_snapshots(scenario_hand)]
        flop, turn, river = histories[1], histories[2], histories[3]
        assert turn[: len(flop)] == flop
        assert river[: len(turn)] == turn

    def test_flop_snapshot(self, scenario_hand):
        first = generate_snapshots(scenario_hand)[0].snapshot_input
        assert first.action_history == ()
        assert first.pot_bb == pytest.approx(8.0)
        assert first.stack_bb == pytest.approx(96.25)
        assert first.board == ("Kd", "7s", "2c")

    def test_deterministic(self, hand_payload):
        first = generate_snapshots(hand_payload)
        second = generate_snapshots(hand_payload)
        encoder = FeatureVectorEncoder()

        assert [s.snapshot_input for s in first] == [s.snapshot_input for s in second]
        for a, b in zip(first, second):
            np.testing.assert_array_equal(
                encoder.encode(a.snapshot_input), encoder.encode(b.snapshot_input)
            )


class TestMultiway:
    """Villain choice and dropped points with three seats postflop."""

    def test_index_gap_for_dropped_point(self):
        snapshots = generate_snapshots(multiway_payload())
        assert [s.index for s in snapshots] == [0, 2, 3]
        assert {s.primary_villain for s in snapshots} == {2}
        assert {s.primary_villain_position for s in snapshots} == {"co"}

    def test_history_pruned_to_hero_and_villain(self):
        snapshots = generate_snapshots(multiway_payload())
        assert snapshots[1].snapshot_input.action_history == ("Check", "Check", "Call", "Call")
        assert snapshots[2].snapshot_input.action_history == (
            "Check",
            "Check",
            "Call",
            "Call",
            "Check",
            "Bet 4.00",
        )
        assert snapshots[2].snapshot_input.action_pot_fractions[-1] == pytest.approx(0.5)

    def test_positions(self):
        snapshot = generate_snapshots(multiway_payload())[0].snapshot_input
        assert snapshot.positions.ip == "co"
        assert snapshot.positions.oop == "bb"
        assert snapshot.hero_cards is None


def test_no_postflop_decisions(hand_payload):
    hand_payload["actionScript"] = hand_payload["actionScript"][:4]
    assert generate_snapshots(hand_payload) == []


def test_hero_folds_preflop(hand_payload):
    hand_payload["actionScript"][3] = {
        "street": "preflop",
        "playerIndex": 1,
        "action": {"type": "fold"},
    }
    hand_payload["actionScript"] = hand_payload["actionScript"][:4]
    assert generate_snapshots(Hand.parse(hand_payload)) == []


def test_malformed_hand():
    with pytest.raises(ValidationError):
        generate_snapshots({"playerChips": [{"chips": 100}]})


class TestImporterVocabulary:
    """Blind posts, showdown entries and letter actions from the importer."""

    def test_showdown_hand(self, hand_payload):
        snapshots = generate_snapshots(showdown_payload())
        plain = generate_snapshots(hand_payload)

        assert len(snapshots) == 4
        assert snapshots[-1].decision_point.hero_action.to_token(100) == "Call"
        assert [s.snapshot_input for s in snapshots] == [s.snapshot_input for s in plain]

    def test_showdown_indexes_follow_script(self):
        snapshots = generate_snapshots(showdown_payload())
        assert [s.decision_point.script_index for s in snapshots] == [7, 9, 11, 15]

    def test_letter_actions(self, hand_payload):
        letters = generate_snapshots(letter_payload())
        plain = generate_snapshots(hand_payload)

        assert [s.snapshot_input for s in letters] == [s.snapshot_input for s in plain]
        assert letters[-1].snapshot_input.action_history[-1] == "Bet 12.00"

    def test_five_bet_plus_pot(self, hand_payload):
        hand_payload["info"]["potType"] = "5bp+"
        snapshots = generate_snapshots(hand_payload)
        assert {s.snapshot_input.pot_type for s in snapshots} == {"5bp"}
