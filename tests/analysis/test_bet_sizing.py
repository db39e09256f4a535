"""Tests for solver action label parsing."""

import pytest

from solvermatch.analysis.bet_sizing import format_sizing, parse_action_sizing, sizing_category


class TestParseActionSizing:
    """Amount and pot-fraction labels."""

    def test_amount_in_big_blinds(self):
        parsed = parse_action_sizing("Bet 9.75", solver_pot_bb=13.0, actual_pot_bb=20.0, bb_size=2.0)
        assert parsed.action_type == "bet"
        assert parsed.sizing.bb == 9.75
        assert parsed.sizing.pot_fraction == 0.75
        assert parsed.sizing.chips == 30
        assert parsed.sizing.category == "large"

    def test_pot_fraction(self):
        parsed = parse_action_sizing("Bet 0.5x", solver_pot_bb=10.0, actual_pot_bb=20.0, bb_size=2.0)
        assert parsed.sizing.bb == 10.0
        assert parsed.sizing.pot_fraction == 0.5
        assert parsed.sizing.chips == 20
        assert parsed.sizing.category == "medium"

    def test_short_raise(self):
        parsed = parse_action_sizing("R 30", solver_pot_bb=20.0, actual_pot_bb=20.0)
        assert parsed.action_type == "raise"
        assert parsed.sizing.category == "massive-overbet"

    @pytest.mark.parametrize(
        "label,action_type", [("X", "check"), ("Check", "check"), ("C", "call"), ("fold", "fold")]
    )
    def test_unsized(self, label, action_type):
        parsed = parse_action_sizing(label, 10.0, 10.0)
        assert parsed.action_type == action_type
        assert parsed.sizing is None

    def test_unknown_label(self):
        parsed = parse_action_sizing("Donk 3", 10.0, 10.0)
        assert parsed.action_type is None
        assert parsed.sizing is None

    def test_zero_solver_pot(self):
        assert parse_action_sizing("Bet 5", 0.0, 10.0).sizing.pot_fraction == 0.0

    def test_to_dict(self):
        sizing = parse_action_sizing("Bet 0.5x", 10.0, 20.0).sizing
        assert sizing.to_dict() == {"bb": 10.0, "potFraction": 0.5, "chips": 20, "category": "medium"}


@pytest.mark.parametrize(
    "fraction,category",
    [
        (0.25, "small"),
        (0.33, "medium-small"),
        (0.5, "medium"),
        (0.75, "large"),
        (1.0, "overbet"),
        (1.5, "massive-overbet"),
    ],
)
def test_sizing_category(fraction, category):
    assert sizing_category(fraction) == category


def test_format_sizing():
    parsed = parse_action_sizing("Bet 9.75", 13.0, 20.0, 2.0)
    assert format_sizing(parsed) == "Bet 0.75x"
    assert format_sizing(parsed, "bb") == "Bet 9.75"
    assert format_sizing(parsed, "chips") == "Bet 30"
    assert format_sizing(parse_action_sizing("Check", 13.0, 20.0)) == "Check"
