"""Tests for weighted range parsing."""

import pytest

from solvermatch.analysis.ranges import expand_hand_class, parse_range, remove_blocked, total_weight
from solvermatch.game.cards import Card, parse_cards
from solvermatch.shared.errors import ValidationError


class TestExpandHandClass:
    """Hand class notation."""

    @pytest.mark.parametrize(
        "token,count", [("AA", 6), ("AKs", 4), ("AKo", 12), ("AK", 16), ("AhKh", 1), ("t9s", 4)]
    )
    def test_combo_counts(self, token, count):
        assert len(expand_hand_class(token)) == count

    def test_higher_card_first(self):
        for a, b in expand_hand_class("AK"):
            assert a.index > b.index

    @pytest.mark.parametrize("token", ["AAs", "AKx", "A", "AKsx", "1K", "AhAh"])
    def test_invalid(self, token):
        with pytest.raises(ValidationError):
            expand_hand_class(token)


class TestParseRange:
    """Range strings with weights and dead cards."""

    def test_weights(self):
        combos = parse_range("AA,KK:0.5,AK@25")
        weights = {c.hand: c.weight for c in combos}
        assert len(combos) == 28
        assert weights["AcAs"] == 1.0
        assert weights["KcKs"] == 0.5
        assert weights["AhKh"] == 0.25

    def test_later_tokens_override(self):
        weights = {c.hand: c.weight for c in parse_range("AA,AhAs:0.5")}
        assert len(weights) == 6
        assert weights["AhAs"] == 0.5

    def test_zero_weight_dropped(self):
        assert parse_range("AA,AhAs:0") != []
        assert len(parse_range("AA,AhAs:0")) == 5
        assert parse_range("KK:0") == []

    def test_dead_cards(self):
        assert len(parse_range("AA", dead=[Card.new("Ah")])) == 3

    def test_empty(self):
        assert parse_range("") == []
        assert parse_range("  ") == []

    def test_whitespace_and_trailing_commas(self):
        assert len(parse_range(" AKs , QQ ,")) == 10

    @pytest.mark.parametrize("text", ["AK:2", "AK:x", "AK@abc", "ZZ"])
    def test_invalid(self, text):
        with pytest.raises(ValidationError):
            parse_range(text)


def test_total_weight_and_remove_blocked():
    combos = parse_range("AA:0.5,KK")
    assert total_weight(combos) == pytest.approx(9.0)
    kept = remove_blocked(combos, parse_cards("AsKs"))
    assert len(kept) == 6


def test_blocks():
    (combo,) = parse_range("AhKh")
    assert combo.blocks([Card.new("Kh")])
    assert not combo.blocks(parse_cards("KdQd"))
