"""Tests for hero hand features."""

import pytest

from solvermatch.analysis.equity import EquityCalculator
from solvermatch.analysis.hand_features import analyze_hand_features, next_card_analysis
from solvermatch.analysis.ranges import parse_range
from solvermatch.game.cards import parse_cards, parse_hole_cards

TURN = parse_cards("Kd7s2c9h")


@pytest.fixture
def calculator(fast_analysis):
    return EquityCalculator(fast_analysis)


class TestNextCardAnalysis:
    """One-card-forward equity swings."""

    def test_none_on_river(self, calculator):
        river = parse_cards("Kd7s2c9h4d")
        hero = parse_hole_cards("QhJh")
        assert next_card_analysis(hero, river, parse_range("KK"), calculator, 10.0) is None

    def test_turn_summary(self, calculator):
        hero = parse_hole_cards("QhJh")
        villain = parse_range("KQ,77", dead=TURN)
        start = 100.0 * calculator.hand_vs_range(hero, villain, TURN)

        analysis = next_card_analysis(hero, TURN, villain, calculator, start)

        assert analysis["startingEquity"] == pytest.approx(start, abs=0.01)
        # 52 - 4 board - 2 hero
        assert len(analysis["cardImpacts"]) == 46
        summary = analysis["summary"]
        assert summary["gains"] + summary["neutral"] + summary["losses"] == 46
        assert summary["bestCard"] == "Ts"
        assert summary["variance"] == pytest.approx(summary["stdDev"] ** 2, abs=1.0)
        for item in analysis["cardImpacts"]:
            assert item["impact"] in ("gain", "neutral", "loss")


def test_analyze_hand_features(calculator):
    features = analyze_hand_features(
        parse_hole_cards("QhJh"), TURN, parse_range("KQ,77", dead=TURN), calculator
    )
    assert features["category"] == "gutshot"
    assert features["madeTier"] == "High Card"
    assert features["drawFlags"] == ["gutshot"]
    assert 0.0 <= features["equityVsRange"] <= 100.0
    assert features["nextStreetAnalysis"] is not None
