"""Tests for blocker impact."""

import pytest

from solvermatch.analysis.blockers import DEFAULT_BLOCKER_IMPACT, blocker_impact
from solvermatch.analysis.ranges import parse_range
from solvermatch.game.cards import parse_cards, parse_hole_cards

FLOP = parse_cards("Kd7s2c")


class TestBlockerImpact:
    """Card removal on the villain range."""

    def test_blocked_share(self):
        impact = blocker_impact(parse_hole_cards("QhJh"), parse_range("QJs,55"), FLOP)

        assert impact["combosBlockedPct"] == 10.0
        assert impact["valueBlockedPct"] == 0.0
        assert impact["bluffsUnblockedPct"] == 75.0
        assert impact["cardRemoval"] == [
            {"card": "Qh", "percentage": 10.0},
            {"card": "Jh", "percentage": 10.0},
        ]
        assert impact["topBlocked"] == [
            {"name": "air", "combosBlocked": 1.0, "percentage": 25.0, "examples": ["QhJh"]}
        ]

    def test_value_blocked(self):
        impact = blocker_impact(parse_hole_cards("KhQh"), parse_range("KK", dead=FLOP), FLOP)
        assert impact["valueBlockedPct"] == pytest.approx(66.67)

    def test_board_blocked_combos_ignored(self):
        # KdKx combos are dead on this board
        impact = blocker_impact(parse_hole_cards("AhQh"), parse_range("KK"), FLOP)
        assert impact["combosBlockedPct"] == 0.0

    def test_bounds(self):
        impact = blocker_impact(
            parse_hole_cards("AsKs"), parse_range("AA,KK,AK,77,22,T9s,65s"), FLOP
        )
        for key in ("combosBlockedPct", "valueBlockedPct", "bluffsUnblockedPct"):
            assert 0.0 <= impact[key] <= 100.0
        assert len(impact["topBlocked"]) <= 5
        counts = [item["combosBlocked"] for item in impact["topBlocked"]]
        assert counts == sorted(counts, reverse=True)
        assert all(len(item["examples"]) <= 3 for item in impact["topBlocked"])

    def test_empty_range(self):
        assert blocker_impact(parse_hole_cards("QhJh"), [], FLOP) == DEFAULT_BLOCKER_IMPACT

    def test_top_n(self):
        impact = blocker_impact(
            parse_hole_cards("AsKs"), parse_range("AA,KK,AK,AKs,A7s,K2s"), FLOP, top_n=1
        )
        assert len(impact["topBlocked"]) == 1
