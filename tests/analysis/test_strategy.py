"""Tests for acting-seat and combo strategy summaries."""

import pytest

from solvermatch.analysis.strategy import (
    DEFAULT_RECOMMENDED,
    combo_strategy,
    default_combo_strategy,
    format_combo_actions,
    optimal_strategy,
    parse_combo_actions,
    rows_from_seat,
    rows_from_table,
)
from solvermatch.game.cards import parse_cards, parse_hole_cards
from solvermatch.shared.config import AnalysisConfig
from solvermatch.shared.errors import ValidationError
from solvermatch.storage.node import ActionStat
from tests.conftest import RIVER_BOARD

BOARD = parse_cards(list(RIVER_BOARD))


class TestComboActionText:
    """``action:frequency:ev`` strings."""

    def test_parse(self):
        stats = parse_combo_actions("B 9.75:10.0:21.15;X:90.0:20.9")
        assert stats == (ActionStat("B 9.75", 10.0, 21.15), ActionStat("X", 90.0, 20.9))

    def test_format(self):
        stats = parse_combo_actions("B 9.75:10.0:21.15;X:90.0:20.9;")
        assert format_combo_actions(stats) == "B 9.75:10:21.15;X:90:20.9"

    @pytest.mark.parametrize("text", ["B 9.75:10", "X:a:1"])
    def test_invalid(self, text):
        with pytest.raises(ValidationError):
            parse_combo_actions(text)


class TestRows:
    """Combo rows from nodes and tables."""

    def test_rows_from_seat_in_percent(self, river_node):
        rows = rows_from_seat(river_node.oop)
        assert len(rows) == 3
        first = rows[0]
        assert "".join(repr(c) for c in first.cards) == "QhJh"
        assert [a.action for a in first.actions] == ["Fold", "Call", "Raise 36.00"]
        assert first.actions[0].frequency == pytest.approx(90.0)

    def test_rows_from_table(self):
        rows = rows_from_table({"AhKh": "X:100:1.5"})
        assert rows[0].weight == 1.0
        assert rows[0].actions[0].frequency == 100.0


class TestOptimalStrategy:
    """Most frequent acting-seat action."""

    def test_recommended(self, river_node):
        strategy = optimal_strategy(river_node.oop.actions, solver_pot=16.0, live_pot=28.0, bb_size=100)

        assert strategy["recommendedAction"]["action"] == "Fold"
        assert strategy["recommendedAction"]["frequency"] == pytest.approx(0.55)
        raise_entry = strategy["actionFrequencies"][2]
        assert raise_entry["actionType"] == "raise"
        assert raise_entry["sizing"]["bb"] == 36.0
        assert raise_entry["sizing"]["potFraction"] == 2.25
        assert raise_entry["sizing"]["chips"] == 6300
        assert raise_entry["sizing"]["category"] == "massive-overbet"

    def test_ties_pick_first(self):
        actions = [ActionStat("Check", 0.5, 0.0), ActionStat("Bet 3", 0.5, 0.1)]
        assert optimal_strategy(actions, 6.0, 6.0)["recommendedAction"]["action"] == "Check"

    def test_no_actions(self):
        strategy = optimal_strategy([], 6.0, 6.0)
        assert strategy["recommendedAction"] == DEFAULT_RECOMMENDED
        assert strategy["actionFrequencies"] == []


class TestComboStrategy:
    """Hero's combo: exact, same category, or range average."""

    def test_exact(self, river_node):
        result = combo_strategy(
            parse_hole_cards("JhQh"), BOARD, RIVER_BOARD, rows_from_seat(river_node.oop)
        )
        assert result["source"] == "exact"
        assert result["heroHand"] == "JhQh"
        assert result["category"] == "air"
        assert result["madeTier"] == "High Card"
        assert [a["action"] for a in result["topActions"]] == ["Fold", "Call"]
        assert result["recommendedAction"] == "Fold"
        assert result["confidence"] == "high"

    def test_same_category(self, river_node):
        result = combo_strategy(
            parse_hole_cards("QdJd"), BOARD, RIVER_BOARD, rows_from_seat(river_node.oop)
        )
        assert result["source"] == "category"
        assert result["recommendedAction"] == "Fold"

    def test_range_average(self, river_node):
        result = combo_strategy(
            parse_hole_cards("As2s"), BOARD, RIVER_BOARD, rows_from_seat(river_node.oop)
        )
        assert result["source"] == "range"
        assert result["category"] == "weakPair"
        top = result["topActions"]
        assert [a["action"] for a in top] == ["Call", "Raise 36.00"]
        assert top[0]["frequency"] == pytest.approx(38.3333, abs=1e-3)
        assert result["confidence"] == "low"

    def test_medium_confidence(self):
        rows = rows_from_table({"QhJh": "Fold:60:0;Call:40:-1"})
        result = combo_strategy(parse_hole_cards("QhJh"), BOARD, RIVER_BOARD, rows, AnalysisConfig())
        assert result["confidence"] == "medium"

    def test_no_rows(self):
        with pytest.raises(ValueError, match="No combo strategy rows"):
            combo_strategy(parse_hole_cards("QhJh"), BOARD, RIVER_BOARD, [])


def test_default_combo_strategy():
    default = default_combo_strategy("QhJh")
    assert default["source"] == "default"
    assert default["recommendedAction"] == "Check"
