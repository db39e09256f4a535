"""
SolverBlock: strategic summary of a matched node in the live hand's context.

Every section is computed independently. A section that fails is logged and
replaced by its default, so one bad range string never costs the whole block.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from solvermatch.analysis.blockers import DEFAULT_BLOCKER_IMPACT, blocker_impact
from solvermatch.analysis.board_analysis import DEFAULT_BOARD_ANALYSIS, analyze_board
from solvermatch.analysis.equity import EquityCalculator
from solvermatch.analysis.hand_features import DEFAULT_HAND_FEATURES, analyze_hand_features
from solvermatch.analysis.hand_strength import range_breakdown, value_share
from solvermatch.analysis.ranges import parse_range
from solvermatch.analysis.strategy import (
    DEFAULT_RECOMMENDED,
    combo_strategy,
    default_combo_strategy,
    optimal_strategy,
    rows_from_seat,
    rows_from_table,
)
from solvermatch.game.cards import parse_cards, parse_hole_cards
from solvermatch.shared.config import AnalysisConfig
from solvermatch.shared.errors import SolverMatchError
from solvermatch.snapshots.assembler import SnapshotInput
from solvermatch.storage.node import SolverNode

logger = logging.getLogger(__name__)

DEFAULT_RANGE_ADVANTAGE = {
    "heroEquity": 50.0,
    "villainEquity": 50.0,
    "equityDelta": 0.0,
    "heroValuePct": 0.0,
    "villainValuePct": 0.0,
    "valueDelta": 0.0,
}
DEFAULT_RANGE_BREAKDOWN = {"totalCombos": 0, "categories": []}
DEFAULT_OPTIMAL_STRATEGY = {"recommendedAction": DEFAULT_RECOMMENDED, "actionFrequencies": []}

_SECTION_ERRORS = (SolverMatchError, ValueError, KeyError, IndexError, ZeroDivisionError)


class SolverBlock(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    node_id: str = Field(alias="nodeId")
    street: str
    board: tuple[str, ...]
    pot: float
    stacks: dict[str, float]
    positions: dict[str, str]
    next_to_act: str = Field(alias="nextToAct")
    sim: float
    board_analysis: dict[str, Any] = Field(alias="boardAnalysis")
    range_advantage: dict[str, Any] = Field(alias="rangeAdvantage")
    hero_range: dict[str, Any] = Field(alias="heroRange")
    villain_range: dict[str, Any] = Field(alias="villainRange")
    optimal_strategy: dict[str, Any] = Field(alias="optimalStrategy")
    blocker_impact: Optional[dict[str, Any]] = Field(default=None, alias="blockerImpact")
    hand_features: Optional[dict[str, Any]] = Field(default=None, alias="handFeatures")
    combo_strategy: Optional[dict[str, Any]] = Field(default=None, alias="comboStrategy")
    degraded_sections: list[str] = Field(default_factory=list, alias="degradedSections")


class SolverBlockBuilder:
    """
    Builds :class:`SolverBlock` objects.

    Args:
        config: Equity sampling and confidence thresholds
        seed: Base seed for Monte Carlo equity
        calculator: Equity calculator; built from ``config`` if omitted
    """

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        seed: int = 0,
        calculator: EquityCalculator | None = None,
    ):
        self.config = config or AnalysisConfig()
        self.calculator = calculator or EquityCalculator(self.config, seed=seed)

    def _section(
        self, name: str, node_id: str, compute: Callable[[], dict], default: dict, degraded: list[str]
    ) -> dict:
        try:
            return compute()
        except _SECTION_ERRORS as exc:
            logger.warning(f"Solver block section {name} failed for node {node_id}: {exc}")
            degraded.append(name)
            return copy.deepcopy(default)

    def build(
        self,
        node: SolverNode,
        snapshot: SnapshotInput,
        similarity: float = 1.0,
        hero_cards: Optional[str] = None,
        bb_size: float = 2.0,
        combo_table: Optional[Mapping[str, str]] = None,
    ) -> SolverBlock:
        """
        Args:
            node: Decoded solver node
            snapshot: Live decision the node was matched to
            similarity: Search score of the match
            hero_cards: Hero hole cards (``"AhKh"``); defaults to the snapshot's
            bb_size: Big blind in chips, for chip-denominated sizings
            combo_table: Per-hand strategy strings, used when the node has no
                combo table for the acting seat
        """
        hero_hand = hero_cards or snapshot.hero_cards
        acting, other = node.next_to_act, "ip" if node.next_to_act == "oop" else "oop"
        degraded: list[str] = []

        def board():
            return parse_cards(list(snapshot.board))

        def hero_range():
            return parse_range(node.range_for(acting), board())

        def villain_range():
            return parse_range(node.range_for(other), board())

        def range_advantage() -> dict:
            hero, villain = hero_range(), villain_range()
            hero_eq, villain_eq = self.calculator.range_vs_range(hero, villain, board())
            hero_value, villain_value = value_share(hero, board()), value_share(villain, board())
            return {
                "heroEquity": round(100.0 * hero_eq, 2),
                "villainEquity": round(100.0 * villain_eq, 2),
                "equityDelta": round(100.0 * (hero_eq - villain_eq), 2),
                "heroValuePct": round(hero_value, 2),
                "villainValuePct": round(villain_value, 2),
                "valueDelta": round(hero_value - villain_value, 2),
            }

        block = SolverBlock(
            node_id=node.node_id,
            street=snapshot.street,
            board=snapshot.board,
            pot=snapshot.pot_bb,
            stacks={"oop": node.stack_oop, "ip": node.stack_ip},
            positions={"ip": snapshot.positions.ip, "oop": snapshot.positions.oop},
            next_to_act=acting,
            sim=similarity,
            board_analysis=self._section(
                "boardAnalysis",
                node.node_id,
                lambda: analyze_board(board()),
                DEFAULT_BOARD_ANALYSIS,
                degraded,
            ),
            range_advantage=self._section(
                "rangeAdvantage", node.node_id, range_advantage, DEFAULT_RANGE_ADVANTAGE, degraded
            ),
            hero_range=self._section(
                "heroRange",
                node.node_id,
                lambda: range_breakdown(hero_range(), board()),
                DEFAULT_RANGE_BREAKDOWN,
                degraded,
            ),
            villain_range=self._section(
                "villainRange",
                node.node_id,
                lambda: range_breakdown(villain_range(), board()),
                DEFAULT_RANGE_BREAKDOWN,
                degraded,
            ),
            optimal_strategy=self._section(
                "optimalStrategy",
                node.node_id,
                lambda: optimal_strategy(node.acting.actions, node.pot, snapshot.pot_bb, bb_size),
                DEFAULT_OPTIMAL_STRATEGY,
                degraded,
            ),
        )

        if hero_hand:
            self._add_hero_sections(
                block,
                node,
                snapshot,
                hero_hand,
                bb_size,
                combo_table,
                board,
                villain_range,
                degraded,
            )

        block.degraded_sections = degraded
        return block

    def _add_hero_sections(
        self, block, node, snapshot, hero_hand, bb_size, combo_table, board, villain_range, degraded
    ) -> None:
        def hole():
            return parse_hole_cards(hero_hand)

        block.blocker_impact = self._section(
            "blockerImpact",
            node.node_id,
            lambda: blocker_impact(hole(), villain_range(), board(), self.config.top_blocked),
            DEFAULT_BLOCKER_IMPACT,
            degraded,
        )
        block.hand_features = self._section(
            "handFeatures",
            node.node_id,
            lambda: analyze_hand_features(hole(), board(), villain_range(), self.calculator),
            DEFAULT_HAND_FEATURES,
            degraded,
        )

        rows = rows_from_seat(node.acting)
        if not rows and combo_table:
            rows = self._section(
                "comboTable", node.node_id, lambda: rows_from_table(combo_table), [], degraded
            )
        if rows:
            block.combo_strategy = self._section(
                "comboStrategy",
                node.node_id,
                lambda: combo_strategy(
                    hole(),
                    board(),
                    node.board,
                    rows,
                    self.config,
                    solver_pot=node.pot,
                    live_pot=snapshot.pot_bb,
                    bb_size=bb_size,
                ),
                default_combo_strategy(hero_hand),
                degraded,
            )
