"""
Solver block analysis.

Turns a decoded solver node plus the live hand context into board, range,
blocker, hand-feature and strategy summaries.
"""

from solvermatch.analysis.solver_block import SolverBlock, SolverBlockBuilder

__all__ = ["SolverBlock", "SolverBlockBuilder"]
