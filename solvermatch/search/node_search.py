"""
Nearest solver-node lookup for a snapshot.

Search runs against the street's collection with exact-match payload
filters, keeps candidates above ``min_score`` and breaks score ties by a
configurable policy. When nothing matches, the last one or two actions are
dropped from the history and the search is retried ("parent" matches).
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from solvermatch.features.action_history import snapshot_action_sequence
from solvermatch.features.board_texture import flop_archetype
from solvermatch.features.encoder import FeatureVectorEncoder
from solvermatch.game.positions import position_bucket
from solvermatch.search.index import VectorIndex
from solvermatch.search.metadata import SearchHit, SearchResult
from solvermatch.shared.config import IndexConfig, SearchConfig
from solvermatch.shared.errors import ExternalTimeout, MatchNotFound, SearchError
from solvermatch.snapshots.assembler import SnapshotInput

logger = logging.getLogger(__name__)

_TIE_EPSILON = 1e-9


class NodeIndexSearch:
    """
    Snapshot -> best matching node metadata.

    Args:
        index: Any :class:`VectorIndex`
        config: Search policy (threshold, tie-break, filters, fallback)
        encoder: Feature encoder; a default one is built if omitted
        collections: Street name (lowercase) -> collection name
    """

    def __init__(
        self,
        index: VectorIndex,
        config: SearchConfig | None = None,
        encoder: FeatureVectorEncoder | None = None,
        collections: dict[str, str] | None = None,
    ):
        self.index = index
        self.config = config or SearchConfig()
        self.encoder = encoder or FeatureVectorEncoder()
        self.collections = collections or dict(IndexConfig().collections)

    def collection_for(self, snapshot: SnapshotInput) -> str:
        return self.collections[snapshot.street.lower()]

    def build_filters(self, snapshot: SnapshotInput) -> dict[str, Any]:
        """Exact-match payload filters for a snapshot."""
        cfg = self.config
        filters: dict[str, Any] = {
            "street": snapshot.street,
            "game_type": snapshot.game_type,
            "pot_type": snapshot.pot_type,
        }
        if cfg.filter_action_sequence:
            filters["action_sequence"] = snapshot_action_sequence(snapshot)
        if cfg.filter_flop_archetype:
            filters["flop_archetype"] = flop_archetype(snapshot.board)
        if cfg.filter_position_buckets:
            ip_bucket = position_bucket(snapshot.positions.ip)
            oop_bucket = position_bucket(snapshot.positions.oop)
            if ip_bucket and oop_bucket:
                filters["position_bucket_ip"] = ip_bucket
                filters["position_bucket_oop"] = oop_bucket
        if cfg.filter_exact_positions:
            filters["positions_ip"] = snapshot.positions.ip
            filters["positions_oop"] = snapshot.positions.oop
        return filters

    def find(self, snapshot: SnapshotInput) -> Optional[SearchResult]:
        """
        Best match for ``snapshot`` or None.

        Raises:
            SearchError, ExternalTimeout: From the direct search. Failures
                during parent fallback are logged and skipped.
        """
        result = self._search_once(snapshot)
        if result is not None:
            return result

        if self.config.parent_fallback and snapshot.action_history:
            return self._parent_fallback(snapshot)
        return None

    def require_match(self, snapshot: SnapshotInput) -> SearchResult:
        """Like :meth:`find` but raises :class:`MatchNotFound` instead of returning None."""
        result = self.find(snapshot)
        if result is None:
            raise MatchNotFound(
                f"No {snapshot.street} node scored >= {self.config.min_score} "
                f"for history {list(snapshot.action_history)}"
            )
        return result

    def _search_once(self, snapshot: SnapshotInput) -> Optional[SearchResult]:
        cfg = self.config
        hits = self.index.search(
            self.collection_for(snapshot),
            self.encoder.encode(snapshot),
            self.build_filters(snapshot),
            cfg.limit * cfg.candidate_multiplier,
            cfg.min_score,
        )
        hits = [h for h in hits if h.score >= cfg.min_score]
        if not hits:
            return None

        best = self._break_ties(hits, snapshot)
        return SearchResult(
            metadata=best.metadata,
            similarity_score=best.score,
            is_approximation=best.score < cfg.approximation_score,
            match_type="exact",
        )

    def _break_ties(self, hits: list[SearchHit], snapshot: SnapshotInput) -> SearchHit:
        top = max(h.score for h in hits)
        tied = [h for h in hits if top - h.score <= _TIE_EPSILON]
        policy = self.config.tie_break
        if len(tied) == 1 or policy == "first":
            return tied[0]

        def stack_gap(hit: SearchHit) -> float:
            return abs(hit.metadata.stack_bb - snapshot.stack_bb)

        def pot_gap(hit: SearchHit) -> float:
            return abs(hit.metadata.pot_bb - snapshot.pot_bb)

        if policy == "stack_distance":
            return min(tied, key=lambda h: (stack_gap(h), pot_gap(h)))
        return min(tied, key=lambda h: (pot_gap(h), stack_gap(h)))

    def _parent_fallback(self, snapshot: SnapshotInput) -> Optional[SearchResult]:
        history = snapshot.action_history
        fractions = snapshot.action_pot_fractions
        max_depth = min(self.config.max_parent_depth, len(history))

        for depth in range(1, max_depth + 1):
            parent = snapshot.model_copy(
                update={
                    "action_history": history[:-depth],
                    "action_pot_fractions": fractions[:-depth],
                }
            )
            try:
                result = self._search_once(parent)
            except (SearchError, ExternalTimeout) as exc:
                logger.warning(f"Parent search at depth {depth} failed: {exc}")
                continue
            if result is not None:
                logger.info(f"Parent match at depth {depth} (score {result.similarity_score:.3f})")
                return result.model_copy(
                    update={
                        "match_type": "parent",
                        "parent_depth": depth,
                        "removed_actions": tuple(history[-depth:]),
                        "is_approximation": True,
                    }
                )

        logger.debug(f"No parent match within {max_depth} removed actions")
        return None
