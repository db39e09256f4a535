"""
Hand -> snapshots with solver data.

Snapshot generation runs synchronously. Search, fetch/decode and block
building then fan out one task per snapshot over a bounded thread pool and
are joined in snapshot order. Every external call is bounded by a timeout
and retried with backoff; a failure degrades only its own snapshot.
"""

from __future__ import annotations

import concurrent.futures
import logging
import time
from typing import Any, Callable, List, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from solvermatch.analysis.solver_block import SolverBlock, SolverBlockBuilder
from solvermatch.features.encoder import FeatureVectorEncoder
from solvermatch.game.hand import Hand
from solvermatch.search.index import InMemoryVectorIndex, VectorIndex
from solvermatch.search.metadata import SearchResult
from solvermatch.search.node_search import NodeIndexSearch
from solvermatch.search.qdrant import QdrantVectorIndex
from solvermatch.shared.config import Config, RetryConfig
from solvermatch.shared.errors import (
    DecodeError,
    ExternalTimeout,
    MatchNotFound,
    SearchError,
    SolverMatchError,
    StorageError,
)
from solvermatch.snapshots.assembler import SnapshotInput
from solvermatch.snapshots.generator import GeneratedSnapshot, generate_snapshots
from solvermatch.storage.codec import ZstdNodeCodec
from solvermatch.storage.decoder import NodeCache, NodeDecoder
from solvermatch.storage.object_store import LocalObjectStore, ObjectStore
from solvermatch.storage.node import SolverNode

logger = logging.getLogger(__name__)

T = TypeVar("T")


def call_with_retry(
    fn: Callable[[], T],
    attempts: int = 3,
    backoff: float = 0.05,
    multiplier: float = 2.0,
    retry_on: Tuple[Type[BaseException], ...] = (ExternalTimeout, SearchError),
    sleep: Callable[[float], None] = time.sleep,
    description: str = "call",
) -> T:
    """
    Call ``fn`` up to ``attempts`` times, sleeping ``backoff * multiplier**n``
    between attempts. Exceptions outside ``retry_on`` propagate immediately;
    the last retryable one propagates once attempts run out.
    """
    delay = backoff
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except retry_on as exc:
            if attempt == attempts:
                logger.info(f"{description} failed after {attempts} attempts: {exc}")
                raise
            logger.debug(f"{description} attempt {attempt} failed ({exc}); retrying in {delay:.3f}s")
            sleep(delay)
            delay *= multiplier
    raise AssertionError("unreachable")


class Snapshot(BaseModel):
    """One output record per retained hero decision."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    index: int
    primary_villain: int = Field(alias="primaryVillain")
    primary_villain_position: str = Field(alias="primaryVillainPosition")
    hero_action: str = Field(alias="heroAction")
    snapshot_input: SnapshotInput = Field(alias="snapshotInput")
    has_match: bool = Field(default=False, alias="hasMatch")
    similarity_score: Optional[float] = Field(default=None, alias="similarityScore")
    solver_block: Optional[SolverBlock] = Field(default=None, alias="solverBlock")
    is_approximation: bool = Field(default=False, alias="isApproximation")
    match_type: Optional[str] = Field(default=None, alias="matchType")
    parent_depth: Optional[int] = Field(default=None, alias="parentDepth")
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class SnapshotPipeline:
    """
    Runs a hand through generation, search, decode and block building.

    Args:
        search: Node search over a vector index
        decoder: Node fetch/decode; without one, snapshots carry match info only
        builder: Solver block builder; built from ``config`` if omitted
        config: Pipeline, retry and analysis settings
        sleep: Backoff sleep (tests pass a no-op)
    """

    def __init__(
        self,
        search: NodeIndexSearch,
        decoder: NodeDecoder | None = None,
        builder: SolverBlockBuilder | None = None,
        config: Config | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or Config.default()
        self.search = search
        self.decoder = decoder
        self.builder = builder or SolverBlockBuilder(
            self.config.analysis, seed=self.config.system.seed
        )
        self._sleep = sleep
        workers = self.config.pipeline.max_workers
        # Timeout-bounded external calls
        self._io = concurrent.futures.ThreadPoolExecutor(
            max_workers=workers * 2, thread_name_prefix="solvermatch-io"
        )

    @classmethod
    def from_config(
        cls,
        config: Config,
        index: VectorIndex | None = None,
        store: ObjectStore | None = None,
    ) -> "SnapshotPipeline":
        """Wire the default components described by ``config``."""
        encoder = FeatureVectorEncoder(config.features)
        if index is None:
            if config.index.backend == "qdrant":
                index = QdrantVectorIndex(
                    config.index.url, config.index.api_key, config.index.timeout_seconds
                )
            else:
                index = InMemoryVectorIndex()
        search = NodeIndexSearch(
            index, config.search, encoder=encoder, collections=dict(config.index.collections)
        )
        decoder = NodeDecoder(
            store or LocalObjectStore(config.storage.root),
            ZstdNodeCodec(config.storage.compression_level),
            cache=NodeCache(config.storage.cache_size),
            encoder=encoder,
        )
        return cls(search, decoder, config=config)

    def close(self) -> None:
        self._io.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "SnapshotPipeline":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def process_hand(self, hand: Hand | dict[str, Any]) -> List[Snapshot]:
        """
        Ordered snapshots for ``hand``.

        Raises:
            ValidationError: The hand is malformed. Search, storage and
                decode failures never raise; they show up on the snapshot.
        """
        if not isinstance(hand, Hand):
            hand = Hand.parse(hand)
        generated = generate_snapshots(hand)
        if not generated:
            return []

        workers = min(self.config.pipeline.max_workers, len(generated))
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="solvermatch-snapshot"
        ) as pool:
            futures = [pool.submit(self._process_one, hand, item) for item in generated]
            return [future.result() for future in futures]

    def process_hands(self, hands: Sequence[Hand | dict[str, Any]]) -> List[List[Snapshot]]:
        return [self.process_hand(hand) for hand in hands]

    # ------------------------------------------------------------------
    # Per-snapshot work
    # ------------------------------------------------------------------

    def _bounded(self, fn: Callable[[], T], timeout: float, what: str) -> T:
        future = self._io.submit(fn)
        try:
            return future.result(timeout=timeout)
        except concurrent.futures.TimeoutError as exc:
            future.cancel()
            raise ExternalTimeout(f"{what} exceeded {timeout:.1f}s") from exc

    def _retrying(self, fn: Callable[[], T], retry: RetryConfig, description: str, retry_on) -> T:
        return call_with_retry(
            fn,
            attempts=retry.max_attempts,
            backoff=retry.backoff_seconds,
            multiplier=retry.backoff_multiplier,
            retry_on=retry_on,
            sleep=self._sleep,
            description=description,
        )

    def find_match(self, snapshot: SnapshotInput) -> SearchResult:
        """
        Raises:
            MatchNotFound, SearchError, ExternalTimeout
        """
        timeout = self.config.pipeline.search_timeout_seconds
        return self._retrying(
            lambda: self._bounded(lambda: self.search.require_match(snapshot), timeout, "search"),
            self.config.retry,
            "search",
            (ExternalTimeout, SearchError),
        )

    def fetch_node(self, result: SearchResult, snapshot: SnapshotInput) -> SolverNode:
        """
        Raises:
            DecodeError, StorageError, ExternalTimeout
            SolverMatchError: The pipeline was built without a decoder.
        """
        if self.decoder is None:
            raise SolverMatchError("Pipeline has no node decoder; cannot fetch solver nodes")
        timeout = self.config.pipeline.fetch_timeout_seconds
        return self._retrying(
            lambda: self._bounded(
                lambda: self.decoder.decode(result.metadata, snapshot), timeout, "fetch"
            ),
            self.config.retry,
            "fetch",
            (ExternalTimeout,),
        )

    def _process_one(self, hand: Hand, item: GeneratedSnapshot) -> Snapshot:
        snapshot = item.snapshot_input
        base = dict(
            index=item.index,
            primary_villain=item.primary_villain,
            primary_villain_position=item.primary_villain_position,
            hero_action=item.decision_point.hero_action.to_token(hand.big_blind),
            snapshot_input=snapshot,
        )

        try:
            result = self.find_match(snapshot)
        except MatchNotFound as exc:
            logger.info(f"Snapshot {item.index}: {exc}")
            return Snapshot(**base)
        except (SearchError, ExternalTimeout) as exc:
            logger.warning(f"Snapshot {item.index}: search failed, marking unmatched: {exc}")
            return Snapshot(**base, error=str(exc))

        matched = dict(
            base,
            has_match=True,
            similarity_score=result.similarity_score,
            is_approximation=result.is_approximation,
            match_type=result.match_type,
            parent_depth=result.parent_depth,
        )
        if self.decoder is None or not self.config.pipeline.build_solver_blocks:
            return Snapshot(**matched)

        try:
            node = self.fetch_node(result, snapshot)
        except (DecodeError, StorageError, ExternalTimeout) as exc:
            logger.warning(f"Snapshot {item.index}: no solver data ({exc})")
            return Snapshot(**matched, error=str(exc))

        combo_data = result.metadata.field_value("combo_data")
        block = self.builder.build(
            node,
            snapshot,
            similarity=result.similarity_score,
            hero_cards=snapshot.hero_cards,
            bb_size=hand.big_blind,
            combo_table=combo_data if isinstance(combo_data, dict) else None,
        )
        return Snapshot(**matched, solver_block=block)
