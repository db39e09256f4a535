"""
Matched metadata -> decoded solver node.

Fetch the stored byte range, decompress, decode every node in the blob and
pick the one that corresponds to the snapshot. Decoded blobs are immutable
once published, so an injected LRU cache keyed by storage location is safe
without invalidation.
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from typing import List, Optional

from solvermatch.features.encoder import FeatureVectorEncoder, cosine_similarity
from solvermatch.game.actions import action_sequence
from solvermatch.search.metadata import NodeMetadata
from solvermatch.shared.errors import DecodeError, StorageError
from solvermatch.snapshots.assembler import PositionPair, SnapshotInput
from solvermatch.storage.codec import NodeCodec, ZstdNodeCodec
from solvermatch.storage.node import SolverNode
from solvermatch.storage.object_store import ObjectStore

logger = logging.getLogger(__name__)


class NodeCache:
    """Thread-safe LRU of decoded node lists."""

    def __init__(self, max_size: int = 128):
        self.max_size = max_size
        self._cache: "OrderedDict[str, tuple[SolverNode, ...]]" = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str) -> Optional[tuple[SolverNode, ...]]:
        with self._lock:
            cached = self._cache.get(key)
            if cached is None:
                self.misses += 1
                return None
            self._cache.move_to_end(key)
            self.hits += 1
            return cached

    def put(self, key: str, nodes: tuple[SolverNode, ...]) -> None:
        if self.max_size <= 0:
            return
        with self._lock:
            self._cache[key] = nodes
            self._cache.move_to_end(key)
            while len(self._cache) > self.max_size:
                self._cache.popitem(last=False)

    def __len__(self) -> int:
        return len(self._cache)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()


class NodeDecoder:
    """
    Fetches and decodes the solver node behind a search match.

    Args:
        store: Object storage holding compressed node blobs
        codec: Decompress/decode implementation
        cache: Optional decoded-blob cache
        encoder: Feature encoder used to rank nodes inside a multi-node blob
    """

    def __init__(
        self,
        store: ObjectStore,
        codec: NodeCodec | None = None,
        cache: NodeCache | None = None,
        encoder: FeatureVectorEncoder | None = None,
    ):
        self.store = store
        self.codec = codec or ZstdNodeCodec()
        self.cache = cache
        self.encoder = encoder or FeatureVectorEncoder()

    def fetch(self, metadata: NodeMetadata) -> bytes:
        """Raw bytes for the metadata's storage location."""
        try:
            return self.store.get(metadata.bucket, metadata.key, metadata.offset, metadata.length)
        except StorageError:
            raise
        except OSError as exc:
            raise StorageError(f"Failed to fetch {metadata.storage_key}: {exc}") from exc

    def load(self, metadata: NodeMetadata) -> tuple[SolverNode, ...]:
        """Every node in the metadata's blob, via the cache when one is set."""
        key = metadata.storage_key
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        raw = self.fetch(metadata)
        try:
            nodes = tuple(self.codec.decode(self.codec.decompress(raw)))
        except DecodeError as exc:
            raise DecodeError(f"{key}: {exc}") from exc
        except (ValueError, TypeError, IndexError) as exc:
            raise DecodeError(f"{key}: malformed node blob ({exc})") from exc
        if not nodes:
            raise DecodeError(f"{key}: blob contains no nodes")

        logger.debug(f"Decoded {len(nodes)} nodes from {key}")
        if self.cache is not None:
            self.cache.put(key, nodes)
        return nodes

    def decode(self, metadata: NodeMetadata, snapshot: SnapshotInput | None = None) -> SolverNode:
        """
        The node for ``metadata``.

        Raises:
            StorageError: The object or range could not be read.
            DecodeError: The blob is corrupt, or the named node is absent.
        """
        return self.select_node(self.load(metadata), metadata, snapshot)

    def select_node(
        self,
        nodes: tuple[SolverNode, ...] | List[SolverNode],
        metadata: NodeMetadata,
        snapshot: SnapshotInput | None = None,
    ) -> SolverNode:
        if metadata.node_identifier:
            for node in nodes:
                if node.node_id == metadata.node_identifier:
                    return node
            raise DecodeError(
                f"{metadata.storage_key}: node {metadata.node_identifier!r} not in blob"
            )

        if len(nodes) == 1 or snapshot is None:
            return nodes[0]

        same_street = [n for n in nodes if n.street.upper() == snapshot.street]
        if not same_street:
            return nodes[0]

        sequence = action_sequence(snapshot.action_history)
        same_line = [n for n in same_street if action_sequence(n.action_history) == sequence]
        if not same_line:
            return same_street[0]
        if len(same_line) == 1:
            return same_line[0]

        target = self.encoder.encode(snapshot)
        best, best_score = same_line[0], -1.0
        for node in same_line:
            score = cosine_similarity(target, self.encoder.encode(node_snapshot(node, snapshot)))
            if score > best_score:
                best, best_score = node, score
        return best


def node_snapshot(node: SolverNode, reference: SnapshotInput) -> SnapshotInput:
    """
    Describe a node the way a snapshot is described so the two can be encoded
    and compared. Bet sizes come from ``reference``, whose action sequence
    matches the node's.
    """
    return reference.model_copy(
        update={
            "board": tuple(node.board),
            "pot_bb": node.pot,
            "stack_bb": min(node.stack_oop, node.stack_ip),
            "positions": PositionPair(ip=node.positions_ip, oop=node.positions_oop),
            "action_history": tuple(node.action_history),
            "next_to_act": node.next_to_act,
        }
    )
