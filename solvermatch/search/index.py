"""Vector index interface and an in-process numpy implementation."""

from __future__ import annotations

import logging
import threading
from typing import Any, Mapping, Protocol

import numpy as np

from solvermatch.features.encoder import VECTOR_DIM
from solvermatch.search.metadata import NodeMetadata, SearchHit
from solvermatch.shared.errors import SearchError

logger = logging.getLogger(__name__)


class VectorIndex(Protocol):
    """Similarity search over indexed solver nodes."""

    def search(
        self,
        collection: str,
        vector: np.ndarray,
        filters: Mapping[str, Any],
        limit: int,
        min_score: float,
    ) -> list[SearchHit]:
        """
        Return up to ``limit`` hits with score >= ``min_score`` whose payload
        equals every filter value, best first.
        """


class InMemoryVectorIndex:
    """
    Brute-force cosine search over numpy matrices, one per collection.

    Ties keep insertion order. Safe for concurrent reads while no writer is
    active; ``add`` takes a lock.
    """

    def __init__(self):
        self._vectors: dict[str, list[np.ndarray]] = {}
        self._metadata: dict[str, list[NodeMetadata]] = {}
        self._matrix: dict[str, np.ndarray] = {}
        self._lock = threading.Lock()

    def add(self, collection: str, vector: np.ndarray, metadata: NodeMetadata) -> None:
        vector = np.asarray(vector, dtype=np.float32)
        if vector.shape != (VECTOR_DIM,):
            raise ValueError(f"Expected a {VECTOR_DIM}-dim vector, got shape {vector.shape}")
        with self._lock:
            self._vectors.setdefault(collection, []).append(vector)
            self._metadata.setdefault(collection, []).append(metadata)
            self._matrix.pop(collection, None)

    def __len__(self) -> int:
        return sum(len(items) for items in self._metadata.values())

    def _matrix_for(self, collection: str) -> np.ndarray:
        with self._lock:
            matrix = self._matrix.get(collection)
            if matrix is None:
                matrix = np.stack(self._vectors[collection])
                self._matrix[collection] = matrix
            return matrix

    def search(
        self,
        collection: str,
        vector: np.ndarray,
        filters: Mapping[str, Any],
        limit: int,
        min_score: float,
    ) -> list[SearchHit]:
        if collection not in self._metadata:
            raise SearchError(f"Unknown collection: {collection}")

        metadata = self._metadata[collection]
        keep = [
            i
            for i, meta in enumerate(metadata)
            if all(meta.field_value(k) == v for k, v in filters.items())
        ]
        if not keep:
            return []

        matrix = self._matrix_for(collection)[keep]
        query = np.asarray(vector, dtype=np.float32)
        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        with np.errstate(divide="ignore", invalid="ignore"):
            scores = np.where(norms > 0, matrix @ query / norms, 0.0)
        scores = np.clip(scores, 0.0, 1.0)

        order = np.argsort(-scores, kind="stable")
        hits = []
        for j in order:
            if scores[j] < min_score or len(hits) >= limit:
                break
            hits.append(SearchHit(metadata=metadata[keep[j]], score=float(scores[j])))

        logger.debug(f"{collection}: {len(keep)} filtered candidates, {len(hits)} hits")
        return hits
