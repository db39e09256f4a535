"""
Qdrant REST adapter.

Talks to Qdrant's HTTP API directly with httpx: one collection per street,
exact-match payload filters, server-side score threshold.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

import httpx
import numpy as np

from solvermatch.search.metadata import NodeMetadata, SearchHit
from solvermatch.shared.errors import ExternalTimeout, SearchError

logger = logging.getLogger(__name__)


def build_filter(filters: Mapping[str, Any]) -> dict[str, Any]:
    """``{"street": "RIVER"}`` -> ``{"must": [{"key": "street", "match": {"value": "RIVER"}}]}``"""
    return {"must": [{"key": key, "match": {"value": value}} for key, value in filters.items()]}


class QdrantVectorIndex:
    """
    :class:`~solvermatch.search.index.VectorIndex` backed by a Qdrant server.

    Args:
        url: Base URL, e.g. ``http://localhost:6333``
        api_key: Optional ``api-key`` header value
        timeout: Per-request timeout in seconds
        client: Pre-built client (tests pass one with a mock transport)
    """

    def __init__(
        self,
        url: str = "http://localhost:6333",
        api_key: str | None = None,
        timeout: float = 5.0,
        client: httpx.Client | None = None,
    ):
        headers = {"api-key": api_key} if api_key else {}
        self._client = client or httpx.Client(base_url=url, timeout=timeout, headers=headers)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "QdrantVectorIndex":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            response = self._client.request(method, path, json=body)
        except httpx.TimeoutException as exc:
            raise ExternalTimeout(f"Qdrant {method} {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise SearchError(f"Qdrant {method} {path} failed: {exc}") from exc

        if not response.is_success:
            raise SearchError(
                f"Qdrant {method} {path} returned {response.status_code}: {response.text[:200]}"
            )
        try:
            return response.json()
        except ValueError as exc:
            raise SearchError(f"Qdrant {method} {path} returned invalid JSON") from exc

    def search(
        self,
        collection: str,
        vector: np.ndarray,
        filters: Mapping[str, Any],
        limit: int,
        min_score: float,
    ) -> list[SearchHit]:
        body: dict[str, Any] = {
            "vector": [float(x) for x in np.asarray(vector).ravel()],
            "limit": limit,
            "with_payload": True,
            "score_threshold": min_score,
        }
        if filters:
            body["filter"] = build_filter(filters)

        data = self._request("POST", f"/collections/{collection}/points/search", body)
        hits = []
        for point in data.get("result") or []:
            payload = dict(point.get("payload") or {})
            payload.setdefault("_id", str(point.get("id", "")))
            try:
                metadata = NodeMetadata.model_validate(payload)
            except ValueError as exc:
                raise SearchError(f"Malformed payload for point {point.get('id')}") from exc
            hits.append(SearchHit(metadata=metadata, score=min(max(float(point["score"]), 0.0), 1.0)))
        logger.debug(f"Qdrant {collection}: {len(hits)} hits")
        return hits

    def upsert(
        self,
        collection: str,
        points: Sequence[tuple[int | str, np.ndarray, NodeMetadata]],
    ) -> None:
        """Insert or replace points; used by corpus tooling."""
        body = {
            "points": [
                {
                    "id": point_id,
                    "vector": [float(x) for x in np.asarray(vector).ravel()],
                    "payload": metadata.payload(),
                }
                for point_id, vector, metadata in points
            ]
        }
        self._request("PUT", f"/collections/{collection}/points?wait=true", body)
