"""Index payload and search result models."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class NodeMetadata(BaseModel):
    """
    Pointer to a stored solver node plus the denormalized fields the index
    filters and ranks on.

    ``bucket``/``key``/``offset``/``length`` locate the compressed node blob;
    everything else mirrors the node so candidates can be filtered without
    fetching it.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    id: str = Field(default="", alias="_id")
    bucket: str = Field(alias="s3_bucket")
    key: str = Field(alias="s3_key")
    offset: Optional[int] = Field(default=None, ge=0)
    length: Optional[int] = Field(default=None, gt=0)
    node_identifier: Optional[str] = None

    street: str = "FLOP"
    game_type: str = "cash"
    pot_type: str = "srp"
    positions_ip: str = ""
    positions_oop: str = ""
    position_bucket_ip: Optional[str] = None
    position_bucket_oop: Optional[str] = None
    board_tex: tuple[int, ...] = ()
    flop_archetype: str = ""
    action_sequence: str = ""
    stack_bb: float = 0.0
    pot_bb: float = 0.0
    act_hash: int = 0
    tag_ids: tuple[int, ...] = ()

    @property
    def storage_key(self) -> str:
        """Identity of the stored byte range; stable across searches."""
        return f"{self.bucket}:{self.key}:{self.offset}:{self.length}"

    def payload(self) -> dict[str, Any]:
        """Flat payload as stored in the index (storage fields use their wire names)."""
        return self.model_dump(by_alias=True)

    def field_value(self, name: str) -> Any:
        """Payload value for a filter key, accepting wire or attribute names."""
        payload = self.payload()
        if name in payload:
            return payload[name]
        return getattr(self, name, None)


class SearchHit(BaseModel):
    """One ranked candidate from a vector index."""

    model_config = ConfigDict(frozen=True)

    metadata: NodeMetadata
    score: float


class SearchResult(BaseModel):
    """The chosen match for a snapshot."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    metadata: NodeMetadata = Field(alias="nodeMetadata")
    similarity_score: float = Field(alias="similarityScore", ge=0.0, le=1.0)
    is_approximation: bool = Field(alias="isApproximation")
    match_type: Literal["exact", "parent"] = Field(default="exact", alias="matchType")
    parent_depth: Optional[int] = Field(default=None, alias="parentDepth")
    removed_actions: tuple[str, ...] = Field(default=(), alias="removedActions")
