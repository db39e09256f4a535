"""
Configuration schema — single source of truth.

Defaults are defined as Pydantic field defaults. YAML files provide overrides only.
Validation constraints live here, next to each field — nowhere else.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from solvermatch.shared.dicts import deep_merge_dicts

# ---------------------------------------------------------------------------
# Shared type aliases for common constraints
# ---------------------------------------------------------------------------

PositiveInt = Annotated[int, Field(gt=0)]
PositiveFloat = Annotated[float, Field(gt=0)]
NonNegFloat = Annotated[float, Field(ge=0)]
UnitFloat = Annotated[float, Field(ge=0.0, le=1.0)]


# ---------------------------------------------------------------------------
# Base model: all config classes inherit this
# ---------------------------------------------------------------------------


class StrictFrozenModel(BaseModel):
    """Base for all config models: immutable, extra keys forbidden."""

    model_config = ConfigDict(frozen=True, extra="forbid")


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------


class SearchConfig(StrictFrozenModel):
    """Similarity search policy."""

    min_score: UnitFloat = Field(default=0.55)
    approximation_score: UnitFloat = Field(default=0.75)
    limit: PositiveInt = Field(default=10)
    candidate_multiplier: PositiveInt = Field(default=3)
    tie_break: Literal["first", "stack_distance", "pot_distance"] = Field(
        default="stack_distance"
    )
    parent_fallback: bool = Field(default=True)
    max_parent_depth: Annotated[int, Field(ge=0)] = Field(default=2)
    filter_action_sequence: bool = Field(default=True)
    filter_flop_archetype: bool = Field(default=True)
    filter_position_buckets: bool = Field(default=True)
    filter_exact_positions: bool = Field(default=False)

    @model_validator(mode="after")
    def approximation_above_minimum(self) -> "SearchConfig":
        if self.approximation_score < self.min_score:
            raise ValueError(
                f"approximation_score ({self.approximation_score}) must be >= "
                f"min_score ({self.min_score})"
            )
        return self


class IndexConfig(StrictFrozenModel):
    """Vector index backend."""

    backend: Literal["memory", "qdrant"] = Field(default="memory")
    url: str = Field(default="http://localhost:6333")
    api_key: str | None = Field(default=None)
    collections: dict[str, str] = Field(
        default_factory=lambda: {
            "flop": "flop_nodes",
            "turn": "turn_nodes",
            "river": "river_nodes",
        }
    )
    timeout_seconds: PositiveFloat = Field(default=5.0)

    @model_validator(mode="after")
    def collections_cover_postflop(self) -> "IndexConfig":
        missing = {"flop", "turn", "river"} - set(self.collections)
        if missing:
            raise ValueError(f"collections missing streets: {sorted(missing)}")
        return self


class StorageConfig(StrictFrozenModel):
    """Object storage and decoded-node cache."""

    root: str = Field(default="data/nodes")
    cache_size: Annotated[int, Field(ge=0)] = Field(default=128)
    compression_level: Annotated[int, Field(ge=1, le=22)] = Field(default=3)


class RetryConfig(StrictFrozenModel):
    """Bounded retry for external calls."""

    max_attempts: PositiveInt = Field(default=3)
    backoff_seconds: NonNegFloat = Field(default=0.05)
    backoff_multiplier: Annotated[float, Field(ge=1.0)] = Field(default=2.0)


class PipelineConfig(StrictFrozenModel):
    """Per-hand fan-out and timeouts."""

    max_workers: PositiveInt = Field(default=4)
    search_timeout_seconds: PositiveFloat = Field(default=5.0)
    fetch_timeout_seconds: PositiveFloat = Field(default=10.0)
    build_solver_blocks: bool = Field(default=True)


class FeatureConfig(StrictFrozenModel):
    """Normalization bounds for the feature vector."""

    max_stack_bb: PositiveFloat = Field(default=250.0)
    max_pot_bb: PositiveFloat = Field(default=500.0)


class AnalysisConfig(StrictFrozenModel):
    """Solver block computations."""

    equity_samples: PositiveInt = Field(default=2_000)
    exact_enumeration_limit: PositiveInt = Field(default=60_000)
    top_blocked: PositiveInt = Field(default=5)
    confidence_high: UnitFloat = Field(default=0.75)
    confidence_medium: UnitFloat = Field(default=0.5)

    @model_validator(mode="after")
    def confidence_is_ordered(self) -> "AnalysisConfig":
        if self.confidence_medium > self.confidence_high:
            raise ValueError(
                f"confidence_medium ({self.confidence_medium}) must not exceed "
                f"confidence_high ({self.confidence_high})"
            )
        return self


class SystemConfig(StrictFrozenModel):
    """System-level configuration."""

    seed: int = Field(default=0)
    config_name: str = Field(default="default")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------


class Config(StrictFrozenModel):
    """
    Complete matching configuration.

    All defaults are defined here in Python. YAML files provide only overrides.
    """

    search: SearchConfig = Field(default_factory=SearchConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    features: FeatureConfig = Field(default_factory=FeatureConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize config to a plain dict (for JSON, logging, etc.)."""
        return self.model_dump()

    @classmethod
    def default(cls) -> "Config":
        """Return a Config populated with all defaults."""
        return cls()

    def merge(self, overrides: dict[str, Any]) -> "Config":
        """Return a new Config with the provided overrides merged in."""
        merged = deep_merge_dicts(self.model_dump(), overrides)
        return Config.model_validate(merged)
