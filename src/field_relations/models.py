#!/usr/bin/env python3
"""
Data structures used throughout the relationship discovery engine.

Run-internal structures (:class:`CandidateField`, :class:`PairMatch`) are plain
frozen dataclasses. Everything a caller receives back from ``analyze``
(:class:`RelationshipSnapshot`, :class:`RelationshipReport` and its metadata)
is a frozen Pydantic model, so it validates its own bounds and serializes to
JSON without extra glue.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .constants import (
    DEFAULT_FIELD_PATTERNS,
    DEFAULT_MIN_CONFIDENCE,
    DEFAULT_MIN_MATCH_COUNT,
    DEFAULT_SAMPLE_SIZE,
    DEFAULT_WORKERS,
    MAX_DISTINCT_VALUES_PER_FIELD,
    MAX_VALUE_LENGTH,
)
from .exceptions import ConfigurationError
from .naming import FieldNameMatcher
from .value_index import ValueIndex

FieldKey = Tuple[str, str]
ProgressCallback = Callable[[str], Any]
CancellationPredicate = Callable[[], bool]


class AnalysisState(str, Enum):
    """Lifecycle states of one analysis run."""

    IDLE = "idle"
    SCANNING = "scanning"
    AGGREGATING = "aggregating"
    SCORING = "scoring"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (
            AnalysisState.COMPLETED,
            AnalysisState.CANCELLED,
            AnalysisState.FAILED,
        )


StateCallback = Callable[[AnalysisState], Any]


# ──────────────────────────────────────────────────────────────────────────────
# Run-internal structures
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class CandidateField:
    """A name-like field of one data source together with its value index."""

    source_name: str
    field_name: str
    index: ValueIndex = field(compare=False, repr=False)

    @property
    def key(self) -> FieldKey:
        return (self.source_name, self.field_name)

    @property
    def distinct_count(self) -> int:
        return self.index.distinct_count

    def __str__(self) -> str:
        return f"{self.source_name}.{self.field_name}"


@dataclass(frozen=True)
class PairMatch:
    """
    Two candidate fields from different sources that share values.

    ``left.key < right.key`` always holds, so a pair has exactly one
    representation regardless of the order the fields were scanned in.
    """

    left: CandidateField
    right: CandidateField
    match_count: int
    samples: Tuple[str, ...] = ()

    @property
    def key(self) -> Tuple[FieldKey, FieldKey]:
        return (self.left.key, self.right.key)


# ──────────────────────────────────────────────────────────────────────────────
# Options
# ──────────────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class AnalysisOptions:
    """
    Options for one ``analyze`` call.

    Attributes:
        progress_callback: Called with each source name as it is scanned.
        cancellation_predicate: Polled before each source and before the
            aggregation and scoring phases; returning True cancels the run.
        min_match_count: Pairs sharing fewer distinct values are dropped.
        min_confidence: Pairs scoring below this are dropped.
        sample_size: Shared values kept per relationship for display.
        field_patterns: Case-insensitive globs selecting name-like fields.
        max_value_length: Longer values are ignored (None disables the cap).
        max_distinct_values: Fields with more distinct values are dropped as
            oversized (None disables the cap).
        max_relationships_per_source: Keep only the N most confident
            relationships per source field (None keeps all).
        workers: Threads used to pair inverted-index buckets.
        state_callback: Called with every lifecycle state the run enters.
    """

    progress_callback: Optional[ProgressCallback] = None
    cancellation_predicate: Optional[CancellationPredicate] = None
    min_match_count: int = DEFAULT_MIN_MATCH_COUNT
    min_confidence: float = DEFAULT_MIN_CONFIDENCE
    sample_size: int = DEFAULT_SAMPLE_SIZE
    field_patterns: Tuple[str, ...] = DEFAULT_FIELD_PATTERNS
    max_value_length: Optional[int] = MAX_VALUE_LENGTH
    max_distinct_values: Optional[int] = MAX_DISTINCT_VALUES_PER_FIELD
    max_relationships_per_source: Optional[int] = None
    workers: int = DEFAULT_WORKERS
    state_callback: Optional[StateCallback] = None

    def __post_init__(self) -> None:
        if isinstance(self.field_patterns, str):
            object.__setattr__(self, "field_patterns", (self.field_patterns,))
        else:
            object.__setattr__(self, "field_patterns", tuple(self.field_patterns))

        if not isinstance(self.min_match_count, int) or self.min_match_count < 1:
            raise ConfigurationError(
                "min_match_count must be a positive integer",
                config_key="min_match_count",
                config_value=self.min_match_count,
            )
        if not 0.0 <= float(self.min_confidence) <= 1.0:
            raise ConfigurationError(
                "min_confidence must be between 0 and 1",
                config_key="min_confidence",
                config_value=self.min_confidence,
            )
        if self.sample_size < 0:
            raise ConfigurationError(
                "sample_size cannot be negative",
                config_key="sample_size",
                config_value=self.sample_size,
            )
        if self.workers < 1:
            raise ConfigurationError(
                "workers must be at least 1",
                config_key="workers",
                config_value=self.workers,
            )
        if not any(p and p.strip() for p in self.field_patterns):
            raise ConfigurationError(
                "at least one field pattern is required",
                config_key="field_patterns",
                config_value=list(self.field_patterns),
            )
        for key in ("max_value_length", "max_distinct_values", "max_relationships_per_source"):
            value = getattr(self, key)
            if value is not None and value < 1:
                raise ConfigurationError(
                    f"{key} must be positive or None", config_key=key, config_value=value
                )
        for key in ("progress_callback", "cancellation_predicate", "state_callback"):
            value = getattr(self, key)
            if value is not None and not callable(value):
                raise ConfigurationError(f"{key} must be callable", config_key=key)

    @property
    def matcher(self) -> FieldNameMatcher:
        return FieldNameMatcher(self.field_patterns)

    def thresholds(self) -> Dict[str, Any]:
        """The scoring-relevant settings, as recorded in report metadata."""
        return {
            "min_match_count": self.min_match_count,
            "min_confidence": self.min_confidence,
            "sample_size": self.sample_size,
            "field_patterns": list(self.field_patterns),
            "max_relationships_per_source": self.max_relationships_per_source,
        }


# ──────────────────────────────────────────────────────────────────────────────
# Report models
# ──────────────────────────────────────────────────────────────────────────────


class FrozenModel(BaseModel):
    """Base for immutable report models."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)


class RelationshipSnapshot(FrozenModel):
    """One discovered relationship between two name-like fields."""

    source_file: str
    source_field: str
    target_file: str
    target_field: str
    match_count: int = Field(ge=1)
    source_coverage: float = Field(ge=0.0, le=1.0)
    target_coverage: float = Field(ge=0.0, le=1.0)
    confidence: float = Field(ge=0.0, le=1.0)
    name_similarity: float = Field(ge=0.0, le=1.0)
    samples: Tuple[str, ...] = ()

    @property
    def source_path(self) -> str:
        return f"{self.source_file} :: {self.source_field}"

    @property
    def target_path(self) -> str:
        return f"{self.target_file} :: {self.target_field}"

    def sort_key(self) -> Tuple[Any, ...]:
        """Report ordering: confidence desc, match count desc, then names."""
        return (
            -self.confidence,
            -self.match_count,
            self.source_file,
            self.source_field,
            self.target_file,
            self.target_field,
        )


class SkippedSource(FrozenModel):
    """A data source that could not be read and was left out of the run."""

    source: str
    reason: str


class OversizedField(FrozenModel):
    """A name-like field dropped because it exceeded the distinct-value cap."""

    source: str
    field_name: str
    limit: int


class ReportMetadata(FrozenModel):
    """Summary of one analysis run."""

    sources_scanned: int = 0
    candidate_fields: int = 0
    pair_matches: int = 0
    relationships_found: int = 0
    elapsed_seconds: float = 0.0
    skipped_sources: Tuple[SkippedSource, ...] = ()
    oversized_fields: Tuple[OversizedField, ...] = ()
    thresholds: Dict[str, Any] = Field(default_factory=dict)
    generated_at: datetime = Field(default_factory=datetime.now)


class RelationshipReport(FrozenModel):
    """Immutable result of a successful analysis run."""

    relationships: Tuple[RelationshipSnapshot, ...] = ()
    metadata: ReportMetadata = Field(default_factory=ReportMetadata)

    @classmethod
    def build(
        cls, snapshots: Sequence[RelationshipSnapshot], metadata: ReportMetadata
    ) -> "RelationshipReport":
        """Create a report with snapshots in canonical order."""
        ordered = tuple(sorted(snapshots, key=RelationshipSnapshot.sort_key))
        return cls(relationships=ordered, metadata=metadata)

    def snapshots(self) -> List[RelationshipSnapshot]:
        return list(self.relationships)

    @property
    def skipped_sources(self) -> Tuple[SkippedSource, ...]:
        return self.metadata.skipped_sources

    def is_empty(self) -> bool:
        return not self.relationships

    def __len__(self) -> int:
        return len(self.relationships)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    def to_json(self, indent: Optional[int] = 2) -> str:
        return self.model_dump_json(indent=indent)


__all__ = [
    "AnalysisState",
    "CandidateField",
    "PairMatch",
    "AnalysisOptions",
    "RelationshipSnapshot",
    "SkippedSource",
    "OversizedField",
    "ReportMetadata",
    "RelationshipReport",
    "FieldKey",
]
