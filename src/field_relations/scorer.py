#!/usr/bin/env python3
"""
Relationship scoring.

Turns a :class:`~field_relations.models.PairMatch` into an oriented
:class:`~field_relations.models.RelationshipSnapshot`, or drops it when it
falls below the configured thresholds.

Confidence is ``min(source_coverage, target_coverage)`` weighted by name
similarity: ``min_cov * (0.7 + 0.3 * similarity)``. Two fields with identical
value sets but unrelated names therefore score 0.7, and the same fields with
identical names score 1.0.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from .constants import (
    COVERAGE_BASE_WEIGHT,
    DEFAULT_MIN_CONFIDENCE,
    DEFAULT_MIN_MATCH_COUNT,
    NAME_SIMILARITY_WEIGHT,
)
from .logging_config import get_logger
from .models import CandidateField, PairMatch, RelationshipSnapshot
from .naming import leaf_field_name, name_similarity

logger = get_logger(__name__)


def orient(left: CandidateField, right: CandidateField) -> Tuple[CandidateField, CandidateField]:
    """
    Pick (source, target) for a pair.

    The field with more distinct values is the source (the "owning" table of
    the entity). Ties go to the smaller (source name, field name) key.
    """
    if left.distinct_count != right.distinct_count:
        return (left, right) if left.distinct_count > right.distinct_count else (right, left)
    return (left, right) if left.key <= right.key else (right, left)


def compute_confidence(source_coverage: float, target_coverage: float, similarity: float) -> float:
    confidence = min(source_coverage, target_coverage) * (
        COVERAGE_BASE_WEIGHT + NAME_SIMILARITY_WEIGHT * similarity
    )
    return min(1.0, max(0.0, confidence))


class RelationshipScorer:
    """Scores and filters field pairs."""

    def __init__(
        self,
        min_match_count: int = DEFAULT_MIN_MATCH_COUNT,
        min_confidence: float = DEFAULT_MIN_CONFIDENCE,
        max_relationships_per_source: Optional[int] = None,
    ):
        self.min_match_count = min_match_count
        self.min_confidence = min_confidence
        self.max_relationships_per_source = max_relationships_per_source

    def score(self, pair: PairMatch) -> Optional[RelationshipSnapshot]:
        """Return the snapshot for ``pair``, or None if it is filtered out."""
        if pair.match_count < self.min_match_count:
            return None

        source, target = orient(pair.left, pair.right)
        source_coverage = min(1.0, pair.match_count / source.distinct_count)
        target_coverage = min(1.0, pair.match_count / target.distinct_count)
        similarity = name_similarity(
            leaf_field_name(source.field_name), leaf_field_name(target.field_name)
        )
        confidence = compute_confidence(source_coverage, target_coverage, similarity)
        if confidence < self.min_confidence:
            return None

        return RelationshipSnapshot(
            source_file=source.source_name,
            source_field=source.field_name,
            target_file=target.source_name,
            target_field=target.field_name,
            match_count=pair.match_count,
            source_coverage=source_coverage,
            target_coverage=target_coverage,
            confidence=confidence,
            name_similarity=similarity,
            samples=pair.samples,
        )

    def score_all(self, pairs: Iterable[PairMatch]) -> List[RelationshipSnapshot]:
        """Score every pair and return the survivors in report order."""
        snapshots = []
        dropped = 0
        for pair in pairs:
            snapshot = self.score(pair)
            if snapshot is None:
                dropped += 1
            else:
                snapshots.append(snapshot)
        snapshots.sort(key=RelationshipSnapshot.sort_key)
        logger.debug("Scored pairs: %d kept, %d below thresholds", len(snapshots), dropped)

        limit = self.max_relationships_per_source
        if limit is None:
            return snapshots

        per_source: Dict[Tuple[str, str], int] = defaultdict(int)
        limited = []
        for snapshot in snapshots:
            key = (snapshot.source_file, snapshot.source_field)
            if per_source[key] < limit:
                per_source[key] += 1
                limited.append(snapshot)
        return limited


__all__ = ["RelationshipScorer", "compute_confidence", "orient"]
