#!/usr/bin/env python3
"""
Co-occurrence aggregation over candidate fields.

Builds an inverted index (normalized value -> fields holding it) in one pass
and turns every bucket with two or more fields into intersection counts for
the cross-source pairs in it. The index lives only inside one
:meth:`CooccurrenceAggregator.aggregate` call.
"""
from __future__ import annotations

from collections import Counter, defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Sequence, Tuple

from .constants import DEFAULT_SAMPLE_SIZE, DEFAULT_WORKERS, MIN_BUCKETS_PER_SHARD
from .logging_config import get_logger, log_performance
from .models import CandidateField, FieldKey, PairMatch

logger = get_logger(__name__)

PairKey = Tuple[FieldKey, FieldKey]
Bucket = Tuple[str, Tuple[CandidateField, ...]]


def build_inverted_index(fields: Sequence[CandidateField]) -> Dict[str, List[CandidateField]]:
    """Map each normalized value to the candidate fields whose index contains it."""
    inverted: Dict[str, List[CandidateField]] = defaultdict(list)
    for candidate in fields:
        for value in candidate.index:
            inverted[value].append(candidate)
    return inverted


def _count_buckets(
    buckets: Sequence[Bucket], sample_size: int
) -> Tuple[Counter, Dict[PairKey, List[str]]]:
    """Pair counts and samples for a run of buckets visited in value order."""
    counts: Counter = Counter()
    samples: Dict[PairKey, List[str]] = {}
    for value, members in buckets:
        for i, left in enumerate(members):
            for right in members[i + 1:]:
                if left.source_name == right.source_name:
                    continue
                key = (left.key, right.key)
                counts[key] += 1
                if sample_size:
                    kept = samples.setdefault(key, [])
                    if len(kept) < sample_size:
                        kept.append(value)
    return counts, samples


class CooccurrenceAggregator:
    """
    Computes exact shared-value counts for every cross-source field pair.

    Args:
        sample_size: Shared values kept per pair (smallest values first).
        workers: Threads used to process bucket shards; 1 runs inline.
    """

    def __init__(self, sample_size: int = DEFAULT_SAMPLE_SIZE, workers: int = DEFAULT_WORKERS):
        self.sample_size = max(0, sample_size)
        self.workers = max(1, workers)

    @log_performance
    def aggregate(self, fields: Sequence[CandidateField]) -> List[PairMatch]:
        """Return one PairMatch per cross-source pair sharing at least one value, sorted by pair key."""
        by_key: Dict[FieldKey, CandidateField] = {}
        for candidate in fields:
            by_key.setdefault(candidate.key, candidate)
        ordered = [by_key[k] for k in sorted(by_key)]

        inverted = build_inverted_index(ordered)
        # Members keep the sorted field order, so (left, right) is already canonical
        buckets: List[Bucket] = [
            (value, tuple(members))
            for value, members in sorted(inverted.items())
            if len(members) > 1
        ]
        logger.debug(
            "Inverted index: %d values, %d shared buckets over %d fields",
            len(inverted),
            len(buckets),
            len(ordered),
        )
        del inverted

        counts, samples = self._process(buckets)

        matches = []
        for key in sorted(counts):
            left_key, right_key = key
            matches.append(
                PairMatch(
                    left=by_key[left_key],
                    right=by_key[right_key],
                    match_count=counts[key],
                    samples=tuple(samples.get(key, ())),
                )
            )
        logger.debug("%d field pairs share at least one value", len(matches))
        return matches

    def _process(self, buckets: List[Bucket]) -> Tuple[Counter, Dict[PairKey, List[str]]]:
        shard_count = min(self.workers, max(1, len(buckets) // MIN_BUCKETS_PER_SHARD))
        if shard_count <= 1:
            return _count_buckets(buckets, self.sample_size)

        size = -(-len(buckets) // shard_count)
        shards = [buckets[i:i + size] for i in range(0, len(buckets), size)]
        logger.debug("Pairing %d buckets in %d shards", len(buckets), len(shards))

        with ThreadPoolExecutor(max_workers=len(shards)) as executor:
            partials = list(
                executor.map(lambda shard: _count_buckets(shard, self.sample_size), shards)
            )

        counts: Counter = Counter()
        samples: Dict[PairKey, List[str]] = {}
        # Shards are contiguous in value order, so concatenating keeps samples sorted
        for shard_counts, shard_samples in partials:
            counts.update(shard_counts)
            for key, values in shard_samples.items():
                kept = samples.setdefault(key, [])
                room = self.sample_size - len(kept)
                if room > 0:
                    kept.extend(values[:room])
        return counts, samples


__all__ = ["CooccurrenceAggregator", "build_inverted_index"]
