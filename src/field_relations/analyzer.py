#!/usr/bin/env python3
"""
Analysis orchestration.

:class:`RelationshipAnalyzer` drives one run through its lifecycle::

    IDLE -> SCANNING -> AGGREGATING -> SCORING -> COMPLETED
              |             |            |
              +-------------+------------+--> CANCELLED / FAILED

A run either returns a complete :class:`~field_relations.models.RelationshipReport`
or raises; there is no partial report. Cancellation is cooperative: the
predicate is polled before each source and before the aggregation and scoring
phases.

Example:
    >>> from field_relations import InMemoryProvider, analyze
    >>> provider = InMemoryProvider({
    ...     "item": {"name": ["Sword", "Shield", "Bow"]},
    ...     "drop": {"item_name": ["sword", "shield"]},
    ... })
    >>> report = analyze(provider)
    >>> [(r.source_field, r.target_field) for r in report.snapshots()]
    [('name', 'item_name')]
"""
from __future__ import annotations

import time
from typing import Callable, List, Optional

from .aggregator import CooccurrenceAggregator
from .exceptions import AnalysisCancelled, ProviderUnavailable
from .extractor import CandidateFieldExtractor
from .logging_config import RunLogger, get_logger
from .models import (
    AnalysisOptions,
    AnalysisState,
    RelationshipReport,
    ReportMetadata,
)
from .providers import DataSourceProvider
from .scorer import RelationshipScorer

logger = get_logger(__name__)


def deadline_predicate(seconds: float) -> Callable[[], bool]:
    """
    Cancellation predicate that fires once ``seconds`` have passed.

    The clock starts when the predicate is created.
    """
    deadline = time.monotonic() + seconds

    def expired() -> bool:
        return time.monotonic() >= deadline

    return expired


class RelationshipAnalyzer:
    """
    Runs relationship discovery over a data source provider.

    One analyzer runs one analysis at a time; use separate instances (or the
    module-level :func:`analyze`) for parallel runs.
    """

    def __init__(self, options: Optional[AnalysisOptions] = None):
        self.options = options or AnalysisOptions()
        self.state = AnalysisState.IDLE
        self.history: List[AnalysisState] = [AnalysisState.IDLE]
        self._sources_scanned = 0
        self._log = RunLogger(logger, {"run_id": 0})

    # ── lifecycle ────────────────────────────────────────────────────────────

    def _enter(self, state: AnalysisState) -> None:
        self.state = state
        self.history.append(state)
        self._log.debug("Analysis state -> %s", state.value)
        callback = self.options.state_callback
        if callback is None:
            return
        try:
            callback(state)
        except Exception as e:
            self._log.warning("State callback failed on %s: %s", state.value, e)

    def _check_cancelled(self, phase: str) -> None:
        predicate = self.options.cancellation_predicate
        if predicate is None:
            return
        try:
            cancelled = bool(predicate())
        except Exception as e:
            self._log.warning("Cancellation predicate failed, cancelling: %s", e)
            cancelled = True
        if cancelled:
            self._log.info(
                "Analysis cancelled during %s after %d sources", phase, self._sources_scanned
            )
            self._enter(AnalysisState.CANCELLED)
            raise AnalysisCancelled(phase=phase, sources_scanned=self._sources_scanned)

    def _report_progress(self, source_name: str) -> None:
        self._sources_scanned += 1
        callback = self.options.progress_callback
        if callback is None:
            return
        try:
            callback(source_name)
        except Exception as e:
            self._log.warning("Progress callback failed for %s: %s", source_name, e)

    # ── run ──────────────────────────────────────────────────────────────────

    def analyze(self, provider: DataSourceProvider) -> RelationshipReport:
        """
        Discover relationships between name-like fields of ``provider``'s sources.

        Raises:
            ProviderUnavailable: The provider could not enumerate its sources.
            AnalysisCancelled: The cancellation predicate fired.
        """
        opts = self.options
        self.state = AnalysisState.IDLE
        self.history = [AnalysisState.IDLE]
        self._sources_scanned = 0
        started = time.perf_counter()
        self._log = RunLogger.start(logger)
        self._log.info("Starting relationship analysis")

        try:
            self._enter(AnalysisState.SCANNING)
            extractor = CandidateFieldExtractor(
                matcher=opts.matcher,
                max_value_length=opts.max_value_length,
                max_distinct_values=opts.max_distinct_values,
            )
            extraction = extractor.extract_all(
                provider,
                before_source=lambda: self._check_cancelled(AnalysisState.SCANNING.value),
                on_source=self._report_progress,
            )
            self._log.debug(
                "Scanned %d sources: %d candidate fields, %d skipped",
                extraction.sources_scanned,
                len(extraction.fields),
                len(extraction.skipped_sources),
            )

            self._check_cancelled(AnalysisState.AGGREGATING.value)
            self._enter(AnalysisState.AGGREGATING)
            aggregator = CooccurrenceAggregator(sample_size=opts.sample_size, workers=opts.workers)
            pairs = aggregator.aggregate(extraction.fields)

            self._check_cancelled(AnalysisState.SCORING.value)
            self._enter(AnalysisState.SCORING)
            scorer = RelationshipScorer(
                min_match_count=opts.min_match_count,
                min_confidence=opts.min_confidence,
                max_relationships_per_source=opts.max_relationships_per_source,
            )
            snapshots = scorer.score_all(pairs)
        except AnalysisCancelled:
            raise
        except ProviderUnavailable as e:
            self._log.error("Analysis failed: %s", e)
            self._enter(AnalysisState.FAILED)
            raise
        except Exception:
            self._enter(AnalysisState.FAILED)
            raise

        metadata = ReportMetadata(
            sources_scanned=extraction.sources_scanned,
            candidate_fields=len(extraction.fields),
            pair_matches=len(pairs),
            relationships_found=len(snapshots),
            elapsed_seconds=time.perf_counter() - started,
            skipped_sources=tuple(extraction.skipped_sources),
            oversized_fields=tuple(extraction.oversized_fields),
            thresholds=opts.thresholds(),
        )
        report = RelationshipReport.build(snapshots, metadata)
        self._enter(AnalysisState.COMPLETED)
        self._log.info(
            "Analysis complete: %d relationships from %d sources in %.2fs",
            len(report),
            metadata.sources_scanned,
            metadata.elapsed_seconds,
        )
        return report


def analyze(
    provider: DataSourceProvider, options: Optional[AnalysisOptions] = None
) -> RelationshipReport:
    """
    Run one stateless analysis.

    Raises:
        ProviderUnavailable: The provider could not enumerate its sources.
        AnalysisCancelled: The cancellation predicate fired.
    """
    return RelationshipAnalyzer(options).analyze(provider)


__all__ = ["RelationshipAnalyzer", "analyze", "deadline_predicate"]
