#!/usr/bin/env python3
"""
Candidate field extraction.

Turns data sources into :class:`~field_relations.models.CandidateField`
objects: one per name-like field that still holds at least one value after
normalization.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Set

from .constants import MAX_DISTINCT_VALUES_PER_FIELD, MAX_VALUE_LENGTH
from .exceptions import FieldRelationsError, ProviderUnavailable, SourceReadError
from .logging_config import get_logger
from .models import CandidateField, FieldKey, OversizedField, SkippedSource
from .naming import FieldNameMatcher, leaf_field_name
from .providers import DataSource, DataSourceProvider
from .value_index import ValueIndex

logger = get_logger(__name__)


@dataclass
class ExtractionResult:
    """Everything the scanning phase produced."""

    fields: List[CandidateField] = field(default_factory=list)
    sources_scanned: int = 0
    skipped_sources: List[SkippedSource] = field(default_factory=list)
    oversized_fields: List[OversizedField] = field(default_factory=list)


def open_sources(provider: DataSourceProvider) -> Iterable[DataSource]:
    """Ask the provider for its sources, mapping any failure to ProviderUnavailable."""
    try:
        return provider.list_sources()
    except ProviderUnavailable:
        raise
    except Exception as e:
        raise ProviderUnavailable(
            f"Data source provider cannot enumerate sources: {e}",
            provider=type(provider).__name__,
            cause=e,
        ) from e


class CandidateFieldExtractor:
    """Builds candidate fields and their value indexes from data sources."""

    def __init__(
        self,
        matcher: Optional[Callable[[str], bool]] = None,
        max_value_length: Optional[int] = MAX_VALUE_LENGTH,
        max_distinct_values: Optional[int] = MAX_DISTINCT_VALUES_PER_FIELD,
    ):
        self.matcher = matcher or FieldNameMatcher()
        self.max_value_length = max_value_length
        self.max_distinct_values = max_distinct_values
        self._seen: Set[FieldKey] = set()
        self.oversized: List[OversizedField] = []

    def reset(self) -> None:
        self._seen.clear()
        self.oversized = []

    def extract_source(self, source: DataSource, source_name: Optional[str] = None) -> List[CandidateField]:
        """
        Build candidate fields for one source.

        Raises:
            SourceReadError: The source's name or fields could not be read.
        """
        if source_name is None:
            source_name = self.source_name(source)
        try:
            field_map = source.fields()
            items = list(field_map.items())
        except Exception as e:
            raise SourceReadError(
                f"Cannot read source {source_name}", source_name=source_name, cause=e
            ) from e

        candidates: List[CandidateField] = []
        oversized: List[OversizedField] = []
        for field_name, raw_values in items:
            field_name = str(field_name)
            if not self.matcher(leaf_field_name(field_name)):
                continue
            key = (source_name, field_name)
            if key in self._seen:
                logger.warning("Duplicate field %s.%s ignored", source_name, field_name)
                continue
            self._seen.add(key)

            try:
                index = ValueIndex.build(
                    raw_values or (),
                    max_value_length=self.max_value_length,
                    max_distinct_values=self.max_distinct_values,
                )
            except Exception as e:
                raise SourceReadError(
                    f"Cannot read values of {source_name}.{field_name}",
                    source_name=source_name,
                    cause=e,
                ) from e

            if index.overflow:
                logger.warning(
                    "Field %s.%s has more than %d distinct values; skipped",
                    source_name,
                    field_name,
                    self.max_distinct_values,
                )
                oversized.append(
                    OversizedField(
                        source=source_name,
                        field_name=field_name,
                        limit=self.max_distinct_values or 0,
                    )
                )
                continue
            if index.is_empty():
                logger.debug("Field %s.%s has no usable values", source_name, field_name)
                continue
            candidates.append(CandidateField(source_name, field_name, index))

        self.oversized.extend(oversized)
        logger.debug("Source %s: %d candidate fields", source_name, len(candidates))
        return candidates

    @staticmethod
    def source_name(source: DataSource) -> str:
        """Read a source's name, raising SourceReadError if that fails."""
        try:
            return str(source.name())
        except Exception as e:
            raise SourceReadError(
                f"Cannot read source name: {e}", source_name=repr(source), cause=e
            ) from e

    def extract(self, provider: DataSourceProvider) -> List[CandidateField]:
        """
        Build candidate fields for every source of a provider.

        Sources that fail to read are skipped; use :meth:`extract_all` to see
        which ones.
        """
        return self.extract_all(provider).fields

    def extract_all(
        self,
        provider: DataSourceProvider,
        before_source: Optional[Callable[[], None]] = None,
        on_source: Optional[Callable[[str], None]] = None,
    ) -> ExtractionResult:
        """
        Scan all sources of a provider.

        Args:
            provider: Where the sources come from.
            before_source: Called before each source is touched; may raise to
                stop the scan (the orchestrator uses this for cancellation).
            on_source: Called with each source's name once it is known.

        Raises:
            ProviderUnavailable: The provider could not enumerate its sources.
        """
        self.reset()
        result = ExtractionResult()
        seen_sources: Set[str] = set()
        sources = open_sources(provider)

        try:
            iterator = iter(sources)
        except TypeError as e:
            raise ProviderUnavailable(
                "Data source provider returned a non-iterable",
                provider=type(provider).__name__,
                cause=e,
            ) from e

        position = 0
        while True:
            if before_source is not None:
                before_source()
            try:
                source = next(iterator)
            except StopIteration:
                break
            except FieldRelationsError:
                raise
            except Exception as e:
                raise ProviderUnavailable(
                    f"Data source provider failed while enumerating: {e}",
                    provider=type(provider).__name__,
                    cause=e,
                ) from e
            position += 1

            try:
                name = self.source_name(source)
            except SourceReadError as e:
                name = f"<source #{position}>"
                logger.warning("Skipping unnamed source %s: %s", name, e.reason)
                result.skipped_sources.append(SkippedSource(source=name, reason=e.reason))
                continue

            if name in seen_sources:
                logger.warning("Source %s listed twice; second copy ignored", name)
                continue
            seen_sources.add(name)

            if on_source is not None:
                on_source(name)
            result.sources_scanned += 1

            try:
                result.fields.extend(self.extract_source(source, name))
            except SourceReadError as e:
                logger.warning("Skipping source %s: %s", name, e.reason)
                result.skipped_sources.append(SkippedSource(source=name, reason=e.reason))

        result.oversized_fields = list(self.oversized)
        return result


__all__ = ["CandidateFieldExtractor", "ExtractionResult", "open_sources"]
