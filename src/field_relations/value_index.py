"""Per-field normalized value multiset.

A :class:`ValueIndex` maps each normalized value of one field to the number of
times it occurs. Normalization trims surrounding whitespace and lower-cases;
``None`` and blank values never enter the index.
"""
from __future__ import annotations

from collections import Counter
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping, Optional

from .constants import MAX_VALUE_LENGTH

__all__ = ["ValueIndex", "normalize_value"]


def normalize_value(raw: Any) -> Optional[str]:
    """
    Normalize a raw field value for matching.

    Returns ``None`` for values that cannot take part in a match (``None``,
    empty or whitespace-only strings). Non-string scalars are stringified
    first so that providers handing over numbers still index cleanly.
    """
    if raw is None:
        return None
    if not isinstance(raw, str):
        raw = str(raw)
    value = raw.strip().lower()
    return value or None


class ValueIndex:
    """Immutable normalized value -> occurrence count mapping for one field."""

    __slots__ = ("_counts", "_total", "_overflow")

    def __init__(self, counts: Mapping[str, int], overflow: bool = False):
        self._counts = MappingProxyType(dict(counts))
        self._total = sum(self._counts.values())
        self._overflow = overflow

    @classmethod
    def build(
        cls,
        raw_values: Iterable[Any],
        max_value_length: Optional[int] = MAX_VALUE_LENGTH,
        max_distinct_values: Optional[int] = None,
    ) -> "ValueIndex":
        """
        Build an index from raw values.

        Values longer than ``max_value_length`` are skipped. Once more than
        ``max_distinct_values`` distinct values have been seen the index is
        marked as overflowed and stops growing.
        """
        counts: Counter[str] = Counter()
        overflow = False
        for raw in raw_values:
            value = normalize_value(raw)
            if value is None:
                continue
            if max_value_length is not None and len(value) > max_value_length:
                continue
            if (
                max_distinct_values is not None
                and value not in counts
                and len(counts) >= max_distinct_values
            ):
                overflow = True
                break
            counts[value] += 1
        return cls(counts, overflow=overflow)

    @property
    def counts(self) -> Mapping[str, int]:
        """Read-only view of value -> occurrence count."""
        return self._counts

    @property
    def distinct_count(self) -> int:
        return len(self._counts)

    @property
    def total_count(self) -> int:
        """Total number of non-blank occurrences."""
        return self._total

    @property
    def overflow(self) -> bool:
        return self._overflow

    def is_empty(self) -> bool:
        return not self._counts

    def count(self, value: str) -> int:
        return self._counts.get(value, 0)

    def __contains__(self, value: object) -> bool:
        return value in self._counts

    def __iter__(self) -> Iterator[str]:
        return iter(self._counts)

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return (
            f"ValueIndex(distinct={self.distinct_count}, total={self.total_count}"
            f"{', overflow' if self._overflow else ''})"
        )
