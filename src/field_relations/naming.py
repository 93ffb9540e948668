"""Field-name helpers: the name-like filter and name token similarity."""
from __future__ import annotations

import re
from fnmatch import fnmatchcase
from typing import FrozenSet, Iterable, Optional, Sequence

from .constants import DEFAULT_FIELD_PATTERNS

__all__ = [
    "FieldNameMatcher",
    "FIELD_PATH_SEPARATOR",
    "leaf_field_name",
    "is_name_like",
    "tokenize_field_name",
    "name_similarity",
]

FIELD_PATH_SEPARATOR = "/"

_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")
# Acronym runs, capitalised/lower words, digit runs: "HTTPServerName2" -> HTTP, Server, Name, 2
_CAMEL_PARTS = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


class FieldNameMatcher:
    """
    Case-insensitive glob matcher over field names.

    The default patterns accept ``name`` and anything ending in ``_name``.
    The matcher is a pure predicate so it can be swapped without touching
    aggregation or scoring.
    """

    def __init__(self, patterns: Optional[Sequence[str]] = None):
        source = DEFAULT_FIELD_PATTERNS if patterns is None else patterns
        self.patterns = tuple(p.strip().lower() for p in source if p and p.strip())

    def __call__(self, field_name: str) -> bool:
        return self.matches(field_name)

    def matches(self, field_name: str) -> bool:
        if not field_name:
            return False
        lowered = field_name.strip().lower()
        return any(fnmatchcase(lowered, pattern) for pattern in self.patterns)

    def __repr__(self) -> str:
        return f"FieldNameMatcher({list(self.patterns)!r})"


def leaf_field_name(field_name: str) -> str:
    """
    Last segment of a path-keyed field, without the attribute marker.

    >>> leaf_field_name("quests/quest/reward/@name")
    'name'
    >>> leaf_field_name("item_name")
    'item_name'
    """
    return (field_name or "").rsplit(FIELD_PATH_SEPARATOR, 1)[-1].lstrip("@")


_DEFAULT_MATCHER = FieldNameMatcher()


def is_name_like(field_name: str) -> bool:
    """True when the field name equals ``name`` or ends with ``_name``."""
    return _DEFAULT_MATCHER.matches(field_name)


def tokenize_field_name(field_name: str) -> FrozenSet[str]:
    """
    Split a field name on underscores/punctuation and camel-case boundaries.

    >>> sorted(tokenize_field_name("item_name"))
    ['item', 'name']
    >>> sorted(tokenize_field_name("dropItemName"))
    ['drop', 'item', 'name']
    """
    tokens = set()
    for chunk in _SEPARATORS.split(field_name or ""):
        for part in _CAMEL_PARTS.findall(chunk):
            tokens.add(part.lower())
    return frozenset(tokens)


def _jaccard(left: Iterable[str], right: Iterable[str]) -> float:
    left_set, right_set = set(left), set(right)
    union = left_set | right_set
    if not union:
        return 0.0
    return len(left_set & right_set) / len(union)


def name_similarity(left_name: str, right_name: str) -> float:
    """Jaccard similarity of the two names' token sets, in [0, 1]."""
    return _jaccard(tokenize_field_name(left_name), tokenize_field_name(right_name))
