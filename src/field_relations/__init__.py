"""Field relationship discovery for configuration tables.

Finds pairs of name-like fields in different data sources whose values refer
to the same entities, scores them and returns an immutable report.
"""
from __future__ import annotations

__version__ = "0.1.0"

from .analyzer import RelationshipAnalyzer, analyze, deadline_predicate
from .exceptions import (
    AnalysisCancelled,
    ConfigurationError,
    FieldRelationsError,
    ProviderUnavailable,
    SourceReadError,
)
from .models import (
    AnalysisOptions,
    AnalysisState,
    RelationshipReport,
    RelationshipSnapshot,
)
from .providers import (
    DataSource,
    DataSourceProvider,
    InMemoryDataSource,
    InMemoryProvider,
    JsonDirectoryProvider,
    XmlDirectoryProvider,
)

__all__ = [
    "__version__",
    "analyze",
    "deadline_predicate",
    "RelationshipAnalyzer",
    "AnalysisOptions",
    "AnalysisState",
    "RelationshipReport",
    "RelationshipSnapshot",
    "DataSource",
    "DataSourceProvider",
    "InMemoryDataSource",
    "InMemoryProvider",
    "JsonDirectoryProvider",
    "XmlDirectoryProvider",
    "FieldRelationsError",
    "SourceReadError",
    "ProviderUnavailable",
    "AnalysisCancelled",
    "ConfigurationError",
]
