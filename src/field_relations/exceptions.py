#!/usr/bin/env python3
"""
Exception hierarchy for field-relations operations.

Three outcomes cross the ``analyze`` boundary and callers are expected to
tell them apart:

- a successful :class:`~field_relations.models.RelationshipReport`
  (possibly with zero relationships),
- :class:`ProviderUnavailable` when the data source provider cannot be
  enumerated at all,
- :class:`AnalysisCancelled` when the cancellation predicate fired.

:class:`SourceReadError` never leaves the engine; it is recorded in the
report metadata as a skipped source.
"""
from __future__ import annotations

from typing import Any, Dict, Optional


class FieldRelationsError(Exception):
    """
    Base exception for all field-relations operations.

    ``details`` holds structured context (source name, config key, ...) and is
    rendered after the message; ``cause`` keeps the underlying exception.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


# ──────────────────────────────────────────────────────────────────────────────
# Data Source Errors
# ──────────────────────────────────────────────────────────────────────────────


class SourceReadError(FieldRelationsError):
    """Raised when a single data source cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        source_name: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        details = {}
        if source_name:
            details["source"] = source_name

        super().__init__(message, details, cause)
        self.source_name = source_name

    @property
    def reason(self) -> str:
        """Short human-readable reason, suitable for report metadata."""
        if self.cause is not None:
            return f"{type(self.cause).__name__}: {self.cause}"
        return self.message


class ProviderUnavailable(FieldRelationsError):
    """Raised when the data source provider cannot enumerate its sources."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        details = {}
        if provider:
            details["provider"] = provider

        super().__init__(message, details, cause)
        self.provider = provider


# ──────────────────────────────────────────────────────────────────────────────
# Run Lifecycle
# ──────────────────────────────────────────────────────────────────────────────


class AnalysisCancelled(FieldRelationsError):
    """Raised when the cancellation predicate asks a run to stop."""

    def __init__(
        self,
        message: str = "analysis cancelled",
        phase: Optional[str] = None,
        sources_scanned: Optional[int] = None,
    ):
        details: Dict[str, Any] = {}
        if phase:
            details["phase"] = phase
        if sources_scanned is not None:
            details["sources_scanned"] = sources_scanned

        super().__init__(message, details)
        self.phase = phase
        self.sources_scanned = sources_scanned


# ──────────────────────────────────────────────────────────────────────────────
# Configuration and Setup Errors
# ──────────────────────────────────────────────────────────────────────────────


class ConfigurationError(FieldRelationsError):
    """Invalid analysis options, thresholds or settings file."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        cause: Optional[Exception] = None,
    ):
        details = {}
        if config_key:
            details["config_key"] = config_key
        if config_value is not None:
            details["config_value"] = config_value

        super().__init__(message, details, cause)
        self.config_key = config_key
        self.config_value = config_value


# ──────────────────────────────────────────────────────────────────────────────
# Command Line
# ──────────────────────────────────────────────────────────────────────────────


class CLIError(FieldRelationsError):
    """A CLI command cannot carry out what was asked (e.g. refusing to overwrite)."""

    def __init__(self, message: str, command: Optional[str] = None, cause: Optional[Exception] = None):
        super().__init__(message, {"command": command} if command else None, cause)
        self.command = command


__all__ = [
    "FieldRelationsError",
    "SourceReadError",
    "ProviderUnavailable",
    "AnalysisCancelled",
    "ConfigurationError",
    "CLIError",
]
