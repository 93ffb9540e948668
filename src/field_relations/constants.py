#!/usr/bin/env python3
"""Constants for field-relations operations.

This module centralizes the thresholds, weights, caps and default values used
by the relationship discovery engine, its providers and its CLI.
"""
from __future__ import annotations

# ──────────────────────────────────────────────────────────────────────────────
# Candidate Field Selection
# ──────────────────────────────────────────────────────────────────────────────

# Glob patterns (case-insensitive) that make a field "name-like"
DEFAULT_FIELD_PATTERNS = ("name", "*_name")

# Values longer than this many characters are ignored when indexing
MAX_VALUE_LENGTH = 256

# A field with more distinct values than this overflows and is dropped
MAX_DISTINCT_VALUES_PER_FIELD = 120_000

# ──────────────────────────────────────────────────────────────────────────────
# Aggregation
# ──────────────────────────────────────────────────────────────────────────────

# Shared values kept per pair for display
DEFAULT_SAMPLE_SIZE = 5

# Worker threads for bucket pairing (1 = no sharding)
DEFAULT_WORKERS = 1

# Buckets per shard submitted to the thread pool
MIN_BUCKETS_PER_SHARD = 256

# ──────────────────────────────────────────────────────────────────────────────
# Scoring
# ──────────────────────────────────────────────────────────────────────────────

# Pairs sharing fewer values than this are dropped
DEFAULT_MIN_MATCH_COUNT = 2

# Pairs scoring below this are dropped
DEFAULT_MIN_CONFIDENCE = 0.3

# confidence = min(coverage) * (COVERAGE_BASE_WEIGHT + NAME_SIMILARITY_WEIGHT * similarity)
COVERAGE_BASE_WEIGHT = 0.7
NAME_SIMILARITY_WEIGHT = 0.3

# ──────────────────────────────────────────────────────────────────────────────
# Providers
# ──────────────────────────────────────────────────────────────────────────────

# File extensions picked up by the directory providers
SUPPORTED_JSON_EXTENSIONS = (".json", ".jsonl", ".ndjson", ".json.gz", ".jsonl.gz", ".ndjson.gz")
SUPPORTED_XML_EXTENSIONS = (".xml",)

# Bytes read up-front to sniff a JSON file's layout
SNIFF_BUFFER_SIZE = 8192

# ──────────────────────────────────────────────────────────────────────────────
# Output and Formatting
# ──────────────────────────────────────────────────────────────────────────────

# Maximum characters shown for a sample value in text output
MAX_SAMPLE_DISPLAY_LENGTH = 40

# Maximum width for console output
MAX_CONSOLE_WIDTH = 120

# ──────────────────────────────────────────────────────────────────────────────
# Logging and Debugging
# ──────────────────────────────────────────────────────────────────────────────

# Default log level
DEFAULT_LOG_LEVEL = "WARNING"

# Maximum log file size in MB
MAX_LOG_FILE_SIZE = 50

# Number of log files to keep in rotation
LOG_FILE_BACKUP_COUNT = 5

# Log format string
DEFAULT_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# ──────────────────────────────────────────────────────────────────────────────
# Export all constants
# ──────────────────────────────────────────────────────────────────────────────

__all__ = [
    # Candidate Field Selection
    "DEFAULT_FIELD_PATTERNS",
    "MAX_VALUE_LENGTH",
    "MAX_DISTINCT_VALUES_PER_FIELD",
    # Aggregation
    "DEFAULT_SAMPLE_SIZE",
    "DEFAULT_WORKERS",
    "MIN_BUCKETS_PER_SHARD",
    # Scoring
    "DEFAULT_MIN_MATCH_COUNT",
    "DEFAULT_MIN_CONFIDENCE",
    "COVERAGE_BASE_WEIGHT",
    "NAME_SIMILARITY_WEIGHT",
    # Providers
    "SUPPORTED_JSON_EXTENSIONS",
    "SUPPORTED_XML_EXTENSIONS",
    "SNIFF_BUFFER_SIZE",
    # Output and Formatting
    "MAX_SAMPLE_DISPLAY_LENGTH",
    "MAX_CONSOLE_WIDTH",
    # Logging and Debugging
    "DEFAULT_LOG_LEVEL",
    "MAX_LOG_FILE_SIZE",
    "LOG_FILE_BACKUP_COUNT",
    "DEFAULT_LOG_FORMAT",
]
