#!/usr/bin/env python3
"""Analyze subcommand for the field-relations CLI.

Scans a directory of configuration files and prints the discovered
relationships between name-like fields.
"""
from __future__ import annotations

import json
from typing import Any, Optional

from ..constants import MAX_SAMPLE_DISPLAY_LENGTH
from ..logging_config import get_logger
from ..settings import LOG_LEVELS

logger = get_logger(__name__)


def add_analyze_subcommand(subparsers):
    """Add the analyze subcommand to the CLI."""
    from ..helpfmt import ColorDefaultsFormatter
    from .colors import BLUE, BOLD, CYAN, GREEN, RESET, YELLOW

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Discover relationships between name-like fields",
        formatter_class=ColorDefaultsFormatter,
        description=f"""
Find columns in different tables that refer to the same entity by name
(e.g. item.xml :: items/item/@name  <->  drop.xml :: drops/drop/@item_name), using shared values only.

{BOLD}{YELLOW}SOURCE FORMATS:{RESET}
  {BLUE}xml{RESET}     One table per *.xml file; attributes and leaf elements are fields
  {BLUE}json{RESET}    One table per *.json / *.jsonl / *.ndjson file (gzip ok)

{BOLD}{YELLOW}OUTPUT FORMATS:{RESET}
  {BLUE}text{RESET}    Human-readable (default)
  {BLUE}json{RESET}    Machine-readable report

{BOLD}{CYAN}EXAMPLES:{RESET}
  {GREEN}# Analyze a directory of XML tables{RESET}
  field-relations analyze ./config

  {GREEN}# JSON data files, stricter thresholds, JSON output{RESET}
  field-relations analyze ./data --format json --min-match-count 5 --min-confidence 0.6 --output-format json

  {GREEN}# Also consider *_id style columns, stop after 30 seconds{RESET}
  field-relations analyze ./config --pattern name --pattern '*_name' --pattern '*_id' --timeout 30
        """,
    )

    analyze_parser.add_argument("path", help="Directory holding the data files")
    analyze_parser.add_argument(
        "--format",
        dest="source_format",
        choices=["xml", "json"],
        default="xml",
        help="Format of the data files",
    )

    # Thresholds (None means "use settings")
    analyze_parser.add_argument(
        "--min-match-count",
        type=int,
        help="Minimum number of shared distinct values",
    )
    analyze_parser.add_argument(
        "--min-confidence",
        type=float,
        help="Minimum confidence between 0 and 1",
    )
    analyze_parser.add_argument(
        "--max-per-source",
        type=int,
        dest="max_relationships_per_source",
        help="Keep only the N most confident relationships per source field",
    )
    analyze_parser.add_argument(
        "--pattern",
        action="append",
        dest="patterns",
        metavar="GLOB",
        help="Name-like field pattern, repeatable (default: name, *_name)",
    )
    analyze_parser.add_argument(
        "--sample-size",
        type=int,
        help="Shared values shown per relationship",
    )
    analyze_parser.add_argument(
        "--workers",
        type=int,
        help="Threads used for pair counting",
    )
    analyze_parser.add_argument(
        "--timeout",
        type=float,
        metavar="SECONDS",
        help="Cancel the analysis after this many seconds",
    )

    # Output / runtime
    analyze_parser.add_argument(
        "--output-format",
        choices=["text", "json"],
        default="text",
        help="Report format",
    )
    analyze_parser.add_argument(
        "--config",
        metavar="PATH",
        help="Settings file (default: auto-discover field-relations.yml)",
    )
    analyze_parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Log level for stderr diagnostics",
    )
    analyze_parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Also write logs to this file",
    )


def cmd_analyze(args) -> None:
    """Execute the analyze command."""
    from ..analyzer import analyze, deadline_predicate
    from ..logging_config import setup_logging
    from ..providers import provider_for_directory
    from ..settings import AnalysisSettings

    settings = AnalysisSettings.load(args.config)
    setup_logging(args.log_level or settings.log_level, args.log_file, force=True)

    options = settings.to_options(
        min_match_count=args.min_match_count,
        min_confidence=args.min_confidence,
        max_relationships_per_source=args.max_relationships_per_source,
        field_patterns=tuple(args.patterns) if args.patterns else None,
        sample_size=args.sample_size,
        workers=args.workers,
        cancellation_predicate=deadline_predicate(args.timeout) if args.timeout is not None else None,
    )

    provider = provider_for_directory(args.path, args.source_format)
    logger.info("Analyzing %s (%s)", args.path, args.source_format)
    report = analyze(provider, options)
    logger.debug("Report summary: %s", report_summary(report))

    if args.output_format == "json":
        print(report.to_json())
    else:
        print(format_report_text(report))


def _truncate(value: str, limit: int = MAX_SAMPLE_DISPLAY_LENGTH) -> str:
    return value if len(value) <= limit else value[: limit - 3] + "..."


def format_report_text(report: Any, color: Optional[bool] = None) -> str:
    """Render a RelationshipReport for the terminal."""
    from . import colors

    def c(code: str) -> str:
        return code if color is not False else ""

    bold, reset, dim = c(colors.BOLD), c(colors.RESET), c(colors.DIM)
    meta = report.metadata
    lines = [
        f"{bold}{c(colors.CYAN)}Field Relationships{reset}",
        f"{dim}Sources scanned: {meta.sources_scanned}  "
        f"Candidate fields: {meta.candidate_fields}  "
        f"Pairs compared: {meta.pair_matches}  "
        f"Elapsed: {meta.elapsed_seconds:.2f}s{reset}",
        "",
    ]

    if report.is_empty():
        lines.append("No relationships found.")
    for snapshot in report.relationships:
        tone = c(colors.confidence_color(snapshot.confidence))
        lines.append(
            f"{tone}{snapshot.confidence:.3f}{reset}  "
            f"{bold}{snapshot.source_path}{reset} -> {bold}{snapshot.target_path}{reset}"
        )
        lines.append(
            f"       matches={snapshot.match_count}  "
            f"coverage={snapshot.source_coverage:.3f}/{snapshot.target_coverage:.3f}  "
            f"name_similarity={snapshot.name_similarity:.2f}"
        )
        if snapshot.samples:
            shown = ", ".join(_truncate(s) for s in snapshot.samples)
            lines.append(f"       {dim}samples: {shown}{reset}")

    if meta.skipped_sources:
        lines.append("")
        lines.append(f"{c(colors.YELLOW)}Skipped sources:{reset}")
        for skipped in meta.skipped_sources:
            lines.append(f"  {skipped.source}: {skipped.reason}")

    if meta.oversized_fields:
        lines.append("")
        lines.append(f"{c(colors.YELLOW)}Oversized fields (not analyzed):{reset}")
        for oversized in meta.oversized_fields:
            lines.append(f"  {oversized.source} :: {oversized.field_name} (> {oversized.limit} values)")

    return "\n".join(lines)


def report_summary(report: Any) -> str:
    """One-line JSON summary, used in debug logs."""
    meta = report.metadata
    return json.dumps(
        {
            "relationships": len(report),
            "sources": meta.sources_scanned,
            "skipped": len(meta.skipped_sources),
        }
    )
