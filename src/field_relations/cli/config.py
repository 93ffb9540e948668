#!/usr/bin/env python3
"""Config command implementation for the field-relations CLI.

Shows the effective settings or writes a default settings file.
"""
from __future__ import annotations

import sys
from pathlib import Path

from ..exceptions import CLIError


def add_config_subcommand(subparsers) -> None:
    """Add config subcommand to the parser."""
    from ..helpfmt import ColorDefaultsFormatter
    from .colors import BOLD, CYAN, GREEN, RESET, YELLOW

    config_parser = subparsers.add_parser(
        "config",
        help="Show or initialize settings",
        formatter_class=ColorDefaultsFormatter,
        description=f"""
Inspect the effective analysis settings (file + environment) or create a
settings file with the defaults.

{BOLD}{YELLOW}ENVIRONMENT OVERRIDES:{RESET}
  FIELD_RELATIONS_MIN_MATCH_COUNT, FIELD_RELATIONS_MIN_CONFIDENCE,
  FIELD_RELATIONS_SAMPLE_SIZE, FIELD_RELATIONS_WORKERS,
  FIELD_RELATIONS_PATTERNS (comma separated), FIELD_RELATIONS_LOG_LEVEL

{BOLD}{CYAN}EXAMPLES:{RESET}
  {GREEN}# Show effective settings (default){RESET}
  field-relations config

  {GREEN}# Write a default settings file{RESET}
  field-relations config --init field-relations.yml
        """,
    )

    config_parser.add_argument(
        "--show",
        action="store_true",
        help="Show effective settings",
    )
    config_parser.add_argument(
        "--init",
        metavar="PATH",
        help="Write a settings file with default values to PATH",
    )
    config_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing settings file with --init",
    )
    config_parser.add_argument(
        "--config",
        metavar="PATH",
        help="Settings file to show (default: auto-discover)",
    )
    config_parser.add_argument(
        "--version",
        action="store_true",
        help="Show field-relations version",
    )


def cmd_config(args) -> None:
    """Execute the config command."""
    if args.version:
        _show_version()
    elif args.init:
        _init_settings(args.init, args.force)
    else:
        _show_settings(args.config)


def _show_version() -> None:
    import field_relations

    from .colors import GREEN, RESET

    print(f"{GREEN}field-relations version: {field_relations.__version__}{RESET}")
    print(f"Python: {sys.version.split()[0]} ({sys.platform})")


def _show_settings(config_path) -> None:
    from ..settings import AnalysisSettings
    from .colors import RESET, section_header, subsection_header

    settings = AnalysisSettings.load(config_path)

    print(section_header("Current field-relations settings:"))
    print("=" * 40)

    categories = {
        "Scoring": ["min_match_count", "min_confidence", "max_relationships_per_source"],
        "Extraction": ["field_patterns", "max_value_length", "max_distinct_values"],
        "Runtime": ["sample_size", "workers", "log_level"],
    }
    for category, keys in categories.items():
        print(f"\n{subsection_header(category + ':')}{RESET}")
        for key in keys:
            value = getattr(settings, key)
            if isinstance(value, list):
                value = ", ".join(value) if value else "(none)"
            elif value is None:
                value = "(unlimited)"
            print(f"  {key}: {value}")

    config_file = config_path or AnalysisSettings.find_config_file()
    if config_file:
        print(f"\nConfig file: {config_file}")
    else:
        print("\nNo config file found (using defaults)")


def _init_settings(path: str, force: bool) -> None:
    from ..settings import AnalysisSettings

    config_path = Path(path)
    if config_path.exists() and not force:
        raise CLIError(
            f"Config file {config_path} already exists. Use --force to overwrite.",
            command="config",
        )

    AnalysisSettings().save(str(config_path))
    print(f"Created config file: {config_path}")
    print("-" * 30)
    print(config_path.read_text(encoding="utf-8"))
