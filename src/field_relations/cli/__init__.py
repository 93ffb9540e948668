#!/usr/bin/env python3
"""Command-line interface for field-relations.

Each subcommand lives in its own module and registers itself on the shared
argparse parser.
"""
from __future__ import annotations

import sys

from ..exceptions import AnalysisCancelled, FieldRelationsError
from .analyze import cmd_analyze
from .config import cmd_config

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_CANCELLED = 130


def build_parser():
    import argparse

    from ..helpfmt import ColorDefaultsFormatter
    from .analyze import add_analyze_subcommand
    from .config import add_config_subcommand

    parser = argparse.ArgumentParser(
        prog="field-relations",
        description="Discover which name-like fields across configuration tables refer to the same entity",
        formatter_class=ColorDefaultsFormatter,
    )
    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        metavar="{analyze,config}",
    )
    add_analyze_subcommand(subparsers)
    add_config_subcommand(subparsers)
    return parser


def main(argv=None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_ERROR

    try:
        if args.command == "analyze":
            cmd_analyze(args)
        elif args.command == "config":
            cmd_config(args)
        else:
            parser.print_help()
            return EXIT_ERROR
        return EXIT_OK
    except (KeyboardInterrupt, AnalysisCancelled):
        print("Analysis cancelled", file=sys.stderr)
        return EXIT_CANCELLED
    except FieldRelationsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


__all__ = ["main", "build_parser", "cmd_analyze", "cmd_config"]
