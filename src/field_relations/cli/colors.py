"""ANSI color codes for CLI output and help text."""

import os
import sys


def supports_color() -> bool:
    """Check if stdout is a color-capable terminal and NO_COLOR is not set."""
    return (
        hasattr(sys.stdout, "isatty")
        and sys.stdout.isatty()
        and not sys.platform.startswith("win")
    ) and "NO_COLOR" not in os.environ


if supports_color():
    RED = "\033[91m"  # errors
    YELLOW = "\033[93m"  # warnings, subsection headers
    GREEN = "\033[92m"  # examples, high confidence
    BLUE = "\033[94m"  # option and format names
    CYAN = "\033[96m"  # section headers
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RESET = "\033[0m"
else:
    RED = YELLOW = GREEN = BLUE = CYAN = BOLD = DIM = RESET = ""


def section_header(text: str) -> str:
    return f"{BOLD}{CYAN}{text}{RESET}"


def subsection_header(text: str) -> str:
    return f"{BOLD}{YELLOW}{text}{RESET}"


def confidence_color(confidence: float) -> str:
    """Color for a confidence value: green when strong, yellow when moderate."""
    if confidence >= 0.8:
        return GREEN
    if confidence >= 0.5:
        return YELLOW
    return DIM
