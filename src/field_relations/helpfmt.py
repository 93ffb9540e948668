"""Custom argparse help formatter.

Combines ArgumentDefaultsHelpFormatter (appends default values) with
RawTextHelpFormatter (keeps the line breaks of the colored epilog-style
descriptions used by the subcommands).
"""

from __future__ import annotations

import argparse

from .constants import MAX_CONSOLE_WIDTH


class ColorDefaultsFormatter(
    argparse.ArgumentDefaultsHelpFormatter,
    argparse.RawTextHelpFormatter,
):
    """Argparse help formatter that shows defaults and colors section headers."""

    def __init__(self, *a, **k):
        k.setdefault("max_help_position", 30)
        k.setdefault("width", MAX_CONSOLE_WIDTH)
        super().__init__(*a, **k)

    def _get_help_string(self, action):
        # Options without a meaningful default stay as written
        if action.default is None or action.default is False:
            return action.help
        return super()._get_help_string(action)

    def start_section(self, heading):
        from .cli.colors import section_header

        if heading:
            heading = section_header(heading)
        return super().start_section(heading)
