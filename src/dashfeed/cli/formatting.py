"""Shared formatting helpers for CLI commands."""

from __future__ import annotations

from rich.text import Text

from dashfeed.core.formatting import status_to_color, tier_to_color


def _format_status_with_color(status: str) -> Text:
    """Format status string with color coding.

    Args:
        status: Status string ("fresh", "stale", or "missing")

    Returns:
        Rich Text object with appropriate color:
        - "fresh" -> green
        - "stale" -> yellow
        - "missing" -> red
    """
    color = status_to_color(status)
    return Text(status, style=color) if color else Text(status)


def _format_tier_with_color(tier: str) -> Text:
    """Format the serving tier name, green for network through red for snapshot."""
    color = tier_to_color(tier)
    return Text(tier, style=color) if color else Text(tier)
