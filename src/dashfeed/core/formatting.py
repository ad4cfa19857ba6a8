"""Formatting utilities for domain logic."""

from __future__ import annotations

from datetime import datetime, timedelta


def status_to_color(status: str) -> str:
    """Map status string to color name.

    Args:
        status: Status string ("fresh", "stale", or "missing")

    Returns:
        Color name string:
        - "fresh" -> "green"
        - "stale" -> "yellow"
        - "missing" -> "red"
        - invalid -> empty string
    """
    color_map = {
        "fresh": "green",
        "stale": "yellow",
        "missing": "red",
    }
    return color_map.get(status, "")


def tier_to_color(tier: str) -> str:
    """Map the tier that served a source to a color name."""
    color_map = {
        "network": "green",
        "persisted": "yellow",
        "snapshot": "red",
    }
    return color_map.get(tier, "")


def stored_state(
    updated_at: datetime | None, now: datetime, max_age: timedelta
) -> str:
    """Classify a stored copy as "fresh", "stale" or "missing"."""
    if updated_at is None:
        return "missing"
    if now - updated_at <= max_age:
        return "fresh"
    return "stale"
