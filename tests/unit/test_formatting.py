"""Tests for formatting utilities."""

from datetime import UTC, datetime, timedelta

import pytest


@pytest.mark.core
class TestStatusToColor:
    """Tests for status_to_color()."""

    @pytest.mark.parametrize(
        ("status", "color"),
        [("fresh", "green"), ("stale", "yellow"), ("missing", "red"), ("bogus", "")],
    )
    def test_mapping(self, status: str, color: str) -> None:
        """Statuses map to traffic-light colors."""
        from dashfeed.core.formatting import status_to_color

        assert status_to_color(status) == color


@pytest.mark.core
class TestTierToColor:
    """Tests for tier_to_color()."""

    @pytest.mark.parametrize(
        ("tier", "color"),
        [("network", "green"), ("persisted", "yellow"), ("snapshot", "red"), ("x", "")],
    )
    def test_mapping(self, tier: str, color: str) -> None:
        """Stronger tiers are greener."""
        from dashfeed.core.formatting import tier_to_color

        assert tier_to_color(tier) == color


@pytest.mark.core
class TestStoredState:
    """Tests for stored_state()."""

    def test_states(self) -> None:
        """Copies are fresh within max_age, stale after, missing when absent."""
        from dashfeed.core.formatting import stored_state

        now = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
        max_age = timedelta(minutes=15)

        assert stored_state(None, now, max_age) == "missing"
        assert stored_state(now - timedelta(minutes=15), now, max_age) == "fresh"
        assert stored_state(now - timedelta(minutes=16), now, max_age) == "stale"


@pytest.mark.cli
class TestCliColors:
    """Tests for Rich text helpers."""

    def test_tier_text_is_styled(self) -> None:
        """Tier text carries its color style."""
        from dashfeed.cli.formatting import _format_tier_with_color

        text = _format_tier_with_color("snapshot")

        assert text.plain == "snapshot"
        assert str(text.style) == "red"

    def test_unknown_status_is_unstyled(self) -> None:
        """Unknown statuses render plain."""
        from dashfeed.cli.formatting import _format_status_with_color

        assert str(_format_status_with_color("unknown").style) == ""
