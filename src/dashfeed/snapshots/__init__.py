"""Bundled fallback snapshots, served when neither network nor stored copies exist."""

from __future__ import annotations

from importlib import resources


def load_snapshot(name: str) -> str | None:
    """Return the bundled snapshot text, or None if no such file is bundled."""
    resource = resources.files(__name__).joinpath(name)
    if not resource.is_file():
        return None
    return resource.read_text(encoding="utf-8")


def list_snapshots() -> list[str]:
    """Names of all bundled snapshot files."""
    return sorted(
        entry.name
        for entry in resources.files(__name__).iterdir()
        if entry.name.endswith(".csv")
    )
