"""Extension-probing lookup for track media assets."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


def resolve_asset(stem: Path, extensions: Sequence[str]) -> Path | None:
    """Return the first existing ``stem + extension`` in priority order.

    Args:
        stem: Full path of the asset without an extension.
        extensions: Candidate suffixes including the leading dot, most preferred first.

    Returns:
        The matching path, or None when no candidate exists.
    """
    for extension in extensions:
        candidate = stem.with_name(stem.name + extension)
        if candidate.is_file():
            return candidate
    return None
