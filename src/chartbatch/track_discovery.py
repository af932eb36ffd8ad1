"""Track folder discovery and pre-flight checks.

A track folder is an immediate child directory of ``{source}/music``. It is
only compiled when it holds at least one chart-source file and the metadata
file; anything else is a soft skip, logged but not recorded as an error.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from .chart_compiler import find_chart_sources
from .logging_utils import render_fields_block

LOGGER = logging.getLogger(__name__)

MUSIC_DIRNAME = "music"


def list_track_folders(music_dir: Path) -> list[Path]:
    """Return the immediate subdirectories of ``music_dir`` in name order.

    Hidden directories (``.`` prefix) are ignored.
    """
    folders: list[Path] = []
    for entry in sorted(music_dir.iterdir(), key=lambda path: path.name):
        if not entry.is_dir():
            continue
        if entry.name.startswith("."):
            LOGGER.debug(
                render_fields_block(
                    "Skipping Hidden Folder",
                    {"Folder": entry},
                )
            )
            continue
        folders.append(entry)
    return folders


def skip_reason_for_track_folder(
    track_dir: Path,
    *,
    chart_extensions: Sequence[str],
    metadata_filename: str,
) -> str | None:
    """Check whether a track folder should be skipped.

    Returns:
        A string describing why the folder is skipped, or None if it should be compiled
    """
    if not find_chart_sources(track_dir, chart_extensions):
        patterns = ", ".join(f"*{extension}" for extension in chart_extensions)
        return f"no chart files ({patterns})"
    if not (track_dir / metadata_filename).is_file():
        return f"no {metadata_filename}"
    return None
