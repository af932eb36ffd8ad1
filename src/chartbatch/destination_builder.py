"""Destination paths for compiled tracks.

Layout::

    {output_root}/{category}/{id}_{sort_name}{_DX}     standard naming
    {output_root}/{category}/{id}                      id-as-folder-name
    {output_root}/{category}/{dir}_Utage               special-mode charts
    {output_root}/{category}/{dir}_Incomplete          assets missing, not ignored
"""

from __future__ import annotations

from pathlib import Path

from .models import TrackMetadata
from .utils import sanitize_component

INCOMPLETE_SUFFIX = "_Incomplete"
SPECIAL_SUFFIX = "_Utage"


def category_root(output_root: Path, category: str) -> Path:
    """Return the category directory; an empty category is the output root itself."""
    if not category:
        return output_root
    return output_root / sanitize_component(category)


def track_directory_name(metadata: TrackMetadata, *, id_as_folder_name: bool) -> str:
    if id_as_folder_name:
        return sanitize_component(metadata.track_id)
    sort_name = metadata.sort_name or metadata.name
    return sanitize_component(f"{metadata.track_id}_{sort_name}{metadata.deluxe_path_suffix}")


def build_track_destination(
    output_root: Path,
    category: str,
    metadata: TrackMetadata,
    *,
    id_as_folder_name: bool,
) -> Path:
    """Build the output directory of a track.

    Raises:
        ValueError: If the destination escapes the output root
    """
    directory = category_root(output_root, category) / track_directory_name(
        metadata, id_as_folder_name=id_as_folder_name
    )
    if metadata.special_mode:
        directory = directory.with_name(f"{directory.name}{SPECIAL_SUFFIX}")

    base_dir = output_root.resolve()
    resolved = directory.resolve(strict=False)
    if not resolved.is_relative_to(base_dir):
        raise ValueError(f"destination {resolved} escapes output root {base_dir}")
    return directory


def incomplete_path(track_dir: Path) -> Path:
    return track_dir.with_name(f"{track_dir.name}{INCOMPLETE_SUFFIX}")


def format_relative_destination(destination: Path, output_root: Path) -> str:
    try:
        relative = destination.relative_to(output_root)
    except ValueError:
        return str(destination)
    return str(relative)
