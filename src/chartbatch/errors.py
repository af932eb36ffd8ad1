"""Exception hierarchy for batch compilation.

Per-track conditions (``MissingAssetError``, ``MetadataError``) are handled
inside the track pipeline. ``ConfigurationError`` and ``AssetCopyError``
unwind to the batch runner and end the run with a failure status.
"""

from __future__ import annotations

from pathlib import Path


class ChartBatchError(Exception):
    """Base exception for chartbatch failures."""


class ConfigurationError(ChartBatchError, ValueError):
    """Raised when a required input is missing or a setting is invalid."""


class MetadataError(ChartBatchError):
    """Raised when a track metadata file exists but cannot be read."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path


class MissingAssetError(ChartBatchError):
    """Raised by the ``fail`` missing-asset policy to abort a single track."""

    def __init__(self, kind_label: str, track_id: str, searched_stem: Path | None = None) -> None:
        super().__init__(f"{kind_label} not found for track {track_id}")
        self.kind_label = kind_label
        self.track_id = track_id
        self.searched_stem = searched_stem


class AssetCopyError(ChartBatchError, FileNotFoundError):
    """Raised when a resolved asset does not exist at its destination after copying."""

    def __init__(self, kind_label: str, destination: Path) -> None:
        super().__init__(f"{kind_label.upper()} NOT FOUND IN: {destination}")
        self.kind_label = kind_label
        self.destination = destination
