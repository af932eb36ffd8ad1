"""Export of resolved media assets into a track's output directory.

Each requested asset kind contributes to the track's completeness. A missing
asset is recorded as an error and handled by the configured
``MissingAssetPolicy``; a resolved asset is copied under its canonical base
name unless it is already present. A copy that does not materialize is a
filesystem failure and raises ``AssetCopyError``, which ends the run.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, MutableSequence, Optional

from rich.console import Console

from .errors import AssetCopyError, MissingAssetError
from .logging_utils import render_fields_block
from .models import AssetKind, ExportResult, TrackMetadata
from .utils import copy_file

LOGGER = logging.getLogger(__name__)

Acknowledge = Callable[[str], object]


class MissingAssetPolicy(str, Enum):
    WARN = "warn"
    PROMPT = "prompt"
    FAIL = "fail"

    @classmethod
    def parse(cls, value: "str | MissingAssetPolicy") -> "MissingAssetPolicy":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            choices = ", ".join(policy.value for policy in cls)
            raise ValueError(f"Unknown missing-asset policy '{value}' (expected one of: {choices})") from exc


def console_acknowledge(message: str) -> object:
    return Console(stderr=True).input(f"[yellow]{message}[/yellow] [dim](press Enter to continue)[/dim] ")


def missing_asset_message(kind: AssetKind, metadata: TrackMetadata) -> str:
    return f"{kind.label} not found: {metadata.name} with ID {metadata.track_id}"


def export_asset(
    should_export: bool,
    resolved: Optional[Path],
    destination_dir: Path,
    kind: AssetKind,
    metadata: TrackMetadata,
    *,
    errors: MutableSequence[str],
    ignore_incomplete: bool = False,
    policy: MissingAssetPolicy = MissingAssetPolicy.WARN,
    searched_stem: Optional[Path] = None,
    acknowledge: Acknowledge = console_acknowledge,
) -> ExportResult:
    """Copy a resolved asset to ``destination_dir/<base_name><suffix>``.

    Args:
        should_export: Whether the caller requested this asset kind at all.
        resolved: Path found by the resolver, or None.
        destination_dir: Track output directory.
        kind: Asset kind describing the canonical base name and label.
        metadata: Metadata of the track being exported.
        errors: Sink for descriptive error messages.
        ignore_incomplete: Treat gaps as non-blocking and skip copy verification.
        policy: Reaction to a missing asset when gaps are not ignored.
        searched_stem: Stem the resolver searched, for log output.
        acknowledge: Callable used by the prompt policy to block on the operator.

    Returns:
        ExportResult whose ``complete`` flag feeds the track completeness decision.

    Raises:
        MissingAssetError: The asset is missing and the policy is ``fail``.
        AssetCopyError: The copy finished but the destination does not exist.
    """
    if not should_export:
        return ExportResult(complete=True, action="not-requested")

    if resolved is None:
        errors.append(missing_asset_message(kind, metadata))
        LOGGER.warning(
            render_fields_block(
                f"{kind.label} Not Found",
                {
                    "Track": f"{metadata.track_id} {metadata.name}",
                    "Searched": f"{searched_stem}[.*]" if searched_stem else "(unknown)",
                    "Extensions": kind.extensions,
                },
            )
        )
        if not ignore_incomplete:
            if policy is MissingAssetPolicy.FAIL:
                raise MissingAssetError(kind.label, metadata.track_id, searched_stem)
            if policy is MissingAssetPolicy.PROMPT:
                acknowledge(f"{kind.label.upper()} FILE NOT FOUND AT: {searched_stem}[.*]")
        return ExportResult(complete=False, action="missing")

    destination = destination_dir / f"{kind.base_name}{resolved.suffix}"
    try:
        copied = copy_file(resolved, destination)
    except OSError as exc:
        if not ignore_incomplete:
            raise AssetCopyError(kind.label, destination) from exc
        errors.append(f"{kind.label} copy failed: {metadata.name} with ID {metadata.track_id} ({exc})")
        return ExportResult(complete=False, action="copy-failed", destination=destination)

    if copied:
        action = "copied"
        LOGGER.debug(
            render_fields_block(
                f"{kind.label} Exported",
                {"Source": resolved, "Destination": destination},
            )
        )
    else:
        action = "already-present"
        LOGGER.debug(
            render_fields_block(
                f"{kind.label} Already Present",
                {"Destination": destination},
            )
        )

    if not ignore_incomplete and not destination.exists():
        LOGGER.error(
            render_fields_block(
                f"{kind.label} Copy Failed",
                {
                    "Source": resolved,
                    "Source Exists": resolved.exists(),
                    "Destination": destination,
                },
            )
        )
        raise AssetCopyError(kind.label, destination)

    return ExportResult(complete=True, action=action, destination=destination)
