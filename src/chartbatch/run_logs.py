"""End-of-run artifacts written to the output root.

- ``log.txt``: human-readable record of the run (always written)
- ``log.json``: compiled tracks and errors as JSON (``--json``)
- ``collections/``: per-genre and per-version manifests (``--collection``)
"""

from __future__ import annotations

import json
import logging
from collections import defaultdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .logging_utils import LogBlockBuilder, render_fields_block
from .run_state import RunState, TrackDetail
from .utils import ensure_directory, sanitize_component

LOGGER = logging.getLogger(__name__)

PRIMARY_LOG_NAME = "log.txt"
JSON_LOG_NAME = "log.json"
COLLECTIONS_DIRNAME = "collections"
MANIFEST_NAME = "manifest.json"


def render_primary_log(state: RunState, *, started_at: Optional[datetime] = None) -> str:
    started = (started_at or datetime.now()).isoformat(timespec="seconds")
    builder = LogBlockBuilder("Compilation Log", pad_top=False)
    builder.add_fields(
        {
            "Started": started,
            "Compiled": state.compiled,
            "Incomplete": state.incomplete,
            "Skipped": state.skipped,
            "Failed": state.failed,
        }
    )
    builder.add_section("Compiled Charts", state.summaries)
    builder.add_section(
        "Compiled Index",
        [f"[{position}]: {track_id} {name}" for position, (track_id, name) in enumerate(state.compiled_index(), 1)],
    )
    builder.add_section("Errors", state.errors)
    builder.add_section("Warnings", state.warnings)
    return builder.render() + "\n"


def write_primary_log(output_root: Path, state: RunState, *, started_at: Optional[datetime] = None) -> Path:
    ensure_directory(output_root)
    path = output_root / PRIMARY_LOG_NAME
    path.write_text(render_primary_log(state, started_at=started_at), encoding="utf-8")
    LOGGER.debug(render_fields_block("Wrote Run Log", {"Path": path}))
    return path


def build_json_log(state: RunState) -> Dict[str, Any]:
    return {
        "compiled": state.compiled,
        "tracks": [detail.as_dict() for detail in state.sorted_details()],
        "errors": list(state.errors),
        "warnings": list(state.warnings),
    }


def _write_json(path: Path, payload: Dict[str, Any]) -> None:
    ensure_directory(path.parent)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, ensure_ascii=False, indent=2)
        handle.write("\n")


def write_json_log(output_root: Path, state: RunState) -> Path:
    path = output_root / JSON_LOG_NAME
    _write_json(path, build_json_log(state))
    LOGGER.debug(render_fields_block("Wrote JSON Track Log", {"Path": path, "Tracks": state.compiled}))
    return path


def group_collections(details: List[TrackDetail]) -> Dict[str, Dict[str, List[TrackDetail]]]:
    """Group compiled tracks by genre and by version, members ordered by numeric id."""
    grouped: Dict[str, Dict[str, List[TrackDetail]]] = {"genre": defaultdict(list), "version": defaultdict(list)}
    for detail in details:
        grouped["genre"][detail.genre or "Unknown"].append(detail)
        grouped["version"][detail.version or "Unknown"].append(detail)
    for groups in grouped.values():
        for members in groups.values():
            members.sort(key=lambda detail: (int(detail.track_id), detail.name))
    return {kind: dict(sorted(groups.items())) for kind, groups in grouped.items()}


def write_collections(collections_root: Path, state: RunState) -> List[Path]:
    """Write one ``manifest.json`` per genre and per version under ``collections_root``."""
    written: List[Path] = []
    for kind, groups in group_collections(state.sorted_details()).items():
        for name, members in groups.items():
            manifest_path = collections_root / kind / sanitize_component(name) / MANIFEST_NAME
            _write_json(
                manifest_path,
                {
                    "name": name,
                    "kind": kind,
                    "count": len(members),
                    "tracks": [{"id": member.track_id, "name": member.name} for member in members],
                },
            )
            written.append(manifest_path)
    LOGGER.debug(
        render_fields_block(
            "Wrote Collections",
            {"Root": collections_root, "Manifests": len(written)},
        )
    )
    return written
