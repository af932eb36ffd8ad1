"""Run-level accumulator for a single batch compilation.

RunState collects everything the end-of-run reporting needs: counts, the
ordered one-line chart summaries, the id→name index printed at the end, the
name+id→detail map used by the JSON log and collection manifests, and the
error and warning lists. It is constructed (or reset) at run start and only
ever written by the runner thread, which folds each TrackOutcome in with
``record``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .logging_utils import render_fields_block
from .models import TrackMetadata, TrackOutcome

LOGGER = logging.getLogger(__name__)


@dataclass
class TrackDetail:
    track_id: str
    name: str
    genre: str
    version: str
    version_number: str
    summary: str = ""

    def as_dict(self) -> dict[str, str]:
        return {
            "id": self.track_id,
            "name": self.name,
            "genre": self.genre,
            "version": self.version,
            "version_number": self.version_number,
            "summary": self.summary,
        }


@dataclass
class RunState:
    """Mutable state for a single compilation run.

    Attributes:
        compiled: Number of tracks committed this run
        skipped: Number of folders skipped (no charts or no metadata)
        incomplete: Number of tracks marked incomplete
        failed: Number of tracks whose compilation raised
        summaries: One-line chart summaries in commit order
        compiled_tracks: Numeric id to track name for the compiled index
        track_details: ``(name, id)`` to detail record for JSON and manifest export
        errors: Error messages recorded during the run
        warnings: Warning messages recorded during the run
    """

    compiled: int = 0
    skipped: int = 0
    incomplete: int = 0
    failed: int = 0
    summaries: list[str] = field(default_factory=list)
    compiled_tracks: dict[int, str] = field(default_factory=dict)
    track_details: dict[tuple[str, str], TrackDetail] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def reset(self) -> None:
        self.compiled = 0
        self.skipped = 0
        self.incomplete = 0
        self.failed = 0
        self.summaries.clear()
        self.compiled_tracks.clear()
        self.track_details.clear()
        self.errors.clear()
        self.warnings.clear()

    def register_error(self, message: str) -> None:
        self.errors.append(message)

    def register_warning(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)

    def record(self, outcome: TrackOutcome) -> None:
        """Fold a finished track into the run totals."""
        self.errors.extend(outcome.errors)
        if outcome.status == "skipped":
            self.skipped += 1
            return
        if outcome.status == "incomplete":
            self.incomplete += 1
            return
        if outcome.status == "failed":
            self.failed += 1
            return
        if outcome.metadata is None:
            raise ValueError(f"Committed outcome for {outcome.source} carries no metadata")
        self._register_compiled(outcome.metadata, outcome.summary)

    def _register_compiled(self, metadata: TrackMetadata, summary: str) -> None:
        previous = self.compiled_tracks.get(metadata.numeric_id)
        if previous is not None:
            message = (
                f"Duplicate track ID {metadata.track_id}: '{metadata.name}' replaces '{previous}' in the compiled index"
            )
            LOGGER.warning(
                render_fields_block(
                    "Duplicate Track ID",
                    {
                        "ID": metadata.track_id,
                        "Previous": previous,
                        "Replacement": metadata.name,
                    },
                )
            )
            self.register_warning(message)

        if metadata.detail_key in self.track_details:
            message = f"Track '{metadata.name}' ({metadata.track_id}) was compiled twice; the later record is kept"
            LOGGER.warning(
                render_fields_block(
                    "Duplicate Track Record",
                    {"ID": metadata.track_id, "Name": metadata.name},
                )
            )
            self.register_warning(message)

        self.summaries.append(summary)
        self.compiled += 1
        self.compiled_tracks[metadata.numeric_id] = metadata.name
        self.track_details[metadata.detail_key] = TrackDetail(
            track_id=metadata.track_id,
            name=metadata.name,
            genre=metadata.genre,
            version=metadata.version,
            version_number=metadata.version_number,
            summary=summary,
        )

    def compiled_index(self) -> list[tuple[int, str]]:
        """Compiled ``(id, name)`` pairs ordered by numeric id."""
        return sorted(self.compiled_tracks.items())

    def sorted_details(self) -> list[TrackDetail]:
        return sorted(self.track_details.values(), key=lambda detail: (int(detail.track_id), detail.name))
