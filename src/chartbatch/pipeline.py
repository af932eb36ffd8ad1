"""Per-track compilation pipeline.

A track folder moves through scanning, metadata loading, categorization,
directory preparation, chart compilation and asset export before the
completeness decision commits it or marks its directory ``_Incomplete``.
The pipeline never touches RunState: it returns a TrackOutcome that the
batch runner folds in.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .asset_exporter import Acknowledge, console_acknowledge, export_asset
from .asset_resolver import resolve_asset
from .categories import route_category
from .chart_compiler import ChartCompiler
from .config import Settings
from .destination_builder import (
    build_track_destination,
    category_root,
    format_relative_destination,
    incomplete_path,
)
from .errors import MetadataError, MissingAssetError
from .logging_utils import render_fields_block
from .metadata_source import TrackMetadataSource
from .models import ASSET_KINDS, TrackMetadata, TrackOutcome
from .track_discovery import skip_reason_for_track_folder
from .utils import archive_directory, ensure_directory, replace_directory

LOGGER = logging.getLogger(__name__)


class TrackPipeline:
    def __init__(
        self,
        settings: Settings,
        metadata_source: TrackMetadataSource,
        compiler: ChartCompiler,
        *,
        acknowledge: Acknowledge = console_acknowledge,
    ) -> None:
        if settings.output_root is None:
            raise ValueError("TrackPipeline requires an output root")
        self.settings = settings
        self.output_root: Path = settings.output_root
        self.metadata_source = metadata_source
        self.compiler = compiler
        self.acknowledge = acknowledge

    def _relative(self, path: Path) -> str:
        return format_relative_destination(path, self.output_root)

    def process(self, track_dir: Path) -> TrackOutcome:
        """Compile one track folder and return its outcome.

        Raises:
            AssetCopyError: A resolved asset failed to materialize after copying.
        """
        settings = self.settings
        skip_reason = skip_reason_for_track_folder(
            track_dir,
            chart_extensions=settings.chart_extensions,
            metadata_filename=settings.metadata_filename,
        )
        if skip_reason:
            LOGGER.info(
                render_fields_block(
                    "Skipping Track Folder",
                    {"Folder": track_dir, "Reason": skip_reason},
                )
            )
            return TrackOutcome(status="skipped", source=track_dir, skip_reason=skip_reason)

        try:
            metadata = self.metadata_source.load(track_dir)
        except MetadataError as exc:
            LOGGER.error(
                render_fields_block(
                    "Unreadable Metadata",
                    {"Folder": track_dir, "Error": exc},
                )
            )
            return TrackOutcome(
                status="skipped",
                source=track_dir,
                errors=(str(exc),),
                skip_reason="unreadable metadata",
            )

        category = route_category(metadata, settings.category_scheme)
        destination_root = category_root(self.output_root, category)
        ensure_directory(destination_root)

        try:
            track_path = build_track_destination(
                self.output_root,
                category,
                metadata,
                id_as_folder_name=settings.id_as_folder_name,
            )
        except ValueError as exc:
            message = f"Unsafe destination for {metadata.name} with ID {metadata.track_id}: {exc}"
            LOGGER.error(
                render_fields_block(
                    "Unsafe Destination",
                    {"Folder": track_dir, "Error": exc},
                )
            )
            return TrackOutcome(status="failed", source=track_dir, metadata=metadata, errors=(message,))

        ensure_directory(track_path)
        LOGGER.debug(
            render_fields_block(
                "Track Directory Ready",
                {
                    "ID": metadata.track_id,
                    "Name": metadata.name,
                    "Category": category or "(flat)",
                    "Directory": self._relative(track_path),
                },
            )
        )

        try:
            summary = self.compiler.compile(track_dir, track_path, metadata, settings.compile_options)
        except Exception as exc:  # noqa: BLE001 - compiler is an external collaborator
            message = f"Compilation failed: {metadata.name} with ID {metadata.track_id} ({exc})"
            LOGGER.error(
                render_fields_block(
                    "Compilation Failed",
                    {"Folder": track_dir, "Destination": track_path, "Error": exc},
                )
            )
            return TrackOutcome(
                status="failed",
                source=track_dir,
                destination=track_path,
                metadata=metadata,
                errors=(message,),
            )

        errors: list[str] = []
        complete = self._export_assets(metadata, track_path, errors)

        if not complete and not settings.ignore_incomplete and not metadata.special_mode:
            return self._mark_incomplete(track_dir, track_path, metadata, summary, errors)
        return self._commit(track_dir, track_path, metadata, summary, complete, errors)

    def _export_assets(self, metadata: TrackMetadata, track_path: Path, errors: list[str]) -> bool:
        settings = self.settings
        complete = True
        for kind in ASSET_KINDS:
            root = settings.asset_root(kind.key)
            stem = kind.source_stem(root, metadata) if root is not None else None
            resolved = resolve_asset(stem, kind.extensions) if stem is not None else None
            try:
                result = export_asset(
                    root is not None,
                    resolved,
                    track_path,
                    kind,
                    metadata,
                    errors=errors,
                    ignore_incomplete=settings.ignore_incomplete,
                    policy=settings.on_missing_asset,
                    searched_stem=stem,
                    acknowledge=self.acknowledge,
                )
            except MissingAssetError:
                return False
            complete = complete and result.complete
        return complete

    def _mark_incomplete(
        self,
        track_dir: Path,
        track_path: Path,
        metadata: TrackMetadata,
        summary: str,
        errors: list[str],
    ) -> TrackOutcome:
        destination: Optional[Path] = None
        if track_path.exists():
            destination = replace_directory(track_path, incomplete_path(track_path))
            LOGGER.warning(
                render_fields_block(
                    "Track Marked Incomplete",
                    {
                        "ID": metadata.track_id,
                        "Name": metadata.name,
                        "Directory": self._relative(destination),
                        "Missing": errors,
                    },
                )
            )
        else:
            LOGGER.info(
                render_fields_block(
                    "Track Skipped",
                    {"ID": metadata.track_id, "Name": metadata.name, "Reason": "output directory missing"},
                )
            )
        return TrackOutcome(
            status="incomplete",
            source=track_dir,
            complete=False,
            summary=summary,
            destination=destination,
            metadata=metadata,
            errors=tuple(errors),
        )

    def _commit(
        self,
        track_dir: Path,
        track_path: Path,
        metadata: TrackMetadata,
        summary: str,
        complete: bool,
        errors: list[str],
    ) -> TrackOutcome:
        archive_path: Optional[Path] = None
        destination = track_path
        if self.settings.export_zip:
            archive_path = archive_directory(track_path)
            destination = archive_path
            LOGGER.debug(
                render_fields_block(
                    "Track Archived",
                    {"Archive": self._relative(archive_path)},
                )
            )

        LOGGER.info(
            render_fields_block(
                "Track Compiled",
                {
                    "ID": metadata.track_id,
                    "Name": metadata.name,
                    "Exported To": self._relative(destination),
                    "Assets": "complete" if complete else "incomplete (ignored)",
                },
            )
        )
        return TrackOutcome(
            status="committed",
            source=track_dir,
            complete=complete,
            summary=summary,
            destination=destination,
            metadata=metadata,
            errors=tuple(errors),
            archive_path=archive_path,
        )
