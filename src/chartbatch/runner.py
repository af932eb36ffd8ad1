from __future__ import annotations

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.progress import Progress

from .asset_exporter import Acknowledge, console_acknowledge
from .chart_compiler import ChartCompiler, PassthroughChartCompiler
from .config import Settings
from .errors import ChartBatchError
from .logging_utils import render_fields_block
from .metadata_source import MusicXmlMetadataSource, TrackMetadataSource
from .pipeline import TrackPipeline
from .run_logs import COLLECTIONS_DIRNAME, write_collections, write_json_log, write_primary_log
from .run_state import RunState
from .run_summary import has_activity, log_detailed_summary, log_run_recap
from .summary_table import SummaryTableRenderer
from .track_discovery import list_track_folders

LOGGER = logging.getLogger(__name__)

EXIT_SUCCESS = 0
# 1 is a configuration error and 2 an argparse usage error
EXIT_FAILED = 3


class BatchRunner:
    """Compile every track folder under ``{source_root}/music`` in one pass.

    The runner owns the RunState: each folder goes through a TrackPipeline
    and the returned outcome is folded in on this thread. Individual tracks
    may be skipped or marked incomplete without failing the run; only a
    ``ChartBatchError`` escaping the pipeline (missing inputs, a copy that
    did not land) or a filesystem ``OSError`` ends it with ``EXIT_FAILED``.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        metadata_source: Optional[TrackMetadataSource] = None,
        compiler: Optional[ChartCompiler] = None,
        acknowledge: Acknowledge = console_acknowledge,
        console: Optional[Console] = None,
    ) -> None:
        self.settings = settings
        self.metadata_source = metadata_source or MusicXmlMetadataSource(settings.metadata_filename)
        self.compiler = compiler or PassthroughChartCompiler(settings.chart_extensions)
        self.acknowledge = acknowledge
        self.summary_renderer = SummaryTableRenderer(console)
        self.run_state = RunState()

    def run(self) -> int:
        self.run_state.reset()
        started_at = datetime.now()
        run_started = time.perf_counter()
        try:
            self.settings.require_inputs()
            self._process_folders()
            artifacts = self._write_artifacts(started_at)
        except (ChartBatchError, OSError) as exc:
            LOGGER.error(
                render_fields_block(
                    "Compilation Aborted",
                    {
                        "Error": exc,
                        "Type": type(exc).__name__,
                        "Compiled Before Abort": self.run_state.compiled,
                    },
                )
            )
            return EXIT_FAILED

        self._report(time.perf_counter() - run_started, artifacts)
        return EXIT_SUCCESS

    def _process_folders(self) -> None:
        settings = self.settings
        pipeline = TrackPipeline(
            settings,
            self.metadata_source,
            self.compiler,
            acknowledge=self.acknowledge,
        )
        folders = list_track_folders(settings.music_dir)
        LOGGER.debug(
            render_fields_block(
                "Discovered Track Folders",
                {"Root": settings.music_dir, "Folders": len(folders)},
            )
        )

        with Progress(disable=not LOGGER.isEnabledFor(logging.INFO)) as progress:
            task_id = progress.add_task("Compiling", total=len(folders))
            for track_dir in folders:
                outcome = pipeline.process(track_dir)
                self.run_state.record(outcome)
                progress.advance(task_id, 1)

    def _write_artifacts(self, started_at: datetime) -> List[Path]:
        settings = self.settings
        output_root = settings.output_root
        assert output_root is not None  # checked by require_inputs
        artifacts = [write_primary_log(output_root, self.run_state, started_at=started_at)]
        if settings.log_json:
            artifacts.append(write_json_log(output_root, self.run_state))
        if settings.compile_collections:
            collections_root = output_root / COLLECTIONS_DIRNAME
            write_collections(collections_root, self.run_state)
            artifacts.append(collections_root)
        return artifacts

    def _report(self, duration: float, artifacts: List[Path]) -> None:
        state = self.run_state
        LOGGER.info(
            render_fields_block(
                "Compilation Finished",
                {"Total music compiled": state.compiled},
            )
        )
        if state.compiled:
            LOGGER.info(
                render_fields_block(
                    "Compiled Index",
                    {str(track_id): name for track_id, name in state.compiled_index()},
                )
            )
        if LOGGER.isEnabledFor(logging.INFO):
            self.summary_renderer.render(state)

        if state.errors or state.warnings:
            verbose = LOGGER.isEnabledFor(logging.DEBUG)
            level = logging.WARNING if state.errors else logging.INFO
            log_detailed_summary(state, level=level, verbose=verbose)
        if has_activity(state):
            log_run_recap(state, duration, output_root=self.settings.output_root, artifacts=artifacts)
