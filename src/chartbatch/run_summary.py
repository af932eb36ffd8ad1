"""Run recaps and end-of-run summaries.

This module formats the closing log output of a batch run: the final count,
the condensed error and warning listing, and the run recap with duration and
written artifacts.
"""

from __future__ import annotations

import logging
from collections import Counter
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence

from .logging_utils import LogBlockBuilder, render_section_block

if TYPE_CHECKING:
    from .run_state import RunState

LOGGER = logging.getLogger(__name__)


def has_activity(state: RunState) -> bool:
    """Return True when the run touched at least one track folder."""
    return bool(state.compiled or state.skipped or state.incomplete or state.failed or state.errors)


def summarize_messages(entries: Sequence[str], *, limit: int = 5) -> List[str]:
    """Group duplicate messages and keep the ``limit`` most frequent.

    Args:
        entries: Messages to summarize.
        limit: Maximum number of distinct messages to show.

    Returns:
        Summary lines with duplicate counts and a pointer to the full list.
    """
    if not entries:
        return []
    counter = Counter(entries)
    ordered = sorted(counter.items(), key=lambda item: (-item[1], item[0]))
    lines: List[str] = []
    for text, count in ordered[:limit]:
        prefix = f"{count}× " if count > 1 else ""
        lines.append(f"{prefix}{text}")
    remaining = len(ordered) - limit
    if remaining > 0:
        lines.append(f"... {remaining} more (see log.txt for the full list)")
    return lines


def log_detailed_summary(state: RunState, *, level: int = logging.INFO, verbose: bool = False) -> None:
    if not (state.errors or state.warnings):
        return
    if verbose:
        sections = [("Errors", state.errors), ("Warnings", state.warnings)]
    else:
        sections = [("Errors", summarize_messages(state.errors)), ("Warnings", summarize_messages(state.warnings))]
    LOGGER.log(level, render_section_block("Detailed Summary", sections))


def log_run_recap(
    state: RunState,
    duration: float,
    *,
    output_root: Optional[Path] = None,
    artifacts: Sequence[Path] = (),
) -> None:
    builder = LogBlockBuilder("Run Recap")
    builder.add_fields(
        {
            "Duration": f"{duration:.2f}s",
            "Total music compiled": state.compiled,
            "Incomplete": state.incomplete,
            "Skipped": state.skipped,
            "Failed": state.failed,
            "Errors": len(state.errors),
            "Warnings": len(state.warnings),
        }
    )
    if output_root is not None:
        builder.add_fields({"Output": output_root})
    if artifacts:
        builder.add_section("Artifacts", [str(path) for path in artifacts])
    LOGGER.info(builder.render())
