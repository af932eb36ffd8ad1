from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:  # pragma: no cover
    from .run_state import RunState


# Color constants for status indicators
SUCCESS_COLOR = "green"
WARNING_COLOR = "yellow"
ERROR_COLOR = "red"
DIM_COLOR = "dim"


class SummaryTableRenderer:
    """Renders run totals and the compiled index as Rich tables."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    @staticmethod
    def _colorize_value(value: int, *, color: str) -> str:
        if value == 0:
            color = DIM_COLOR
        return f"[{color}]{value}[/{color}]"

    def build_totals_table(self, state: RunState) -> Table:
        table = Table(title="Run Summary", show_header=True, header_style="bold")
        table.add_column("Compiled", justify="right")
        table.add_column("Incomplete", justify="right")
        table.add_column("Skipped", justify="right")
        table.add_column("Failed", justify="right")
        table.add_column("Errors", justify="right")
        table.add_row(
            self._colorize_value(state.compiled, color=SUCCESS_COLOR),
            self._colorize_value(state.incomplete, color=WARNING_COLOR),
            self._colorize_value(state.skipped, color=DIM_COLOR),
            self._colorize_value(state.failed, color=ERROR_COLOR),
            self._colorize_value(len(state.errors), color=ERROR_COLOR),
        )
        return table

    def build_index_table(self, state: RunState) -> Table:
        table = Table(title=f"Total music compiled: {state.compiled}", show_header=True, header_style="bold")
        table.add_column("#", justify="right", style=DIM_COLOR)
        table.add_column("ID", justify="right")
        table.add_column("Name")
        for position, (track_id, name) in enumerate(state.compiled_index(), 1):
            table.add_row(str(position), str(track_id), name)
        return table

    def render(self, state: RunState) -> None:
        self.console.print(self.build_totals_table(state))
        if state.compiled:
            self.console.print(self.build_index_table(state))
