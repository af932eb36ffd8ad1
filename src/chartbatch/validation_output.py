from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .validation import (
    ValidationIssue,
    ValidationReport,
    get_section_display_name,
    group_validation_issues,
)

# severity -> (header, header style, panel border)
SEVERITY_STYLES: Dict[str, Tuple[str, str, str]] = {
    "error": ("Validation Errors", "bold red", "red"),
    "warning": ("Validation Warnings", "bold yellow", "yellow"),
}


def _line_label(issue: ValidationIssue) -> str:
    return f"L{issue.line_number}" if issue.line_number else "-"


def _issue_table(issues: List[ValidationIssue]) -> Table:
    table = Table.grid(padding=(0, 1))
    table.add_column(style="dim", width=6, no_wrap=True)
    table.add_column(style="cyan", overflow="fold")
    table.add_column(overflow="fold")
    for issue in issues:
        table.add_row(
            _line_label(issue),
            Text(issue.path),
            Text.assemble(issue.message, (f" ({issue.code})", "dim")),
        )
    return table


class ValidationFormatter:
    """Print a ValidationReport as one Rich panel per configuration section."""

    def __init__(self, console: Optional[Console] = None, show_suggestions: bool = True) -> None:
        self.console = console or Console()
        self.show_suggestions = show_suggestions

    def format_report(self, report: ValidationReport) -> None:
        for severity, issues in (("error", report.errors), ("warning", report.warnings)):
            if issues:
                self._print_issues(severity, issues)
        if report.errors:
            return
        suffix = " (with warnings)" if report.warnings else ""
        self.console.print(f"[bold green]✓ Configuration passed validation{suffix}.[/bold green]")

    def _print_issues(self, severity: str, issues: List[ValidationIssue]) -> None:
        header, header_style, border = SEVERITY_STYLES[severity]
        self.console.print(f"\n[{header_style}]{header}: {len(issues)} {severity}(s) detected[/{header_style}]")

        for section, by_key in group_validation_issues(issues).items():
            body: List[RenderableType] = []
            for key, key_issues in by_key.items():
                if key != section:
                    body.append(Text(f"→ {key}", style="bold cyan"))
                body.append(_issue_table(key_issues))
            self.console.print(
                Panel(
                    Group(*body),
                    title=f"[bold]{get_section_display_name(section)}[/bold]",
                    border_style=border,
                    padding=(1, 2),
                )
            )
            if self.show_suggestions:
                self._print_suggestions([issue for group in by_key.values() for issue in group])

    def _print_suggestions(self, issues: List[ValidationIssue]) -> None:
        for issue in issues:
            if issue.fix_suggestion:
                self.console.print(
                    f"  [yellow]💡[/yellow] [dim]{_line_label(issue)}[/dim] {issue.path}: "
                    f"[italic]{issue.fix_suggestion}[/italic]"
                )


__all__ = [
    "ValidationFormatter",
]
