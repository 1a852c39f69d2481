"""Rich output helpers for the command-line front end."""

from __future__ import annotations

from datetime import datetime

from rich.console import Console
from rich.table import Table

from iofs.types import OperationOutcome, StatResult


class Display:
    """Renders operation results for a terminal."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize display.

        Args:
            console: Console to print to. Defaults to a stdout console.
        """
        self.console = console or Console()

    def show_success(self, message: str) -> None:
        """Show success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def show_error(self, message: str) -> None:
        """Show error message."""
        self.console.print(f"[red]✗[/red] {message}")

    def show_warning(self, message: str) -> None:
        """Show warning message."""
        self.console.print(f"[yellow]![/yellow] {message}")

    def show_paths(self, paths: list[str]) -> None:
        """Print one path per line, verbatim."""
        for path in paths:
            self.console.print(path, markup=False, highlight=False, soft_wrap=True)

    def show_outcome(self, outcome: OperationOutcome, action: str) -> None:
        """Report an operation outcome, including skipped entries.

        Args:
            outcome: Result of the operation.
            action: Past-tense verb for the success line, e.g. "Copied".
        """
        if not outcome:
            kind = outcome.error_kind.value if outcome.error_kind else "unknown"
            self.show_error(f"{outcome.path}: {outcome.error} ({kind})")
            return

        self.show_success(f"{action} {outcome.path}")
        for failure in outcome.failures:
            self.show_warning(f"Skipped {failure.path}: {failure.error}")

    def show_stat(self, result: StatResult) -> None:
        """Display a stat result as a two-column table.

        Args:
            result: Probe result. ABSENT results print a warning instead.
        """
        if not result.exists:
            self.show_warning(f"{result.path} does not exist")
            return

        table = Table(title=result.path, show_header=False)
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        table.add_row("Type", result.kind.value)
        table.add_row("Size", f"{result.size} bytes")
        table.add_row("Mode", oct(result.permissions))
        table.add_row("Owner", f"{result.uid}:{result.gid}")
        table.add_row("Modified", datetime.fromtimestamp(result.mtime).isoformat(timespec="seconds"))
        self.console.print(table)
