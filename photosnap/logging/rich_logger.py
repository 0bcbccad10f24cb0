"""Rich-based progress reporter implementation."""
from __future__ import annotations

import logging
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from ..core.models import ExportResult, ExportStats


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Send log records of the photosnap package through Rich."""
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    logger = logging.getLogger("photosnap")
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False


def format_bytes(size: int) -> str:
    value = float(size)
    for unit in ("B", "KB", "MB", "GB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"


def stats_rows(stats: ExportStats) -> list[tuple[str, str]]:
    """Label/value pairs shown after an export."""
    rows = [(f"Files ({name})", str(count)) for name, count in stats.per_category.items()]
    rows += [
        ("Hard Linked", str(stats.linked)),
        ("Copied", f"{stats.copied} ({format_bytes(stats.bytes_copied)})"),
        ("Reused From Candidates", str(stats.from_candidates)),
    ]
    if stats.album_links:
        rows.append(("Album Entries", str(stats.album_links)))
    if stats.elapsed_seconds > 0:
        rows.append(("Time Elapsed", f"{stats.elapsed_seconds:.1f}s"))
    return rows


class RichProgressReporter:
    """Progress reporter using Rich for terminal output.

    One progress bar per exported category; messages and tables go to
    stderr so stdout stays free for command output.
    """

    def __init__(self, verbose: bool = False, quiet: bool = False):
        self._console = Console(stderr=True)
        self._verbose = verbose
        self._quiet = quiet
        self._progress: Optional[Progress] = None
        self._current_task_id: Optional[TaskID] = None

    def start_phase(self, name: str, total: int) -> None:
        if self._quiet:
            return

        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[bold blue]{task.description}"),
            BarColumn(bar_width=40),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self._console,
        )
        self._progress.start()
        self._current_task_id = self._progress.add_task(name, total=total)

    def advance_phase(self, amount: int = 1) -> None:
        if self._progress and self._current_task_id is not None:
            self._progress.advance(self._current_task_id, amount)

    def end_phase(self) -> None:
        if self._progress:
            self._progress.stop()
            self._progress = None
            self._current_task_id = None

    def info(self, message: str) -> None:
        if not self._quiet:
            self._console.print(f"[blue]ℹ[/blue] {message}")

    def success(self, message: str) -> None:
        if not self._quiet:
            self._console.print(f"[green]✓[/green] {message}")

    def warning(self, message: str) -> None:
        self._console.print(f"[yellow]⚠[/yellow] {message}")

    def error(self, message: str) -> None:
        self._console.print(f"[red]✗[/red] {message}", style="red")

    def print_header(self, title: str) -> None:
        if not self._quiet:
            self._console.print(Panel(title, style="bold cyan"))

    def print_config(self, config_items: dict) -> None:
        if self._quiet:
            return
        table = Table(title="Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        for key, value in config_items.items():
            table.add_row(key, str(value))
        self._console.print(table)

    def print_stats(self, stats: ExportStats) -> None:
        if self._quiet:
            return
        table = Table(title="Export Complete", show_header=False)
        table.add_column("Metric", style="cyan")
        table.add_column("Value", style="green", justify="right")
        for label, value in stats_rows(stats):
            table.add_row(label, value)
        self._console.print(table)

    def print_result(self, result: ExportResult) -> None:
        self.print_stats(result.stats)
        for path in result.flat_cleanup_failures:
            self.warning(f"Flat folder could not be removed: {path}")
        self.success(f"Snapshot ready: {result.snapshot_path}")

    def __enter__(self) -> "RichProgressReporter":
        return self

    def __exit__(self, *args) -> None:
        self.end_phase()


class QuietProgressReporter:
    """Minimal progress reporter that only shows problems."""

    def start_phase(self, name: str, total: int) -> None:
        pass

    def advance_phase(self, amount: int = 1) -> None:
        pass

    def end_phase(self) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def success(self, message: str) -> None:
        pass

    def warning(self, message: str) -> None:
        print(f"WARNING: {message}", file=sys.stderr)

    def error(self, message: str) -> None:
        print(f"ERROR: {message}", file=sys.stderr)

    def print_header(self, title: str) -> None:
        pass

    def print_config(self, config_items: dict) -> None:
        pass

    def print_stats(self, stats: ExportStats) -> None:
        pass

    def print_result(self, result: ExportResult) -> None:
        for path in result.flat_cleanup_failures:
            self.warning(f"Flat folder could not be removed: {path}")

    def __enter__(self) -> "QuietProgressReporter":
        return self

    def __exit__(self, *args) -> None:
        pass
