"""Clean console interface for dither3d.

Usage:
    from dither3d.console import console

    with console.spinner("Balancing initial pattern..."):
        do_work()

    console.success("Done", detail="Saved 32 layers")
    console.warn("Something odd")
    console.error("Failed", detail=str(err))
    console.info("Lattice: 32x32x32")
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Optional

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.text import Text


class Console:
    """Minimal logging interface with rich output."""

    __slots__ = ('_console',)

    def __init__(self, rich_console: Optional[RichConsole] = None) -> None:
        self._console = rich_console if rich_console is not None else RichConsole()

    @property
    def rich(self) -> RichConsole:
        return self._console

    @contextmanager
    def spinner(self, message: str):
        """Show a spinner while work is in progress."""
        with self._console.status(f"[bold cyan]{message}", spinner="dots"):
            yield

    def success(self, message: str, *, detail: Optional[str] = None, title: Optional[str] = None) -> None:
        """Green success message."""
        text = Text(message, style="bold green")
        if detail:
            text.append(f"\n{detail}", style="dim")
        if title:
            self._console.print(Panel(text, title=f"[cyan]{title}[/cyan]", border_style="green"))
        else:
            self._console.print(f"[bold green]✓[/bold green] {message}" + (f" [dim]{detail}[/dim]" if detail else ""))

    def warn(self, message: str, *, detail: Optional[str] = None) -> None:
        """Yellow warning message."""
        self._console.print(f"[yellow]⚠[/yellow] {message}" + (f" [dim]{detail}[/dim]" if detail else ""))

    def error(self, message: str, *, detail: Optional[str] = None) -> None:
        """Red error message."""
        self._console.print(f"[bold red]✗[/bold red] {message}" + (f" [dim]{detail}[/dim]" if detail else ""))

    def info(self, message: str, *, detail: Optional[str] = None) -> None:
        """Blue info message."""
        self._console.print(f"[blue]•[/blue] {message}" + (f" [dim]{detail}[/dim]" if detail else ""))

    def header(self, title: str, **fields: str) -> None:
        """Show a panel with key-value fields."""
        lines = [f"[bold]{k}:[/bold] {v}" for k, v in fields.items()]
        self._console.print(Panel("\n".join(lines), title=f"[cyan]{title}[/cyan]", border_style="blue"))


def percent_label(done: int, total: Optional[int]) -> str:
    """Percentage text for the bar; blank for open-ended phases."""
    if total is None:
        return ""
    return f"{100.0 * min(done, total) / max(total, 1):>3.0f}%"


class ProgressReporter:
    """Throttled progress bar fed by the phase controller.

    Call it as ``reporter(phase, done, total)``. The bar is refreshed every
    ``interval`` calls and always when ``done == total``; an interval <= 0
    turns reporting off entirely.
    """

    def __init__(self, interval: int, out: Optional[Console] = None) -> None:
        self.interval = int(interval)
        self._out = out if out is not None else console
        self._progress: Optional[Progress] = None
        self._tasks: dict[str, int] = {}
        self._calls = 0

    @property
    def enabled(self) -> bool:
        return self.interval > 0

    def task_fields(self, phase: str) -> dict:
        """Custom fields of the bar for ``phase`` while the reporter is active."""
        if self._progress is None or phase not in self._tasks:
            return {}
        task_id = self._tasks[phase]
        return next(dict(t.fields) for t in self._progress.tasks if t.id == task_id)

    def __enter__(self) -> "ProgressReporter":
        if self.enabled:
            self._progress = Progress(
                SpinnerColumn(),
                TextColumn("[bold cyan]{task.description}"),
                BarColumn(),
                TextColumn("{task.fields[percent]}"),
                console=self._out.rich,
                transient=False,
            )
            self._progress.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._progress is not None:
            self._progress.stop()
            self._progress = None
        self._tasks.clear()
        self._calls = 0

    def __call__(self, phase: str, done: int, total: Optional[int]) -> None:
        if self._progress is None:
            return
        self._calls += 1
        finished = total is not None and done >= total
        if self._calls % self.interval != 0 and not finished:
            return
        label = phase.replace("_", " ").lower()
        task = self._tasks.get(phase)
        if task is None:
            task = self._progress.add_task(label, total=total, percent=percent_label(done, total))
            self._tasks[phase] = task
        if total is None:
            # open-ended phase: the bar stays indeterminate, the count goes in the label
            self._progress.update(task, description=f"{label} ({done})")
        else:
            self._progress.update(
                task, completed=min(done, total), total=max(total, 1), percent=percent_label(done, total)
            )


console = Console()
