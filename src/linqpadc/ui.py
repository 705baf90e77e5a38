from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.text import Text

_T = TypeVar("_T")

console = Console()
err_console = Console(stderr=True)


def spinner_enabled() -> bool:
    return os.getenv("LINQPADC_SPINNER", "1") == "1" and console.is_terminal


def configure_logging(verbose: bool) -> None:
    """Route library log records through rich; DEBUG when verbose."""
    handler = RichHandler(console=err_console, show_time=False, show_path=False, markup=False)
    root = logging.getLogger("linqpadc")
    root.handlers = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    root.propagate = False


@dataclass(frozen=True)
class Reporter:
    """User-facing messages, one method per level."""

    verbose: bool = False

    def info(self, message: str) -> None:
        console.print(Text(message))

    def warning(self, message: str) -> None:
        console.print(Text(f"[WARNING] {message}", style="yellow"))

    def error(self, message: str) -> None:
        err_console.print(Text(f"[ERROR] {message}", style="bold red"))

    def success(self, message: str) -> None:
        console.print(Text(f"[SUCCESS] {message}", style="bold green"))

    def detail(self, message: str) -> None:
        if self.verbose:
            console.print(Text(f"[VERBOSE] {message}", style="dim"))


@dataclass(frozen=True)
class Spinner:
    message: str

    def run(self, fn: Callable[[], _T]) -> _T:
        if not spinner_enabled():
            return fn()

        with Progress(
            SpinnerColumn(style="cyan"),
            TextColumn("[bold]{task.description}[/bold]"),
            transient=True,
            console=console,
        ) as prog:
            task_id = prog.add_task(self.message, total=None)
            try:
                return fn()
            finally:
                prog.update(task_id, completed=1)
