from __future__ import annotations

import logging
import os
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.text import Text

from vitestx.output import ErrorLocation

console = Console()
err_console = Console(stderr=True)


def quiet_enabled() -> bool:
    return os.getenv("VITESTX_QUIET", "0") == "1"


def configure_logging(verbose: bool = False) -> None:
    """Route vitestx loggers to stderr through Rich."""
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(console=err_console, show_time=False, show_path=verbose)
    root = logging.getLogger("vitestx")
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False


def print_output_line(line: str) -> None:
    # Runner output already carries its own colors.
    console.print(Text.from_ansi(line), highlight=False, soft_wrap=True)


def print_command(command: str, root: Path) -> None:
    if quiet_enabled():
        return
    console.print(f"[cyan]Root:[/cyan] {escape(str(root))}")
    console.print(f"[cyan]Command:[/cyan] {escape(command)}")


def print_locations(locations: list[ErrorLocation], root: Path) -> None:
    """Print error locations as clickable file:line:column references."""
    if not locations:
        return
    console.print()
    console.print(f"[bold red]Error locations ({len(locations)}):[/bold red]")
    for location in locations:
        console.print(f"  {escape(location.render(root))}", highlight=False, soft_wrap=True)


def print_summary(returncode: int) -> None:
    if quiet_enabled():
        return
    if returncode == 0:
        console.print("[bold green]Tests passed[/bold green]")
    else:
        console.print(f"[bold red]Tests failed[/bold red] (exit={returncode})")
