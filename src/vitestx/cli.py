"""vitestx CLI - run Vitest for a file, the suite, the test at a line, or again."""

import sys
from pathlib import Path

import typer
from rich.markup import escape

from vitestx import __version__
from vitestx.errors import NotFoundError, VitestxError
from vitestx.exec import SubprocessRunner
from vitestx.locator import find_test_declaration, offset_for_line
from vitestx.orchestrator import OptionOverrides, Orchestrator, PlannedRun, RunReport
from vitestx.output import scan_error_locations
from vitestx.session import SessionStore
from vitestx.ui import (
    configure_logging,
    console,
    print_command,
    print_locations,
    print_output_line,
    print_summary,
)
from vitestx.utils.repo import find_project_root

cli = typer.Typer(
    name="vitestx",
    help="vitestx - run Vitest from the nearest package.json and list error locations",
    no_args_is_help=True,
)

NPX_OPTION = typer.Option(
    None,
    "--npx-option",
    help="Option passed to npx (repeatable; replaces configured npx options).",
)
RUNNER_OPTION = typer.Option(
    None,
    "--runner-option",
    help="Option passed to the runner (repeatable; replaces configured runner options).",
)
DEBUG = typer.Option(False, "--debug", help="Add --inspect-brk and --no-file-parallelism.")
DRY_RUN = typer.Option(False, "--dry-run", help="Print the command without running it.")
STATE_DIR = typer.Option(
    None,
    "--state-dir",
    envvar="VITESTX_STATE_DIR",
    help="Directory holding the last-command session file.",
)


def _version_option_callback(value: bool) -> None:
    """Handle eager --version option."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@cli.callback()
def _cli_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show vitestx version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    """Configure logging for every invocation."""
    _ = version
    configure_logging(verbose)


def _fail(exc: Exception) -> typer.Exit:
    if isinstance(exc, NotFoundError):
        console.print(f"[yellow]{escape(str(exc))}[/yellow]")
    else:
        typer.echo(f"Error: {exc}", err=True)
    return typer.Exit(1)


def _orchestrator(
    store: SessionStore,
    npx_option: list[str] | None,
    runner_option: list[str] | None,
) -> Orchestrator:
    overrides = OptionOverrides(
        npx_options=tuple(npx_option) if npx_option else None,
        runner_options=tuple(runner_option) if runner_option else None,
    )
    return Orchestrator(SubprocessRunner(), store.load(), overrides=overrides)


def _run(orchestrator: Orchestrator, store: SessionStore, planned: PlannedRun, dry_run: bool) -> None:
    if dry_run:
        typer.echo(planned.command)
        return

    print_command(planned.command, planned.root)
    report: RunReport = orchestrator.execute(planned, on_line=print_output_line)
    store.save(orchestrator.session)

    print_locations(report.locations, report.root)
    print_summary(report.returncode)
    if not report.passed:
        raise typer.Exit(report.exit_code)


def _resolve_offset(path: Path, line: int | None, column: int, offset: int | None) -> int:
    if offset is not None:
        return offset
    if line is None:
        raise typer.BadParameter("pass --line or --offset")
    return offset_for_line(path.read_text(encoding="utf-8", errors="replace"), line, column)


@cli.command("file")
def run_file(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Test file to run."),
    debug: bool = DEBUG,
    dry_run: bool = DRY_RUN,
    npx_option: list[str] | None = NPX_OPTION,
    runner_option: list[str] | None = RUNNER_OPTION,
    state_dir: Path | None = STATE_DIR,
) -> None:
    """Run the tests in one file."""
    store = SessionStore(state_dir)
    orchestrator = _orchestrator(store, npx_option, runner_option)
    try:
        planned = orchestrator.plan_file(path, debug=debug)
        _run(orchestrator, store, planned, dry_run)
    except VitestxError as exc:
        raise _fail(exc) from exc


@cli.command("all")
def run_all(
    path: Path | None = typer.Argument(None, exists=True, help="Any path inside the project (default: cwd)."),
    debug: bool = DEBUG,
    dry_run: bool = DRY_RUN,
    npx_option: list[str] | None = NPX_OPTION,
    runner_option: list[str] | None = RUNNER_OPTION,
    state_dir: Path | None = STATE_DIR,
) -> None:
    """Run the whole suite of the project."""
    store = SessionStore(state_dir)
    orchestrator = _orchestrator(store, npx_option, runner_option)
    try:
        planned = orchestrator.plan_all(path, debug=debug)
        _run(orchestrator, store, planned, dry_run)
    except VitestxError as exc:
        raise _fail(exc) from exc


@cli.command("unit")
def run_unit(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Test file."),
    line: int | None = typer.Option(None, "--line", "-l", min=1, help="1-based cursor line."),
    column: int = typer.Option(0, "--column", "-c", min=0, help="0-based cursor column."),
    offset: int | None = typer.Option(None, "--offset", min=0, help="Character offset of the cursor."),
    debug: bool = DEBUG,
    dry_run: bool = DRY_RUN,
    npx_option: list[str] | None = NPX_OPTION,
    runner_option: list[str] | None = RUNNER_OPTION,
    state_dir: Path | None = STATE_DIR,
) -> None:
    """Run the it/test/describe block enclosing the cursor."""
    store = SessionStore(state_dir)
    orchestrator = _orchestrator(store, npx_option, runner_option)
    try:
        cursor = _resolve_offset(path, line, column, offset)
        planned = orchestrator.plan_unit(path, cursor, debug=debug)
        _run(orchestrator, store, planned, dry_run)
    except VitestxError as exc:
        raise _fail(exc) from exc


@cli.command("rerun")
def rerun(
    debug: bool = DEBUG,
    dry_run: bool = DRY_RUN,
    state_dir: Path | None = STATE_DIR,
) -> None:
    """Run the last command again."""
    store = SessionStore(state_dir)
    orchestrator = _orchestrator(store, None, None)
    try:
        planned = orchestrator.plan_rerun(debug=debug)
        _run(orchestrator, store, planned, dry_run)
    except VitestxError as exc:
        raise _fail(exc) from exc


@cli.command("root")
def root(
    path: Path = typer.Argument(Path("."), help="File or directory to search from."),
) -> None:
    """Print the nearest directory containing package.json."""
    found = find_project_root(path)
    if found is None:
        console.print(f"[yellow]No package.json found above {escape(str(path))}[/yellow]")
        raise typer.Exit(1)
    typer.echo(str(found))


@cli.command("locate")
def locate(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Test file."),
    line: int | None = typer.Option(None, "--line", "-l", min=1, help="1-based cursor line."),
    column: int = typer.Option(0, "--column", "-c", min=0, help="0-based cursor column."),
    offset: int | None = typer.Option(None, "--offset", min=0, help="Character offset of the cursor."),
) -> None:
    """Print the test block name enclosing the cursor."""
    cursor = _resolve_offset(path, line, column, offset)
    declaration = find_test_declaration(path.read_text(encoding="utf-8", errors="replace"), cursor)
    if declaration is None or declaration.name is None:
        console.print("[yellow]No test declaration found above the cursor[/yellow]")
        raise typer.Exit(1)
    typer.echo(f"{declaration.kind}\t{declaration.name}")


@cli.command("scan")
def scan(
    log: Path | None = typer.Argument(None, exists=True, dir_okay=False, help="Saved output (default: stdin)."),
    root_dir: Path | None = typer.Option(None, "--root", help="Resolve relative files against this directory."),
) -> None:
    """List file:line:column error locations found in Vitest output."""
    if log is not None:
        lines = log.read_text(encoding="utf-8", errors="replace").splitlines()
    else:
        lines = sys.stdin.read().splitlines()

    for location in scan_error_locations(lines):
        typer.echo(location.render(root_dir))


@cli.command("version")
def version() -> None:
    """Show vitestx version."""
    typer.echo(__version__)


if __name__ == "__main__":

    cli()
