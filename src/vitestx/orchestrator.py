"""Run actions: current file, whole suite, test at point, and rerun."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from vitestx.command import CommandSpec, quote_options, with_debug, with_test_name
from vitestx.errors import TestNotFoundError
from vitestx.exec import LineHandler, ProcessRunner
from vitestx.locator import find_test_declaration
from vitestx.output import ErrorLocation, scan_error_locations
from vitestx.session import Session
from vitestx.utils.repo import require_project_root
from vitestx.utils.repo_config import RunnerConfig, load_runner_config

logger = logging.getLogger(__name__)

ConfigLoader = Callable[[Path | None], RunnerConfig]


@dataclass(frozen=True)
class OptionOverrides:
    """Option lists given on the command line; None keeps the configured value."""

    npx_options: tuple[str, ...] | None = None
    runner_options: tuple[str, ...] | None = None


@dataclass(frozen=True)
class PlannedRun:
    """A rendered command and the project root it runs in."""

    command: str
    root: Path
    test_name: str | None = None


@dataclass(frozen=True)
class RunReport:
    """Outcome of one run action."""

    command: str
    root: Path
    returncode: int
    locations: list[ErrorLocation] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.returncode == 0

    @property
    def exit_code(self) -> int:
        """Shell-style status: a process killed by signal N maps to 128 + N."""
        return self.returncode if self.returncode >= 0 else 128 - self.returncode


class Orchestrator:
    """Builds commands in the project root and hands them to a process runner."""

    def __init__(
        self,
        runner: ProcessRunner,
        session: Session | None = None,
        *,
        overrides: OptionOverrides | None = None,
        config_loader: ConfigLoader = load_runner_config,
    ):
        self.runner = runner
        self.session = session if session is not None else Session()
        self.overrides = overrides or OptionOverrides()
        self.config_loader = config_loader

    def _config(self, root: Path) -> RunnerConfig:
        config = self.config_loader(root)
        return config.with_overrides(
            npx_options=self.overrides.npx_options,
            runner_options=self.overrides.runner_options,
        )

    def _plan(
        self,
        root: Path,
        target: Path | str,
        *,
        debug: bool,
        test_name: str | None = None,
    ) -> PlannedRun:
        config = self._config(root)
        spec = CommandSpec.create(
            config.npx_options,
            config.runner_options,
            target,
            project_root=root,
        )
        if test_name is not None:
            spec = with_test_name(spec, test_name, config.test_name_option)
        if debug:
            spec = with_debug(spec, config.debug_options)
        command = spec.render(template=config.command_template, runner=config.runner)
        logger.debug("planned %r in %s", command, root)
        return PlannedRun(command=command, root=root, test_name=test_name)

    def plan_file(self, path: Path, *, debug: bool = False) -> PlannedRun:
        """Plan a run of the tests in one file."""
        target = Path(path).expanduser().absolute()
        root = require_project_root(target)
        return self._plan(root, target, debug=debug)

    def plan_all(self, path: Path | None = None, *, debug: bool = False) -> PlannedRun:
        """Plan a run of the whole suite of the project containing path (default: cwd)."""
        root = require_project_root(path if path is not None else Path.cwd())
        return self._plan(root, "", debug=debug)

    def plan_unit(self, path: Path, offset: int, *, debug: bool = False) -> PlannedRun:
        """Plan a run of the test block enclosing offset in path."""
        target = Path(path).expanduser().absolute()
        root = require_project_root(target)
        text = target.read_text(encoding="utf-8", errors="replace")
        declaration = find_test_declaration(text, offset)
        if declaration is None:
            raise TestNotFoundError(f"No it/test/describe block found above the cursor in {path}")
        if declaration.name is None:
            raise TestNotFoundError(
                f"The {declaration.kind}() block above the cursor in {path} has no string name"
            )
        return self._plan(root, target, debug=debug, test_name=declaration.name)

    def plan_rerun(self, *, debug: bool = False) -> PlannedRun:
        """Plan a replay of the last command, optionally with the debug flags added."""
        command, cwd = self.session.require_last()
        if debug:
            command = f"{command.rstrip()} {quote_options(self._config(cwd).debug_options)}"
        return PlannedRun(command=command, root=cwd)

    def execute(self, planned: PlannedRun, on_line: LineHandler | None = None) -> RunReport:
        """Remember the command, run it, and scan its output."""
        self.session.remember(planned.command, planned.root)
        outcome = self.runner.run(planned.command, cwd=planned.root, on_line=on_line)
        return RunReport(
            command=planned.command,
            root=planned.root,
            returncode=outcome.returncode,
            locations=scan_error_locations(outcome.lines),
        )

    def run_file(self, path: Path, *, debug: bool = False, on_line: LineHandler | None = None) -> RunReport:
        return self.execute(self.plan_file(path, debug=debug), on_line)

    def run_all(
        self,
        path: Path | None = None,
        *,
        debug: bool = False,
        on_line: LineHandler | None = None,
    ) -> RunReport:
        return self.execute(self.plan_all(path, debug=debug), on_line)

    def run_unit_at_point(
        self,
        path: Path,
        offset: int,
        *,
        debug: bool = False,
        on_line: LineHandler | None = None,
    ) -> RunReport:
        return self.execute(self.plan_unit(path, offset, debug=debug), on_line)

    def rerun(self, *, debug: bool = False, on_line: LineHandler | None = None) -> RunReport:
        return self.execute(self.plan_rerun(debug=debug), on_line)
