"""Process runners for test commands."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from vitestx.command import split_command
from vitestx.errors import RunnerError

logger = logging.getLogger(__name__)

LineHandler = Callable[[str], None]


@dataclass(frozen=True)
class RunOutcome:
    """Result envelope for one test command."""

    command: str
    cwd: Path
    returncode: int
    lines: tuple[str, ...]


class ProcessRunner(Protocol):
    """Submit a command, stream its output lines, report its exit code."""

    def run(self, command: str, *, cwd: Path, on_line: LineHandler | None = None) -> RunOutcome:
        ...


def _discard(_line: str) -> None:
    """Default line handler."""


class SubprocessRunner:
    """Run commands without a shell, merging stderr into stdout."""

    def __init__(self, env: dict[str, str] | None = None):
        self.env = env

    def run(self, command: str, *, cwd: Path, on_line: LineHandler | None = None) -> RunOutcome:
        """Run command and stream each output line to on_line."""
        handler = on_line or _discard
        try:
            argv = split_command(command)
        except ValueError as exc:
            raise RunnerError(f"cannot parse command {command!r}: {exc}") from exc
        if not argv:
            raise RunnerError("empty command")

        logger.debug("running %s in %s", argv, cwd)
        lines: list[str] = []
        try:
            process = subprocess.Popen(
                argv,
                cwd=cwd,
                env=self.env,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
            )
        except OSError as exc:
            raise RunnerError(f"failed to start {argv[0]}: {exc}") from exc

        with process:
            if process.stdout is None:
                process.kill()
                raise RunnerError(f"no output pipe for {argv[0]}")
            for raw in process.stdout:
                line = raw.rstrip("\r\n")
                lines.append(line)
                handler(line)
            returncode = process.wait()

        logger.debug("exit code %d", returncode)
        return RunOutcome(
            command=command,
            cwd=cwd.resolve(),
            returncode=returncode,
            lines=tuple(lines),
        )
