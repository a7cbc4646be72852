"""Test command construction."""

from __future__ import annotations

import shlex
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from pathlib import Path

from vitestx.errors import ConfigError
from vitestx.utils.repo import relative_to_root
from vitestx.utils.repo_config import (
    DEBUG_OPTIONS,
    DEFAULT_RUNNER,
    DEFAULT_TEMPLATE,
    TEST_NAME_OPTION,
)

LAUNCHER = "npx"


def quote_options(options: Iterable[str]) -> str:
    """Shell-quote each token and join with single spaces."""
    return " ".join(shlex.quote(option) for option in options)


@dataclass(frozen=True)
class CommandSpec:
    """npx options, runner options and target for one test invocation.

    An empty target means "run the whole suite".
    """

    npx_options: tuple[str, ...] = ()
    runner_options: tuple[str, ...] = ()
    target: str = ""

    @classmethod
    def create(
        cls,
        npx_options: Sequence[str],
        runner_options: Sequence[str],
        target: str | Path = "",
        *,
        project_root: Path | None = None,
    ) -> CommandSpec:
        """Build a spec, making a non-empty target relative to project_root."""
        target_text = str(target) if target != "" else ""
        if target_text and project_root is not None:
            target_text = relative_to_root(target_text, project_root)
        return cls(
            npx_options=tuple(npx_options),
            runner_options=tuple(runner_options),
            target=target_text,
        )

    def tokens(self, runner: str = DEFAULT_RUNNER) -> list[str]:
        """Structured argv for the default command shape."""
        argv = [LAUNCHER, *self.npx_options, runner, *self.runner_options]
        if self.target:
            argv.append(self.target)
        return argv

    def render(self, template: str = DEFAULT_TEMPLATE, runner: str = DEFAULT_RUNNER) -> str:
        """Join the spec into the final shell command string."""
        try:
            return template.format(
                npx_options=quote_options(self.npx_options),
                runner=runner,
                runner_options=quote_options(self.runner_options),
                target=shlex.quote(self.target) if self.target else "",
            )
        except (KeyError, IndexError, ValueError) as exc:
            raise ConfigError(f"Invalid command template {template!r}: {exc}") from exc


def build_command(
    npx_options: Sequence[str],
    runner_options: Sequence[str],
    target: str | Path = "",
    *,
    project_root: Path | None = None,
    template: str = DEFAULT_TEMPLATE,
    runner: str = DEFAULT_RUNNER,
) -> str:
    """Format the shell command for the given options and target."""
    spec = CommandSpec.create(npx_options, runner_options, target, project_root=project_root)
    return spec.render(template=template, runner=runner)


def split_command(command: str) -> list[str]:
    """Split a rendered command back into argv tokens."""
    return shlex.split(command)


def with_debug(spec: CommandSpec, debug_options: Sequence[str] = DEBUG_OPTIONS) -> CommandSpec:
    """Append the debugger-attach and synchronous-execution flags."""
    return replace(spec, runner_options=(*spec.runner_options, *debug_options))


def with_test_name(spec: CommandSpec, name: str, option: str = TEST_NAME_OPTION) -> CommandSpec:
    """Append a test name filter."""
    return replace(spec, runner_options=(*spec.runner_options, option, name))
