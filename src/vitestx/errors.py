"""Error hierarchy for vitestx."""

from __future__ import annotations


class VitestxError(RuntimeError):
    """Base class for every error raised by vitestx."""


class NotFoundError(VitestxError):
    """Informational dead-end: nothing to act on, not a failure of the tool."""


class ProjectNotFoundError(NotFoundError):
    """No ancestor directory holds a package.json."""


class TestNotFoundError(NotFoundError):
    """No it/test/describe declaration above the cursor."""

    __test__ = False


class NoLastCommandError(NotFoundError):
    """Rerun requested before anything was run."""


class ConfigError(VitestxError):
    """Malformed .vitestx configuration file."""


class RunnerError(VitestxError):
    """The test command could not be started."""
