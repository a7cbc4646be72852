"""Tests for the subprocess runner."""

from __future__ import annotations

import shlex
import sys
from pathlib import Path

import pytest

from vitestx.errors import RunnerError
from vitestx.exec import SubprocessRunner


def _python(code: str) -> str:
    return f"{shlex.quote(sys.executable)} -c {shlex.quote(code)}"


def test_streams_lines_and_reports_exit_code(tmp_path: Path) -> None:
    code = "import sys; print('one'); print('two', file=sys.stderr); sys.stdout.flush(); sys.exit(3)"
    streamed: list[str] = []

    outcome = SubprocessRunner().run(_python(code), cwd=tmp_path, on_line=streamed.append)

    assert outcome.returncode == 3
    assert sorted(outcome.lines) == ["one", "two"]
    assert streamed == list(outcome.lines)
    assert outcome.cwd == tmp_path.resolve()


def test_runs_in_given_directory(tmp_path: Path) -> None:
    outcome = SubprocessRunner().run(_python("import os; print(os.getcwd())"), cwd=tmp_path)

    assert outcome.returncode == 0
    assert Path(outcome.lines[0]).resolve() == tmp_path.resolve()


def test_missing_executable_raises(tmp_path: Path) -> None:
    with pytest.raises(RunnerError, match="failed to start"):
        SubprocessRunner().run("definitely-not-a-real-binary-vitestx --run", cwd=tmp_path)


def test_empty_command_raises(tmp_path: Path) -> None:
    with pytest.raises(RunnerError, match="empty command"):
        SubprocessRunner().run("   ", cwd=tmp_path)


def test_unbalanced_quotes_raise(tmp_path: Path) -> None:
    with pytest.raises(RunnerError, match="cannot parse command"):
        SubprocessRunner().run("npx vitest 'oops", cwd=tmp_path)


class _PipelessProcess:
    stdout = None

    def __init__(self, *args, **kwargs):
        self.killed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def kill(self) -> None:
        self.killed = True


def test_missing_output_pipe_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("vitestx.exec.subprocess.Popen", _PipelessProcess)

    with pytest.raises(RunnerError, match="no output pipe"):
        SubprocessRunner().run("npx vite --run", cwd=tmp_path)
