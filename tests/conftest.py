"""Pytest configuration and fixtures for vitestx tests."""
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep session state and option overrides out of the user's environment."""
    monkeypatch.setenv("VITESTX_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.delenv("VITESTX_NPX_OPTIONS", raising=False)
    monkeypatch.delenv("VITESTX_RUNNER_OPTIONS", raising=False)
    monkeypatch.delenv("VITESTX_QUIET", raising=False)


@pytest.fixture
def node_project(tmp_path: Path) -> Path:
    """A project root with package.json and one test file."""
    root = tmp_path / "repo"
    (root / "src").mkdir(parents=True)
    (root / "package.json").write_text('{"name": "demo"}\n', encoding="utf-8")
    (root / "src" / "sum.test.ts").write_text(
        "import { describe, it, expect } from 'vitest'\n"
        "\n"
        "describe('sum', () => {\n"
        "  it('adds numbers', () => {\n"
        "    expect(1 + 1).toBe(2)\n"
        "  })\n"
        "})\n",
        encoding="utf-8",
    )
    return root


def pytest_sessionfinish(session, exitstatus):
    """Check that coverage data was collected if --cov was requested.

    This prevents silent "no data collected" scenarios that produce 0% coverage
    without failing the test run.
    """
    cov_enabled = any("--cov" in str(arg) for arg in session.config.args)

    if not cov_enabled:
        return

    cwd = Path.cwd()
    coverage_files = list(cwd.glob(".coverage*"))

    if not coverage_files:
        pytest.exit(
            "Coverage was enabled but no data was collected. "
            "Check that tests import from 'vitestx' (the package) not 'src/vitestx' (filesystem path).",
            returncode=1
        )
