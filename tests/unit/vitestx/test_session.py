"""Unit tests for last-command session state."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from vitestx.errors import NoLastCommandError, NotFoundError
from vitestx.session import Session, SessionStore, default_state_dir


def test_require_last_without_command_raises() -> None:
    with pytest.raises(NoLastCommandError) as exc_info:
        Session().require_last()

    assert isinstance(exc_info.value, NotFoundError)


def test_remember_overwrites_previous() -> None:
    session = Session()
    session.remember("npx  vite --color a.test.ts", Path("/repo"))
    session.remember("npx  vite --color ", Path("/other"))

    assert session.require_last() == ("npx  vite --color ", Path("/other"))


def test_store_round_trip(tmp_path: Path) -> None:
    store = SessionStore(tmp_path)
    session = Session()
    session.remember("npx  vite --color ", tmp_path / "repo")

    store.save(session)
    loaded = store.load()

    assert loaded == session
    payload = json.loads((tmp_path / "session.json").read_text(encoding="utf-8"))
    assert payload["schema_version"] == "vitestx.session.v1"


def test_store_missing_file_is_empty(tmp_path: Path) -> None:
    assert SessionStore(tmp_path).load() == Session()


def test_store_corrupt_file_is_empty(tmp_path: Path) -> None:
    (tmp_path / "session.json").write_text("{oops", encoding="utf-8")

    assert SessionStore(tmp_path).load() == Session()


def test_store_non_object_payload_is_empty(tmp_path: Path) -> None:
    (tmp_path / "session.json").write_text("[1, 2]", encoding="utf-8")

    assert SessionStore(tmp_path).load() == Session()


def test_default_state_dir_env_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VITESTX_STATE_DIR", str(tmp_path / "custom"))

    assert default_state_dir() == tmp_path / "custom"


def test_default_state_dir_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("VITESTX_STATE_DIR", raising=False)
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path))

    assert default_state_dir() == tmp_path / "vitestx"
