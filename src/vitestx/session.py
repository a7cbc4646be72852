"""Last-command state for reruns."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from vitestx.errors import NoLastCommandError

SESSION_SCHEMA_VERSION = "vitestx.session.v1"
ENV_STATE_DIR = "VITESTX_STATE_DIR"
SESSION_FILENAME = "session.json"

logger = logging.getLogger(__name__)


@dataclass
class Session:
    """Most recently run command and the directory it ran in.

    Only the orchestrator writes to a session.
    """

    last_command: str | None = None
    last_cwd: Path | None = None

    def remember(self, command: str, cwd: Path) -> None:
        self.last_command = command
        self.last_cwd = cwd

    def require_last(self) -> tuple[str, Path]:
        """Return the last command and its directory."""
        if self.last_command is None:
            raise NoLastCommandError("No previous test command to rerun.")
        return self.last_command, self.last_cwd or Path.cwd()

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": SESSION_SCHEMA_VERSION,
            "last_command": self.last_command,
            "last_cwd": str(self.last_cwd) if self.last_cwd is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Session:
        command = data.get("last_command")
        cwd = data.get("last_cwd")
        return cls(
            last_command=command if isinstance(command, str) else None,
            last_cwd=Path(cwd) if isinstance(cwd, str) else None,
        )


def default_state_dir() -> Path:
    """State directory: $VITESTX_STATE_DIR, else $XDG_CACHE_HOME/vitestx or ~/.cache/vitestx."""
    override = os.getenv(ENV_STATE_DIR)
    if override:
        return Path(override).expanduser()
    cache_home = os.getenv("XDG_CACHE_HOME")
    base = Path(cache_home).expanduser() if cache_home else Path.home() / ".cache"
    return base / "vitestx"


class SessionStore:
    """JSON file persistence so reruns survive between CLI invocations."""

    def __init__(self, state_dir: Path | None = None):
        self.path = (state_dir or default_state_dir()) / SESSION_FILENAME

    def load(self) -> Session:
        """Load the stored session; missing or unreadable files give an empty one."""
        if not self.path.exists():
            return Session()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("ignoring unreadable session file %s: %s", self.path, exc)
            return Session()
        if not isinstance(data, dict):
            return Session()
        return Session.from_dict(data)

    def save(self, session: Session) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(session.to_dict(), sort_keys=True, indent=2),
            encoding="utf-8",
        )
