"""Error location scanning for Vitest output."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")

# Matches "❯ src/sum.test.ts:7:18", "❯ add src/sum.ts:3:9" and "at add (/repo/src/sum.ts:3:9)".
ERROR_LOCATION_PATTERN = re.compile(
    r"^\s*(?:❯|at)\s+"
    r"(?:[^\s(]+\s+\(?|\()?"
    r"(?:file://)?"
    r"(?P<file>(?:[A-Za-z]:)?[^\s():]+)"
    r":(?P<line>\d+):(?P<column>\d+)\)?\s*$"
)


@dataclass(frozen=True)
class ErrorLocation:
    """A file:line:column reference found in runner output."""

    file: str
    line: int
    column: int

    def resolve(self, root: Path) -> Path:
        """Absolute path of the file, relative paths taken from root."""
        path = Path(self.file)
        return path if path.is_absolute() else root / path

    def render(self, root: Path | None = None) -> str:
        """Clickable file:line:column form."""
        file = str(self.resolve(root)) if root is not None else self.file
        return f"{file}:{self.line}:{self.column}"


def strip_ansi(text: str) -> str:
    """Remove terminal color sequences."""
    return _ANSI_ESCAPE.sub("", text)


def parse_error_location(line: str) -> ErrorLocation | None:
    """Parse one output line."""
    match = ERROR_LOCATION_PATTERN.match(strip_ansi(line))
    if match is None:
        return None
    return ErrorLocation(
        file=match.group("file"),
        line=int(match.group("line")),
        column=int(match.group("column")),
    )


def scan_error_locations(lines: Iterable[str]) -> list[ErrorLocation]:
    """Collect error locations in output order, without duplicates."""
    seen: set[ErrorLocation] = set()
    locations: list[ErrorLocation] = []
    for line in lines:
        location = parse_error_location(line)
        if location is None or location in seen:
            continue
        seen.add(location)
        locations.append(location)
    return locations
