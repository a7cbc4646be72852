"""Find the it/test/describe block enclosing a cursor position.

The search is a single backward regex scan: the declaration starting closest
before the end of the cursor's line wins. Nesting is not tracked, so a closed
sibling block above the cursor can be reported instead of the enclosing one.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# 1: kind, 2: modifier (.only, .skip, ...), 3: first argument, 4: quoted name
UNIT_PATTERN = re.compile(
    r"[ \t]*(it|test|describe)(\.\w+)?\(((['\"`].*?['\"`])|[^,\n]*?)[ \t]*,"
)
_KIND_START = re.compile(r"(?=it|test|describe)")


@dataclass(frozen=True)
class TestDeclaration:
    """A matched declaration; name is None when the first argument is not a string literal."""

    __test__ = False

    kind: str
    name: str | None
    offset: int


def _line_end(text: str, offset: int) -> int:
    end = text.find("\n", offset)
    return len(text) if end == -1 else end


def find_test_declaration(text: str, offset: int) -> TestDeclaration | None:
    """Search backward from the end of the cursor's line for a declaration."""
    offset = max(0, min(offset, len(text)))
    limit = _line_end(text, offset)

    starts = [m.start() for m in _KIND_START.finditer(text, 0, limit)]
    for start in reversed(starts):
        match = UNIT_PATTERN.match(text, start, limit)
        if match is None:
            continue
        literal = match.group(4)
        name = literal[1:-1] if literal is not None else None
        logger.debug("declaration %s(%r) at offset %d", match.group(1), name, start)
        return TestDeclaration(kind=match.group(1), name=name, offset=start)

    return None


def find_test_name(text: str, offset: int) -> str | None:
    """Name of the nearest declaration above the cursor, if it has one."""
    declaration = find_test_declaration(text, offset)
    return declaration.name if declaration is not None else None


def offset_for_line(text: str, line: int, column: int = 0) -> int:
    """Character offset for a 1-based line and 0-based column."""
    if line < 1:
        raise ValueError(f"line must be >= 1, got {line}")
    offset = 0
    for index, content in enumerate(text.splitlines(keepends=True), start=1):
        if index == line:
            return offset + min(max(column, 0), len(content.rstrip("\r\n")))
        offset += len(content)
    return len(text)
