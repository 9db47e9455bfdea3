"""Unified diff indexing.

GitHub only accepts review comments on lines that appear in the diff on the
new side: added ("+") lines and unchanged context (" ") lines. This module
turns a file's ``patch`` into the ordered set of those new-file line numbers.
"""

import re
from collections.abc import Iterator

from ..utils import get_logger

logger = get_logger(__name__)

HUNK_HEADER_RE = re.compile(r"^@@ -\d+(?:,\d+)? \+(?P<new_start>\d+)(?:,\d+)? @@")


class AddressableLineSet:
    """Ordered, de-duplicated new-file line numbers that accept a review comment."""

    def __init__(self, lines: list[int] | tuple[int, ...] = ()) -> None:
        self._lines = tuple(dict.fromkeys(lines))
        self._members = frozenset(self._lines)

    def __contains__(self, line: object) -> bool:
        return line in self._members

    def __iter__(self) -> Iterator[int]:
        return iter(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __bool__(self) -> bool:
        return bool(self._lines)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, AddressableLineSet):
            return self._lines == other._lines
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._lines)

    def __repr__(self) -> str:
        return f"<AddressableLineSet({list(self._lines)})>"

    @property
    def lines(self) -> tuple[int, ...]:
        return self._lines

    @property
    def first(self) -> int | None:
        """Lowest addressable line, or None for an empty set."""
        return min(self._members) if self._members else None


def parse_addressable_lines(patch: str | None) -> list[int]:
    """Parse a unified diff patch into addressable new-file line numbers.

    Args:
    ----
        patch: Unified diff text for a single file (may be None or empty)

    Returns:
    -------
        Line numbers in patch order. Gaps between hunks are expected.

    """
    lines: list[int] = []
    if not patch:
        return lines

    current_line = 0
    in_hunk = False

    for raw in patch.split("\n"):
        raw = raw.rstrip("\r")

        if raw.startswith("@@"):
            in_hunk = True
            match = HUNK_HEADER_RE.match(raw)
            if match:
                current_line = int(match.group("new_start")) - 1
            else:
                # Cursor stays where it was; the rest of this hunk may be misnumbered
                logger.warning("Malformed hunk header, keeping line cursor at %d: %r", current_line, raw)
            continue

        if not in_hunk:
            # "--- a/..." and "+++ b/..." file headers only appear before the first hunk
            continue

        if raw.startswith("+"):
            current_line += 1
            lines.append(current_line)
        elif raw.startswith(" "):
            current_line += 1
            lines.append(current_line)
        # "-" lines have no new-side coordinate; "\ No newline at end of file" is metadata

    logger.debug("Addressable lines for patch: %s", lines)
    return lines


def index_patch(patch: str | None) -> AddressableLineSet:
    """Build the AddressableLineSet for one file's patch."""
    return AddressableLineSet(parse_addressable_lines(patch))
