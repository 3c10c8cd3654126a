"""
Cursor over source text and the escape-aware segment scanner.
"""

import re
from typing import NamedTuple


class Scanner:
    """
    A read cursor over an immutable string.

    Each tokenising pass owns its own scanner; nested passes create new ones.
    """

    def __init__(self, string: str, pos: int = 0):
        self.string = string
        self.pos = pos

    def __repr__(self) -> str:
        return f"Scanner(pos={self.pos}, rest={self.rest[:20]!r})"

    @property
    def eos(self) -> bool:
        """True when the cursor is at the end of the string."""
        return self.pos >= len(self.string)

    @property
    def rest(self) -> str:
        return self.string[self.pos :]

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.string):
            return None
        return self.string[self.pos]

    def startswith(self, prefix: str) -> bool:
        return self.string.startswith(prefix, self.pos)

    def match(self, pattern: re.Pattern[str]) -> re.Match[str] | None:
        """Match ``pattern`` at the cursor without consuming anything."""
        return pattern.match(self.string, self.pos)

    def scan(self, pattern: re.Pattern[str]) -> str | None:
        """Match ``pattern`` at the cursor and consume the matched text."""
        m = pattern.match(self.string, self.pos)
        if m is None:
            return None
        self.pos = m.end()
        return m.group(0)


class Segment(NamedTuple):
    """
    Result of :func:`get_string_segment`.

    ``value`` and ``terminator`` are both None when no unescaped terminator
    was found.
    """

    value: str | None
    terminator: str | None

    @property
    def found(self) -> bool:
        return self.terminator is not None


NO_SEGMENT = Segment(None, None)


def get_string_segment(scanner: Scanner, terminators: str) -> Segment:
    """
    Consume text up to the first unescaped character from ``terminators``.

    A backslash escapes the character after it, so a terminator preceded by
    an odd run of backslashes is content. Escapes are left untouched in the
    returned value.

    Args:
        scanner: Cursor positioned at the start of the segment
        terminators: Characters that end the segment

    Returns:
        ``Segment(value, terminator)`` with the cursor just past the
        terminator, or ``NO_SEGMENT`` with the cursor unmoved when the input
        runs out first
    """
    text = scanner.string
    start = pos = scanner.pos
    end = len(text)

    while pos < end:
        char = text[pos]
        if char == "\\":
            pos += 2
            continue
        if char in terminators:
            scanner.pos = pos + 1
            return Segment(text[start:pos], char)
        pos += 1

    return NO_SEGMENT
