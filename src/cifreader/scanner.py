"""
Token-level reader over the text of CIF commands.

The scanner works on decoded text rather than on grammar states. It shares
the lexical classes of the byte grammar: a blank is anything that is not a
digit, an upper-case letter, '-', '(', ')' or ';', and numbers may be
separated by any run of blanks or upper-case letters.
"""

from __future__ import annotations

from typing import FrozenSet

from .errors import MalformedFieldError
from .fsm import CLASS_MEMBERS, CharClass
from .model import CommandType, Point, Size

DIGITS: FrozenSet[str] = frozenset("0123456789")
UPPERS: FrozenSet[str] = frozenset(chr(b) for b in CLASS_MEMBERS[CharClass.UPPER_CHAR])
LAYER_NAME_CHARS: FrozenSet[str] = DIGITS | UPPERS
_NON_BLANK: FrozenSet[str] = frozenset(
    chr(b) for b in range(256) if b not in CLASS_MEMBERS[CharClass.BLANK_CHAR]
)


def is_blank(ch: str) -> bool:
    return bool(ch) and ch not in _NON_BLANK


def is_separator(ch: str) -> bool:
    return is_blank(ch) or ch in UPPERS


class CommandScanner:
    """Cursor over command text with typed read helpers."""

    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    @property
    def exhausted(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self) -> str:
        """Current character, or '' at end of input."""
        return self.text[self.pos] if self.pos < len(self.text) else ""

    def advance(self) -> str:
        ch = self.peek()
        if ch:
            self.pos += 1
        return ch

    def found(self) -> str:
        ch = self.peek()
        return repr(ch) if ch else "end of input"

    def skip_blanks(self) -> None:
        while is_blank(self.peek()):
            self.pos += 1

    def skip_separators(self) -> None:
        while is_separator(self.peek()):
            self.pos += 1

    def skip_past(self, stop: str = ";") -> None:
        """Move just after the next stop character, or to the end of input."""
        index = self.text.find(stop, self.pos)
        self.pos = len(self.text) if index < 0 else index + 1

    def expect_keyword(self, keyword: str, command_type: CommandType) -> None:
        self.skip_blanks()
        if self.peek() != keyword:
            raise MalformedFieldError(
                command_type, "keyword", f"expected {keyword!r}, found {self.found()}", self.pos
            )
        self.pos += 1

    def read_integer(self, command_type: CommandType, field: str, signed: bool = True) -> int:
        """
        Read one integer, skipping any separators in front of it.

        Args:
            command_type: Command being read, for error reports.
            field: Field name, for error reports.
            signed: Whether a leading '-' is allowed.

        Raises:
            MalformedFieldError: If no digits follow, or a sign appears on an unsigned field.
        """
        self.skip_separators()
        start = self.pos
        negative = self.peek() == "-"
        if negative:
            if not signed:
                raise MalformedFieldError(command_type, field, "must not be negative", start)
            self.pos += 1
        digits_start = self.pos
        while self.peek() in DIGITS:
            self.pos += 1
        if self.pos == digits_start:
            raise MalformedFieldError(
                command_type, field, f"expected digits, found {self.found()}", self.pos
            )
        value = int(self.text[digits_start:self.pos])
        return -value if negative else value

    def read_point(self, command_type: CommandType, field: str) -> Point:
        x = self.read_integer(command_type, f"{field}.x")
        y = self.read_integer(command_type, f"{field}.y")
        return Point(x, y)

    def read_size(self, command_type: CommandType, field: str) -> Size:
        width = self.read_integer(command_type, f"{field}.width", signed=False)
        height = self.read_integer(command_type, f"{field}.height", signed=False)
        return Size(width, height)

    def read_name(self, command_type: CommandType, field: str) -> str:
        self.skip_blanks()
        start = self.pos
        while self.peek() in LAYER_NAME_CHARS:
            self.pos += 1
        if self.pos == start:
            raise MalformedFieldError(
                command_type, field, f"expected a name, found {self.found()}", self.pos
            )
        return self.text[start:self.pos]

    def read_until(self, stop: str, command_type: CommandType, field: str) -> str:
        """Return the text up to (not including) stop and leave the cursor on stop."""
        index = self.text.find(stop, self.pos)
        if index < 0:
            raise MalformedFieldError(
                command_type, field, f"missing closing {stop!r}", len(self.text)
            )
        value = self.text[self.pos:index]
        self.pos = index
        return value

    def at_terminator(self) -> bool:
        """Probe for ';' after skipping separators; the cursor stays in front of it."""
        self.skip_separators()
        return self.peek() == ";"

    def expect_terminator(self, command_type: CommandType) -> None:
        if not self.at_terminator():
            raise MalformedFieldError(
                command_type, "terminator", f"expected ';', found {self.found()}", self.pos
            )
        self.pos += 1
