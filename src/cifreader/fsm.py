"""
Byte-driven finite state machine used to check CIF syntax.

States are numbered 1..N and each owns a 256-entry transition table. A lookup
with no configured entry yields ERROR_STATE; the engine never raises while
running, only while it is being built.

Character classes mirror the lexical categories of the CIF report. Two of them
carry quirks that are kept on purpose:
- COMMENT_CHAR admits every byte. The exclusion test it was derived from
  compared against '(' twice and so excluded nothing.
- SEPARATOR_CHAR is the union of UPPER_CHAR and BLANK_CHAR, so upper-case
  letters separate numbers.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple, Union

from .errors import ConfigurationError

ERROR_STATE = -1
INITIAL_STATE = 1
TABLE_SIZE = 256


class CharClass(Enum):
    DIGIT = "digit"
    UPPER_CHAR = "upper_char"
    BLANK_CHAR = "blank_char"
    USER_CHAR = "user_char"
    COMMENT_CHAR = "comment_char"
    SEPARATOR_CHAR = "separator_char"
    LAYER_NAME_CHAR = "layer_name_char"


Chars = Union[CharClass, str, bytes, int]

_DIGITS = frozenset(range(ord("0"), ord("9") + 1))
_UPPERS = frozenset(range(ord("A"), ord("Z") + 1))
_BLANK_EXCLUDED = frozenset(ord(c) for c in "-();")


def _class_members(char_class: CharClass) -> FrozenSet[int]:
    if char_class is CharClass.DIGIT:
        return _DIGITS
    if char_class is CharClass.UPPER_CHAR:
        return _UPPERS
    if char_class is CharClass.BLANK_CHAR:
        return frozenset(
            b
            for b in range(TABLE_SIZE)
            if b not in _DIGITS and b not in _UPPERS and b not in _BLANK_EXCLUDED
        )
    if char_class is CharClass.USER_CHAR:
        return frozenset(b for b in range(TABLE_SIZE) if b != ord(";"))
    if char_class is CharClass.COMMENT_CHAR:
        return frozenset(range(TABLE_SIZE))
    if char_class is CharClass.SEPARATOR_CHAR:
        return _class_members(CharClass.UPPER_CHAR) | _class_members(CharClass.BLANK_CHAR)
    if char_class is CharClass.LAYER_NAME_CHAR:
        return _class_members(CharClass.DIGIT) | _class_members(CharClass.UPPER_CHAR)
    raise ConfigurationError(f"Unknown character class {char_class!r}")


CLASS_MEMBERS: Dict[CharClass, FrozenSet[int]] = {
    char_class: _class_members(char_class) for char_class in CharClass
}


def resolve_chars(chars: Chars) -> FrozenSet[int]:
    """
    Expand a character set into the byte values it covers.

    Args:
        chars: A CharClass, a literal str/bytes (every character counts), or a single byte value.

    Returns:
        Frozen set of byte values in 0..255.

    Raises:
        ConfigurationError: For unknown classes, empty literals or values outside a byte.
    """
    if isinstance(chars, CharClass):
        return CLASS_MEMBERS[chars]
    if isinstance(chars, bool):
        raise ConfigurationError(f"Unknown character set {chars!r}")
    if isinstance(chars, int):
        values: Iterable[int] = (chars,)
    elif isinstance(chars, bytes):
        values = tuple(chars)
    elif isinstance(chars, str):
        values = tuple(ord(c) for c in chars)
    else:
        raise ConfigurationError(f"Unknown character set {chars!r}")

    resolved = frozenset(values)
    if not resolved:
        raise ConfigurationError("Empty character set")
    out_of_range = sorted(v for v in resolved if not 0 <= v < TABLE_SIZE)
    if out_of_range:
        raise ConfigurationError(f"Character values outside a byte: {out_of_range}")
    return resolved


class TransitionTable:
    """Byte -> next-state map for one state; mutable until frozen."""

    def __init__(self) -> None:
        self._targets: List[Optional[int]] = [None] * TABLE_SIZE
        self._frozen: Optional[Tuple[Optional[int], ...]] = None

    @property
    def frozen(self) -> bool:
        return self._frozen is not None

    def set(self, chars: Chars, next_state: int) -> None:
        """Install next_state for every byte in chars, overwriting earlier entries."""
        if self._frozen is not None:
            raise ConfigurationError("Transition table is frozen")
        for byte in resolve_chars(chars):
            self._targets[byte] = next_state

    def next(self, byte: int) -> int:
        targets = self._frozen if self._frozen is not None else self._targets
        target = targets[byte]
        return ERROR_STATE if target is None else target

    def freeze(self) -> None:
        if self._frozen is None:
            self._frozen = tuple(self._targets)

    def defined(self) -> Dict[int, int]:
        """Return {byte: next_state} for every configured byte."""
        targets = self._frozen if self._frozen is not None else self._targets
        return {byte: target for byte, target in enumerate(targets) if target is not None}


class StateMachine:
    """
    Indexed collection of transition tables over states 1..state_count.

    State 1 is the unique initial state. The machine holds no cursor; callers
    pass the current state to next(), so one frozen machine can serve many
    validations at once.
    """

    def __init__(self, state_count: int) -> None:
        if state_count < INITIAL_STATE:
            raise ConfigurationError(f"state_count must be >= 1, got {state_count}")
        self.state_count = state_count
        self._tables: List[TransitionTable] = [TransitionTable() for _ in range(state_count)]

    def _check_state(self, state: int, role: str) -> None:
        if not INITIAL_STATE <= state <= self.state_count:
            raise ConfigurationError(
                f"{role} state {state} outside 1..{self.state_count}; "
                "the machine is too small for this grammar"
            )

    def add(self, state: int, chars: Chars, next_state: int) -> None:
        """
        Add transitions from state to next_state for every byte in chars.

        Raises:
            ConfigurationError: If either state is out of range, the
                character set is unknown, or the machine is frozen.
        """
        self._check_state(state, "Source")
        self._check_state(next_state, "Target")
        self._tables[state - 1].set(chars, next_state)

    def next(self, state: int, byte: int) -> int:
        """Return the state reached from state on byte, or ERROR_STATE."""
        if not INITIAL_STATE <= state <= self.state_count:
            return ERROR_STATE
        return self._tables[state - 1].next(byte & 0xFF)

    def table(self, state: int) -> TransitionTable:
        self._check_state(state, "Requested")
        return self._tables[state - 1]

    def freeze(self) -> "StateMachine":
        for table in self._tables:
            table.freeze()
        return self

    @property
    def frozen(self) -> bool:
        return all(table.frozen for table in self._tables)


__all__ = [
    "ERROR_STATE",
    "INITIAL_STATE",
    "TABLE_SIZE",
    "CharClass",
    "CLASS_MEMBERS",
    "Chars",
    "resolve_chars",
    "TransitionTable",
    "StateMachine",
]
