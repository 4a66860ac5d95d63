# validator.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto
from typing import IO, Iterable, Iterator, List, Optional, Union

from .fsm import ERROR_STATE
from .grammar import CIFGrammar, default_grammar

log = logging.getLogger(__name__)

ByteSource = Union[bytes, bytearray, memoryview, IO[bytes], Iterable[int]]

DEFAULT_CHUNK_SIZE = 64 * 1024


class ValidationStatus(Enum):
    ACCEPTED = auto()
    INCOMPLETE = auto()
    INVALID = auto()


@dataclass(frozen=True)
class ValidationOutcome:
    """
    Verdict of one validation pass.

    For INVALID, state is the last valid state and byte/offset identify the
    rejected byte. Otherwise state is the state reached at end of input.
    """

    status: ValidationStatus
    state: int
    byte: Optional[int] = None
    offset: Optional[int] = None
    bytes_read: int = 0

    @property
    def accepted(self) -> bool:
        return self.status is ValidationStatus.ACCEPTED

    @property
    def incomplete(self) -> bool:
        return self.status is ValidationStatus.INCOMPLETE

    @property
    def invalid(self) -> bool:
        return self.status is ValidationStatus.INVALID

    def describe(self) -> List[str]:
        """Human-readable diagnostic lines for this outcome."""
        if self.status is ValidationStatus.ACCEPTED:
            return [f"Syntax accepted ({self.bytes_read} bytes, final state {self.state})"]
        if self.status is ValidationStatus.INCOMPLETE:
            return [
                "Contents are incomplete (maybe a missing End command); "
                f"stopped in state {self.state} after {self.bytes_read} bytes"
            ]
        assert self.byte is not None
        return [
            f"Invalid contents at offset {self.offset}",
            f"State: {self.state}",
            f"Input char: {display_byte(self.byte)} (ASCII={self.byte})",
        ]


def display_byte(byte: int) -> str:
    """Render a byte as a character, escaping anything that is not printable ASCII."""
    if 0x20 <= byte < 0x7F:
        return chr(byte)
    return f"\\x{byte:02x}"


def iter_bytes(source: ByteSource, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[int]:
    """
    Yield the bytes of a source one at a time.

    Args:
        source: In-memory bytes, a binary stream with read(), or an iterable of ints.
        chunk_size: Read size used for streams.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        yield from bytes(source)
        return
    read = getattr(source, "read", None)
    if callable(read):
        while True:
            chunk = read(chunk_size)
            if not chunk:
                return
            if isinstance(chunk, str):
                raise TypeError("Byte source must be opened in binary mode")
            yield from chunk
        return
    if isinstance(source, str):
        raise TypeError("Validate bytes, not str; encode the text first")
    for byte in source:
        yield byte


class SyntaxValidator:
    """Single forward pass of the CIF grammar over a byte source."""

    def __init__(self, grammar: Optional[CIFGrammar] = None) -> None:
        self.grammar = grammar or default_grammar()

    def validate(self, source: ByteSource) -> ValidationOutcome:
        machine = self.grammar.machine
        state = self.grammar.initial_state
        offset = 0
        for byte in iter_bytes(source):
            next_state = machine.next(state, byte)
            if next_state == ERROR_STATE:
                outcome = ValidationOutcome(
                    status=ValidationStatus.INVALID,
                    state=state,
                    byte=byte,
                    offset=offset,
                    bytes_read=offset + 1,
                )
                log.debug(
                    "Rejected byte %d at offset %d in state %d", byte, offset, state
                )
                return outcome
            state = next_state
            offset += 1

        status = (
            ValidationStatus.ACCEPTED
            if self.grammar.is_accepting(state)
            else ValidationStatus.INCOMPLETE
        )
        log.debug("Validation finished: %s in state %d after %d bytes", status.name, state, offset)
        return ValidationOutcome(status=status, state=state, bytes_read=offset)


def validate(source: ByteSource, grammar: Optional[CIFGrammar] = None) -> ValidationOutcome:
    """Validate a byte source against the CIF grammar."""
    return SyntaxValidator(grammar).validate(source)


__all__ = [
    "ByteSource",
    "SyntaxValidator",
    "ValidationOutcome",
    "ValidationStatus",
    "display_byte",
    "iter_bytes",
    "validate",
]
