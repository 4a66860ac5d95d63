# cif_file.py
from __future__ import annotations

import logging
from enum import Enum, auto
from pathlib import Path
from typing import List, Optional, Union

from .codec import ON_ERROR_CHOICES, read_commands
from .errors import ConfigurationError, ResourceError, UnsupportedCommandError
from .grammar import CIFGrammar
from .model import Command
from .validator import SyntaxValidator, ValidationOutcome, ValidationStatus

log = logging.getLogger(__name__)


class LoadStatus(Enum):
    OK = auto()
    CANT_OPEN_INPUT_FILE = auto()
    INCORRECT_INPUT_FILE = auto()
    INCOMPLETE_INPUT_FILE = auto()
    UNSUPPORTED_COMMAND = auto()
    MALFORMED_COMMAND = auto()


class CIFFile:
    """
    A CIF file on disk and the commands read from it.

    load() runs open -> validate -> materialize and stops at the first stage
    that fails. Every problem is recorded in messages (and logged) so callers
    can show them without inspecting exceptions.
    """

    def __init__(
        self,
        path: Union[str, Path],
        *,
        on_error: str = "abort",
        encoding: str = "latin-1",
        max_input_bytes: Optional[int] = None,
        grammar: Optional[CIFGrammar] = None,
    ) -> None:
        if on_error not in ON_ERROR_CHOICES:
            raise ConfigurationError(
                f"on_error must be one of {list(ON_ERROR_CHOICES)}, got {on_error!r}"
            )
        if max_input_bytes is not None and max_input_bytes < 0:
            raise ConfigurationError("max_input_bytes must be >= 0")
        self.path = Path(path)
        self.on_error = on_error
        self.encoding = encoding
        self.max_input_bytes = max_input_bytes
        self._validator = SyntaxValidator(grammar)
        self.commands: List[Command] = []
        self.messages: List[str] = []
        self.outcome: Optional[ValidationOutcome] = None

    def _report(self, level: int, message: str) -> None:
        self.messages.append(message)
        log.log(level, "%s: %s", self.path, message)

    def _read_bytes(self) -> bytes:
        """
        Read the whole file, honoring max_input_bytes.

        Raises:
            ResourceError: If the file cannot be read or is larger than allowed.
        """
        try:
            with self.path.open("rb") as f:
                if self.max_input_bytes is None:
                    return f.read()
                data = f.read(self.max_input_bytes + 1)
        except OSError as exc:
            raise ResourceError(f"Can't open input file {self.path}: {exc.strerror or exc}") from exc
        if len(data) > self.max_input_bytes:
            raise ResourceError(
                f"Input file {self.path} exceeds max_input_bytes={self.max_input_bytes}"
            )
        return data

    def _validate(self, data: bytes) -> LoadStatus:
        outcome = self._validator.validate(data)
        self.outcome = outcome
        if outcome.status is ValidationStatus.INVALID:
            lines = outcome.describe()
            self._report(logging.ERROR, "Error detected when validating contents of input file.")
            for line in lines:
                self._report(logging.ERROR, line)
            return LoadStatus.INCORRECT_INPUT_FILE
        if outcome.status is ValidationStatus.INCOMPLETE:
            self._report(logging.ERROR, outcome.describe()[0])
            return LoadStatus.INCOMPLETE_INPUT_FILE
        return LoadStatus.OK

    def _load_commands(self, data: bytes) -> LoadStatus:
        text = data.decode(self.encoding, errors="replace")
        result = read_commands(text, on_error=self.on_error)
        self.commands = result.commands
        level = logging.ERROR if self.on_error == "abort" else logging.WARNING
        for error in result.errors:
            self._report(level, str(error))
        if result.errors and self.on_error == "abort":
            if isinstance(result.errors[0], UnsupportedCommandError):
                return LoadStatus.UNSUPPORTED_COMMAND
            return LoadStatus.MALFORMED_COMMAND
        return LoadStatus.OK

    def load(self, validate_only: bool = False) -> LoadStatus:
        """
        Load the file.

        Args:
            validate_only: Stop after the syntax check and leave commands empty.

        Returns:
            LoadStatus describing the first failing stage, or OK.
        """
        self.messages.clear()
        self.commands = []
        self.outcome = None

        try:
            data = self._read_bytes()
        except ResourceError as exc:
            self._report(logging.ERROR, str(exc))
            return LoadStatus.CANT_OPEN_INPUT_FILE

        status = self._validate(data)
        if status is not LoadStatus.OK or validate_only:
            return status

        return self._load_commands(data)


__all__ = ["CIFFile", "LoadStatus"]
