# errors.py
from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .model import CommandType


class CIFError(Exception):
    """Base class for every error raised by cifreader."""


class ConfigurationError(CIFError):
    """A grammar or runtime configuration is internally inconsistent."""


class ResourceError(CIFError):
    """The byte source could not be opened or read."""


class CommandError(CIFError):
    """A single command could not be materialized from its text."""

    def __init__(self, message: str, offset: Optional[int] = None) -> None:
        super().__init__(message)
        self.offset = offset


class UnsupportedCommandError(CommandError):
    """The leading keyword of a command matches no known variant."""

    def __init__(self, keyword: str, offset: Optional[int] = None) -> None:
        shown = repr(keyword) if keyword else "end of input"
        super().__init__(f"Unsupported command starting with {shown}", offset)
        self.keyword = keyword


class MalformedFieldError(CommandError):
    """A command field could not be read from the text."""

    def __init__(
        self,
        command_type: "CommandType",
        field: str,
        detail: str,
        offset: Optional[int] = None,
    ) -> None:
        where = f" at offset {offset}" if offset is not None else ""
        super().__init__(
            f"Malformed {command_type.name} command: field '{field}' {detail}{where}", offset
        )
        self.command_type = command_type
        self.field = field
        self.detail = detail


__all__ = [
    "CIFError",
    "ConfigurationError",
    "ResourceError",
    "CommandError",
    "UnsupportedCommandError",
    "MalformedFieldError",
]
