"""
Text codec for CIF commands.

parse_command() reads one command starting at its keyword; format_command()
emits the canonical form (keyword, fields in fixed order, single spaces,
' ;' terminator). Reading a formatted command gives back an equal command.

read_commands() walks a whole file, dispatching on each leading keyword and
collecting command errors as values so the caller can choose to stop at the
first one or skip past it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import IO, Callable, Dict, Iterable, List

from .errors import CommandError, ConfigurationError, MalformedFieldError, UnsupportedCommandError
from .model import (
    NEUTRAL_ROTATION,
    BoxCommand,
    CallCommand,
    Command,
    CommandType,
    CommentCommand,
    DefinitionDeleteCommand,
    DefinitionFinishCommand,
    DefinitionStartCommand,
    EndCommand,
    LayerCommand,
    Point,
    PolygonCommand,
    RoundFlashCommand,
    Transform,
    TransformType,
    UserExtensionCommand,
    WireCommand,
)
from .scanner import DIGITS, CommandScanner

log = logging.getLogger(__name__)

ON_ERROR_CHOICES = ("abort", "skip")


# ---------------- Readers ----------------
def _read_path(scanner: CommandScanner, command_type: CommandType) -> List[Point]:
    points = [scanner.read_point(command_type, "points[0]")]
    while not scanner.at_terminator():
        points.append(scanner.read_point(command_type, f"points[{len(points)}]"))
    return points


def _read_box(scanner: CommandScanner) -> BoxCommand:
    command_type = CommandType.BOX
    scanner.expect_keyword("B", command_type)
    size = scanner.read_size(command_type, "size")
    position = scanner.read_point(command_type, "position")
    rotation = NEUTRAL_ROTATION
    if not scanner.at_terminator():
        rotation = scanner.read_point(command_type, "rotation")
    scanner.expect_terminator(command_type)
    return BoxCommand(size=size, position=position, rotation=rotation)


def _read_polygon(scanner: CommandScanner) -> PolygonCommand:
    command_type = CommandType.POLYGON
    scanner.expect_keyword("P", command_type)
    points = _read_path(scanner, command_type)
    scanner.expect_terminator(command_type)
    return PolygonCommand(points=points)


def _read_round_flash(scanner: CommandScanner) -> RoundFlashCommand:
    command_type = CommandType.ROUND_FLASH
    scanner.expect_keyword("R", command_type)
    diameter = scanner.read_integer(command_type, "diameter", signed=False)
    position = scanner.read_point(command_type, "position")
    scanner.expect_terminator(command_type)
    return RoundFlashCommand(diameter=diameter, position=position)


def _read_wire(scanner: CommandScanner) -> WireCommand:
    command_type = CommandType.WIRE
    scanner.expect_keyword("W", command_type)
    width = scanner.read_integer(command_type, "width", signed=False)
    points = _read_path(scanner, command_type)
    scanner.expect_terminator(command_type)
    return WireCommand(width=width, points=points)


def _read_layer(scanner: CommandScanner) -> LayerCommand:
    command_type = CommandType.LAYER
    scanner.expect_keyword("L", command_type)
    name = scanner.read_name(command_type, "name")
    scanner.expect_terminator(command_type)
    return LayerCommand(name=name)


def _read_definition(scanner: CommandScanner) -> Command:
    # D S / D F / D D share the leading keyword; the second letter picks the variant.
    start = scanner.pos
    scanner.expect_keyword("D", CommandType.DEFINITION_START)
    scanner.skip_blanks()
    sub = scanner.peek()
    if sub == "S":
        command_type = CommandType.DEFINITION_START
        scanner.advance()
        symbol_id = scanner.read_integer(command_type, "id", signed=False)
        scale_a, scale_b = 1, 1
        if not scanner.at_terminator():
            scale_a = scanner.read_integer(command_type, "scale_a", signed=False)
            scale_b = scanner.read_integer(command_type, "scale_b", signed=False)
        scanner.expect_terminator(command_type)
        return DefinitionStartCommand(id=symbol_id, scale_a=scale_a, scale_b=scale_b)
    if sub == "F":
        scanner.advance()
        scanner.expect_terminator(CommandType.DEFINITION_FINISH)
        return DefinitionFinishCommand()
    if sub == "D":
        command_type = CommandType.DEFINITION_DELETE
        scanner.advance()
        symbol_id = scanner.read_integer(command_type, "id", signed=False)
        scanner.expect_terminator(command_type)
        return DefinitionDeleteCommand(id=symbol_id)
    raise UnsupportedCommandError("D" + sub, start)


def _read_call(scanner: CommandScanner) -> CallCommand:
    command_type = CommandType.CALL
    scanner.expect_keyword("C", command_type)
    symbol_id = scanner.read_integer(command_type, "id", signed=False)
    transforms: List[Transform] = []
    while True:
        scanner.skip_blanks()
        ch = scanner.peek()
        if ch == ";":
            break
        if ch == "T":
            scanner.advance()
            point = scanner.read_point(command_type, f"transforms[{len(transforms)}]")
            transforms.append(Transform(TransformType.TRANSLATE, point))
        elif ch == "M":
            scanner.advance()
            scanner.skip_blanks()
            axis = scanner.peek()
            if axis not in ("X", "Y"):
                raise MalformedFieldError(
                    command_type,
                    f"transforms[{len(transforms)}]",
                    f"expected mirror axis 'X' or 'Y', found {scanner.found()}",
                    scanner.pos,
                )
            scanner.advance()
            mirror = TransformType.MIRROR_X if axis == "X" else TransformType.MIRROR_Y
            transforms.append(Transform(mirror))
        elif ch == "R":
            scanner.advance()
            point = scanner.read_point(command_type, f"transforms[{len(transforms)}]")
            transforms.append(Transform(TransformType.ROTATE, point))
        else:
            raise MalformedFieldError(
                command_type,
                f"transforms[{len(transforms)}]",
                f"expected 'T', 'M', 'R' or ';', found {scanner.found()}",
                scanner.pos,
            )
    scanner.expect_terminator(command_type)
    return CallCommand(id=symbol_id, transforms=transforms)


def _read_user_extension(scanner: CommandScanner) -> UserExtensionCommand:
    command_type = CommandType.USER_EXTENSION
    scanner.skip_blanks()
    start = scanner.pos
    while scanner.peek() in DIGITS:
        scanner.advance()
    if scanner.pos == start:
        raise MalformedFieldError(
            command_type, "code", f"expected digits, found {scanner.found()}", scanner.pos
        )
    code = int(scanner.text[start:scanner.pos])
    body = scanner.read_until(";", command_type, "body")
    scanner.advance()
    return UserExtensionCommand(code=code, body=body.strip())


def _read_comment(scanner: CommandScanner) -> CommentCommand:
    command_type = CommandType.COMMENT
    scanner.expect_keyword("(", command_type)
    text = scanner.read_until(")", command_type, "text")
    scanner.advance()
    scanner.expect_terminator(command_type)
    return CommentCommand(text=text)


def _read_end(scanner: CommandScanner) -> EndCommand:
    scanner.expect_keyword("E", CommandType.END)
    return EndCommand()


_KEYWORD_READERS: Dict[str, Callable[[CommandScanner], Command]] = {
    "B": _read_box,
    "P": _read_polygon,
    "R": _read_round_flash,
    "W": _read_wire,
    "L": _read_layer,
    "D": _read_definition,
    "C": _read_call,
    "(": _read_comment,
    "E": _read_end,
}


def read_command(scanner: CommandScanner) -> Command:
    """
    Read the command that starts at the scanner's cursor (after blanks).

    Raises:
        UnsupportedCommandError: If the leading keyword matches no variant.
        MalformedFieldError: If a field of the matched variant cannot be read.
    """
    scanner.skip_blanks()
    keyword = scanner.peek()
    if keyword in DIGITS:
        return _read_user_extension(scanner)
    reader = _KEYWORD_READERS.get(keyword)
    if reader is None:
        raise UnsupportedCommandError(keyword, scanner.pos)
    return reader(scanner)


def parse_command(text: str) -> Command:
    """Parse the first command in text; anything after it is ignored."""
    return read_command(CommandScanner(text))


# ---------------- Writers ----------------
def _format_points(points: Iterable[Point]) -> str:
    return " ".join(str(point) for point in points)


def _format_box(command: BoxCommand) -> str:
    return f"B {command.size} {command.position} {command.rotation} ;"


def _format_polygon(command: PolygonCommand) -> str:
    return f"P {_format_points(command.points)} ;"


def _format_round_flash(command: RoundFlashCommand) -> str:
    return f"R {command.diameter} {command.position} ;"


def _format_wire(command: WireCommand) -> str:
    return f"W {command.width} {_format_points(command.points)} ;"


def _format_layer(command: LayerCommand) -> str:
    return f"L {command.name} ;"


def _format_definition_start(command: DefinitionStartCommand) -> str:
    if (command.scale_a, command.scale_b) == (1, 1):
        return f"D S {command.id} ;"
    return f"D S {command.id} {command.scale_a} {command.scale_b} ;"


def _format_definition_finish(command: DefinitionFinishCommand) -> str:
    return "D F ;"


def _format_definition_delete(command: DefinitionDeleteCommand) -> str:
    return f"D D {command.id} ;"


def _format_transform(transform: Transform) -> str:
    if transform.type is TransformType.MIRROR_X:
        return "M X"
    if transform.type is TransformType.MIRROR_Y:
        return "M Y"
    letter = "T" if transform.type is TransformType.TRANSLATE else "R"
    return f"{letter} {transform.point}"


def _format_call(command: CallCommand) -> str:
    parts = [f"C {command.id}"]
    parts.extend(_format_transform(t) for t in command.transforms)
    parts.append(";")
    return " ".join(parts)


def _format_user_extension(command: UserExtensionCommand) -> str:
    if command.body:
        return f"{command.code} {command.body} ;"
    return f"{command.code} ;"


def _format_comment(command: CommentCommand) -> str:
    return f"({command.text}) ;"


def _format_end(command: EndCommand) -> str:
    return "E"


_WRITERS: Dict[CommandType, Callable] = {
    CommandType.BOX: _format_box,
    CommandType.POLYGON: _format_polygon,
    CommandType.ROUND_FLASH: _format_round_flash,
    CommandType.WIRE: _format_wire,
    CommandType.LAYER: _format_layer,
    CommandType.DEFINITION_START: _format_definition_start,
    CommandType.DEFINITION_FINISH: _format_definition_finish,
    CommandType.DEFINITION_DELETE: _format_definition_delete,
    CommandType.CALL: _format_call,
    CommandType.USER_EXTENSION: _format_user_extension,
    CommandType.COMMENT: _format_comment,
    CommandType.END: _format_end,
}


def format_command(command: Command) -> str:
    """Canonical CIF text for one command."""
    return _WRITERS[command.type](command)


def write_commands(commands: Iterable[Command], stream: IO[str]) -> None:
    """Write one canonical command per line."""
    for command in commands:
        stream.write(format_command(command))
        stream.write("\n")


# ---------------- Whole-file walk ----------------
@dataclass
class ReadResult:
    commands: List[Command] = field(default_factory=list)
    errors: List[CommandError] = field(default_factory=list)
    end_seen: bool = False

    @property
    def ok(self) -> bool:
        return not self.errors


def read_commands(text: str, on_error: str = "abort") -> ReadResult:
    """
    Materialize every command in text, stopping after End.

    Args:
        text: Decoded file contents, normally already accepted by the validator.
        on_error: "abort" stops at the first command error; "skip" records it,
            resumes after the next ';' and keeps going.

    Returns:
        ReadResult with the commands read so far and any command errors.

    Raises:
        ConfigurationError: If on_error is not a known policy.
    """
    if on_error not in ON_ERROR_CHOICES:
        raise ConfigurationError(
            f"on_error must be one of {list(ON_ERROR_CHOICES)}, got {on_error!r}"
        )

    result = ReadResult()
    scanner = CommandScanner(text)
    while True:
        scanner.skip_blanks()
        if scanner.exhausted:
            break
        start = scanner.pos
        try:
            command = read_command(scanner)
        except CommandError as exc:
            result.errors.append(exc)
            log.warning("%s", exc)
            if on_error == "abort":
                break
            scanner.pos = start
            scanner.skip_past(";")
            continue
        result.commands.append(command)
        if command.type is CommandType.END:
            result.end_seen = True
            break

    log.debug(
        "Read %d commands with %d errors (end_seen=%s)",
        len(result.commands),
        len(result.errors),
        result.end_seen,
    )
    return result


__all__ = [
    "ON_ERROR_CHOICES",
    "ReadResult",
    "format_command",
    "parse_command",
    "read_command",
    "read_commands",
    "write_commands",
]
