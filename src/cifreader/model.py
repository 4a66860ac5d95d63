# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import FrozenSet, List, Optional, Union


@dataclass(frozen=True)
class Point:
    """Signed integer coordinate pair."""

    x: int
    y: int

    def __str__(self) -> str:
        return f"{self.x} {self.y}"


@dataclass(frozen=True)
class Size:
    """Non-negative width/height pair."""

    width: int
    height: int

    def __str__(self) -> str:
        return f"{self.width} {self.height}"


NEUTRAL_ROTATION = Point(1, 0)


class CommandType(Enum):
    BOX = auto()
    POLYGON = auto()
    ROUND_FLASH = auto()
    WIRE = auto()
    LAYER = auto()
    DEFINITION_START = auto()
    DEFINITION_FINISH = auto()
    DEFINITION_DELETE = auto()
    CALL = auto()
    USER_EXTENSION = auto()
    COMMENT = auto()
    END = auto()


CONTROL_TYPES: FrozenSet[CommandType] = frozenset(
    {
        CommandType.DEFINITION_START,
        CommandType.DEFINITION_FINISH,
        CommandType.DEFINITION_DELETE,
        CommandType.END,
    }
)
PRIMITIVE_TYPES: FrozenSet[CommandType] = frozenset(CommandType) - CONTROL_TYPES
POSITION_BASED_TYPES: FrozenSet[CommandType] = frozenset(
    {CommandType.BOX, CommandType.ROUND_FLASH}
)
PATH_BASED_TYPES: FrozenSet[CommandType] = frozenset({CommandType.POLYGON, CommandType.WIRE})


class TransformType(Enum):
    TRANSLATE = auto()
    MIRROR_X = auto()
    MIRROR_Y = auto()
    ROTATE = auto()


@dataclass(frozen=True)
class Transform:
    """One step of a call transformation; point is None for mirrors."""

    type: TransformType
    point: Optional[Point] = None


@dataclass
class BoxCommand:
    size: Size
    position: Point  # box center
    rotation: Point = NEUTRAL_ROTATION  # direction vector of the length axis

    type = CommandType.BOX


@dataclass
class PolygonCommand:
    points: List[Point] = field(default_factory=list)  # kept verbatim, order matters

    type = CommandType.POLYGON


@dataclass
class RoundFlashCommand:
    diameter: int
    position: Point

    type = CommandType.ROUND_FLASH


@dataclass
class WireCommand:
    width: int
    points: List[Point] = field(default_factory=list)

    type = CommandType.WIRE


@dataclass
class LayerCommand:
    name: str

    type = CommandType.LAYER


@dataclass
class DefinitionStartCommand:
    id: int
    scale_a: int = 1  # coordinates inside the symbol are scaled by a / b
    scale_b: int = 1

    type = CommandType.DEFINITION_START


@dataclass
class DefinitionFinishCommand:
    type = CommandType.DEFINITION_FINISH


@dataclass
class DefinitionDeleteCommand:
    id: int

    type = CommandType.DEFINITION_DELETE


@dataclass
class CallCommand:
    id: int
    transforms: List[Transform] = field(default_factory=list)  # applied in order

    type = CommandType.CALL


@dataclass
class UserExtensionCommand:
    code: int
    body: str = ""  # opaque

    type = CommandType.USER_EXTENSION


@dataclass
class CommentCommand:
    text: str = ""

    type = CommandType.COMMENT


@dataclass
class EndCommand:
    type = CommandType.END


Command = Union[
    BoxCommand,
    PolygonCommand,
    RoundFlashCommand,
    WireCommand,
    LayerCommand,
    DefinitionStartCommand,
    DefinitionFinishCommand,
    DefinitionDeleteCommand,
    CallCommand,
    UserExtensionCommand,
    CommentCommand,
    EndCommand,
]
