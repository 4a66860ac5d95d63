"""Read and validate CIF (Caltech Intermediate Form) files."""

from .cif_file import CIFFile, LoadStatus
from .codec import ReadResult, format_command, parse_command, read_commands, write_commands
from .errors import (
    CIFError,
    CommandError,
    ConfigurationError,
    MalformedFieldError,
    ResourceError,
    UnsupportedCommandError,
)
from .fsm import ERROR_STATE, CharClass, StateMachine, TransitionTable
from .grammar import ACCEPTING_STATES, STATE_COUNT, CIFGrammar, build_cif_grammar, default_grammar
from .model import (
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
    Size,
    Transform,
    TransformType,
    UserExtensionCommand,
    WireCommand,
)
from .validator import SyntaxValidator, ValidationOutcome, ValidationStatus, validate

__all__ = [
    "ACCEPTING_STATES",
    "BoxCommand",
    "CIFError",
    "CIFFile",
    "CIFGrammar",
    "CallCommand",
    "CharClass",
    "Command",
    "CommandError",
    "CommandType",
    "CommentCommand",
    "ConfigurationError",
    "DefinitionDeleteCommand",
    "DefinitionFinishCommand",
    "DefinitionStartCommand",
    "ERROR_STATE",
    "EndCommand",
    "LayerCommand",
    "LoadStatus",
    "MalformedFieldError",
    "Point",
    "PolygonCommand",
    "ReadResult",
    "ResourceError",
    "RoundFlashCommand",
    "STATE_COUNT",
    "Size",
    "StateMachine",
    "SyntaxValidator",
    "Transform",
    "TransformType",
    "TransitionTable",
    "UnsupportedCommandError",
    "UserExtensionCommand",
    "ValidationOutcome",
    "ValidationStatus",
    "WireCommand",
    "build_cif_grammar",
    "default_grammar",
    "format_command",
    "parse_command",
    "read_commands",
    "validate",
    "write_commands",
]
