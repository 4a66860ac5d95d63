"""
CIF command grammar wired onto the byte state machine.

Each command family owns a disjoint range of states. Within a family the
numeric sub-grammars follow one pattern: a digit run stays in its digit state,
a separator run stays in its separator state, and a leading '-' moves to a
state that only accepts a digit. A ';' that completes a command returns to
state 1.

  1        between commands
  2..13    P  polygon
  14..30   B  box
  31..39   R  round flash
  40..53   W  wire
  54..56   L  layer
  57..69   D  definition start / finish / delete
  70..87   C  call with transformations
  88       0-9 user extension
  89..90   (  comment
  91..92   E  end (accepting)

Within a state, class transitions are listed before single characters so a
specific byte overrides the class entry that also covers it (state 89).
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import FrozenSet, Tuple

from .fsm import INITIAL_STATE, CharClass, Chars, StateMachine

DIGIT = CharClass.DIGIT
BLANK = CharClass.BLANK_CHAR
SEP = CharClass.SEPARATOR_CHAR
USER = CharClass.USER_CHAR
COMMENT = CharClass.COMMENT_CHAR
LAYER_NAME = CharClass.LAYER_NAME_CHAR

STATE_COUNT = 92
ACCEPTING_STATES: FrozenSet[int] = frozenset({91, 92})

Transition = Tuple[int, Chars, int]


def _call_follow(state: int) -> Tuple[Transition, ...]:
    """Transitions that close a call transformation and open the next one."""
    return (
        (state, BLANK, 72),
        (state, "T", 73),
        (state, "M", 79),
        (state, "R", 82),
        (state, ";", 1),
    )


CIF_TRANSITIONS: Tuple[Transition, ...] = (
    # Between commands
    (1, BLANK, 1),
    (1, "P", 2),
    (1, "B", 14),
    (1, "R", 31),
    (1, "W", 40),
    (1, "L", 54),
    (1, "D", 57),
    (1, "C", 70),
    (1, DIGIT, 88),
    (1, "(", 89),
    (1, "E", 91),
    # Polygon: P path ;
    (2, BLANK, 2),
    (2, "-", 3),
    (2, DIGIT, 4),
    (3, DIGIT, 4),
    (4, DIGIT, 4),
    (4, SEP, 5),
    (5, SEP, 5),
    (5, "-", 6),
    (5, DIGIT, 7),
    (6, DIGIT, 7),
    (7, DIGIT, 7),
    (7, SEP, 8),
    (7, ";", 1),
    (8, SEP, 8),
    (8, "-", 9),
    (8, DIGIT, 10),
    (8, ";", 1),
    (9, DIGIT, 10),
    (10, DIGIT, 10),
    (10, SEP, 11),
    (11, SEP, 11),
    (11, "-", 12),
    (11, DIGIT, 13),
    (12, DIGIT, 13),
    (13, SEP, 8),  # next number starts a new point
    (13, DIGIT, 13),
    (13, ";", 1),
    # Box: B width height x y [rx ry] ;
    (14, BLANK, 14),
    (14, DIGIT, 15),
    (15, DIGIT, 15),
    (15, SEP, 16),
    (16, SEP, 16),
    (16, DIGIT, 17),
    (17, DIGIT, 17),
    (17, SEP, 18),
    (18, SEP, 18),
    (18, "-", 19),
    (18, DIGIT, 20),
    (19, DIGIT, 20),
    (20, DIGIT, 20),
    (20, SEP, 21),
    (21, SEP, 21),
    (21, "-", 22),
    (21, DIGIT, 23),
    (22, DIGIT, 23),
    (23, DIGIT, 23),
    (23, SEP, 24),
    (23, ";", 1),
    (24, SEP, 24),
    (24, "-", 25),
    (24, DIGIT, 26),
    (24, ";", 1),
    (25, DIGIT, 26),
    (26, DIGIT, 26),
    (26, SEP, 27),
    (27, SEP, 27),
    (27, "-", 28),
    (27, DIGIT, 29),
    (28, DIGIT, 29),
    (29, DIGIT, 29),
    (29, SEP, 30),
    (29, ";", 1),
    (30, SEP, 30),
    (30, ";", 1),
    # Round flash: R diameter x y ;
    (31, BLANK, 31),
    (31, DIGIT, 32),
    (32, DIGIT, 32),
    (32, SEP, 33),
    (33, SEP, 33),
    (33, "-", 34),
    (33, DIGIT, 35),
    (34, DIGIT, 35),
    (35, DIGIT, 35),
    (35, SEP, 36),
    (36, SEP, 36),
    (36, "-", 37),
    (36, DIGIT, 38),
    (37, DIGIT, 38),
    (38, DIGIT, 38),
    (38, SEP, 39),
    (38, ";", 1),
    (39, SEP, 39),
    (39, ";", 1),
    # Wire: W width path ;
    (40, BLANK, 40),
    (40, DIGIT, 41),
    (41, DIGIT, 41),
    (41, SEP, 42),
    (42, SEP, 42),
    (42, "-", 43),
    (42, DIGIT, 44),
    (43, DIGIT, 44),
    (44, DIGIT, 44),
    (44, SEP, 45),
    (45, SEP, 45),
    (45, "-", 46),
    (45, DIGIT, 47),
    (46, DIGIT, 47),
    (47, DIGIT, 47),
    (47, SEP, 48),
    (47, ";", 1),
    (48, SEP, 48),
    (48, "-", 49),
    (48, DIGIT, 50),
    (48, ";", 1),
    (49, DIGIT, 50),
    (50, DIGIT, 50),
    (50, SEP, 51),
    (51, SEP, 51),
    (51, "-", 52),
    (51, DIGIT, 53),
    (52, DIGIT, 53),
    (53, DIGIT, 53),
    (53, SEP, 48),
    (53, ";", 1),
    # Layer: L name ;
    (54, BLANK, 54),
    (54, LAYER_NAME, 55),
    (55, LAYER_NAME, 55),
    (55, BLANK, 56),
    (55, ";", 1),
    (56, BLANK, 56),
    (56, ";", 1),
    # Definition: D S id [a b] ; | D F ; | D D id ;
    (57, BLANK, 57),
    (57, "S", 58),
    (57, "F", 65),
    (57, "D", 67),
    (58, BLANK, 58),
    (58, DIGIT, 59),
    (59, DIGIT, 59),
    (59, SEP, 60),
    (59, ";", 1),
    (60, SEP, 60),
    (60, DIGIT, 61),
    (60, ";", 1),
    (61, DIGIT, 61),
    (61, SEP, 62),
    (62, SEP, 62),
    (62, DIGIT, 63),
    (63, DIGIT, 63),
    (63, SEP, 64),
    (63, ";", 1),
    (64, SEP, 64),
    (64, ";", 1),
    (65, BLANK, 66),
    (65, ";", 1),
    (66, BLANK, 66),
    (66, ";", 1),
    (67, BLANK, 67),
    (67, DIGIT, 68),
    (68, DIGIT, 68),
    (68, SEP, 69),
    (68, ";", 1),
    (69, SEP, 69),
    (69, ";", 1),
    # Call: C id {T point | M X | M Y | R point} ;
    (70, BLANK, 70),
    (70, DIGIT, 71),
    (71, DIGIT, 71),
    *_call_follow(71),
    *_call_follow(72),
    (73, SEP, 73),
    (73, "-", 74),
    (73, DIGIT, 75),
    (74, DIGIT, 75),
    (75, DIGIT, 75),
    (75, SEP, 76),
    (76, SEP, 76),
    (76, "-", 77),
    (76, DIGIT, 78),
    (77, DIGIT, 78),
    (78, DIGIT, 78),
    *_call_follow(78),
    (79, BLANK, 79),
    (79, "X", 80),
    (79, "Y", 81),
    *_call_follow(80),
    *_call_follow(81),
    (82, SEP, 82),
    (82, "-", 83),
    (82, DIGIT, 84),
    (83, DIGIT, 84),
    (84, DIGIT, 84),
    (84, SEP, 85),
    (85, SEP, 85),
    (85, "-", 86),
    (85, DIGIT, 87),
    (86, DIGIT, 87),
    (87, DIGIT, 87),
    *_call_follow(87),
    # User extension: digit userText ;
    (88, USER, 88),
    (88, ";", 1),
    # Comment: ( text ) ;
    (89, COMMENT, 89),
    (89, ")", 90),
    (90, BLANK, 90),
    (90, ";", 1),
    # End: E {blank}
    (91, BLANK, 92),
    (92, BLANK, 92),
)


@dataclass(frozen=True)
class CIFGrammar:
    """A frozen state machine plus the states that accept a whole file."""

    machine: StateMachine
    accepting_states: FrozenSet[int] = ACCEPTING_STATES
    initial_state: int = INITIAL_STATE

    def is_accepting(self, state: int) -> bool:
        return state in self.accepting_states


def build_cif_grammar(
    state_count: int = STATE_COUNT,
    transitions: Tuple[Transition, ...] = CIF_TRANSITIONS,
) -> CIFGrammar:
    """
    Build and freeze the CIF state machine.

    Args:
        state_count: Number of states to allocate; must cover every referenced state.
        transitions: (state, chars, next_state) triples, applied in order.

    Returns:
        CIFGrammar wrapping the frozen machine.

    Raises:
        ConfigurationError: If a transition references a state beyond state_count
            or uses an unknown character set.
    """
    machine = StateMachine(state_count)
    for state, chars, next_state in transitions:
        machine.add(state, chars, next_state)
    return CIFGrammar(machine=machine.freeze())


@lru_cache(maxsize=1)
def default_grammar() -> CIFGrammar:
    """Shared read-only grammar instance."""
    return build_cif_grammar()


__all__ = [
    "ACCEPTING_STATES",
    "CIF_TRANSITIONS",
    "CIFGrammar",
    "STATE_COUNT",
    "Transition",
    "build_cif_grammar",
    "default_grammar",
]
