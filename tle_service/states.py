"""
Parser states and the static transition table for the recovery state machine.
"""

from enum import Enum
from typing import Dict, FrozenSet


class ParserState(str, Enum):
    """Parser states for the state machine"""

    INITIAL = "INITIAL"
    DETECTING_FORMAT = "DETECTING_FORMAT"
    PARSING_NAME = "PARSING_NAME"
    PARSING_LINE1 = "PARSING_LINE1"
    PARSING_LINE2 = "PARSING_LINE2"
    VALIDATING = "VALIDATING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


TERMINAL_STATES: FrozenSet[ParserState] = frozenset({ParserState.COMPLETED, ParserState.ERROR})

# Every legal transition; ERROR is reachable from every non-terminal state
TRANSITIONS: Dict[ParserState, FrozenSet[ParserState]] = {
    ParserState.INITIAL: frozenset({ParserState.DETECTING_FORMAT, ParserState.ERROR}),
    ParserState.DETECTING_FORMAT: frozenset({
        ParserState.PARSING_NAME, ParserState.PARSING_LINE1, ParserState.ERROR,
    }),
    ParserState.PARSING_NAME: frozenset({ParserState.PARSING_LINE1, ParserState.ERROR}),
    ParserState.PARSING_LINE1: frozenset({ParserState.PARSING_LINE2, ParserState.ERROR}),
    ParserState.PARSING_LINE2: frozenset({ParserState.VALIDATING, ParserState.ERROR}),
    ParserState.VALIDATING: frozenset({ParserState.COMPLETED, ParserState.ERROR}),
    ParserState.COMPLETED: frozenset(),
    ParserState.ERROR: frozenset(),
}


def is_legal_transition(current: ParserState, target: ParserState) -> bool:
    return target in TRANSITIONS[current]
