"""
Severity Escalation

One table decides, per error code and parse mode, what happens to an issue:

    THROW    the issue fails the parse
    WARN     a copy downgraded to warning severity is reported instead
    RECOVER  the issue is recorded as an error and a recovery action is taken

Critical issues always throw and warning-severity issues always warn,
whatever the table says. A thrown structural or critical issue halts the
pipeline at once since column positions can no longer be trusted; any other
thrown issue is collected and fails the parse once validation finishes.
"""

from enum import Enum
from typing import Dict, Tuple

from tle_service.errors import STRUCTURAL_CODES, WARNING_CODES, ErrorCode, Severity, ValidationIssue
from tle_service.models import ParseMode


class Disposition(str, Enum):
    """What the pipeline does with an issue"""

    THROW = "throw"
    WARN = "warn"
    RECOVER = "recover"


_T, _W, _R = Disposition.THROW, Disposition.WARN, Disposition.RECOVER

_STRUCTURAL = (_T, _T, _R)
_RECOVERABLE = (_T, _W, _R)
_ADVISORY = (_W, _W, _W)

# code -> (strict, permissive, recover)
ESCALATION_TABLE: Dict[ErrorCode, Tuple[Disposition, Disposition, Disposition]] = {
    ErrorCode.INVALID_INPUT_TYPE: _STRUCTURAL,
    ErrorCode.EMPTY_INPUT: _STRUCTURAL,
    ErrorCode.INVALID_LINE_COUNT: _STRUCTURAL,
    ErrorCode.INVALID_LINE_LENGTH: _STRUCTURAL,
    ErrorCode.INVALID_LINE_NUMBER: _STRUCTURAL,
    ErrorCode.CHECKSUM_MISMATCH: _RECOVERABLE,
    ErrorCode.INVALID_CHECKSUM_CHARACTER: _RECOVERABLE,
    ErrorCode.SATELLITE_NUMBER_MISMATCH: _RECOVERABLE,
    ErrorCode.INVALID_SATELLITE_NUMBER: _RECOVERABLE,
    ErrorCode.INVALID_CLASSIFICATION: _RECOVERABLE,
    ErrorCode.VALUE_OUT_OF_RANGE: _RECOVERABLE,
    ErrorCode.INVALID_NUMBER_FORMAT: _RECOVERABLE,
}
ESCALATION_TABLE.update({code: _ADVISORY for code in WARNING_CODES})

_MODE_INDEX = {ParseMode.STRICT: 0, ParseMode.PERMISSIVE: 1, ParseMode.RECOVER: 2}


def resolve_disposition(issue: ValidationIssue, mode: ParseMode) -> Disposition:
    """
    Decide how an issue is handled under a parse mode.

    Args:
        issue: Issue reported by a rule
        mode: Active parse mode

    Returns:
        Disposition for the issue
    """
    if issue.severity is Severity.CRITICAL:
        return Disposition.THROW
    if issue.severity is Severity.WARNING:
        return Disposition.WARN
    return ESCALATION_TABLE[issue.code][_MODE_INDEX[ParseMode(mode)]]


def halts_immediately(issue: ValidationIssue, disposition: Disposition) -> bool:
    """True when a thrown issue must stop the pipeline before validation completes."""
    if disposition is not Disposition.THROW:
        return False
    return issue.severity is Severity.CRITICAL or issue.code in STRUCTURAL_CODES
