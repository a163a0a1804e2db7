"""
TLE Line Checksum

Modulo-10 checksum used by NORAD element sets: every digit in columns 1-68
adds its value, every minus sign adds 1, everything else (letters, spaces,
periods, plus signs) adds nothing. Column 69 holds the result.

The stated digit is never trusted; it is always compared against a
recomputed value, and only on lines whose columns can be trusted
(exactly 69 characters).
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from tle_service.config import CHECKSUM_COLUMN, TLE_LINE_LENGTH
from tle_service.errors import ErrorCode, Severity, ValidationIssue


class ChecksumResult(BaseModel):
    """Outcome of validating one line's checksum"""

    model_config = ConfigDict(frozen=True)

    valid: bool
    expected: Optional[int] = None
    actual: Optional[int] = None
    issue: Optional[ValidationIssue] = None


def compute_checksum(line: str) -> int:
    """
    Calculate the checksum digit for a TLE line.

    Args:
        line: TLE data line; only columns 1-68 are summed

    Returns:
        Checksum digit (0-9)
    """
    checksum = 0
    for char in line[:CHECKSUM_COLUMN - 1]:
        if "0" <= char <= "9":
            checksum += int(char)
        elif char == "-":
            checksum += 1
    return checksum % 10


def validate_checksum(line: str, line_number: Optional[int] = None) -> ChecksumResult:
    """
    Validate a line's stated checksum against the recomputed one.

    Args:
        line: TLE data line
        line_number: 1 or 2, attached to any issue for reporting

    Returns:
        ChecksumResult; `issue` is set whenever `valid` is False
    """
    prefix = f"Line {line_number}: " if line_number else ""

    if len(line) != TLE_LINE_LENGTH:
        return ChecksumResult(
            valid=False,
            issue=ValidationIssue(
                code=ErrorCode.INVALID_LINE_LENGTH,
                message=f"{prefix}Line length must be {TLE_LINE_LENGTH} characters (got {len(line)})",
                severity=Severity.ERROR,
                field="line_length",
                expected=TLE_LINE_LENGTH,
                actual=len(line),
                line=line_number,
            ),
        )

    expected = compute_checksum(line)
    stated = line[CHECKSUM_COLUMN - 1]

    if not ("0" <= stated <= "9"):
        return ChecksumResult(
            valid=False,
            expected=expected,
            issue=ValidationIssue(
                code=ErrorCode.INVALID_CHECKSUM_CHARACTER,
                message=f"{prefix}Checksum position must contain a digit (got '{stated}')",
                severity=Severity.ERROR,
                field=f"checksum_{line_number}" if line_number else "checksum",
                expected="0-9",
                actual=stated,
                line=line_number,
            ),
        )

    actual = int(stated)
    if actual == expected:
        return ChecksumResult(valid=True, expected=expected, actual=actual)

    return ChecksumResult(
        valid=False,
        expected=expected,
        actual=actual,
        issue=ValidationIssue(
            code=ErrorCode.CHECKSUM_MISMATCH,
            message=f"{prefix}Checksum mismatch: expected {expected}, got {actual}",
            severity=Severity.ERROR,
            field=f"checksum_{line_number}" if line_number else "checksum",
            expected=expected,
            actual=actual,
            line=line_number,
        ),
    )
