"""
Error Taxonomy

Flat error-code enumeration, severity levels and the issue model shared by
every stage of TLE decoding and validation.

The same code may be reported with different severities depending on
context (mean motion out of range is a warning, every other range violation
is an error), so severity travels on the issue rather than on the code.
"""

from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict


class Severity(str, Enum):
    """Issue severity levels"""

    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCode(str, Enum):
    """Error codes for structured TLE issue reporting"""

    # Input
    INVALID_INPUT_TYPE = "INVALID_INPUT_TYPE"
    EMPTY_INPUT = "EMPTY_INPUT"

    # Structure
    INVALID_LINE_COUNT = "INVALID_LINE_COUNT"
    INVALID_LINE_LENGTH = "INVALID_LINE_LENGTH"
    INVALID_LINE_NUMBER = "INVALID_LINE_NUMBER"

    # Checksum
    CHECKSUM_MISMATCH = "CHECKSUM_MISMATCH"
    INVALID_CHECKSUM_CHARACTER = "INVALID_CHECKSUM_CHARACTER"

    # Fields
    SATELLITE_NUMBER_MISMATCH = "SATELLITE_NUMBER_MISMATCH"
    INVALID_SATELLITE_NUMBER = "INVALID_SATELLITE_NUMBER"
    INVALID_CLASSIFICATION = "INVALID_CLASSIFICATION"
    VALUE_OUT_OF_RANGE = "VALUE_OUT_OF_RANGE"
    INVALID_NUMBER_FORMAT = "INVALID_NUMBER_FORMAT"
    SATELLITE_NAME_TOO_LONG = "SATELLITE_NAME_TOO_LONG"
    SATELLITE_NAME_FORMAT_WARNING = "SATELLITE_NAME_FORMAT_WARNING"

    # Advisory warnings: unusual but potentially valid values
    CLASSIFIED_DATA_WARNING = "CLASSIFIED_DATA_WARNING"
    STALE_TLE_WARNING = "STALE_TLE_WARNING"
    HIGH_ECCENTRICITY_WARNING = "HIGH_ECCENTRICITY_WARNING"
    LOW_MEAN_MOTION_WARNING = "LOW_MEAN_MOTION_WARNING"
    DEPRECATED_EPOCH_YEAR_WARNING = "DEPRECATED_EPOCH_YEAR_WARNING"
    REVOLUTION_NUMBER_ROLLOVER_WARNING = "REVOLUTION_NUMBER_ROLLOVER_WARNING"
    NEAR_ZERO_DRAG_WARNING = "NEAR_ZERO_DRAG_WARNING"
    NON_STANDARD_EPHEMERIS_WARNING = "NON_STANDARD_EPHEMERIS_WARNING"
    NEGATIVE_DECAY_WARNING = "NEGATIVE_DECAY_WARNING"


ERROR_DESCRIPTIONS: Dict[ErrorCode, str] = {
    ErrorCode.INVALID_INPUT_TYPE: "Input data must be a string",
    ErrorCode.EMPTY_INPUT: "Input string is empty or contains only whitespace",
    ErrorCode.INVALID_LINE_COUNT: "TLE must contain exactly 2 or 3 lines",
    ErrorCode.INVALID_LINE_LENGTH: "TLE line must be exactly 69 characters",
    ErrorCode.INVALID_LINE_NUMBER: "Line number must be 1 or 2",
    ErrorCode.CHECKSUM_MISMATCH: "Calculated checksum does not match",
    ErrorCode.INVALID_CHECKSUM_CHARACTER: "Checksum must be a digit 0-9",
    ErrorCode.SATELLITE_NUMBER_MISMATCH: "Satellite numbers on line 1 and line 2 must match",
    ErrorCode.INVALID_SATELLITE_NUMBER: "Satellite catalog number is invalid",
    ErrorCode.INVALID_CLASSIFICATION: "Classification must be U, C, or S",
    ErrorCode.VALUE_OUT_OF_RANGE: "Field value is outside valid range",
    ErrorCode.INVALID_NUMBER_FORMAT: "Field contains invalid numeric format",
    ErrorCode.SATELLITE_NAME_TOO_LONG: "Satellite name exceeds maximum length",
    ErrorCode.SATELLITE_NAME_FORMAT_WARNING: "Satellite name contains unusual characters",
    ErrorCode.CLASSIFIED_DATA_WARNING: "TLE contains classified satellite data",
    ErrorCode.STALE_TLE_WARNING: "TLE epoch is significantly old",
    ErrorCode.HIGH_ECCENTRICITY_WARNING: "Eccentricity is unusually high",
    ErrorCode.LOW_MEAN_MOTION_WARNING: "Mean motion is unusually low",
    ErrorCode.DEPRECATED_EPOCH_YEAR_WARNING: "Epoch year is in the far past",
    ErrorCode.REVOLUTION_NUMBER_ROLLOVER_WARNING: "Revolution number may have rolled over",
    ErrorCode.NEAR_ZERO_DRAG_WARNING: "Drag coefficient is near zero",
    ErrorCode.NON_STANDARD_EPHEMERIS_WARNING: "Ephemeris type is non-standard",
    ErrorCode.NEGATIVE_DECAY_WARNING: "Mean motion decay is negative",
}

WARNING_CODES = frozenset({
    ErrorCode.SATELLITE_NAME_TOO_LONG,
    ErrorCode.SATELLITE_NAME_FORMAT_WARNING,
    ErrorCode.CLASSIFIED_DATA_WARNING,
    ErrorCode.STALE_TLE_WARNING,
    ErrorCode.HIGH_ECCENTRICITY_WARNING,
    ErrorCode.LOW_MEAN_MOTION_WARNING,
    ErrorCode.DEPRECATED_EPOCH_YEAR_WARNING,
    ErrorCode.REVOLUTION_NUMBER_ROLLOVER_WARNING,
    ErrorCode.NEAR_ZERO_DRAG_WARNING,
    ErrorCode.NON_STANDARD_EPHEMERIS_WARNING,
    ErrorCode.NEGATIVE_DECAY_WARNING,
})

# Codes whose failure means column positions cannot be trusted
STRUCTURAL_CODES = frozenset({
    ErrorCode.INVALID_INPUT_TYPE,
    ErrorCode.EMPTY_INPUT,
    ErrorCode.INVALID_LINE_COUNT,
    ErrorCode.INVALID_LINE_LENGTH,
    ErrorCode.INVALID_LINE_NUMBER,
})


def describe(code: Any) -> str:
    """Return a human-readable description of an error code."""
    try:
        return ERROR_DESCRIPTIONS[ErrorCode(code)]
    except ValueError:
        return "Unknown error code"


def is_warning_code(code: Any) -> bool:
    """Check whether a code only ever represents a warning."""
    try:
        return ErrorCode(code) in WARNING_CODES
    except ValueError:
        return False


class ValidationIssue(BaseModel):
    """A single problem found while decoding or validating a record"""

    model_config = ConfigDict(frozen=True)

    code: ErrorCode
    message: str
    severity: Severity
    field: Optional[str] = None
    expected: Any = None
    actual: Any = None
    line: Optional[int] = None

    def as_warning(self) -> "ValidationIssue":
        """Copy of this issue downgraded to warning severity."""
        if self.severity is Severity.WARNING:
            return self
        return self.model_copy(update={"severity": Severity.WARNING})


class TLEValidationError(ValueError):
    """
    Raised when a TLE fails validation.

    Carries the complete ordered issue lists so callers never have to parse
    the message text.
    """

    def __init__(self, message: str, errors: Iterable[ValidationIssue],
                 warnings: Iterable[ValidationIssue] = ()):
        super().__init__(message)
        self.errors: Tuple[ValidationIssue, ...] = tuple(errors)
        self.warnings: Tuple[ValidationIssue, ...] = tuple(warnings)

    @property
    def codes(self) -> List[ErrorCode]:
        """Error codes in the order they were reported."""
        return [issue.code for issue in self.errors]

    @classmethod
    def from_issues(cls, errors: Iterable[ValidationIssue],
                    warnings: Iterable[ValidationIssue] = ()) -> "TLEValidationError":
        errors = tuple(errors)
        message = "TLE validation failed:\n" + "\n".join(e.message for e in errors)
        return cls(message, errors, warnings)


class TLEFormatError(TLEValidationError):
    """Raised for structural problems: empty input, line count, length or marker."""
