"""
Standard TLE Parser

Strict and permissive parsing on top of the shared state-machine pipeline.

- strict: any error-severity issue raises TLEValidationError carrying the
  full ordered issue list; warnings are attached to the returned record.
- permissive: only structural problems raise; every other error is
  downgraded to a warning and the record is always returned.

Usage:
    from tle_service import parse_tle

    record = parse_tle(text)
    record = parse_tle(text, {"mode": "permissive"})
"""

from typing import Any

from tle_service.errors import STRUCTURAL_CODES, TLEFormatError, TLEValidationError
from tle_service.logging_config import get_logger
from tle_service.models import ParsedTLE, ParseMode, ParserOptions, ValidationReport
from tle_service.state_machine import run_pipeline

logger = get_logger(__name__)


class StandardParser:
    """
    Single-record parser for strict and permissive modes.

    Args:
        options: ParserOptions, a mapping of option values, or None for the
            configured defaults
    """

    def __init__(self, options: Any = None):
        self.options = ParserOptions.coerce(options)
        if self.options.mode is ParseMode.RECOVER:
            raise ValueError(
                "StandardParser supports 'strict' and 'permissive' modes; "
                "use RecoveryStateMachineParser for 'recover'"
            )

    def parse(self, text: str) -> ParsedTLE:
        """
        Parse one TLE record.

        Args:
            text: Two or three line TLE text

        Returns:
            Decoded record

        Raises:
            TypeError: text is not a string
            TLEFormatError: empty input or a structural problem
            TLEValidationError: any other error in strict mode
        """
        if not isinstance(text, str):
            raise TypeError(f"TLE data must be a string, got {type(text).__name__}")

        result = run_pipeline(text, self.options)
        if not result.success:
            structural = any(issue.code in STRUCTURAL_CODES for issue in result.errors)
            error_class = TLEFormatError if structural else TLEValidationError
            logger.debug("parse_failed", mode=self.options.mode.value,
                         codes=[issue.code.value for issue in result.errors])
            raise error_class.from_issues(result.errors, result.warnings)

        return result.data

    def validate(self, text: Any) -> ValidationReport:
        """Validate a record without raising; non-string input is reported as an issue."""
        result = run_pipeline(text, self.options)
        return ValidationReport(
            is_valid=result.success,
            errors=result.errors,
            warnings=result.warnings,
        )


def parse_tle(text: str, options: Any = None) -> ParsedTLE:
    """Parse one TLE record in strict or permissive mode."""
    return StandardParser(options).parse(text)


def validate_tle(text: Any, options: Any = None) -> ValidationReport:
    """Validate one TLE record and report every issue found."""
    return StandardParser(options).validate(text)
