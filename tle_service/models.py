"""
Data models for decoded TLE records, parser options and parse results.

All models are frozen pydantic models: a record or result is built once per
parse and never mutated afterwards.
"""

from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from tle_service.config import DEFAULT_STALE_AFTER_DAYS, EPOCH_YEAR_PIVOT, config
from tle_service.errors import ValidationIssue
from tle_service.states import ParserState


class ParseMode(str, Enum):
    """Tolerance policy applied to validation issues"""

    STRICT = "strict"
    PERMISSIVE = "permissive"
    RECOVER = "recover"


class RecoveryKind(str, Enum):
    """Recovery action kinds"""

    CONTINUE = "continue"
    SKIP_FIELD = "skip_field"
    USE_DEFAULT = "use_default"
    ATTEMPT_FIX = "attempt_fix"
    ABORT = "abort"


def full_epoch_year(two_digit_year: int) -> int:
    """Expand a two-digit epoch year (57-99 -> 19xx, 00-56 -> 20xx)."""
    if two_digit_year < EPOCH_YEAR_PIVOT:
        return 2000 + two_digit_year
    return 1900 + two_digit_year


def epoch_to_datetime(two_digit_year: int, days: float) -> datetime:
    """Convert epoch year and fractional day-of-year to a UTC datetime."""
    dt = datetime(full_epoch_year(two_digit_year), 1, 1, tzinfo=timezone.utc)
    # Day 1.0 is midnight on January 1st
    return dt + timedelta(days=days - 1.0)


class RecoveryAction(BaseModel):
    """A recovery step taken by the state machine parser"""

    model_config = ConfigDict(frozen=True)

    kind: RecoveryKind
    description: str
    state: ParserState
    field: Optional[str] = None


class ParserOptions(BaseModel):
    """
    Options shared by every parsing entry point.

    `mode` selects the policy: strict raises on any error, permissive
    downgrades non-structural errors to warnings, recover never raises and
    reports a ParseResult with a recovery trail.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: ParseMode = Field(default_factory=lambda: ParseMode(config.PARSE_MODE))
    max_recovery_attempts: int = Field(
        default_factory=lambda: config.MAX_RECOVERY_ATTEMPTS, ge=0
    )
    include_partial_results: bool = True
    include_warnings: bool = True
    include_comments: bool = True
    advisory_checks: bool = False
    reference_time: Optional[datetime] = None
    stale_after_days: float = Field(default=DEFAULT_STALE_AFTER_DAYS, gt=0)

    @classmethod
    def coerce(cls, options: Any) -> "ParserOptions":
        """
        Accept None, a ParserOptions instance or a plain mapping.

        Raises:
            TypeError: options is some other type
            pydantic.ValidationError: a mapping holds an invalid value
        """
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, Mapping):
            return cls.model_validate(dict(options))
        raise TypeError(
            f"options must be a ParserOptions instance or a mapping, got {type(options).__name__}"
        )


class ParsedTLE(BaseModel):
    """
    Decoded TLE record.

    Every field is optional so that a partially recovered record can be
    represented; a record returned by a successful parse has all required
    fields populated.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None

    # Line 1
    satellite_number: Optional[int] = None
    classification: Optional[str] = None
    intl_designator_year: Optional[int] = None
    intl_designator_launch_number: Optional[int] = None
    intl_designator_piece: Optional[str] = None
    epoch_year: Optional[int] = None
    epoch_day: Optional[float] = None
    first_derivative: Optional[float] = None
    second_derivative: Optional[float] = None
    bstar: Optional[float] = None
    ephemeris_type: Optional[int] = None
    element_set_number: Optional[int] = None
    checksum_1: Optional[int] = None

    # Line 2
    inclination: Optional[float] = None
    right_ascension: Optional[float] = None
    eccentricity: Optional[float] = None
    argument_of_perigee: Optional[float] = None
    mean_anomaly: Optional[float] = None
    mean_motion: Optional[float] = None
    revolution_number: Optional[int] = None
    checksum_2: Optional[int] = None

    line1: Optional[str] = None
    line2: Optional[str] = None

    warnings: Optional[Tuple[ValidationIssue, ...]] = None
    comments: Optional[Tuple[str, ...]] = None
    recovery_trail: Optional[Tuple[RecoveryAction, ...]] = None

    @property
    def epoch(self) -> Optional[datetime]:
        """Epoch as a UTC datetime, or None when the epoch fields are missing."""
        if self.epoch_year is None or self.epoch_day is None:
            return None
        return epoch_to_datetime(self.epoch_year, self.epoch_day)

    @property
    def international_designator(self) -> Optional[str]:
        """Designator in the compact 'YYNNNP' form used on line 1, e.g. '98067A'."""
        if self.intl_designator_year is None or self.intl_designator_launch_number is None:
            return None
        piece = self.intl_designator_piece or ""
        return f"{self.intl_designator_year:02d}{self.intl_designator_launch_number:03d}{piece}"


class ContextSummary(BaseModel):
    """Summary of parser context reported with every ParseResult"""

    model_config = ConfigDict(frozen=True)

    line_count: int = 0
    has_name: bool = False
    recovery_attempts: int = 0


class ParseResult(BaseModel):
    """Outcome of a state machine parse"""

    model_config = ConfigDict(frozen=True)

    success: bool
    state: ParserState
    data: Optional[ParsedTLE] = None
    errors: Tuple[ValidationIssue, ...] = ()
    warnings: Tuple[ValidationIssue, ...] = ()
    recovery_actions: Tuple[RecoveryAction, ...] = ()
    context: ContextSummary = ContextSummary()
    visited_states: Tuple[ParserState, ...] = ()


class ValidationReport(BaseModel):
    """Validation outcome without a decoded record"""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    errors: Tuple[ValidationIssue, ...] = ()
    warnings: Tuple[ValidationIssue, ...] = ()
