"""
Validation Rule Set

Each tier is a pure function returning the issues it finds, in a fixed
order. The parser appends tier results to a single growing list in the
order structural, name, checksum, cross-field, format/range, advisory, so
the final issue list is reproducible without sorting.

Decoded fields are passed as a mapping from field name to value. A field
that is absent from the mapping was not wholly present on its line and is
not checked; a value of None means the field was blank, INVALID means its
text could not be decoded.
"""

from datetime import datetime, timezone
from typing import Any, List, Mapping, NamedTuple, Optional

from tle_service.checksum import validate_checksum
from tle_service.config import (
    HIGH_ECCENTRICITY_THRESHOLD,
    LOW_MEAN_MOTION_THRESHOLD,
    MAX_NAME_LENGTH,
    REVOLUTION_ROLLOVER_THRESHOLD,
    TLE_LINE_LENGTH,
    VALID_CLASSIFICATIONS,
)
from tle_service.errors import ErrorCode, Severity, ValidationIssue
from tle_service.fields import FIELD_TABLE, FieldEncoding, is_invalid
from tle_service.models import epoch_to_datetime, full_epoch_year


class RangeRule(NamedTuple):
    field: str
    label: str
    minimum: float
    maximum: float
    severity: Severity


RANGE_RULES = (
    RangeRule("inclination", "Inclination", 0.0, 180.0, Severity.ERROR),
    RangeRule("right_ascension", "Right ascension", 0.0, 360.0, Severity.ERROR),
    RangeRule("eccentricity", "Eccentricity", 0.0, 1.0, Severity.ERROR),
    RangeRule("argument_of_perigee", "Argument of perigee", 0.0, 360.0, Severity.ERROR),
    RangeRule("mean_anomaly", "Mean anomaly", 0.0, 360.0, Severity.ERROR),
    RangeRule("epoch_year", "Epoch year", 0, 99, Severity.ERROR),
    RangeRule("epoch_day", "Epoch day", 1.0, 366.99999999, Severity.ERROR),
    # Rare but not impossible, so only a warning
    RangeRule("mean_motion", "Mean motion", 0.0, 20.0, Severity.WARNING),
)

_RANGED_FIELDS = frozenset(rule.field for rule in RANGE_RULES)

# Fields validated by the structural and cross-field tiers instead
_NOT_FORMAT_CHECKED = frozenset({
    "line_number_1", "line_number_2",
    "satellite_number_1", "satellite_number_2",
    "checksum_1", "checksum_2",
})

# Numeric fields without a range rule, in column order
FORMAT_CHECKED_FIELDS = tuple(
    spec for spec in FIELD_TABLE
    if spec.encoding is not FieldEncoding.PLAIN_STRING
    and spec.name not in _RANGED_FIELDS
    and spec.name not in _NOT_FORMAT_CHECKED
)


def check_line_count(count: int) -> List[ValidationIssue]:
    """Structural tier: a record has 2 or 3 non-comment lines."""
    if count < 2:
        return [ValidationIssue(
            code=ErrorCode.INVALID_LINE_COUNT,
            message=f"TLE must contain at least 2 lines (got {count})",
            severity=Severity.CRITICAL,
            field="line_count",
            expected="2 or 3",
            actual=count,
        )]
    if count > 3:
        return [ValidationIssue(
            code=ErrorCode.INVALID_LINE_COUNT,
            message=f"TLE must contain 2 or 3 lines (got {count})",
            severity=Severity.ERROR,
            field="line_count",
            expected="2 or 3",
            actual=count,
        )]
    return []


def check_line_structure(line: str, line_number: int) -> List[ValidationIssue]:
    """
    Structural tier for one data line: readable marker, exact length,
    expected line-number marker in column 1.
    """
    if not line:
        return [ValidationIssue(
            code=ErrorCode.INVALID_LINE_LENGTH,
            message=f"Line {line_number}: line is too short to read its line number",
            severity=Severity.CRITICAL,
            field="line_length",
            expected=TLE_LINE_LENGTH,
            actual=0,
            line=line_number,
        )]

    issues = []
    if len(line) != TLE_LINE_LENGTH:
        issues.append(ValidationIssue(
            code=ErrorCode.INVALID_LINE_LENGTH,
            message=f"Line {line_number}: line must be {TLE_LINE_LENGTH} characters (got {len(line)})",
            severity=Severity.ERROR,
            field="line_length",
            expected=TLE_LINE_LENGTH,
            actual=len(line),
            line=line_number,
        ))

    if line[0] != str(line_number):
        issues.append(ValidationIssue(
            code=ErrorCode.INVALID_LINE_NUMBER,
            message=f"Line {line_number}: must start with '{line_number}' (got '{line[0]}')",
            severity=Severity.ERROR,
            field=f"line_number_{line_number}",
            expected=str(line_number),
            actual=line[0],
            line=line_number,
        ))
    return issues


def check_name(name: str) -> List[ValidationIssue]:
    """Name tier: advisory checks on the optional name line."""
    issues = []
    if name[:1] in ("1", "2"):
        issues.append(ValidationIssue(
            code=ErrorCode.SATELLITE_NAME_FORMAT_WARNING,
            message="Name line starts with '1' or '2' and might be a data line",
            severity=Severity.WARNING,
            field="name",
            actual=name,
        ))
    if len(name) > MAX_NAME_LENGTH:
        issues.append(ValidationIssue(
            code=ErrorCode.SATELLITE_NAME_TOO_LONG,
            message=f"Satellite name should be {MAX_NAME_LENGTH} characters or less (got {len(name)})",
            severity=Severity.WARNING,
            field="name",
            expected=MAX_NAME_LENGTH,
            actual=len(name),
        ))
    return issues


def check_checksums(line1: str, line2: str) -> List[ValidationIssue]:
    """Checksum tier, line 1 then line 2. Lines of the wrong length are skipped."""
    issues = []
    for line_number, line in ((1, line1), (2, line2)):
        if len(line) != TLE_LINE_LENGTH:
            continue
        result = validate_checksum(line, line_number)
        if result.issue is not None:
            issues.append(result.issue)
    return issues


def usable_satellite_number(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def check_satellite_numbers(fields: Mapping[str, Any]) -> List[ValidationIssue]:
    """Cross-field tier: catalog numbers must be numeric and equal."""
    issues = []
    for line_number in (1, 2):
        name = f"satellite_number_{line_number}"
        if name not in fields:
            continue
        value = fields[name]
        if not usable_satellite_number(value):
            issues.append(ValidationIssue(
                code=ErrorCode.INVALID_SATELLITE_NUMBER,
                message=f"Line {line_number}: satellite number must be a non-negative integer",
                severity=Severity.ERROR,
                field=name,
                actual=None if is_invalid(value) else value,
                line=line_number,
            ))

    number1 = fields.get("satellite_number_1")
    number2 = fields.get("satellite_number_2")
    if usable_satellite_number(number1) and usable_satellite_number(number2) and number1 != number2:
        issues.append(ValidationIssue(
            code=ErrorCode.SATELLITE_NUMBER_MISMATCH,
            message=f"Satellite numbers do not match: line 1 has {number1}, line 2 has {number2}",
            severity=Severity.ERROR,
            field="satellite_number",
            expected=number1,
            actual=number2,
        ))
    return issues


def check_classification(fields: Mapping[str, Any]) -> List[ValidationIssue]:
    """Cross-field tier: classification must be U, C or S."""
    if "classification" not in fields:
        return []
    value = fields["classification"]
    if value in VALID_CLASSIFICATIONS:
        return []
    return [ValidationIssue(
        code=ErrorCode.INVALID_CLASSIFICATION,
        message=f"Classification must be one of {', '.join(VALID_CLASSIFICATIONS)} (got {value!r})",
        severity=Severity.ERROR,
        field="classification",
        expected=list(VALID_CLASSIFICATIONS),
        actual=value,
        line=1,
    )]


def _format_issue(field: str, line: int, raw_value: Any) -> ValidationIssue:
    return ValidationIssue(
        code=ErrorCode.INVALID_NUMBER_FORMAT,
        message=f"Line {line}: {field} is not a valid number",
        severity=Severity.ERROR,
        field=field,
        actual=raw_value,
        line=line,
    )


def unreadable(value: Any, optional: bool) -> bool:
    """True when a decoded value cannot be used as a number."""
    return is_invalid(value) or (value is None and not optional)


def check_formats(fields: Mapping[str, Any],
                  raw: Optional[Mapping[str, str]] = None) -> List[ValidationIssue]:
    """Numeric fields without a range rule must decode, in column order."""
    raw = raw or {}
    issues = []
    for spec in FORMAT_CHECKED_FIELDS:
        if spec.name not in fields:
            continue
        if unreadable(fields[spec.name], spec.optional):
            issues.append(_format_issue(spec.name, spec.target_line, raw.get(spec.name)))
    return issues


def check_ranges(fields: Mapping[str, Any],
                 raw: Optional[Mapping[str, str]] = None) -> List[ValidationIssue]:
    """Range rules in their fixed order; unreadable values are format errors."""
    raw = raw or {}
    issues = []
    for rule in RANGE_RULES:
        if rule.field not in fields:
            continue
        value = fields[rule.field]
        line = 1 if rule.field.startswith("epoch") else 2
        if unreadable(value, optional=False):
            issues.append(_format_issue(rule.field, line, raw.get(rule.field)))
            continue
        if not rule.minimum <= value <= rule.maximum:
            issues.append(ValidationIssue(
                code=ErrorCode.VALUE_OUT_OF_RANGE,
                message=f"{rule.label} must be between {rule.minimum} and {rule.maximum} (got {value})",
                severity=rule.severity,
                field=rule.field,
                expected=[rule.minimum, rule.maximum],
                actual=value,
                line=line,
            ))
    return issues


def _usable(value: Any) -> bool:
    return value is not None and not is_invalid(value)


def _advisory(code: ErrorCode, message: str, field: str, actual: Any,
              expected: Any = None) -> ValidationIssue:
    return ValidationIssue(
        code=code,
        message=message,
        severity=Severity.WARNING,
        field=field,
        expected=expected,
        actual=actual,
    )


def check_advisories(fields: Mapping[str, Any],
                     reference_time: Optional[datetime] = None,
                     stale_after_days: float = 30.0) -> List[ValidationIssue]:
    """
    Opt-in warnings about unusual but potentially valid values.

    The staleness check only runs against an explicit reference time so
    that parsing the same text always gives the same result.
    """
    issues = []

    classification = fields.get("classification")
    if classification in ("C", "S"):
        label = "classified" if classification == "C" else "secret"
        issues.append(_advisory(
            ErrorCode.CLASSIFIED_DATA_WARNING,
            f"TLE is marked as {label} ({classification})",
            "classification", classification,
        ))

    epoch_year = fields.get("epoch_year")
    epoch_day = fields.get("epoch_day")
    if _usable(epoch_year) and 0 <= epoch_year <= 99:
        full_year = full_epoch_year(epoch_year)
        if full_year < 2000:
            issues.append(_advisory(
                ErrorCode.DEPRECATED_EPOCH_YEAR_WARNING,
                f"Epoch year {full_year} is in the far past",
                "epoch_year", full_year,
            ))
        if reference_time is not None and _usable(epoch_day) and 1.0 <= epoch_day < 367.0:
            if reference_time.tzinfo is None:
                reference_time = reference_time.replace(tzinfo=timezone.utc)
            age_days = (reference_time - epoch_to_datetime(epoch_year, epoch_day)).total_seconds() / 86400.0
            if age_days > stale_after_days:
                issues.append(_advisory(
                    ErrorCode.STALE_TLE_WARNING,
                    f"TLE epoch is {age_days:.1f} days old",
                    "epoch", round(age_days, 1), expected=stale_after_days,
                ))

    eccentricity = fields.get("eccentricity")
    if _usable(eccentricity) and eccentricity > HIGH_ECCENTRICITY_THRESHOLD:
        issues.append(_advisory(
            ErrorCode.HIGH_ECCENTRICITY_WARNING,
            f"Eccentricity {eccentricity} is unusually high",
            "eccentricity", eccentricity, expected=HIGH_ECCENTRICITY_THRESHOLD,
        ))

    mean_motion = fields.get("mean_motion")
    if _usable(mean_motion) and mean_motion < LOW_MEAN_MOTION_THRESHOLD:
        issues.append(_advisory(
            ErrorCode.LOW_MEAN_MOTION_WARNING,
            f"Mean motion {mean_motion} rev/day is unusually low",
            "mean_motion", mean_motion, expected=LOW_MEAN_MOTION_THRESHOLD,
        ))

    revolution_number = fields.get("revolution_number")
    if _usable(revolution_number) and revolution_number > REVOLUTION_ROLLOVER_THRESHOLD:
        issues.append(_advisory(
            ErrorCode.REVOLUTION_NUMBER_ROLLOVER_WARNING,
            f"Revolution number {revolution_number} is close to rolling over",
            "revolution_number", revolution_number, expected=REVOLUTION_ROLLOVER_THRESHOLD,
        ))

    bstar = fields.get("bstar")
    if _usable(bstar) and bstar == 0.0:
        issues.append(_advisory(
            ErrorCode.NEAR_ZERO_DRAG_WARNING,
            "B* drag term is zero",
            "bstar", bstar,
        ))

    ephemeris_type = fields.get("ephemeris_type")
    if _usable(ephemeris_type) and ephemeris_type != 0:
        issues.append(_advisory(
            ErrorCode.NON_STANDARD_EPHEMERIS_WARNING,
            f"Ephemeris type {ephemeris_type} is non-standard (expected 0)",
            "ephemeris_type", ephemeris_type, expected=0,
        ))

    first_derivative = fields.get("first_derivative")
    if _usable(first_derivative) and first_derivative < 0:
        issues.append(_advisory(
            ErrorCode.NEGATIVE_DECAY_WARNING,
            "First derivative of mean motion is negative",
            "first_derivative", first_derivative,
        ))

    return issues
