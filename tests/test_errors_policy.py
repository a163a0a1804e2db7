"""
Tests for the error taxonomy, escalation table and parser options

Run with:
    python -m pytest tests/test_errors_policy.py -v
"""

import unittest
from datetime import datetime

from pydantic import ValidationError

from tle_service import (
    ErrorCode,
    ParseMode,
    ParserOptions,
    Severity,
    TLEFormatError,
    TLEValidationError,
    ValidationIssue,
)
from tle_service.errors import ERROR_DESCRIPTIONS, STRUCTURAL_CODES, WARNING_CODES, describe, is_warning_code
from tle_service.policy import ESCALATION_TABLE, Disposition, halts_immediately, resolve_disposition


def make_issue(code, severity=Severity.ERROR):
    return ValidationIssue(code=code, message=f"{code.value} raised", severity=severity)


class TestErrorTaxonomy(unittest.TestCase):
    """Test error codes and their descriptions."""

    def test_every_code_described(self):
        """Test that every error code has a description."""
        for code in ErrorCode:
            with self.subTest(code=code):
                self.assertIn(code, ERROR_DESCRIPTIONS)
                self.assertEqual(describe(code), ERROR_DESCRIPTIONS[code])

    def test_describe_accepts_plain_strings(self):
        """Test description lookup by code name."""
        self.assertEqual(describe("CHECKSUM_MISMATCH"), "Calculated checksum does not match")
        self.assertEqual(describe("NOT_A_CODE"), "Unknown error code")

    def test_warning_codes(self):
        """Test warning-only code detection."""
        self.assertTrue(is_warning_code(ErrorCode.SATELLITE_NAME_TOO_LONG))
        self.assertTrue(is_warning_code("STALE_TLE_WARNING"))
        self.assertFalse(is_warning_code(ErrorCode.CHECKSUM_MISMATCH))
        self.assertFalse(is_warning_code("NOT_A_CODE"))

    def test_structural_and_warning_codes_disjoint(self):
        """Test that no code is both structural and warning-only."""
        self.assertFalse(STRUCTURAL_CODES & WARNING_CODES)

    def test_as_warning(self):
        """Test downgrading an issue to warning severity."""
        issue = make_issue(ErrorCode.CHECKSUM_MISMATCH)
        downgraded = issue.as_warning()

        self.assertEqual(downgraded.severity, Severity.WARNING)
        self.assertEqual(downgraded.code, issue.code)
        self.assertEqual(issue.severity, Severity.ERROR)

        warning = make_issue(ErrorCode.NEGATIVE_DECAY_WARNING, Severity.WARNING)
        self.assertIs(warning.as_warning(), warning)


class TestExceptions(unittest.TestCase):
    """Test exception construction from issue lists."""

    def test_from_issues(self):
        """Test building a validation error from issue lists."""
        errors = [make_issue(ErrorCode.CHECKSUM_MISMATCH), make_issue(ErrorCode.VALUE_OUT_OF_RANGE)]
        warnings = [make_issue(ErrorCode.NEGATIVE_DECAY_WARNING, Severity.WARNING)]

        exc = TLEValidationError.from_issues(errors, warnings)

        self.assertIsInstance(exc, ValueError)
        self.assertEqual(exc.codes, [ErrorCode.CHECKSUM_MISMATCH, ErrorCode.VALUE_OUT_OF_RANGE])
        self.assertEqual(len(exc.warnings), 1)
        self.assertIn("CHECKSUM_MISMATCH raised", str(exc))

    def test_format_error_is_validation_error(self):
        """Test the format error subclass."""
        exc = TLEFormatError.from_issues([make_issue(ErrorCode.EMPTY_INPUT, Severity.CRITICAL)])
        self.assertIsInstance(exc, TLEFormatError)
        self.assertIsInstance(exc, TLEValidationError)
        self.assertEqual(exc.warnings, ())


class TestEscalationTable(unittest.TestCase):
    """Test disposition lookup per code and mode."""

    def test_table_covers_every_code(self):
        """Test that every code has a disposition."""
        self.assertEqual(set(ESCALATION_TABLE), set(ErrorCode))

    def test_structural_codes(self):
        """Test dispositions of structural codes per mode."""
        issue = make_issue(ErrorCode.INVALID_LINE_LENGTH)
        self.assertEqual(resolve_disposition(issue, ParseMode.STRICT), Disposition.THROW)
        self.assertEqual(resolve_disposition(issue, ParseMode.PERMISSIVE), Disposition.THROW)
        self.assertEqual(resolve_disposition(issue, ParseMode.RECOVER), Disposition.RECOVER)

    def test_recoverable_codes(self):
        """Test dispositions of recoverable codes per mode."""
        issue = make_issue(ErrorCode.CHECKSUM_MISMATCH)
        self.assertEqual(resolve_disposition(issue, "strict"), Disposition.THROW)
        self.assertEqual(resolve_disposition(issue, "permissive"), Disposition.WARN)
        self.assertEqual(resolve_disposition(issue, "recover"), Disposition.RECOVER)

    def test_critical_always_throws(self):
        """Test that critical issues throw in every mode."""
        issue = make_issue(ErrorCode.INVALID_LINE_COUNT, Severity.CRITICAL)
        for mode in ParseMode:
            with self.subTest(mode=mode):
                self.assertEqual(resolve_disposition(issue, mode), Disposition.THROW)

    def test_warning_severity_always_warns(self):
        """Test that warning-severity issues warn in every mode."""
        # Mean motion range violations are reported with warning severity
        issue = make_issue(ErrorCode.VALUE_OUT_OF_RANGE, Severity.WARNING)
        for mode in ParseMode:
            with self.subTest(mode=mode):
                self.assertEqual(resolve_disposition(issue, mode), Disposition.WARN)

    def test_halts_immediately(self):
        """Test which thrown issues halt the pipeline."""
        structural = make_issue(ErrorCode.INVALID_LINE_NUMBER)
        critical = make_issue(ErrorCode.EMPTY_INPUT, Severity.CRITICAL)
        checksum = make_issue(ErrorCode.CHECKSUM_MISMATCH)

        self.assertTrue(halts_immediately(structural, Disposition.THROW))
        self.assertTrue(halts_immediately(critical, Disposition.THROW))
        self.assertFalse(halts_immediately(checksum, Disposition.THROW))
        self.assertFalse(halts_immediately(structural, Disposition.RECOVER))
        self.assertFalse(halts_immediately(checksum, Disposition.WARN))


class TestParserOptions(unittest.TestCase):
    """Test option defaults and coercion."""

    def test_defaults(self):
        """Test default option values."""
        options = ParserOptions()
        self.assertEqual(options.mode, ParseMode.STRICT)
        self.assertEqual(options.max_recovery_attempts, 10)
        self.assertTrue(options.include_partial_results)
        self.assertTrue(options.include_warnings)
        self.assertFalse(options.advisory_checks)
        self.assertIsNone(options.reference_time)

    def test_coerce(self):
        """Test coercion of None, instances and mappings."""
        self.assertEqual(ParserOptions.coerce(None), ParserOptions())

        options = ParserOptions(mode="recover")
        self.assertIs(ParserOptions.coerce(options), options)

        coerced = ParserOptions.coerce({"mode": "permissive", "reference_time": "2024-01-01T00:00:00"})
        self.assertEqual(coerced.mode, ParseMode.PERMISSIVE)
        self.assertEqual(coerced.reference_time, datetime(2024, 1, 1))

    def test_coerce_rejects_other_types(self):
        """Test that other option types are rejected."""
        with self.assertRaises(TypeError):
            ParserOptions.coerce("strict")

    def test_invalid_values_rejected(self):
        """Test validation of option values."""
        for bad in ({"mode": "lenient"}, {"max_recovery_attempts": -1},
                    {"stale_after_days": 0}, {"unknown_option": True}):
            with self.subTest(options=bad):
                with self.assertRaises(ValidationError):
                    ParserOptions.coerce(bad)

    def test_frozen(self):
        """Test that options cannot be changed after creation."""
        options = ParserOptions()
        with self.assertRaises(ValidationError):
            options.mode = ParseMode.RECOVER


if __name__ == "__main__":
    unittest.main()
