"""
Tests for the modulo-10 line checksum

Run with:
    python -m pytest tests/test_checksum.py -v
"""

import unittest

from tle_service.checksum import compute_checksum, validate_checksum
from tle_service.config import SAMPLE_ISS_TLE
from tle_service.errors import ErrorCode


class TestComputeChecksum(unittest.TestCase):
    """Test checksum computation."""

    def setUp(self):
        self.line1 = SAMPLE_ISS_TLE["line1"]
        self.line2 = SAMPLE_ISS_TLE["line2"]

    def test_reference_lines(self):
        """Test checksums of known good lines."""
        self.assertEqual(compute_checksum(self.line1), 6)
        self.assertEqual(compute_checksum(self.line2), 8)

    def test_minus_sign_counts_one(self):
        """Test that each minus sign adds one."""
        line = "-" + " " * 67 + "0"
        self.assertEqual(compute_checksum(line), 1)

    def test_letters_and_punctuation_count_zero(self):
        """Test that letters, spaces and punctuation add nothing."""
        line = "U.+ABC" + " " * 62 + "0"
        self.assertEqual(compute_checksum(line), 0)

    def test_column_69_ignored(self):
        """Test that the checksum column itself is not summed."""
        self.assertEqual(compute_checksum(self.line1[:68] + "0"), compute_checksum(self.line1))


class TestValidateChecksum(unittest.TestCase):
    """Test checksum validation outcomes."""

    def setUp(self):
        self.line1 = SAMPLE_ISS_TLE["line1"]

    def test_valid_line(self):
        """Test validation of a line with a correct checksum."""
        result = validate_checksum(self.line1, 1)
        self.assertTrue(result.valid)
        self.assertEqual(result.expected, 6)
        self.assertEqual(result.actual, 6)
        self.assertIsNone(result.issue)

    def test_mismatch(self):
        """Test that a wrong checksum digit is reported with both values."""
        result = validate_checksum(self.line1[:68] + "5", 1)
        self.assertFalse(result.valid)
        self.assertEqual(result.issue.code, ErrorCode.CHECKSUM_MISMATCH)
        self.assertEqual(result.issue.expected, 6)
        self.assertEqual(result.issue.actual, 5)
        self.assertEqual(result.issue.line, 1)
        self.assertEqual(result.issue.field, "checksum_1")

    def test_non_digit_checksum(self):
        """Test that a non-digit checksum character is reported."""
        result = validate_checksum(self.line1[:68] + "X", 1)
        self.assertFalse(result.valid)
        self.assertEqual(result.issue.code, ErrorCode.INVALID_CHECKSUM_CHARACTER)

    def test_wrong_length_not_computed(self):
        """Test that lines of the wrong length are not checksummed."""
        result = validate_checksum(self.line1[:60], 1)
        self.assertFalse(result.valid)
        self.assertIsNone(result.expected)
        self.assertEqual(result.issue.code, ErrorCode.INVALID_LINE_LENGTH)
        self.assertEqual(result.issue.actual, 60)

    def test_any_digit_change_flips_validity(self):
        """Incrementing any digit in columns 1-68 changes the sum by 1 or -9."""
        for index, char in enumerate(self.line1[:68]):
            if not char.isdigit():
                continue
            changed = str((int(char) + 1) % 10)
            mutated = self.line1[:index] + changed + self.line1[index + 1:]
            with self.subTest(column=index + 1):
                self.assertFalse(validate_checksum(mutated).valid)

    def test_checksum_digit_change_flips_validity(self):
        """Test that only the computed digit validates."""
        for digit in "012345789":
            with self.subTest(digit=digit):
                self.assertFalse(validate_checksum(self.line1[:68] + digit).valid)

    def test_validity_matches_recomputation(self):
        """Test that validation agrees with recomputing the checksum."""
        for line in (SAMPLE_ISS_TLE["line1"], SAMPLE_ISS_TLE["line2"]):
            for digit in "0123456789":
                candidate = line[:68] + digit
                with self.subTest(line=line[0], digit=digit):
                    self.assertEqual(
                        validate_checksum(candidate).valid,
                        compute_checksum(candidate) == int(digit),
                    )


if __name__ == "__main__":
    unittest.main()
