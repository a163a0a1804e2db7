"""
Tests for record to TLE line encoding

Run with:
    python -m pytest tests/test_encoder.py -v
"""

import unittest

from tle_service import ParsedTLE, parse_tle, record_to_lines, record_to_text
from tle_service.encoder import format_compact_sci, format_first_derivative
from tle_service.fields import FieldEncoding, decode

REFERENCE_RECORDS = [
    (
        "1 25544U 98067A   20300.83097691  .00001534  00000-0  35580-4 0  9996",
        "2 25544  51.6453  57.0843 0001671  64.9808  73.0513 15.49338189252428",
    ),
    (
        "1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995",
        "2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598",
    ),
    (
        "1 00005U 58002B   00179.78495062  .00000023  00000-0  28098-4 0  4753",
        "2 00005  34.2682 348.7242 1859667 331.7664  19.3264 10.82419157413667",
    ),
    (
        "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927",
        "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537",
    ),
]

STRICT = {"mode": "strict"}


class TestCompactFormatting(unittest.TestCase):
    """Test packed scientific notation formatting."""

    def test_reference_values(self):
        """Test packed notation for reference drag terms."""
        self.assertEqual(format_compact_sci(0.0), " 00000-0")
        self.assertEqual(format_compact_sci(3.558e-5), " 35580-4")
        self.assertEqual(format_compact_sci(-1.1606e-5), "-11606-4")
        self.assertEqual(format_compact_sci(2.1844e-4), " 21844-3")
        self.assertEqual(format_compact_sci(1.2345), " 12345+1")

    def test_decodes_back(self):
        """Test that packed values decode to the original value."""
        for value in (3.558e-5, -1.1606e-5, 2.8098e-5, 1.0e-9, 0.5):
            with self.subTest(value=value):
                encoded = format_compact_sci(value)
                self.assertEqual(len(encoded), 8)
                self.assertAlmostEqual(decode(encoded, FieldEncoding.COMPACT_SCI), value, places=15)

    def test_exponent_overflow(self):
        """Test that exponents outside one digit are rejected."""
        with self.assertRaises(ValueError):
            format_compact_sci(1.0e-12)
        with self.assertRaises(ValueError):
            format_compact_sci(1.0e10)

    def test_first_derivative(self):
        """Test formatting of the signed first derivative."""
        self.assertEqual(format_first_derivative(0.00001534), " .00001534")
        self.assertEqual(format_first_derivative(-0.00002182), "-.00002182")
        with self.assertRaises(ValueError):
            format_first_derivative(1.5)


class TestRecordEncoding(unittest.TestCase):
    """Test line reconstruction from decoded records."""

    def test_reference_lines_reproduced(self):
        """Test that decoded reference records encode to the same lines."""
        for line1, line2 in REFERENCE_RECORDS:
            with self.subTest(line1=line1):
                record = parse_tle(f"{line1}\n{line2}", STRICT)
                self.assertEqual(record_to_lines(record), (line1, line2))

    def test_round_trip_reproduces_every_field(self):
        """Test that re-parsing encoded text gives an equal record."""
        for line1, line2 in REFERENCE_RECORDS:
            with self.subTest(line1=line1):
                record = parse_tle(f"VANGUARD 1\n{line1}\n{line2}", STRICT)
                reparsed = parse_tle(record_to_text(record), STRICT)
                self.assertEqual(reparsed, record)

    def test_modified_record(self):
        """Test that modified fields survive encoding."""
        line1, line2 = REFERENCE_RECORDS[0]
        record = parse_tle(f"{line1}\n{line2}", STRICT)
        modified = record.model_copy(update={"bstar": record.bstar * 1.5, "inclination": 98.7654})

        reparsed = parse_tle(record_to_text(modified), STRICT)
        self.assertAlmostEqual(reparsed.bstar, record.bstar * 1.5, places=12)
        self.assertEqual(reparsed.inclination, 98.7654)

    def test_name_line(self):
        """Test that the name line is only written when given."""
        line1, line2 = REFERENCE_RECORDS[0]
        record = parse_tle(f"{line1}\n{line2}", STRICT)

        self.assertEqual(record_to_text(record).count("\n"), 1)
        text = record_to_text(record, name="ISS (ZARYA)")
        self.assertEqual(text.split("\n"), ["ISS (ZARYA)", line1, line2])

    def test_missing_designator_is_blank(self):
        """Test that a missing designator encodes as blanks."""
        line1, line2 = REFERENCE_RECORDS[0]
        record = parse_tle(f"{line1}\n{line2}", STRICT).model_copy(update={
            "intl_designator_year": None,
            "intl_designator_launch_number": None,
            "intl_designator_piece": None,
        })
        encoded1, _ = record_to_lines(record)
        self.assertEqual(encoded1[9:17], " " * 8)
        self.assertIsNone(parse_tle(record_to_text(record), STRICT).intl_designator_year)

    def test_missing_fields_rejected(self):
        """Test that incomplete records cannot be encoded."""
        with self.assertRaises(ValueError):
            record_to_lines(ParsedTLE(satellite_number=25544))

    def test_eccentricity_must_be_below_one(self):
        """Test that an eccentricity of one cannot be encoded."""
        line1, line2 = REFERENCE_RECORDS[0]
        record = parse_tle(f"{line1}\n{line2}", STRICT).model_copy(update={"eccentricity": 1.0})
        with self.assertRaises(ValueError):
            record_to_lines(record)


if __name__ == "__main__":
    unittest.main()
