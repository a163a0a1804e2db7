"""
Field Decoding

Fixed-column field table and pure decoders for Two-Line Element (TLE) sets.

TLE Format:
Each data line is exactly 69 characters. Fields sit at fixed 1-based column
ranges; numeric fields use one of a handful of textual encodings:

- PLAIN_INT        "25544", "  999"
- PLAIN_STRING     "U", "A  "
- IMPLIED_DECIMAL  "0001671" -> 0.0001671 (leading "0." assumed)
- SIGNED_DECIMAL   " .00001534", "-.00002182", " 51.6453"
- COMPACT_SCI      " 35580-4" -> +0.35580e-4, "-11606-4" -> -0.11606e-4

Decoding never raises on malformed characters. A field that is entirely
blank decodes to None (explicit absence), and a field that cannot be read
decodes to the INVALID sentinel so validation can report it.

References:
- CelesTrak TLE format documentation: https://celestrak.org/NORAD/documentation/tle-fmt.php
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class FieldEncoding(Enum):
    """Textual encodings used by TLE fields"""

    PLAIN_INT = "PLAIN_INT"
    PLAIN_STRING = "PLAIN_STRING"
    IMPLIED_DECIMAL = "IMPLIED_DECIMAL"
    SIGNED_DECIMAL = "SIGNED_DECIMAL"
    COMPACT_SCI = "COMPACT_SCI"


class _Invalid:
    """Marker for a field whose text could not be decoded."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "INVALID"

    def __bool__(self) -> bool:
        return False


INVALID = _Invalid()

# ASCII only: \d would otherwise accept any Unicode digit
_INT_PATTERN = re.compile(r"^[+-]?\d+$", re.ASCII)
_DECIMAL_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)$", re.ASCII)
_DIGITS_PATTERN = re.compile(r"^\d+$", re.ASCII)
_COMPACT_PATTERN = re.compile(r"^([ +-])(\d{5})([+-])(\d)$", re.ASCII)


@dataclass(frozen=True)
class FieldSpec:
    """
    Static descriptor of one fixed-column field.

    Columns are 1-based and inclusive, as in the format documentation.
    """

    name: str
    start_column: int
    end_column: int
    target_line: int
    encoding: FieldEncoding
    optional: bool = False
    default: Any = None

    @property
    def width(self) -> int:
        return self.end_column - self.start_column + 1

    def extract(self, line: str) -> Optional[str]:
        """Raw text of this field, or None when the line ends before the field does."""
        if len(line) < self.end_column:
            return None
        return line[self.start_column - 1:self.end_column]


_I = FieldEncoding.PLAIN_INT
_S = FieldEncoding.PLAIN_STRING
_D = FieldEncoding.SIGNED_DECIMAL

LINE1_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("line_number_1", 1, 1, 1, _S),
    FieldSpec("satellite_number_1", 3, 7, 1, _I),
    FieldSpec("classification", 8, 8, 1, _S),
    FieldSpec("intl_designator_year", 10, 11, 1, _I, optional=True),
    FieldSpec("intl_designator_launch_number", 12, 14, 1, _I, optional=True),
    FieldSpec("intl_designator_piece", 15, 17, 1, _S, optional=True),
    FieldSpec("epoch_year", 19, 20, 1, _I),
    FieldSpec("epoch_day", 21, 32, 1, _D),
    FieldSpec("first_derivative", 34, 43, 1, _D, default=0.0),
    FieldSpec("second_derivative", 45, 52, 1, FieldEncoding.COMPACT_SCI, default=0.0),
    FieldSpec("bstar", 54, 61, 1, FieldEncoding.COMPACT_SCI, default=0.0),
    FieldSpec("ephemeris_type", 63, 63, 1, _I, optional=True, default=0),
    FieldSpec("element_set_number", 65, 68, 1, _I, optional=True, default=0),
    FieldSpec("checksum_1", 69, 69, 1, _I),
)

LINE2_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("line_number_2", 1, 1, 2, _S),
    FieldSpec("satellite_number_2", 3, 7, 2, _I),
    FieldSpec("inclination", 9, 16, 2, _D),
    FieldSpec("right_ascension", 18, 25, 2, _D),
    FieldSpec("eccentricity", 27, 33, 2, FieldEncoding.IMPLIED_DECIMAL),
    FieldSpec("argument_of_perigee", 35, 42, 2, _D),
    FieldSpec("mean_anomaly", 44, 51, 2, _D),
    FieldSpec("mean_motion", 53, 63, 2, _D),
    FieldSpec("revolution_number", 64, 68, 2, _I, optional=True, default=0),
    FieldSpec("checksum_2", 69, 69, 2, _I),
)

FIELD_TABLE: Tuple[FieldSpec, ...] = LINE1_FIELDS + LINE2_FIELDS
FIELDS_BY_NAME: Dict[str, FieldSpec] = {spec.name: spec for spec in FIELD_TABLE}


def fields_for_line(line_number: int) -> Tuple[FieldSpec, ...]:
    """Field specs for data line 1 or 2."""
    return LINE1_FIELDS if line_number == 1 else LINE2_FIELDS


def decode_compact_sci(raw: str) -> Any:
    """
    Decode the 8-character packed scientific notation.

    Layout: [sign][5 mantissa digits][exponent sign][exponent digit], with
    the mantissa read as 0.ddddd. A blank mantissa sign counts as '+'; the
    exponent sign must be written out.

    Args:
        raw: Field text, e.g. " 35580-4"

    Returns:
        Decoded float, None for a blank field, INVALID otherwise
    """
    if not raw.strip():
        return None
    match = _COMPACT_PATTERN.match(raw)
    if match is None:
        return INVALID
    sign, digits, exp_sign, exp_digit = match.groups()
    sign = "-" if sign == "-" else ""
    exp_sign = "-" if exp_sign == "-" else ""
    # Parsing the decimal string keeps the value correctly rounded
    return float(f"{sign}0.{digits}e{exp_sign}{exp_digit}")


def decode(raw: Optional[str], encoding: FieldEncoding) -> Any:
    """
    Decode raw field text.

    Args:
        raw: Field text as cut from the line (None when the field is missing)
        encoding: How the text is encoded

    Returns:
        Decoded value, None when the field is blank or missing, or INVALID
        when the text does not match the encoding
    """
    if raw is None or not raw.strip():
        return None

    if encoding is FieldEncoding.PLAIN_STRING:
        return raw.strip()

    if encoding is FieldEncoding.COMPACT_SCI:
        return decode_compact_sci(raw)

    text = raw.strip()

    if encoding is FieldEncoding.PLAIN_INT:
        return int(text) if _INT_PATTERN.match(text) else INVALID

    if encoding is FieldEncoding.IMPLIED_DECIMAL:
        return float("0." + text) if _DIGITS_PATTERN.match(text) else INVALID

    if encoding is FieldEncoding.SIGNED_DECIMAL:
        return float(text) if _DECIMAL_PATTERN.match(text) else INVALID

    raise ValueError(f"Unknown field encoding: {encoding}")


def decode_field(spec: FieldSpec, line: str) -> Any:
    """Extract and decode one field from a data line."""
    return decode(spec.extract(line), spec.encoding)


def is_invalid(value: Any) -> bool:
    return value is INVALID
