"""
TLE Encoder

Formats a decoded record back into two 69-character TLE lines with freshly
computed checksums. Decoding the output in strict mode reproduces every
field of a record that was itself decoded from valid lines.
"""

from typing import Optional, Tuple

from tle_service.checksum import compute_checksum
from tle_service.models import ParsedTLE

_REQUIRED_FIELDS = (
    "satellite_number", "epoch_year", "epoch_day",
    "inclination", "right_ascension", "eccentricity",
    "argument_of_perigee", "mean_anomaly", "mean_motion",
)


def format_compact_sci(value: float) -> str:
    """
    Format a number in the 8-character packed notation, e.g. 3.558e-05 -> ' 35580-4'.

    Raises:
        ValueError: the exponent does not fit in a single digit
    """
    if value == 0.0:
        return " 00000-0"

    sign = "-" if value < 0 else " "
    # "3.5580e-05": five significant digits, mantissa read as 0.35580
    mantissa, exponent = f"{abs(value):.4e}".split("e")
    digits = mantissa.replace(".", "")
    exp = int(exponent) + 1
    if not -9 <= exp <= 9:
        raise ValueError(f"Value {value} cannot be represented in packed notation")

    exp_sign = "-" if exp < 0 else "+"
    return f"{sign}{digits}{exp_sign}{abs(exp):d}"


def format_first_derivative(value: float) -> str:
    """Format the first derivative as sign plus '.dddddddd' (10 characters)."""
    text = f"{abs(value):.8f}"
    if not text.startswith("0."):
        raise ValueError(f"First derivative {value} must be smaller than 1 in magnitude")
    sign = "-" if value < 0 else " "
    return sign + text[1:]


def _with_checksum(line: str) -> str:
    return line[:68] + str(compute_checksum(line))


def record_to_lines(record: ParsedTLE) -> Tuple[str, str]:
    """
    Reconstruct TLE lines from a decoded record.

    Args:
        record: Record with every required orbital field populated

    Returns:
        Tuple of (line1, line2) strings

    Raises:
        ValueError: a required field is missing or a value does not fit its columns
    """
    missing = [name for name in _REQUIRED_FIELDS if getattr(record, name) is None]
    if missing:
        raise ValueError(f"Cannot encode record with missing fields: {', '.join(missing)}")
    if not 0.0 <= record.eccentricity < 1.0:
        raise ValueError(f"Eccentricity {record.eccentricity} must be in [0, 1)")

    classification = record.classification or "U"
    if record.intl_designator_year is not None and record.intl_designator_launch_number is not None:
        designator = (
            f"{record.intl_designator_year:02d}"
            f"{record.intl_designator_launch_number:03d}"
            f"{record.intl_designator_piece or '':<3}"
        )
    else:
        designator = " " * 8

    # Format line 1
    line1 = f"1 {record.satellite_number:05d}{classification} {designator} "
    line1 += f"{record.epoch_year:02d}{record.epoch_day:012.8f} "
    line1 += format_first_derivative(record.first_derivative or 0.0) + " "
    line1 += format_compact_sci(record.second_derivative or 0.0) + " "
    line1 += format_compact_sci(record.bstar or 0.0)
    line1 += f" {record.ephemeris_type or 0:1d} {record.element_set_number or 0:4d}"
    line1 = _with_checksum(line1 + "0")

    # Format line 2
    ecc_str = f"{round(record.eccentricity * 10000000):07d}"
    line2 = f"2 {record.satellite_number:05d} "
    line2 += f"{record.inclination:8.4f} "
    line2 += f"{record.right_ascension:8.4f} "
    line2 += ecc_str + " "
    line2 += f"{record.argument_of_perigee:8.4f} "
    line2 += f"{record.mean_anomaly:8.4f} "
    line2 += f"{record.mean_motion:11.8f}"
    line2 += f"{record.revolution_number or 0:5d}"
    line2 = _with_checksum(line2 + "0")

    for number, line in ((1, line1), (2, line2)):
        if len(line) != 69:
            raise ValueError(f"Encoded line {number} is {len(line)} characters, expected 69")
    return line1, line2


def record_to_text(record: ParsedTLE, name: Optional[str] = None) -> str:
    """Render a record as 2-line text, or 3-line text when it carries a name."""
    line1, line2 = record_to_lines(record)
    name = name if name is not None else record.name
    lines = [name, line1, line2] if name else [line1, line2]
    return "\n".join(lines)
