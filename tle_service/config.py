"""
TLE Service Configuration and Constants

This module contains the fixed record-format constants, reference TLE data
and environment-driven defaults used throughout the package.

Format Constants:
    Column layout values follow the NORAD two-line element set format as
    documented by CelesTrak. They are fixed at import time and never loaded
    from external configuration, so decoding stays pure and deterministic.

Environment Overrides:
    TLE_PARSE_MODE             Default parse mode (strict, permissive, recover)
    TLE_MAX_RECOVERY_ATTEMPTS  Recovery budget for the state machine parser
    TLE_BATCH_WORKERS          Worker threads for batch parsing
    TLE_LOG_LEVEL              Logging level name (DEBUG, INFO, ...)
    TLE_LOG_FORMAT             "console" or "json"

References:
    CelesTrak TLE format documentation:
    https://celestrak.org/NORAD/documentation/tle-fmt.php
"""

import os
from typing import Dict, Any

# Record format
TLE_LINE_LENGTH: int = 69  # Exact length of a trusted data line
CHECKSUM_COLUMN: int = 69  # 1-based column of the checksum digit
MAX_NAME_LENGTH: int = 24  # Recommended maximum for the name line
COMMENT_PREFIX: str = "#"
VALID_CLASSIFICATIONS = ("U", "C", "S")

# Two-digit years 57-99 map to 1957-1999, 00-56 to 2000-2056
EPOCH_YEAR_PIVOT: int = 57

# Advisory thresholds (warnings only)
HIGH_ECCENTRICITY_THRESHOLD: float = 0.25
LOW_MEAN_MOTION_THRESHOLD: float = 1.0
REVOLUTION_ROLLOVER_THRESHOLD: int = 90000
DEFAULT_STALE_AFTER_DAYS: float = 30.0

DEFAULT_MAX_RECOVERY_ATTEMPTS: int = 10

# Reference ISS record for demonstrations and tests
# Epoch: 2020-10-26 (day 300.83097691)
SAMPLE_ISS_TLE: Dict[str, Any] = {
    'name': 'ISS (ZARYA)',
    'norad_id': 25544,
    'line1': '1 25544U 98067A   20300.83097691  .00001534  00000-0  35580-4 0  9996',
    'line2': '2 25544  51.6453  57.0843 0001671  64.9808  73.0513 15.49338189252428',
    'inclination': 51.6453,
    'eccentricity': 0.0001671,
    'mean_motion': 15.49338189,
}


class ServiceConfig:
    """Environment-driven defaults, read once at import."""

    PARSE_MODE = os.getenv('TLE_PARSE_MODE', 'strict').lower()
    MAX_RECOVERY_ATTEMPTS = int(
        os.getenv('TLE_MAX_RECOVERY_ATTEMPTS', str(DEFAULT_MAX_RECOVERY_ATTEMPTS))
    )
    BATCH_WORKERS = int(os.getenv('TLE_BATCH_WORKERS', '8'))
    LOG_LEVEL = os.getenv('TLE_LOG_LEVEL', 'WARNING').upper()
    LOG_FORMAT = os.getenv('TLE_LOG_FORMAT', 'console').lower()


config = ServiceConfig()
