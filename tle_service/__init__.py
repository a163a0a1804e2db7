"""
TLE Decoding and Validation Package

This package decodes NORAD two-line element sets (TLEs) into structured
records and validates them under strict, permissive or recovering policies.

Modules:
    fields: Fixed-column field table and field decoders
    checksum: Modulo-10 line checksum
    rules: Ordered validation rule tiers
    policy: Severity escalation table shared by every parse mode
    state_machine: Recovery state machine pipeline
    parser: Strict and permissive parsing entry points
    encoder: Record to TLE line formatting
    batch: Multi-record splitting and concurrent parsing

References:
    CelesTrak TLE format documentation:
    https://celestrak.org/NORAD/documentation/tle-fmt.php
"""

from tle_service.batch import parse_batch, split_tle_sets
from tle_service.checksum import compute_checksum, validate_checksum
from tle_service.encoder import record_to_lines, record_to_text
from tle_service.errors import (
    ErrorCode,
    Severity,
    TLEFormatError,
    TLEValidationError,
    ValidationIssue,
)
from tle_service.models import (
    ParsedTLE,
    ParseMode,
    ParseResult,
    ParserOptions,
    RecoveryAction,
    RecoveryKind,
    ValidationReport,
)
from tle_service.parser import StandardParser, parse_tle, validate_tle
from tle_service.state_machine import RecoveryStateMachineParser, parse_with_recovery
from tle_service.states import ParserState

__version__ = "1.0.0"

__all__ = [
    "ErrorCode",
    "ParseMode",
    "ParseResult",
    "ParsedTLE",
    "ParserOptions",
    "ParserState",
    "RecoveryAction",
    "RecoveryKind",
    "RecoveryStateMachineParser",
    "Severity",
    "StandardParser",
    "TLEFormatError",
    "TLEValidationError",
    "ValidationIssue",
    "ValidationReport",
    "compute_checksum",
    "parse_batch",
    "parse_tle",
    "parse_with_recovery",
    "record_to_lines",
    "record_to_text",
    "split_tle_sets",
    "validate_checksum",
    "validate_tle",
]
