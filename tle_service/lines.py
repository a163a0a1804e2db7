"""
Input line handling: line-ending normalisation, trimming, comment separation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from tle_service.config import COMMENT_PREFIX


class LineRole(Enum):
    """Declared role of a line within a record"""

    NAME = "name"
    LINE1 = "line1"
    LINE2 = "line2"


@dataclass(frozen=True)
class RawLine:
    """A trimmed input line and its declared role."""

    text: str
    role: LineRole


def normalize_line_endings(text: str) -> str:
    """Replace CRLF and lone CR line endings with LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def split_lines(text: str) -> Tuple[List[str], List[str]]:
    """
    Split raw input into record lines and comment lines.

    Tabs become spaces, every line is trimmed, blank lines are dropped and
    lines starting with '#' are returned separately as comments.

    Args:
        text: Raw TLE text

    Returns:
        Tuple of (record_lines, comment_lines), both in input order
    """
    lines: List[str] = []
    comments: List[str] = []
    for line in normalize_line_endings(text).split("\n"):
        line = line.replace("\t", " ").strip()
        if not line:
            continue
        if line.startswith(COMMENT_PREFIX):
            comments.append(line)
        else:
            lines.append(line)
    return lines, comments


def assign_roles(lines: List[str]) -> List[RawLine]:
    """Tag a 2- or 3-line record with line roles."""
    roles = [LineRole.LINE1, LineRole.LINE2]
    if len(lines) == 3:
        roles.insert(0, LineRole.NAME)
    return [RawLine(text, role) for text, role in zip(lines, roles)]
