"""
Batch Parsing

Splits multi-record text into individual TLE records and parses them on a
thread pool. Each parse reads only its own text and the shared, read-only
field table, so no locking is needed. Results come back in input order and
never raise for bad records; callers inspect `ParseResult.success`.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Any, List, Optional

from tle_service.config import COMMENT_PREFIX, config
from tle_service.lines import normalize_line_endings
from tle_service.logging_config import get_logger
from tle_service.models import ParseResult, ParserOptions
from tle_service.state_machine import run_pipeline

logger = get_logger(__name__)


def split_tle_sets(text: str) -> List[str]:
    """
    Split text holding many TLE records into one text block per record.

    A line starting with '1' opens a new record; a line starting with '2'
    joins the current record; any other line is a name that opens a new
    record. Comment lines travel with the record being built. Fragments that
    never reach a line 2 are dropped.

    Args:
        text: Raw multi-record text

    Returns:
        List of record texts, in input order
    """
    if not isinstance(text, str):
        raise TypeError(f"TLE data must be a string, got {type(text).__name__}")

    sets: List[List[str]] = []
    current: List[str] = []
    pending_comments: List[str] = []

    def data_lines(block: List[str]) -> List[str]:
        return [line for line in block if not line.startswith(COMMENT_PREFIX)]

    def flush() -> None:
        data = data_lines(current)
        if len(data) >= 2 and data[-1][0] == "2":
            sets.append(list(current))

    for line in normalize_line_endings(text).split("\n"):
        line = line.strip()
        if not line:
            continue

        if line.startswith(COMMENT_PREFIX):
            (current if current else pending_comments).append(line)
            continue

        if line[0] == "1":
            opened = data_lines(current)
            if len(opened) == 1 and opened[0][0] not in "12":
                # A lone name line belongs to this record
                current.append(line)
            else:
                flush()
                current = pending_comments + [line]
                pending_comments = []
        elif line[0] == "2":
            current.append(line)
        else:
            flush()
            current = pending_comments + [line]
            pending_comments = []

    flush()
    return ["\n".join(block) for block in sets]


def parse_batch(text: str, options: Any = None,
                max_workers: Optional[int] = None) -> List[ParseResult]:
    """
    Parse every record in a multi-record text concurrently.

    Args:
        text: Raw multi-record text
        options: ParserOptions or mapping applied to every record
        max_workers: Thread pool size (defaults to TLE_BATCH_WORKERS)

    Returns:
        One ParseResult per record, in input order
    """
    options = ParserOptions.coerce(options)
    records = split_tle_sets(text)
    workers = max_workers or config.BATCH_WORKERS

    with ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(lambda record: run_pipeline(record, options), records))

    succeeded = sum(1 for result in results if result.success)
    logger.info("batch_parsed", records=len(results), succeeded=succeeded,
                failed=len(results) - succeeded, mode=options.mode.value)
    return results
