"""
Repository pattern for log access.

Handles appending warning records and reading them back.
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from .log_file import (
    INPUT_PREFIX,
    SEPARATOR,
    TIMESTAMP_FORMAT,
    format_record,
    open_log,
    resolve_log_path,
)
from .models import LimitWarningRecord

logger = logging.getLogger(__name__)

_HEADER = re.compile(r"^\[(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2})\] (.+)$")


class LogRepository:
    """Repository for reading the rate limit log.

    Wraps the module level functions with a fixed log path so that
    CLI commands can filter and summarize records.
    """

    def __init__(self, log_path: Optional[str] = None):
        """Initialize the repository with a log path.

        Args:
            log_path: Path to the log file (defaults to ~/.claude/rate-limit.log)
        """
        self.log_path = resolve_log_path(log_path)

    def get_recent_records(
        self,
        label: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[LimitWarningRecord]:
        """Get recent records with optional filtering.

        Args:
            label: Optional filter for a specific label
            limit: Maximum number of records to return

        Returns:
            List of records ordered newest first
        """
        records = read_records(self.log_path)
        if label:
            records = [record for record in records if record.label == label]
        records.reverse()
        if limit is not None:
            records = records[:limit]
        return records

    def get_summary(self) -> Dict[str, object]:
        """Get counts per label and the covered time range.

        Returns:
            Dictionary with total, per label counts, first and last timestamps
        """
        records = read_records(self.log_path)
        return {
            "total": len(records),
            "by_label": summarize_records(records),
            "first": records[0].timestamp if records else None,
            "last": records[-1].timestamp if records else None,
        }


def append_records(records: List[LimitWarningRecord], log_path: Path) -> None:
    """Append records to the log, in order.

    Each record is written with a single write call so that records from
    concurrent processes interleave at record boundaries where the OS
    allows it. No locking is performed.

    Args:
        records: Records to append
        log_path: Path to the log file

    Raises:
        OSError: If the log cannot be opened or written
    """
    if not records:
        return

    with open_log(log_path) as handle:
        for record in records:
            handle.write(format_record(record))
            handle.flush()


def append_record(record: LimitWarningRecord, log_path: Path) -> None:
    """Append a single record to the log."""
    append_records([record], log_path)


def read_records(log_path: Path) -> List[LimitWarningRecord]:
    """Parse the log back into records, oldest first.

    Payloads may span several lines. A separator line only closes a record
    when it is followed by the end of the file or by another record header,
    so payloads that themselves contain '---' survive. Text that does not
    belong to a record is skipped.

    Args:
        log_path: Path to the log file

    Returns:
        Records in file order (empty if the file does not exist)
    """
    path = Path(log_path)
    if not path.exists():
        return []

    with open(path, "r", encoding="utf-8", errors="replace") as f:
        lines = f.read().split("\n")
    if lines and lines[-1] == "":
        lines.pop()

    records = []
    i = 0
    while i < len(lines):
        header = _HEADER.match(lines[i])
        if not header or i + 1 >= len(lines) or not lines[i + 1].startswith(INPUT_PREFIX):
            i += 1
            continue

        try:
            timestamp = datetime.strptime(header.group(1), TIMESTAMP_FORMAT)
        except ValueError:
            logger.debug("Skipping record with bad timestamp at line %d", i + 1)
            i += 1
            continue

        payload_lines = [lines[i + 1][len(INPUT_PREFIX):]]
        j = i + 2
        while j < len(lines):
            if lines[j] == SEPARATOR and (j + 1 == len(lines) or _HEADER.match(lines[j + 1])):
                break
            payload_lines.append(lines[j])
            j += 1

        records.append(LimitWarningRecord(
            timestamp=timestamp,
            label=header.group(2),
            payload="\n".join(payload_lines),
        ))
        i = j + 1

    return records


def summarize_records(records: List[LimitWarningRecord]) -> Dict[str, int]:
    """Count records per label, in order of first appearance."""
    counts: Dict[str, int] = {}
    for record in records:
        counts[record.label] = counts.get(record.label, 0) + 1
    return counts
