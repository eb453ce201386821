"""
Log file location and record format.

Provides the append handle and text layout of the rate limit log.
"""

import logging
from pathlib import Path
from typing import IO, Optional

from .models import LimitWarningRecord

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
INPUT_PREFIX = "Input: "
SEPARATOR = "---"


def default_log_path() -> Path:
    """Return the shared log path under the invoking user's home directory.

    Resolved on every call so that a changed HOME is honoured.
    """
    return Path.home() / ".claude" / "rate-limit.log"


def resolve_log_path(log_path: Optional[str] = None) -> Path:
    """Expand a user supplied log path, falling back to the default."""
    if log_path is None:
        return default_log_path()
    return Path(log_path).expanduser()


def format_record(record: LimitWarningRecord) -> str:
    """Render a record as the three line block stored in the log.

    Args:
        record: Record to render

    Returns:
        Timestamp/label line, input line and separator, newline terminated
    """
    timestamp = record.timestamp.strftime(TIMESTAMP_FORMAT)
    return (
        f"[{timestamp}] {record.label}\n"
        f"{INPUT_PREFIX}{record.payload}\n"
        f"{SEPARATOR}\n"
    )


def open_log(log_path: Path) -> IO[str]:
    """Open the log for appending.

    Text that cannot be encoded is written backslash-escaped. The parent
    directory is never created here; a missing directory surfaces as an
    OSError for the caller to handle.

    Args:
        log_path: Path to the log file

    Returns:
        Text handle in append mode
    """
    logger.debug("Opening rate limit log %s", log_path)
    return open(log_path, "a", encoding="utf-8", errors="backslashreplace")
