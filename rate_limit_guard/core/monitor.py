"""
Rate limit hook.

Annotates the shared log when a host runtime event payload looks like
a rate limit or usage limit condition. The hook is fire-and-forget:
it never fails and never blocks the host that invoked it.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import IO, Iterable, Optional

from rich.console import Console

from ..storage.log_file import default_log_path
from ..storage.models import LimitWarningRecord
from ..storage.repository import append_record
from .detector import detect_families
from .patterns import DEFAULT_FAMILIES, PatternFamily

logger = logging.getLogger(__name__)

# The host treats any non-zero status as a hook failure
EXIT_CODE_HOOK = 0

DEFAULT_LOG_DISPLAY = "~/.claude/rate-limit.log"


def read_payload(stream: Optional[IO]) -> str:
    """Read one hook payload from stdin or another stream.

    Bytes are decoded as UTF-8 with undecodable sequences replaced, so
    keywords around them still match. Trailing newlines are dropped,
    like shell command substitution. A missing or unreadable stream
    yields an empty payload.
    """
    if stream is None:
        return ""
    raw = getattr(stream, "buffer", stream)
    try:
        data = raw.read()
    except (OSError, UnicodeDecodeError, ValueError) as e:
        logger.debug("Could not read hook payload: %s", e)
        return ""
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    return data.rstrip("\n")


def warning_console() -> Console:
    """Console that writes warnings to stderr, never stdout."""
    return Console(stderr=True, highlight=False, soft_wrap=True)


def run_hook(
    payload: str,
    log_path: Optional[Path] = None,
    console: Optional[Console] = None,
    now: Optional[datetime] = None,
    families: Iterable[PatternFamily] = DEFAULT_FAMILIES,
) -> int:
    """Check a payload and annotate the log for every matching family.

    For each matching family one record is appended to the log and one
    warning line is printed. Nothing that goes wrong while persisting
    escapes: the error is logged at DEBUG and the warning is still printed.

    Args:
        payload: Raw event payload from the host runtime
        log_path: Log file (defaults to ~/.claude/rate-limit.log)
        console: Console for warnings (defaults to stderr)
        now: Timestamp shared by all records of this invocation
        families: Keyword families to check

    Returns:
        Always EXIT_CODE_HOOK
    """
    matches = detect_families(payload, families)
    if not matches:
        return EXIT_CODE_HOOK

    if log_path is None:
        try:
            log_path = default_log_path()
        except (RuntimeError, KeyError) as e:
            # No usable home directory
            logger.debug("Could not resolve rate limit log path: %s", e)
    console = console or warning_console()
    timestamp = (now or datetime.now()).replace(microsecond=0)

    for family in matches:
        if log_path is not None:
            record = LimitWarningRecord(timestamp=timestamp, label=family.label, payload=payload)
            try:
                append_record(record, log_path)
            except Exception as e:
                logger.debug("Could not write %s record to %s: %s", family.name, log_path, e)
        _warn(console, f"⚠️  {family.notice} - logged to {log_path or DEFAULT_LOG_DISPLAY}")

    return EXIT_CODE_HOOK


def _warn(console: Console, message: str) -> None:
    try:
        console.print(message, markup=False)
    except (OSError, UnicodeError, ValueError) as e:
        logger.debug("Could not print warning: %s", e)
