"""
Data models for storage layer.

Defines the records kept in the rate limit log.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class LimitWarningRecord:
    """Immutable entry of the rate limit log.

    Append-only records; once written they are never modified,
    rotated or truncated by this tool.
    """
    timestamp: datetime
    label: str
    payload: str
