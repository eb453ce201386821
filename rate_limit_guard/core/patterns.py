"""
Keyword families for limit detection.

Defines the fixed rate-limit and usage indicator patterns.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class WarningKind(Enum):
    """Kinds of warnings written to the rate limit log."""
    RATE_LIMIT = "rate_limit"
    USAGE = "usage"

    @property
    def label(self) -> str:
        """Label line written after the timestamp."""
        return _LABELS[self]


_LABELS = {
    WarningKind.RATE_LIMIT: "RATE LIMIT WARNING",
    WarningKind.USAGE: "USAGE WARNING",
}

# Matched per line, so '.' never spans a newline
RATE_LIMIT_PATTERN = r"rate.?limit|too many requests|quota|capacity|throttl|overloaded|try again|429|503"
USAGE_PATTERN = r"usage.?(limit|cap)|plan.?limit|exceeded|maximum"


@dataclass(frozen=True)
class PatternFamily:
    """A named keyword alternation and how its matches are reported."""
    name: str
    label: str
    pattern: re.Pattern
    notice: str

    def matches(self, payload: str) -> bool:
        """Return True if any keyword of this family occurs in the payload."""
        return self.pattern.search(payload) is not None


def compile_pattern(expression: str) -> re.Pattern:
    """Compile a keyword alternation the way the hook matches it.

    Raises:
        re.error: If the expression is not a valid regular expression
    """
    return re.compile(expression, re.IGNORECASE)


RATE_LIMIT_FAMILY = PatternFamily(
    name=WarningKind.RATE_LIMIT.value,
    label=WarningKind.RATE_LIMIT.label,
    pattern=compile_pattern(RATE_LIMIT_PATTERN),
    notice="Rate limit detected",
)

USAGE_FAMILY = PatternFamily(
    name=WarningKind.USAGE.value,
    label=WarningKind.USAGE.label,
    pattern=compile_pattern(USAGE_PATTERN),
    notice="Usage warning detected",
)

# Order matters: rate-limit records are written before usage records
DEFAULT_FAMILIES: Tuple[PatternFamily, ...] = (RATE_LIMIT_FAMILY, USAGE_FAMILY)
