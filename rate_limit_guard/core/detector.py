"""
Payload detection against keyword families.

Applies independent pattern checks to an opaque hook payload.
"""

from typing import Iterable, List

from .patterns import DEFAULT_FAMILIES, PatternFamily


def detect_families(
    payload: str,
    families: Iterable[PatternFamily] = DEFAULT_FAMILIES,
) -> List[PatternFamily]:
    """Return every family with at least one keyword in the payload.

    Each family is checked independently, so a payload can match
    several families. Results keep the order of ``families``.

    Args:
        payload: Raw hook input
        families: Keyword families to check

    Returns:
        Matching families (empty if none)
    """
    if not payload:
        return []
    return [family for family in families if family.matches(payload)]


def matched_terms(payload: str, family: PatternFamily) -> List[str]:
    """List the distinct keywords of a family found in the payload.

    Terms are lowercased and returned in order of first appearance.
    """
    terms: List[str] = []
    for match in family.pattern.finditer(payload):
        term = match.group(0).lower()
        if term and term not in terms:
            terms.append(term)
    return terms
