"""
Near-miss matching against fixed enumerations.

Source systems type status labels by hand, with and without Vietnamese
diacritics. A value is matched to the closest enumeration member after
folding case, whitespace and diacritics.
"""

import unicodedata
from collections.abc import Iterable

from rapidfuzz.distance import Levenshtein

# Letters that do not decompose under NFD
_FOLD_TABLE = str.maketrans({"đ": "d", "Đ": "d"})


def normalize_label(value: str) -> str:
    """
    Fold a label for comparison.

    Removes all whitespace, lower-cases and strips combining marks, so
    ``"Đã  giao"`` and ``"da giao"`` both become ``"dagiao"``.
    """
    folded = "".join(value.split()).lower().translate(_FOLD_TABLE)
    decomposed = unicodedata.normalize("NFD", folded)
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def canonical_member(value: str, members: Iterable[str]) -> str | None:
    """Return the member equal to ``value`` ignoring case and surrounding space."""
    target = value.strip().casefold()
    for member in members:
        if member.casefold() == target:
            return member
    return None


def closest_member(value: str, members: Iterable[str], ratio: float) -> str | None:
    """
    Find the enumeration member nearest to ``value``.

    A member qualifies when the edit distance between the normalized
    forms is at most ``ratio`` times the member's normalized length.
    Among qualifying members the smallest distance wins; ties keep the
    first member in enumeration order.

    Args:
        value: Candidate text.
        members: Valid enumeration members.
        ratio: Allowed distance relative to the member's length.

    Returns:
        The matching member, or None when nothing is close enough.
    """
    needle = normalize_label(value)
    best: str | None = None
    best_distance: int | None = None

    for member in members:
        target = normalize_label(member)
        distance = Levenshtein.distance(needle, target)
        if distance > len(target) * ratio:
            continue
        if best_distance is None or distance < best_distance:
            best, best_distance = member, distance

    return best
