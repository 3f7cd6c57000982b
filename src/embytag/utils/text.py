"""Text utilities for title matching and file paths."""

import re

from rapidfuzz.distance import Levenshtein

_PATH_SEPARATORS = re.compile(r"[/\\]")


def similarity(a: str | None, b: str | None) -> float:
    """
    Score how alike two titles are, from 0 (unrelated) to 1 (identical).

    Comparison is case-insensitive and based on Levenshtein distance
    normalised by the longer string:

        1 - distance(a, b) / max(len(a), len(b))

    Examples:
        similarity("Alien", "alien")  → 1.0
        similarity("Alien", "Aliens") → 0.833…
        similarity("", "Alien")       → 0.0

    Args:
        a: First title
        b: Second title

    Returns:
        Similarity in [0, 1]; 0 when either title is empty
    """
    if not a or not b:
        return 0.0

    a = a.lower()
    b = b.lower()
    if a == b:
        return 1.0

    distance = Levenshtein.distance(a, b)
    return 1.0 - distance / max(len(a), len(b))


def parent_directory(path: str) -> str:
    """
    Return the directory part of a file path, accepting / and \\ separators.

    The result always uses "/" so Windows and POSIX paths of the same
    folder compare equal:

        "D:\\Movies\\Heat\\heat.cd1.mkv" → "D:/Movies/Heat"
        "/media/heat/heat.cd2.mkv"       → "/media/heat"
    """
    return "/".join(_PATH_SEPARATORS.split(path)[:-1])
