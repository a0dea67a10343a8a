from functools import lru_cache

import Levenshtein

# Minimum length of the shorter title before a bare prefix counts as the same scene
MIN_PARTIAL_PREFIX_LENGTH = 20
TRUNCATION_RATIO = 0.7


@lru_cache(maxsize=8192)
def levenshtein_similarity(a: str, b: str) -> float:
    """(len(longer) - edit distance) / len(longer); two empty strings are identical."""
    longer, shorter = (a, b) if len(a) >= len(b) else (b, a)
    if not longer:
        return 1.0
    return (len(longer) - Levenshtein.distance(longer, shorter)) / len(longer)


def is_truncated_match(a: str, b: str, ratio: float = TRUNCATION_RATIO,
                       min_prefix_length: int = MIN_PARTIAL_PREFIX_LENGTH) -> bool:
    """
    True when one title looks like a cut-off copy of the other: the shorter is a
    prefix of the longer and is either most of its length or long enough on its own.
    """
    if not a or not b:
        return False
    longer, shorter = (a, b) if len(a) >= len(b) else (b, a)
    if not longer.startswith(shorter):
        return False
    return len(shorter) / len(longer) >= ratio or len(shorter) >= min_prefix_length
