import logging
import re
from functools import lru_cache
from typing import Iterable, List, Optional, Pattern

from release_scraper.models import RawRelease
from release_scraper.functions.logging import log_event

# Up to two unrelated words may sit between consecutive name words ("Jane Marie Doe")
MAX_INTERVENING_WORDS = 2
# Dotted and underscored release names separate words without spaces
WORD_SEPARATOR = r"[\s._]+"
# A name word that ends in punctuation ("A.J.") may run straight into the next one
OPTIONAL_SEPARATOR = r"[\s._]*"
# Letters and digits only; underscores count as separators
NOT_PRECEDED_BY_WORD = r"(?<![^\W_])"
NOT_FOLLOWED_BY_WORD = r"(?![^\W_])"


def _gap_after(word: str) -> str:
    leading = WORD_SEPARATOR if word[-1].isalnum() else OPTIONAL_SEPARATOR
    return rf"{leading}(?:[^\W_]+{WORD_SEPARATOR}){{0,{MAX_INTERVENING_WORDS}}}"


@lru_cache(maxsize=256)
def build_name_pattern(name: str) -> Optional[Pattern]:
    words = name.lower().split()
    if not words:
        return None

    body = re.escape(words[0])
    for previous, word in zip(words, words[1:]):
        body += _gap_after(previous) + re.escape(word)

    start = NOT_PRECEDED_BY_WORD if words[0][0].isalnum() else ''
    end = NOT_FOLLOWED_BY_WORD if words[-1][-1].isalnum() else ''
    return re.compile(start + body + end, re.IGNORECASE)


def title_contains_name(title: str, names: Iterable[str]) -> bool:
    for name in names:
        pattern = build_name_pattern(name)
        if pattern is not None and pattern.search(title):
            return True
    return False


def apply_name_filter(releases: List[RawRelease], name: str, aliases: Optional[Iterable[str]] = None) -> List[RawRelease]:
    """Drop releases whose title does not contain the entity name or an alias, words in order."""
    allowed = [n.lower() for n in [name, *(aliases or [])] if n and n.strip()]
    if not allowed:
        logging.warning("Name filter called without a name; keeping every release")
        return list(releases)

    kept = [release for release in releases if title_contains_name(release.title, allowed)]

    eliminated = len(releases) - len(kept)
    if eliminated:
        logging.info(f"Name filter for '{name}' eliminated {eliminated} of {len(releases)} releases")
        log_event('filter_eliminated', entity=name, before=len(releases), after=len(kept), eliminated=eliminated)
    return kept
