import re
from functools import lru_cache
from typing import List, Optional, Pattern, Tuple

_I = re.IGNORECASE

# Everything after one of these phrases is promotional text
SPAM_TAIL_PATTERN = re.compile(
    r'\s+(want more|watch and download|get of accounts|backup/latest|to watch video|#hd|#in)\b.*$', _I | re.DOTALL
)

# (pattern, replacement) pairs applied in order
NOISE_PATTERNS: List[Tuple[Pattern, str]] = [
    # links and file hosts
    (re.compile(r'(https?://)?t\.me/\S*', _I), ' '),
    (re.compile(r'(https?://|ftp://|www\.)\S*', _I), ' '),
    # bare domains, unless another dotted word follows ("Goes.To.Town")
    (re.compile(r"\b[a-z0-9-]+\.(com|net|org|io|to|cc|tv|xxx|html)\b(?!\.\w)\S*", _I), " "),
    (re.compile(r'\b(savefiles|lulustream|doodstream|streamtape|bigwarp)\b', _I), ' '),
    # arrow spam and escaped newlines
    (re.compile(r'[-=]>|<[-=]'), ' '),
    (re.compile(r'\\r\\n|\\n|\r\n|\n'), ' '),
    # platform prefixes
    (re.compile(r'\b(onlyfans|manyvids|fansly|patreon|fancentro|pornhub|xvideos|chaturbate|cam4|'
                r'myfreecams|mfc|streamate|mrluckyraw|tagteampov|baddiesonlypov)\b[-.\s]*', _I), ' '),
    # hype words
    (re.compile(r'\b(new|full|xxx|nsfw|leaked|exclusive|premium|vip|hot|sexy|latest|hd|rq)\b', _I), ' '),
    # dates, longest forms first
    (re.compile(r'\b(19|20)\d{2}[-_. ]\d{2}[-_. ]\d{2}\b'), ' '),
    (re.compile(r'\b\d{2}[-_. ]\d{2}[-_. ]\d{2}\b'), ' '),
    (re.compile(r'\b(19|20)\d{2}\b'), ' '),
    # resolution, source, codec, audio, container
    (re.compile(r'\b(2160p|1080p|720p|480p|4k|uhd|hd|sd)\b', _I), ' '),
    (re.compile(r'\b(web-?dl|webrip|bluray|blu-ray|hdtv|dvdrip|bdrip|brrip)\b', _I), ' '),
    (re.compile(r'\b(h\.?264|h\.?265|x264|x265|hevc|avc|mpeg|divx|xvid)\b', _I), ' '),
    (re.compile(r'\b(aac|ac3|dts|flac|mp3|dd5\.1|dd2\.0|atmos)\b', _I), ' '),
    (re.compile(r'\b(mp4|mkv|avi|wmv|mov|flv|m4v|ts|mpg)\b', _I), ' '),
    # bracketed groups
    (re.compile(r'\[[^\]]*\]'), ' '),
    (re.compile(r'\([^)]*\)'), ' '),
    # file sizes
    (re.compile(r'\b\d+(\.\d+)?\s?(gb|mb|gib|mib)\b', _I), ' '),
    # episode numbering
    (re.compile(r'\b(s\d{1,2}e\d{1,3}|e\d{2,3})\b', _I), ' '),
    # release tags
    (re.compile(r'\b(repack|proper|real|retail|extended|unrated|directors?[ .]cut|remastered|xleech|p2p|xc)\b', _I), ' '),
]

CLEANUP_PATTERNS: List[Tuple[Pattern, str]] = [
    (re.compile(r'\\"'), '"'),
    (re.compile(r'[-_.]{2,}'), ' '),
    # dotted and underscored release names
    (re.compile(r'(?<=\w)[._](?=\w)'), ' '),
    (re.compile(r'\s*[-_.]\s*(?=[-_.])'), ' '),
    (re.compile(r'\s+'), ' '),
]

EDGE_PUNCTUATION = re.compile(r'^[-_.",:;\s]+|[-_.",:;\s]+$')

_NON_WORD = re.compile(r'[^\w\s]')
_WHITESPACE = re.compile(r'\s+')


def _clean_once(title: str) -> str:
    cleaned = SPAM_TAIL_PATTERN.sub('', title)
    for pattern, replacement in NOISE_PATTERNS:
        cleaned = pattern.sub(replacement, cleaned)
    for pattern, replacement in CLEANUP_PATTERNS:
        cleaned = pattern.sub(replacement, cleaned)
    return EDGE_PUNCTUATION.sub('', cleaned.strip())


@lru_cache(maxsize=4096)
def normalize_title(title: str) -> str:
    """
    Strip indexer noise from a release title, leaving the content title.

    Case is preserved. Falls back to the raw title when nothing would remain.
    Applying it to its own output returns the same string.
    """
    if not title:
        return title or ''

    current = title
    while True:
        cleaned = _clean_once(current)
        if not cleaned or cleaned == current:
            break
        current = cleaned

    return current


def normalize_for_comparison(title: str) -> str:
    """Lower-case, punctuation to spaces, whitespace collapsed."""
    if not title:
        return ''
    return _WHITESPACE.sub(' ', _NON_WORD.sub(' ', title.lower())).strip()


def strip_entity_name(title: str, name: Optional[str]) -> str:
    """Remove a leading performer or studio name so the model compares scene titles only."""
    if not title or not name:
        return title
    pattern = re.compile(r'^' + re.escape(name) + r'\s*[-–—:,]?\s*', _I)
    stripped = EDGE_PUNCTUATION.sub('', pattern.sub('', title))
    return stripped if len(stripped) >= 5 else title
