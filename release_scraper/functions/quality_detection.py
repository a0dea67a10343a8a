import re
from typing import List, Pattern, Tuple

# First match wins, so higher resolutions come first
QUALITY_PATTERNS: List[Tuple[Pattern, str]] = [
    (re.compile(r'2160p|4k', re.IGNORECASE), '2160p'),
    (re.compile(r'1080p', re.IGNORECASE), '1080p'),
    (re.compile(r'720p', re.IGNORECASE), '720p'),
    (re.compile(r'480p', re.IGNORECASE), '480p'),
]

SOURCE_PATTERNS: List[Tuple[Pattern, str]] = [
    (re.compile(r'web-dl|webdl', re.IGNORECASE), 'WEB-DL'),
    (re.compile(r'webrip', re.IGNORECASE), 'WEBRip'),
    (re.compile(r'bluray|blu-ray', re.IGNORECASE), 'BluRay'),
    (re.compile(r'hdtv', re.IGNORECASE), 'HDTV'),
]

UNKNOWN = 'Unknown'

def _first_label(title: str, table: List[Tuple[Pattern, str]]) -> str:
    if not title:
        return UNKNOWN
    for pattern, label in table:
        if pattern.search(title):
            return label
    return UNKNOWN

def detect_quality(title: str) -> str:
    return _first_label(title, QUALITY_PATTERNS)

def detect_source(title: str) -> str:
    return _first_label(title, SOURCE_PATTERNS)
