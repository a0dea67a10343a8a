import logging
import re
from typing import Dict, Iterable, List, Optional, Set

from release_scraper.models import CandidateGroup, RawRelease
from release_scraper.functions.title_normalizer import normalize_title
from release_scraper.functions.logging import log_event

# Content titles shorter than this are too generic to merge with anything
MIN_GROUPABLE_LENGTH = 15
# Both titles of a truncated pair must be at least this long
MIN_TRUNCATED_LENGTH = 30
DEFAULT_MERGE_THRESHOLD = 0.92

_NAME_TOKEN_SPLIT = re.compile(r'[\s,\-&]+')


def group_key(title: str) -> str:
    return title.casefold()


class GroupArena:
    """
    Insertion-ordered store of candidate groups addressed by integer handles.

    Merging two groups goes through replace(), which removes both and puts the
    combined group where the earlier of the two used to be. rekey() gives a
    group a new title in place.
    """

    def __init__(self, groups: Optional[Iterable[CandidateGroup]] = None):
        self._order: List[int] = []
        self._groups: Dict[int, CandidateGroup] = {}
        self._next_handle = 0
        for group in groups or []:
            self.add(group)

    def __len__(self):
        return len(self._order)

    def add(self, group: CandidateGroup) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._order.append(handle)
        self._groups[handle] = group
        return handle

    def get(self, handle: int) -> CandidateGroup:
        return self._groups[handle]

    def handles(self) -> List[int]:
        return list(self._order)

    def replace(self, handle_a: int, handle_b: int, title: str) -> int:
        group_a, group_b = self._groups[handle_a], self._groups[handle_b]
        position = min(self._order.index(handle_a), self._order.index(handle_b))
        first, second = (group_a, group_b) if self._order.index(handle_a) == position else (group_b, group_a)

        merged = CandidateGroup(title=title, releases=first.releases + second.releases)
        for handle in (handle_a, handle_b):
            self._order.remove(handle)
            del self._groups[handle]

        handle = self._next_handle
        self._next_handle += 1
        self._order.insert(position, handle)
        self._groups[handle] = merged
        return handle

    def rekey(self, handle: int, title: str) -> None:
        group = self._groups[handle]
        self._groups[handle] = CandidateGroup(title=title, releases=group.releases)

    def groups(self) -> List[CandidateGroup]:
        return [self._groups[handle] for handle in self._order]


def _find_structural_match(arena: GroupArena, key: str, grouping_threshold: float) -> Optional[int]:
    for handle in arena.handles():
        existing_key = group_key(arena.get(handle).title)
        if len(existing_key) < MIN_GROUPABLE_LENGTH:
            continue
        if existing_key == key:
            return handle

        shorter, longer = sorted((existing_key, key), key=len)
        if (len(shorter) >= MIN_TRUNCATED_LENGTH
                and len(shorter) < len(longer)
                and longer.startswith(shorter)
                and len(shorter) / len(longer) >= grouping_threshold):
            return handle
    return None


def group_releases(releases: List[RawRelease], grouping_threshold: float = 0.7) -> List[CandidateGroup]:
    """Group releases whose content titles are identical or one is a cut-off copy of the other."""
    arena = GroupArena()

    for release in releases:
        title = normalize_title(release.title)

        if len(title) < MIN_GROUPABLE_LENGTH:
            arena.add(CandidateGroup(title=title, releases=[release]))
            continue

        handle = _find_structural_match(arena, group_key(title), grouping_threshold)
        if handle is None:
            arena.add(CandidateGroup(title=title, releases=[release]))
            continue

        group = arena.get(handle)
        group.releases.append(release)
        if len(title) > len(group.title):
            logging.debug(f"Re-keying group '{group.title}' under longer title '{title}'")
            arena.rekey(handle, title)

    groups = arena.groups()
    logging.info(f"Grouped {len(releases)} releases into {len(groups)} candidate groups")
    log_event('groups_built', releases=len(releases), groups=len(groups))
    return groups


def extract_name_tokens(title: str) -> Set[str]:
    """Capitalized words longer than two characters, lower-cased for comparison."""
    return {
        word.lower() for word in _NAME_TOKEN_SPLIT.split(title or '')
        if len(word) > 2 and word[0].isupper()
    }


def _names_conflict(title_a: str, title_b: str) -> bool:
    tokens_a, tokens_b = extract_name_tokens(title_a), extract_name_tokens(title_b)
    return bool(tokens_a) and bool(tokens_b) and tokens_a.isdisjoint(tokens_b)


def merge_similar_groups(groups: List[CandidateGroup], oracle, threshold: float = DEFAULT_MERGE_THRESHOLD) -> List[CandidateGroup]:
    """
    Merge groups whose titles the similarity model scores at or above threshold.

    Single greedy pass in group order. A merged group keeps the longer title and
    is compared against the remaining groups under that title. Pairs with
    capitalized name tokens on both sides and none in common are never sent to
    the model.
    """
    if oracle is None or len(groups) < 2 or not oracle.is_available():
        return groups

    arena = GroupArena(groups)
    merges = 0
    skipped_by_names = 0

    index_a = 0
    while index_a < len(arena):
        handle_a = arena.handles()[index_a]
        index_b = index_a + 1
        while index_b < len(arena):
            title_a = arena.get(handle_a).title
            if len(title_a) < MIN_GROUPABLE_LENGTH:
                break

            handle_b = arena.handles()[index_b]
            title_b = arena.get(handle_b).title
            if len(title_b) < MIN_GROUPABLE_LENGTH:
                index_b += 1
                continue

            if _names_conflict(title_a, title_b):
                skipped_by_names += 1
                index_b += 1
                continue

            score = oracle.similarity(title_a, title_b)
            if score is None or score < threshold:
                index_b += 1
                continue

            merged_title = title_a if len(title_a) >= len(title_b) else title_b
            handle_a = arena.replace(handle_a, handle_b, merged_title)
            merges += 1
            logging.debug(f"Merged '{title_a}' and '{title_b}' (similarity {score:.3f})")
            log_event('group_merged', title_a=title_a, title_b=title_b, merged_title=merged_title, score=round(score, 4))
        index_a += 1

    if merges or skipped_by_names:
        logging.info(f"Semantic merge: {merges} merges, {skipped_by_names} pairs skipped for differing names")
    return arena.groups()
