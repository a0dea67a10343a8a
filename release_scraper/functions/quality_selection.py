import logging
from typing import List, Optional

from release_scraper.models import (
    CandidateGroup, MatchedGroup, QualityProfile, QualityProfileItem, RawRelease, SelectedRelease,
)
from release_scraper.functions.logging import log_event

ANY = 'any'


def release_satisfies(release: RawRelease, item: QualityProfileItem) -> bool:
    if item.quality != ANY and release.quality != item.quality:
        return False
    if item.source != ANY and release.source != item.source:
        return False
    if release.seeders < item.seeder_floor:
        return False
    max_size = item.max_size_bytes
    if max_size is not None and release.size_bytes > max_size:
        return False
    return True


def _most_seeded(releases: List[RawRelease]) -> RawRelease:
    # max() keeps the first release on ties
    return max(releases, key=lambda release: release.seeders)


def select_best_release(releases: List[RawRelease], profile: Optional[QualityProfile]) -> Optional[RawRelease]:
    """
    Pick one release according to the profile's preference order.

    The first profile item with any qualifying release wins, and among its
    qualifiers the most seeded is returned. Without a profile (or with an empty
    one) the most seeded release overall is returned. None when nothing qualifies.
    """
    if not releases:
        return None

    if profile is None or not profile.items:
        return _most_seeded(releases)

    for rank, item in enumerate(profile.items):
        qualifiers = [release for release in releases if release_satisfies(release, item)]
        if qualifiers:
            best = _most_seeded(qualifiers)
            logging.debug(f"Profile item {rank} ({item.quality}/{item.source}) matched {len(qualifiers)} releases, "
                          f"picked '{best.title}' with {best.seeders} seeders")
            return best

    return None


def select_for_matched(matched: List[MatchedGroup], profile: Optional[QualityProfile]) -> List[SelectedRelease]:
    selections = []
    for match in matched:
        best = select_best_release(match.group.releases, profile)
        if best is None:
            logging.warning(f"No release for scene {match.scene.id} '{match.scene.title}' satisfies the quality profile")
            continue

        selections.append(SelectedRelease.from_release(best, scene_id=match.scene.id))
        log_event('quality_selected', scene_id=match.scene.id, title=best.title, quality=best.quality,
                  source=best.source, seeders=best.seeders, size_bytes=best.size_bytes)
    return selections


def select_for_unmatched(unmatched: List[CandidateGroup], profile: Optional[QualityProfile],
                         min_indexers: int) -> List[SelectedRelease]:
    """Select releases for groups with no known scene, if enough distinct indexers carry them."""
    selections = []
    for group in unmatched:
        indexer_count = len(group.distinct_indexers())
        if indexer_count < min_indexers:
            logging.debug(f"Skipping unmatched '{group.title}': {indexer_count} indexers, need {min_indexers}")
            log_event('unmatched_skipped', group_title=group.title, indexers=indexer_count, minimum=min_indexers)
            continue

        best = select_best_release(group.releases, profile)
        if best is None:
            continue

        selections.append(SelectedRelease.from_release(best))
        log_event('quality_selected', scene_id=None, title=best.title, quality=best.quality,
                  source=best.source, seeders=best.seeders, size_bytes=best.size_bytes, indexers=indexer_count)
    return selections
