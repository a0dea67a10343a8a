import logging
from typing import Dict, List

from release_scraper.models import RawRelease
from release_scraper.functions.logging import log_event


def _release_key(release: RawRelease) -> str:
    if release.info_hash:
        return release.info_hash.lower()
    # No hash: the same upload tends to keep its exact title and size across indexers
    return f"{release.title}-{release.size_bytes}"


def _merge(existing: RawRelease, incoming: RawRelease) -> RawRelease:
    # indexers without an id are keyed by name
    indexer_ids = tuple(dict.fromkeys(existing.indexer_ids + incoming.indexer_ids))
    best = incoming if incoming.seeders > existing.seeders else existing
    return RawRelease(
        title=existing.title,
        size_bytes=existing.size_bytes or incoming.size_bytes,
        seeders=best.seeders,
        quality=existing.quality,
        source=existing.source,
        indexer_id=existing.indexer_id,
        indexer_name=existing.indexer_name,
        download_url=best.download_url or existing.download_url or incoming.download_url,
        info_hash=existing.info_hash or incoming.info_hash,
        indexer_ids=indexer_ids,
    )


def deduplicate_releases(releases: List[RawRelease]) -> List[RawRelease]:
    """Collapse the same torrent returned by several indexers into one release."""
    unique: Dict[str, RawRelease] = {}
    for release in releases:
        key = _release_key(release)
        if key in unique:
            unique[key] = _merge(unique[key], release)
        else:
            unique[key] = release

    results = list(unique.values())
    if len(results) != len(releases):
        logging.debug(f"Deduplicated {len(releases)} releases down to {len(results)}")
        log_event('releases_deduplicated', before=len(releases), after=len(results))
    return results
