import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from release_scraper.exceptions import ScrapeCancelledError
from release_scraper.models import UNKNOWN_INDEXER, RawRelease, SearchEntity
from release_scraper.functions.quality_detection import detect_quality, detect_source
from release_scraper.functions.logging import log_event
from release_scraper.prowlarr import extract_info_hash


def _as_int(value) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def build_release(item: Dict[str, Any]) -> Optional[RawRelease]:
    """Convert one gateway result into a RawRelease; results without a title are skipped."""
    title = item.get('title')
    if not title or not isinstance(title, str):
        return None

    indexer = item.get('indexerId')
    indexer_id = f"prowlarr-{indexer}" if indexer not in (None, '') else ''

    return RawRelease(
        title=title,
        size_bytes=_as_int(item.get('size')),
        seeders=_as_int(item.get('seeders')),
        quality=detect_quality(title),
        source=detect_source(title),
        indexer_id=indexer_id,
        indexer_name=item.get('indexer') or item.get('indexerName') or UNKNOWN_INDEXER,
        download_url=item.get('downloadUrl') or item.get('magnetUrl') or '',
        info_hash=extract_info_hash(item),
    )


def build_search_terms(entity: SearchEntity, include_aliases: bool = True) -> List[str]:
    candidates = [entity.name]
    if include_aliases:
        candidates.extend(entity.aliases or [])

    terms = []
    seen = set()
    for term in candidates:
        term = (term or '').strip()
        if term and term.lower() not in seen:
            seen.add(term.lower())
            terms.append(term)
    return terms


def _check_cancelled(cancel_event: Optional[threading.Event]):
    if cancel_event is not None and cancel_event.is_set():
        raise ScrapeCancelledError("Indexer search cancelled")


def search_term(gateway, term: str) -> List[RawRelease]:
    try:
        items = gateway.search(term)
    except Exception as e:
        logging.warning(f"Indexer search for '{term}' failed, skipping term: {str(e)}")
        log_event('term_search_completed', level=logging.WARNING, term=term, count=0, error=str(e))
        return []

    releases = [release for release in (build_release(item) for item in items or []) if release is not None]
    logging.info(f"Search term '{term}' returned {len(releases)} releases")
    log_event('term_search_completed', term=term, count=len(releases))
    return releases


def search_indexers(gateway, entity: SearchEntity, include_aliases: bool = True, max_workers: int = 1,
                    cancel_event: Optional[threading.Event] = None) -> List[RawRelease]:
    """
    Search every term for an entity and return all releases in term order.

    A term whose search fails contributes nothing. With max_workers > 1 terms are
    searched in parallel, but results are still concatenated in term order.
    """
    if gateway is None:
        logging.warning(f"No indexer configured; skipping search for '{entity.name}'")
        return []

    terms = build_search_terms(entity, include_aliases)
    _check_cancelled(cancel_event)

    if max_workers > 1 and len(terms) > 1:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(terms))) as executor:
            per_term = list(executor.map(lambda term: search_term(gateway, term), terms))
    else:
        per_term = []
        for term in terms:
            _check_cancelled(cancel_event)
            per_term.append(search_term(gateway, term))

    _check_cancelled(cancel_event)

    releases = [release for term_releases in per_term for release in term_releases]
    logging.info(f"Indexer search for '{entity.name}' returned {len(releases)} releases across {len(terms)} terms")
    log_event('indexer_search_completed', entity=entity.name, terms=len(terms), count=len(releases))
    return releases
