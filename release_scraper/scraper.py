import logging
import threading
import time
from typing import Any, Dict, Iterable, List, Optional

from release_scraper.catalog import CatalogStore, fetch_known_scenes
from release_scraper.exceptions import ScrapeCancelledError
from release_scraper.indexer_search import search_indexers
from release_scraper.models import SearchEntity, SelectedRelease
from release_scraper.prowlarr import ProwlarrGateway
from release_scraper.quality_profiles import ConfigQualityProfileStore, QualityProfileStore
from release_scraper.semantic_oracle import SemanticOracle
from release_scraper.functions import (
    apply_name_filter,
    deduplicate_releases,
    group_releases,
    merge_similar_groups,
    match_groups,
    select_for_matched,
    select_for_unmatched,
)
from release_scraper.functions.logging import log_event
from utilities.settings import get_setting


class ReleaseScraper:
    """
    Runs the search, filter, group, match and select pipeline for tracked entities.

    `settings` optionally overrides config values as {section: {key: value}};
    anything not given there is read with get_setting().
    """

    def __init__(self, gateway, catalog_store: CatalogStore, profile_store: QualityProfileStore,
                 oracle: Optional[SemanticOracle] = None, settings: Optional[Dict[str, Dict[str, Any]]] = None):
        self.gateway = gateway
        self.catalog_store = catalog_store
        self.profile_store = profile_store
        self.oracle = oracle if oracle is not None else SemanticOracle()
        self.settings = settings or {}

    def _setting(self, section: str, key: str):
        overrides = self.settings.get(section, {})
        if key in overrides:
            return overrides[key]
        return get_setting(section, key)

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event], stage: str):
        if cancel_event is not None and cancel_event.is_set():
            raise ScrapeCancelledError(f"Scrape cancelled before {stage}")

    def scrape_entity(self, entity: SearchEntity, quality_profile_id=None,
                      include_metadata_missing: Optional[bool] = None,
                      include_aliases: Optional[bool] = None,
                      cancel_event: Optional[threading.Event] = None) -> List[SelectedRelease]:
        """Return the selected releases for one entity: matched scenes first, then accepted unmatched groups."""
        start_time = time.time()
        if include_metadata_missing is None:
            include_metadata_missing = bool(self._setting('Scraping', 'include_metadata_missing'))
        if include_aliases is None:
            include_aliases = bool(self._setting('Scraping', 'include_aliases'))

        logging.info(f"Scraping releases for {entity.entity_type} '{entity.name}'")

        releases = search_indexers(
            self.gateway, entity,
            include_aliases=include_aliases,
            max_workers=int(self._setting('Scraping', 'search_concurrency')),
            cancel_event=cancel_event,
        )
        if not releases:
            logging.info(f"No releases found for '{entity.name}'")
            log_event('scrape_completed', entity=entity.name, selected=0, duration=round(time.time() - start_time, 3))
            return []

        releases = deduplicate_releases(releases)
        aliases = entity.aliases if include_aliases else []
        releases = apply_name_filter(releases, entity.name, aliases)

        self._check_cancelled(cancel_event, 'grouping')
        groups = group_releases(releases, float(self._setting('Scraping', 'grouping_threshold')))

        oracle_available = self.oracle.is_available()
        if oracle_available:
            self._check_cancelled(cancel_event, 'semantic merge')
            groups = merge_similar_groups(groups, self.oracle, float(self._setting('Semantic Matching', 'merge_threshold')))

        self._check_cancelled(cancel_event, 'catalog fetch')
        scenes = fetch_known_scenes(
            self.catalog_store, entity,
            limit=int(self._setting('Scraping', 'scene_fetch_limit')),
            batch_size=int(self._setting('Scraping', 'scene_batch_size')),
            max_workers=int(self._setting('Scraping', 'catalog_fetch_concurrency')),
        )

        self._check_cancelled(cancel_event, 'matching')
        match_result = match_groups(
            groups, scenes,
            oracle=self.oracle if oracle_available else None,
            match_threshold=float(self._setting('Semantic Matching', 'match_threshold')),
            entity_name=entity.name,
        )

        profile = self.profile_store.get_profile(quality_profile_id) if quality_profile_id is not None else None
        if profile is None or not profile.items:
            logging.debug(f"No usable quality profile '{quality_profile_id}'; falling back to most seeders")

        self._check_cancelled(cancel_event, 'selection')
        selections = select_for_matched(match_result.matched, profile)
        if include_metadata_missing:
            selections.extend(select_for_unmatched(
                match_result.unmatched, profile,
                int(self._setting('Scraping', 'min_indexers_for_metadata_less')),
            ))

        duration = time.time() - start_time
        logging.info(f"Selected {len(selections)} releases for '{entity.name}' in {duration:.2f}s "
                     f"({len(match_result.matched)} matched, {len(match_result.unmatched)} unmatched groups)")
        log_event('scrape_completed', entity=entity.name, selected=len(selections),
                  matched=len(match_result.matched), unmatched=len(match_result.unmatched),
                  duration=round(duration, 3))
        return selections

    def scrape_entities(self, entities: Iterable[SearchEntity], quality_profile_id=None,
                        cancel_event: Optional[threading.Event] = None, **kwargs) -> Dict[str, List[SelectedRelease]]:
        """Scrape several entities; one entity failing leaves the others untouched."""
        results: Dict[str, List[SelectedRelease]] = {}
        for entity in entities:
            try:
                results[entity.id] = self.scrape_entity(entity, quality_profile_id, cancel_event=cancel_event, **kwargs)
            except ScrapeCancelledError:
                logging.info("Scrape batch cancelled")
                raise
            except Exception as e:
                logging.error(f"Error scraping '{entity.name}': {str(e)}", exc_info=True)
                log_event('entity_failed', level=logging.ERROR, entity=entity.name, error=str(e))
                results[entity.id] = []
        return results


def create_scraper_from_settings(catalog_store: CatalogStore,
                                 profile_store: Optional[QualityProfileStore] = None) -> ReleaseScraper:
    return ReleaseScraper(
        gateway=ProwlarrGateway.from_settings(),
        catalog_store=catalog_store,
        profile_store=profile_store or ConfigQualityProfileStore(),
        oracle=SemanticOracle.from_settings(),
    )
