import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, List, Sequence, Union

from release_scraper.exceptions import CatalogContractError
from release_scraper.models import CatalogScene, SearchEntity

DEFAULT_SCENE_LIMIT = 500
DEFAULT_BATCH_SIZE = 50

SceneRecord = Union[CatalogScene, Mapping]


class CatalogStore(ABC):
    """Read access to the known scenes of tracked performers and studios"""

    @abstractmethod
    def find_known_scenes_for_entity(self, entity_type: str, entity_id: str,
                                     limit: int, offset: int) -> List[SceneRecord]:
        """Return up to `limit` scenes starting at `offset`, in a stable order"""
        pass


class InMemoryCatalogStore(CatalogStore):
    def __init__(self, scenes_by_entity: Dict[str, Sequence[SceneRecord]] = None):
        self.scenes_by_entity = dict(scenes_by_entity or {})

    def find_known_scenes_for_entity(self, entity_type, entity_id, limit, offset):
        scenes = self.scenes_by_entity.get(entity_id, [])
        return list(scenes[offset:offset + limit])


def coerce_scene(record: SceneRecord) -> CatalogScene:
    if isinstance(record, CatalogScene):
        return record
    if not isinstance(record, Mapping):
        raise CatalogContractError(f"Catalog returned a {type(record).__name__}, expected a scene record")

    scene_id = record.get('id')
    title = record.get('title')
    if scene_id is None or scene_id == '' or not isinstance(title, str):
        raise CatalogContractError(f"Catalog scene record is missing id or title: {dict(record)!r}")

    performers = record.get('performer_ids') or record.get('performerIds') or ()
    return CatalogScene(
        id=str(scene_id),
        title=title,
        date=record.get('date'),
        performer_ids=tuple(str(p) for p in performers),
        studio_id=record.get('studio_id', record.get('studioId')),
    )


def _fetch_batch(store: CatalogStore, entity: SearchEntity, batch_size: int, offset: int) -> List[CatalogScene]:
    records = store.find_known_scenes_for_entity(entity.entity_type, entity.id, batch_size, offset)
    if records is None:
        raise CatalogContractError(f"Catalog returned None for {entity.entity_type} {entity.id} at offset {offset}")
    return [coerce_scene(record) for record in records]


def _dedupe(scenes: Iterable[CatalogScene], limit: int) -> List[CatalogScene]:
    seen = set()
    unique = []
    for scene in scenes:
        if scene.id in seen:
            continue
        seen.add(scene.id)
        unique.append(scene)
        if len(unique) >= limit:
            break
    return unique


def fetch_known_scenes(store: CatalogStore, entity: SearchEntity, limit: int = DEFAULT_SCENE_LIMIT,
                       batch_size: int = DEFAULT_BATCH_SIZE, max_workers: int = 1) -> List[CatalogScene]:
    """
    Fetch at most `limit` known scenes for an entity in `batch_size` pages.

    Sequential fetching stops at the first short page. With max_workers > 1 every
    page up to the limit is requested at once and the pages are reassembled in
    offset order, so the result is the same either way.
    """
    if limit <= 0:
        return []
    batch_size = max(1, min(batch_size, limit))
    offsets = list(range(0, limit, batch_size))

    if max_workers > 1 and len(offsets) > 1:
        with ThreadPoolExecutor(max_workers=min(max_workers, len(offsets))) as executor:
            pages = list(executor.map(lambda offset: _fetch_batch(store, entity, batch_size, offset), offsets))
        # Drop everything after the first short page
        scenes = []
        for page in pages:
            scenes.extend(page)
            if len(page) < batch_size:
                break
    else:
        scenes = []
        for offset in offsets:
            page = _fetch_batch(store, entity, batch_size, offset)
            scenes.extend(page)
            if len(page) < batch_size:
                break

    unique = _dedupe(scenes, limit)
    logging.info(f"Fetched {len(unique)} known scenes for {entity.entity_type} '{entity.name}'")
    return unique
