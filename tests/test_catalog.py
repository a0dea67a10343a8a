import unittest
import sys
import os

# Add the project root to the path so we can import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from release_scraper.catalog import CatalogStore, InMemoryCatalogStore, fetch_known_scenes
from release_scraper.exceptions import CatalogContractError
from release_scraper.models import CatalogScene, SearchEntity


class EndlessCatalog(CatalogStore):
    """Always returns a full page."""

    def __init__(self):
        self.calls = []

    def find_known_scenes_for_entity(self, entity_type, entity_id, limit, offset):
        self.calls.append((limit, offset))
        return [CatalogScene(id=str(offset + i), title=f"Scene {offset + i}") for i in range(limit)]


class CountingCatalog(InMemoryCatalogStore):

    def __init__(self, scenes_by_entity):
        super().__init__(scenes_by_entity)
        self.calls = 0

    def find_known_scenes_for_entity(self, entity_type, entity_id, limit, offset):
        self.calls += 1
        return super().find_known_scenes_for_entity(entity_type, entity_id, limit, offset)


class TestFetchKnownScenes(unittest.TestCase):

    def setUp(self):
        self.entity = SearchEntity(id="e1", name="Jane Doe")

    def test_capped_at_limit_in_batches(self):
        store = EndlessCatalog()
        scenes = fetch_known_scenes(store, self.entity, limit=500, batch_size=50)
        self.assertEqual(len(scenes), 500)
        self.assertEqual(len(store.calls), 10)
        self.assertEqual(store.calls[0], (50, 0))
        self.assertEqual(store.calls[-1], (50, 450))

    def test_short_page_stops_fetching(self):
        scenes = [CatalogScene(id=str(i), title=f"Scene {i}") for i in range(120)]
        store = CountingCatalog({"e1": scenes})
        result = fetch_known_scenes(store, self.entity, limit=500, batch_size=50)
        self.assertEqual([s.id for s in result], [str(i) for i in range(120)])
        self.assertEqual(store.calls, 3)

    def test_concurrent_fetch_is_reassembled_in_order(self):
        scenes = [CatalogScene(id=str(i), title=f"Scene {i}") for i in range(120)]
        store = InMemoryCatalogStore({"e1": scenes})
        sequential = fetch_known_scenes(store, self.entity, limit=500, batch_size=50)
        concurrent = fetch_known_scenes(store, self.entity, limit=500, batch_size=50, max_workers=4)
        self.assertEqual(sequential, concurrent)

    def test_mappings_are_coerced_and_deduplicated(self):
        store = InMemoryCatalogStore({"e1": [
            {'id': 1, 'title': 'Beach Day Fun', 'performerIds': [5]},
            {'id': 1, 'title': 'Beach Day Fun'},
            {'id': '2', 'title': 'Mountain Hike', 'studio_id': 's9'},
        ]})
        result = fetch_known_scenes(store, self.entity)
        self.assertEqual([s.id for s in result], ['1', '2'])
        self.assertEqual(result[0].performer_ids, ('5',))
        self.assertEqual(result[1].studio_id, 's9')

    def test_malformed_record_raises(self):
        store = InMemoryCatalogStore({"e1": [{'title': 'no id'}]})
        with self.assertRaises(CatalogContractError):
            fetch_known_scenes(store, self.entity)

        store = InMemoryCatalogStore({"e1": ["just a string"]})
        with self.assertRaises(CatalogContractError):
            fetch_known_scenes(store, self.entity)

    def test_zero_limit(self):
        store = EndlessCatalog()
        self.assertEqual(fetch_known_scenes(store, self.entity, limit=0), [])
        self.assertEqual(store.calls, [])


if __name__ == '__main__':
    unittest.main()
