import unittest
from unittest.mock import patch
import tempfile
import shutil
import json
import sys
import os

# Add the project root to the path so we can import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from utilities.settings import get_setting, set_setting, load_config, validate_url, parse_bool
from release_scraper.quality_profiles import ConfigQualityProfileStore, profile_from_dict


class SettingsTestCase(unittest.TestCase):

    def setUp(self):
        self.config_dir = tempfile.mkdtemp()
        self.env = patch.dict(os.environ, {'USER_CONFIG': self.config_dir})
        self.env.start()

    def tearDown(self):
        self.env.stop()
        shutil.rmtree(self.config_dir, ignore_errors=True)

    def write_config(self, config):
        with open(os.path.join(self.config_dir, 'config.json'), 'w') as f:
            json.dump(config, f)


class TestSettings(SettingsTestCase):

    def test_schema_defaults_without_config_file(self):
        self.assertEqual(load_config(), {})
        self.assertEqual(get_setting('Scraping', 'scene_fetch_limit'), 500)
        self.assertEqual(get_setting('Semantic Matching', 'merge_threshold'), 0.92)
        self.assertEqual(get_setting('Scraping', 'min_indexers_for_metadata_less'), 2)

    def test_caller_default_beats_schema(self):
        self.assertEqual(get_setting('Debug', 'logging_level', 'DEBUG'), 'DEBUG')

    def test_set_and_get(self):
        set_setting('Prowlarr', 'url', 'prowlarr:9696/')
        set_setting('Prowlarr', 'enabled', 'true')
        self.assertEqual(get_setting('Prowlarr', 'url'), 'http://prowlarr:9696')
        self.assertIs(get_setting('Prowlarr', 'enabled'), True)

    def test_corrupt_config_uses_backup(self):
        with open(os.path.join(self.config_dir, 'config.json'), 'w') as f:
            f.write('{not json')
        with open(os.path.join(self.config_dir, 'config.json.backup'), 'w') as f:
            json.dump({'Scraping': {'scene_batch_size': 25}}, f)
        self.assertEqual(get_setting('Scraping', 'scene_batch_size'), 25)

    def test_helpers(self):
        self.assertEqual(validate_url(''), '')
        self.assertEqual(validate_url('https://host:1/'), 'https://host:1')
        self.assertTrue(parse_bool('on'))
        self.assertFalse(parse_bool('no'))


class TestConfigQualityProfiles(SettingsTestCase):

    def test_profile_from_config(self):
        self.write_config({'Quality Profiles': {'7': {'name': 'HD first', 'items': [
            {'quality': '1080p', 'source': 'any', 'minSeeders': 'any', 'maxSize': 4},
            {'quality': 'any', 'source': 'any', 'minSeeders': 5, 'maxSize': 0},
        ]}}})
        profile = ConfigQualityProfileStore().get_profile(7)
        self.assertEqual(profile.name, 'HD first')
        self.assertEqual(len(profile.items), 2)
        self.assertEqual(profile.items[0].max_size_bytes, 4e9)
        self.assertEqual(profile.items[0].seeder_floor, 0)
        self.assertEqual(profile.items[1].seeder_floor, 5)
        self.assertIsNone(profile.items[1].max_size_bytes)

    def test_missing_profile(self):
        self.assertIsNone(ConfigQualityProfileStore().get_profile('nope'))
        self.assertIsNone(ConfigQualityProfileStore().get_profile(None))

    def test_profile_defaults(self):
        profile = profile_from_dict('x', {'items': [{}]})
        self.assertEqual(profile.items[0].quality, 'any')
        self.assertEqual(profile.items[0].source, 'any')
        self.assertEqual(profile.items[0].min_seeders, 'any')


if __name__ == '__main__':
    unittest.main()
