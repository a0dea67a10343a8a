import unittest
from unittest.mock import MagicMock, patch
import sys
import os

import requests

# Add the project root to the path so we can import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from api_tracker import api
from release_scraper.exceptions import IndexerUnavailableError
from release_scraper.prowlarr import ProwlarrGateway, parse_indexer_ids, extract_info_hash


def json_response(data):
    response = MagicMock()
    response.json.return_value = data
    response.text = str(data)
    return response


def http_error(status):
    response = MagicMock()
    response.status_code = status
    return requests.exceptions.HTTPError(f"{status} error", response=response)


@patch('tenacity.nap.time.sleep', return_value=None)
class TestProwlarrGateway(unittest.TestCase):

    def setUp(self):
        self.gateway = ProwlarrGateway("http://prowlarr:9696/", "secret", timeout=12, limit=1000)

    def test_search_request(self, _sleep):
        with patch.object(api, 'get', return_value=json_response([{'title': 'Jane Doe'}])) as mock_get:
            results = self.gateway.search("Jane Doe")

        self.assertEqual(results, [{'title': 'Jane Doe'}])
        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], "http://prowlarr:9696/api/v1/search")
        self.assertEqual(kwargs['headers']['X-Api-Key'], "secret")
        self.assertEqual(kwargs['params'], {'query': 'Jane Doe', 'type': 'search', 'limit': 1000})
        self.assertEqual(kwargs['timeout'], 12)

    def test_indexer_ids_restrict_search(self, _sleep):
        gateway = ProwlarrGateway("http://prowlarr:9696", "secret", indexer_ids="3, 5")
        self.assertEqual(gateway.build_params("x")['indexerIds'], [3, 5])

    def test_non_list_response(self, _sleep):
        with patch.object(api, 'get', return_value=json_response({'message': 'nope'})):
            with self.assertRaises(IndexerUnavailableError):
                self.gateway.search("Jane Doe")

    def test_timeouts_are_retried(self, _sleep):
        with patch.object(api, 'get', side_effect=requests.exceptions.Timeout("slow")) as mock_get:
            with self.assertRaises(IndexerUnavailableError):
                self.gateway.search("Jane Doe")
        self.assertEqual(mock_get.call_count, 3)

    def test_recovers_after_transient_error(self, _sleep):
        side_effect = [http_error(503), json_response([])]
        with patch.object(api, 'get', side_effect=side_effect) as mock_get:
            self.assertEqual(self.gateway.search("Jane Doe"), [])
        self.assertEqual(mock_get.call_count, 2)

    def test_client_errors_are_not_retried(self, _sleep):
        with patch.object(api, 'get', side_effect=http_error(401)) as mock_get:
            with self.assertRaises(IndexerUnavailableError):
                self.gateway.search("Jane Doe")
        self.assertEqual(mock_get.call_count, 1)


class TestProwlarrSettings(unittest.TestCase):

    def _settings(self, values):
        return lambda section, key=None, default=None: values.get(key, default)

    def test_disabled(self):
        with patch('release_scraper.prowlarr.get_setting', side_effect=self._settings({'enabled': False})):
            self.assertIsNone(ProwlarrGateway.from_settings())

    def test_missing_api_key(self):
        values = {'enabled': True, 'url': 'http://prowlarr:9696', 'api_key': ''}
        with patch('release_scraper.prowlarr.get_setting', side_effect=self._settings(values)):
            self.assertIsNone(ProwlarrGateway.from_settings())

    def test_configured(self):
        values = {'enabled': True, 'url': 'http://prowlarr:9696', 'api_key': 'k', 'timeout': 5,
                  'limit': 100, 'indexer_ids': ''}
        with patch('release_scraper.prowlarr.get_setting', side_effect=self._settings(values)):
            gateway = ProwlarrGateway.from_settings()
        self.assertEqual(gateway.url, 'http://prowlarr:9696')
        self.assertEqual(gateway.limit, 100)
        self.assertEqual(gateway.indexer_ids, [])


class TestHelpers(unittest.TestCase):

    def test_parse_indexer_ids(self):
        self.assertEqual(parse_indexer_ids(""), [])
        self.assertEqual(parse_indexer_ids("1,2, x ,4"), [1, 2, 4])
        self.assertEqual(parse_indexer_ids([7, "8"]), [7, 8])

    def test_extract_info_hash(self):
        self.assertEqual(extract_info_hash({'infoHash': 'ABC'}), 'abc')
        self.assertEqual(extract_info_hash({'magnetUrl': 'magnet:?xt=urn:btih:' + 'F' * 40}), 'f' * 40)
        self.assertEqual(extract_info_hash({}), '')


if __name__ == '__main__':
    unittest.main()
