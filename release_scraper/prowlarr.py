import logging
import re
from typing import Any, Dict, List, Optional

from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception

from api_tracker import api
from release_scraper.exceptions import IndexerUnavailableError
from utilities.settings import get_setting

_BTIH_PATTERN = re.compile(r'urn:btih:([a-fA-F0-9]{40})', re.IGNORECASE)


def should_retry_error(exception: Exception) -> bool:
    """Timeouts, dropped connections and 5xx responses are worth another attempt"""
    if isinstance(exception, api.exceptions.HTTPError):
        response = exception.response
        return response is not None and response.status_code >= 500
    return isinstance(exception, (api.exceptions.Timeout, api.exceptions.ConnectionError))


def parse_indexer_ids(value) -> List[int]:
    if not value:
        return []
    if isinstance(value, (list, tuple)):
        parts = value
    else:
        parts = str(value).split(',')
    ids = []
    for part in parts:
        part = str(part).strip()
        if part.isdigit():
            ids.append(int(part))
        elif part:
            logging.warning(f"Ignoring non-numeric Prowlarr indexer ID '{part}'")
    return ids


def extract_info_hash(item: Dict[str, Any]) -> str:
    info_hash = (item.get('infoHash') or '').lower()
    if info_hash:
        return info_hash
    magnet_url = item.get('magnetUrl') or ''
    match = _BTIH_PATTERN.search(magnet_url)
    return match.group(1).lower() if match else ''


class ProwlarrGateway:
    """Free-text search against a Prowlarr instance's aggregated indexers."""

    def __init__(self, url: str, api_key: str, timeout: float = 30, limit: int = 1000, indexer_ids=None):
        self.url = url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.limit = limit
        self.indexer_ids = parse_indexer_ids(indexer_ids)

    @classmethod
    def from_settings(cls) -> Optional['ProwlarrGateway']:
        if not get_setting('Prowlarr', 'enabled'):
            logging.debug("Prowlarr is disabled in settings")
            return None
        url = get_setting('Prowlarr', 'url')
        api_key = get_setting('Prowlarr', 'api_key')
        if not url or not api_key:
            logging.error("Prowlarr is enabled but is missing URL or API key.")
            return None
        return cls(
            url,
            api_key,
            timeout=float(get_setting('Prowlarr', 'timeout')),
            limit=int(get_setting('Prowlarr', 'limit')),
            indexer_ids=get_setting('Prowlarr', 'indexer_ids'),
        )

    def build_params(self, term: str) -> Dict[str, Any]:
        params = {'query': term, 'type': 'search', 'limit': self.limit}
        if self.indexer_ids:
            params['indexerIds'] = self.indexer_ids
        return params

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception(should_retry_error),
        reraise=True
    )
    def _get(self, term: str):
        headers = {'X-Api-Key': self.api_key, 'accept': 'application/json'}
        return api.get(f"{self.url}/api/v1/search", headers=headers, params=self.build_params(term), timeout=self.timeout)

    def search(self, term: str) -> List[Dict[str, Any]]:
        logging.debug(f"Prowlarr search: '{term}'")
        try:
            response = self._get(term)
        except api.exceptions.RequestException as e:
            raise IndexerUnavailableError(f"Prowlarr search for '{term}' failed: {str(e)}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise IndexerUnavailableError(f"Prowlarr returned invalid JSON for '{term}': {response.text[:200]}") from e

        if not isinstance(data, list):
            raise IndexerUnavailableError(f"Prowlarr response for '{term}' was not a list: {type(data).__name__}")
        return data
