from release_scraper.models import (
    RawRelease,
    SelectedRelease,
    CandidateGroup,
    CatalogScene,
    QualityProfile,
    QualityProfileItem,
    SearchEntity,
)
from release_scraper.exceptions import (
    ReleaseScraperError,
    IndexerUnavailableError,
    OracleUnavailableError,
    CatalogContractError,
    ScrapeCancelledError,
)
from release_scraper.scraper import ReleaseScraper, create_scraper_from_settings

__all__ = [
    'RawRelease', 'SelectedRelease', 'CandidateGroup', 'CatalogScene',
    'QualityProfile', 'QualityProfileItem', 'SearchEntity',
    'ReleaseScraperError', 'IndexerUnavailableError', 'OracleUnavailableError',
    'CatalogContractError', 'ScrapeCancelledError',
    'ReleaseScraper', 'create_scraper_from_settings',
]
