class ReleaseScraperError(Exception):
    """Base exception class for all release scraper errors"""
    pass

class IndexerUnavailableError(ReleaseScraperError):
    """Exception raised when an indexer search cannot be completed"""
    pass

class OracleUnavailableError(ReleaseScraperError):
    """Exception raised when the similarity model cannot be loaded or times out"""
    pass

class CatalogContractError(ReleaseScraperError):
    """Exception raised when the catalog store returns records of the wrong shape"""
    pass

class ScrapeCancelledError(ReleaseScraperError):
    """Exception raised when a caller cancels a scrape in progress"""
    pass
