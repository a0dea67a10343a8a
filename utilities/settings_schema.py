# settings_schema.py

SETTINGS_SCHEMA = {
    "Prowlarr": {
        "enabled": {
            "type": "boolean",
            "description": "Search indexers through Prowlarr",
            "default": False
        },
        "url": {
            "type": "string",
            "description": "Prowlarr base URL",
            "default": ""
        },
        "api_key": {
            "type": "string",
            "description": "Prowlarr API key (sent as X-Api-Key)",
            "default": "",
            "sensitive": True
        },
        "timeout": {
            "type": "integer",
            "description": "Per-request timeout in seconds",
            "default": 30
        },
        "limit": {
            "type": "integer",
            "description": "Maximum number of results requested per search term",
            "default": 1000
        },
        "indexer_ids": {
            "type": "string",
            "description": "Comma-separated Prowlarr indexer IDs to restrict searches to (empty for all)",
            "default": ""
        }
    },
    "Scraping": {
        "include_aliases": {
            "type": "boolean",
            "description": "Also search each alias of a tracked performer or studio",
            "default": True
        },
        "include_metadata_missing": {
            "type": "boolean",
            "description": "Accept releases that do not match any known scene",
            "default": False
        },
        "grouping_threshold": {
            "type": "float",
            "description": "Minimum length ratio for merging a truncated title into a longer one",
            "default": 0.7
        },
        "min_indexers_for_metadata_less": {
            "type": "integer",
            "description": "Distinct indexers required before an unmatched release is accepted",
            "default": 2
        },
        "scene_fetch_limit": {
            "type": "integer",
            "description": "Maximum number of known scenes fetched per entity",
            "default": 500
        },
        "scene_batch_size": {
            "type": "integer",
            "description": "Known scenes fetched per catalog request",
            "default": 50
        },
        "search_concurrency": {
            "type": "integer",
            "description": "Search terms queried in parallel",
            "default": 1
        },
        "catalog_fetch_concurrency": {
            "type": "integer",
            "description": "Catalog batches fetched in parallel",
            "default": 1
        }
    },
    "Semantic Matching": {
        "enabled": {
            "type": "boolean",
            "description": "Use a cross-encoder model for title similarity",
            "default": False
        },
        "model_name": {
            "type": "string",
            "description": "sentence-transformers cross-encoder model",
            "default": "cross-encoder/ms-marco-MiniLM-L-6-v2"
        },
        "match_threshold": {
            "type": "float",
            "description": "Minimum similarity for matching a release group to a known scene",
            "default": 0.7
        },
        "merge_threshold": {
            "type": "float",
            "description": "Minimum similarity for merging two release groups",
            "default": 0.92
        },
        "timeout": {
            "type": "integer",
            "description": "Seconds to wait for a single similarity score",
            "default": 30
        }
    },
    "Quality Profiles": {
        "type": "dict",
        "description": "Quality profiles keyed by id: {name, items: [{quality, source, minSeeders, maxSize}]}",
        "default": {}
    },
    "Debug": {
        "logging_level": {
            "type": "string",
            "description": "Console logging level",
            "default": "INFO",
            "options": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        }
    }
}
