import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from release_scraper.models import QualityProfile, QualityProfileItem
from utilities.settings import get_setting


class QualityProfileStore(ABC):
    @abstractmethod
    def get_profile(self, profile_id) -> Optional[QualityProfile]:
        pass


def _parse_min_seeders(value):
    if value is None or value == '' or str(value).lower() == 'any':
        return 'any'
    return int(value)


def item_from_dict(data: Dict[str, Any]) -> QualityProfileItem:
    max_size = data.get('maxSize', data.get('max_size_gb', 0))
    return QualityProfileItem(
        quality=str(data.get('quality', 'any')),
        source=str(data.get('source', 'any')),
        min_seeders=_parse_min_seeders(data.get('minSeeders', data.get('min_seeders'))),
        max_size_gb=float(max_size or 0),
    )


def profile_from_dict(profile_id, data: Dict[str, Any]) -> QualityProfile:
    items = tuple(item_from_dict(item) for item in data.get('items', []))
    return QualityProfile(id=str(profile_id), name=data.get('name', str(profile_id)), items=items)


class InMemoryQualityProfileStore(QualityProfileStore):
    def __init__(self, profiles=None):
        self.profiles = {str(p.id): p for p in (profiles or [])}

    def get_profile(self, profile_id):
        if profile_id is None:
            return None
        return self.profiles.get(str(profile_id))


class ConfigQualityProfileStore(QualityProfileStore):
    """Reads profiles from the 'Quality Profiles' config section on every lookup."""

    def get_profile(self, profile_id):
        if profile_id is None:
            return None
        profiles = get_setting('Quality Profiles') or {}
        data = profiles.get(str(profile_id))
        if data is None:
            logging.warning(f"Quality profile '{profile_id}' not found in settings")
            return None
        try:
            return profile_from_dict(profile_id, data)
        except (TypeError, ValueError) as e:
            logging.error(f"Quality profile '{profile_id}' is malformed: {str(e)}")
            return None
