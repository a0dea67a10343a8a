from dataclasses import dataclass, field, fields
from typing import List, Optional, Tuple, Union

UNKNOWN_INDEXER = "Unknown"


@dataclass(frozen=True)
class RawRelease:
    """One search result, as returned by an indexer."""
    title: str
    size_bytes: int = 0
    seeders: int = 0
    quality: str = "Unknown"
    source: str = "Unknown"
    indexer_id: str = ""
    indexer_name: str = UNKNOWN_INDEXER
    download_url: str = ""
    info_hash: str = ""
    # every indexer that returned this torrent, filled in by de-duplication
    indexer_ids: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.indexer_ids and self.indexer_key:
            object.__setattr__(self, 'indexer_ids', (self.indexer_key,))

    @property
    def indexer_key(self) -> str:
        """Indexer identity: the id when the indexer reported one, else its name."""
        if self.indexer_id:
            return self.indexer_id
        if self.indexer_name and self.indexer_name != UNKNOWN_INDEXER:
            return self.indexer_name
        return ""


@dataclass(frozen=True)
class SelectedRelease(RawRelease):
    scene_id: Optional[str] = None

    @classmethod
    def from_release(cls, release: RawRelease, scene_id: Optional[str] = None) -> 'SelectedRelease':
        values = {f.name: getattr(release, f.name) for f in fields(RawRelease)}
        return cls(scene_id=scene_id, **values)


@dataclass
class CandidateGroup:
    title: str
    releases: List[RawRelease] = field(default_factory=list)

    def distinct_indexers(self) -> set:
        indexers = set()
        for release in self.releases:
            indexers.update(i for i in release.indexer_ids if i)
        return indexers


@dataclass(frozen=True)
class CatalogScene:
    id: str
    title: str
    date: Optional[str] = None
    performer_ids: Tuple[str, ...] = ()
    studio_id: Optional[str] = None


@dataclass(frozen=True)
class QualityProfileItem:
    quality: str = "any"
    source: str = "any"
    min_seeders: Union[int, str] = "any"
    max_size_gb: float = 0

    @property
    def seeder_floor(self) -> int:
        if self.min_seeders == "any" or self.min_seeders is None:
            return 0
        return int(self.min_seeders)

    @property
    def max_size_bytes(self) -> Optional[float]:
        """Size ceiling in bytes, or None when the item has no ceiling."""
        if not self.max_size_gb:
            return None
        return float(self.max_size_gb) * 1e9


@dataclass(frozen=True)
class QualityProfile:
    id: str
    name: str = ""
    items: Tuple[QualityProfileItem, ...] = ()


@dataclass
class SearchEntity:
    id: str
    name: str
    entity_type: str = "performer"
    aliases: List[str] = field(default_factory=list)


@dataclass
class MatchedGroup:
    scene: CatalogScene
    group: CandidateGroup
    method: str
    score: float


@dataclass
class MatchResult:
    matched: List[MatchedGroup] = field(default_factory=list)
    unmatched: List[CandidateGroup] = field(default_factory=list)
