"""
In-flight record types for the aggregation pipeline.

RawEventRecord is what a source adapter hands over; CanonicalEvent is the
normalized shape that gets scored and merged; ScrapingResult is the per-source
outcome of one pipeline run.
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import List, Optional, Union, FrozenSet, Dict, Any


CATEGORIES = ('music', 'technology', 'food', 'business', 'comedy', 'arts', 'sports', 'wellness')


@dataclass
class RawEventRecord:
    """Provider data converted to a single loose shape, before normalization"""
    id: str
    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    venue: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    price: Optional[Union[float, int, str]] = None
    is_free: Optional[bool] = None
    image_url: Optional[str] = None
    source_url: Optional[str] = None
    organizer: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawEventRecord':
        """Build a record from a loosely keyed dict (camelCase or snake_case)"""
        aliases = {
            'isFree': 'is_free',
            'imageUrl': 'image_url',
            'sourceUrl': 'source_url',
        }
        known = set(cls.__dataclass_fields__)
        kwargs = {}
        for key, value in data.items():
            key = aliases.get(key, key)
            if key in known:
                kwargs[key] = value
        kwargs['id'] = str(kwargs.get('id', ''))
        return cls(**kwargs)


@dataclass(frozen=True)
class SourceInfo:
    """Registry entry for a provider, as seen by the normalizer and orchestrator"""
    id: str
    name: str
    base_url: str
    enabled: bool = True
    rate_limit: int = 2000  # milliseconds between provider requests
    verified: bool = False


@dataclass
class CanonicalEvent:
    """Normalized event as persisted in the events table"""
    id: str
    title: str
    description: str
    detailed_description: str
    date: str
    time: str
    venue_name: str
    venue_address: str
    city: str
    state: str
    image_url: str
    price: float
    is_free: bool
    category: str
    organizer: str
    tags: List[str]
    source_id: str
    source_name: str
    source_url: str
    original_id: str
    last_updated: datetime
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_verified: bool = False
    aggregation_score: int = 0
    # Fields filled from defaults during normalization; not persisted
    defaulted_fields: FrozenSet[str] = field(default_factory=frozenset, compare=False)

    def to_row(self) -> Dict[str, Any]:
        """Column values for the events table"""
        row = asdict(self)
        row.pop('defaulted_fields')
        row['tags'] = list(self.tags)
        return row


@dataclass
class ScrapingResult:
    """Outcome of processing one source during a run"""
    source: str
    success: bool
    events_found: int = 0
    events_added: int = 0
    events_updated: int = 0
    events_duplicate: int = 0
    errors: List[str] = field(default_factory=list)
    duration: int = 0  # milliseconds
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data
