"""
PredictHQ Events API adapter.
"""

from typing import List, Dict, Any

from eventsphere.lib.http import request_json
from eventsphere.records import RawEventRecord
from eventsphere.sources.base import SourceAdapter


EVENTS_URL = "https://api.predicthq.com/v1/events/"
CATEGORIES = 'concerts,festivals,performing-arts,conferences,expos,sports,community'


def predicthq_to_raw(item: Dict[str, Any]) -> RawEventRecord:
    """Map one PredictHQ event object to a RawEventRecord."""
    start = item.get('start_local') or item.get('start') or ''
    date_part, _, time_part = start.partition('T')

    venue = next((e for e in item.get('entities') or [] if e.get('type') == 'venue'), {})
    address = (item.get('geo') or {}).get('address') or {}

    # GeoJSON order: [longitude, latitude]
    latitude = longitude = None
    location = item.get('location') or []
    if len(location) == 2:
        longitude, latitude = float(location[0]), float(location[1])

    labels = [label for label in item.get('labels') or [] if label]

    return RawEventRecord(
        id=str(item['id']),
        title=item.get('title'),
        description=item.get('description') or '',
        date=date_part or None,
        time=time_part[:5] or None,
        venue=venue.get('name'),
        address=venue.get('formatted_address') or address.get('formatted_address'),
        city=address.get('locality'),
        state=address.get('region'),
        category=item.get('category'),
        tags=labels[:5] or None,
        latitude=latitude,
        longitude=longitude,
    )


class PredictHQAdapter(SourceAdapter):
    """Pulls upcoming events for a country from PredictHQ."""

    def __init__(self, source, access_token: str, country: str = 'IN', limit: int = 50, **kwargs):
        super().__init__(source, **kwargs)
        self.access_token = access_token
        self.country = country
        self.limit = limit

    def fetch_records(self) -> List[RawEventRecord]:
        payload = request_json(
            EVENTS_URL,
            params={
                'country': self.country,
                'active.gte': self.today().isoformat(),
                'category': CATEGORIES,
                'sort': 'start',
                'limit': self.limit,
            },
            headers={'Authorization': f"Bearer {self.access_token}"},
        )

        records = []
        for item in payload.get('results') or []:
            try:
                records.append(predicthq_to_raw(item))
            except (KeyError, ValueError) as e:
                self.logger.warning(f"Skipping malformed PredictHQ event: {e}")
        return records
