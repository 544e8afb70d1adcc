"""
Ticketmaster Discovery API adapter.
"""

from typing import List, Dict, Any, Optional

from eventsphere.lib.http import request_json, SourceFetchError
from eventsphere.records import RawEventRecord
from eventsphere.sources.base import SourceAdapter


DISCOVERY_URL = "https://app.ticketmaster.com/discovery/v2/events.json"


def _to_float(value) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def ticketmaster_to_raw(item: Dict[str, Any]) -> RawEventRecord:
    """Map one Discovery API event object to a RawEventRecord."""
    venues = (item.get('_embedded') or {}).get('venues') or [{}]
    venue = venues[0]
    start = (item.get('dates') or {}).get('start') or {}
    location = venue.get('location') or {}

    price = None
    price_ranges = item.get('priceRanges') or []
    if price_ranges:
        price = price_ranges[0].get('min')

    image_url = None
    images = item.get('images') or []
    if images:
        image_url = max(images, key=lambda img: img.get('width') or 0).get('url')

    category = None
    tags = []
    for classification in item.get('classifications') or []:
        segment = (classification.get('segment') or {}).get('name')
        genre = (classification.get('genre') or {}).get('name')
        if segment and not category:
            category = segment
        if genre and genre != 'Undefined':
            tags.append(genre.lower())

    return RawEventRecord(
        id=str(item['id']),
        title=item.get('name'),
        description=item.get('info') or item.get('pleaseNote') or '',
        date=start.get('localDate'),
        time=start.get('localTime'),
        venue=venue.get('name'),
        address=(venue.get('address') or {}).get('line1'),
        city=(venue.get('city') or {}).get('name'),
        state=(venue.get('state') or {}).get('name'),
        price=price,
        image_url=image_url,
        source_url=item.get('url'),
        organizer=(item.get('promoter') or {}).get('name'),
        category=category,
        tags=tags or None,
        latitude=_to_float(location.get('latitude')),
        longitude=_to_float(location.get('longitude')),
    )


class TicketmasterAdapter(SourceAdapter):
    """Queries the Discovery API once per configured city."""

    def __init__(self, source, api_key: str, cities: List[str], country_code: str = 'IN', **kwargs):
        super().__init__(source, **kwargs)
        self.api_key = api_key
        self.cities = cities
        self.country_code = country_code

    def fetch_records(self) -> List[RawEventRecord]:
        records = []
        failures = []

        for index, city in enumerate(self.cities):
            if index:
                self.pause()
            try:
                payload = request_json(DISCOVERY_URL, params={
                    'apikey': self.api_key,
                    'city': city,
                    'countryCode': self.country_code,
                    'size': 50,
                    'sort': 'date,asc',
                })
            except SourceFetchError as e:
                self.logger.error(f"Error scraping Ticketmaster for {city}: {e}")
                failures.append(f"{city}: {e}")
                continue

            events = (payload.get('_embedded') or {}).get('events') or []
            for item in events:
                try:
                    records.append(ticketmaster_to_raw(item))
                except KeyError as e:
                    self.logger.warning(f"Skipping malformed Ticketmaster event: missing {e}")

        if failures and len(failures) == len(self.cities):
            raise SourceFetchError('; '.join(failures))
        self.warnings.extend(failures)
        return records
