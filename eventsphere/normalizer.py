"""
Normalization of raw provider records into canonical events.

Every function here is pure: the only notion of "now" is the timestamp the
pipeline passes in, so the same raw record normalizes identically within a run.
"""

import re
from datetime import datetime
from typing import Optional, List, Union

from eventsphere.records import RawEventRecord, CanonicalEvent, SourceInfo
from eventsphere.scoring import score_event


DEFAULT_TIME = '18:00'
DEFAULT_TITLE = 'Untitled Event'
DEFAULT_VENUE = 'TBA'
DEFAULT_CATEGORY = 'business'
UNKNOWN_STATE = 'Unknown'
MAX_TAGS = 5

CITY_ALIASES = {
    'mumbai': 'Mumbai',
    'bombay': 'Mumbai',
    'navi mumbai': 'Mumbai',
    'delhi': 'New Delhi',
    'new delhi': 'New Delhi',
    'delhi ncr': 'New Delhi',
    'bangalore': 'Bengaluru',
    'bengaluru': 'Bengaluru',
    'hyderabad': 'Hyderabad',
    'chennai': 'Chennai',
    'madras': 'Chennai',
    'pune': 'Pune',
    'kolkata': 'Kolkata',
    'calcutta': 'Kolkata',
}

CITY_STATES = {
    'Mumbai': 'Maharashtra',
    'New Delhi': 'Delhi',
    'Bengaluru': 'Karnataka',
    'Hyderabad': 'Telangana',
    'Chennai': 'Tamil Nadu',
    'Pune': 'Maharashtra',
    'Kolkata': 'West Bengal',
}

CITY_COORDINATES = {
    'Mumbai': (19.076, 72.8777),
    'New Delhi': (28.7041, 77.1025),
    'Bengaluru': (12.9716, 77.5946),
    'Hyderabad': (17.385, 78.4867),
    'Chennai': (13.0827, 80.2707),
    'Pune': (18.5204, 73.8567),
    'Kolkata': (22.5726, 88.3639),
}

# Checked in this order; the first bucket with a matching keyword wins
CATEGORY_KEYWORDS = [
    ('music', ('music', 'concert', 'band', 'jazz')),
    ('technology', ('tech', 'startup', 'coding', 'digital', 'hackathon')),
    ('food', ('food', 'restaurant', 'culinary')),
    ('business', ('business', 'networking', 'conference', 'workshop')),
    ('comedy', ('comedy', 'standup', 'stand-up', 'humor')),
    ('arts', ('art', 'design', 'creative', 'exhibition')),
    ('sports', ('sport', 'fitness', 'game', 'marathon', 'cricket')),
    ('wellness', ('wellness', 'yoga', 'meditation')),
]

_UNSPLASH = 'https://images.unsplash.com/{}?w=800&h=400&auto=format&fit=crop'
DEFAULT_IMAGES = {
    'music': _UNSPLASH.format('photo-1470229722913-7c0e2dbbafd3'),
    'technology': _UNSPLASH.format('photo-1540575467063-178a50c2df87'),
    'food': _UNSPLASH.format('photo-1555939594-58d7cb561ad1'),
    'business': _UNSPLASH.format('photo-1559136555-9303baea8ebd'),
    'arts': _UNSPLASH.format('photo-1578662996442-48f60103fc96'),
    'sports': _UNSPLASH.format('photo-1571019613454-1cb2f99b2d8b'),
    'default': _UNSPLASH.format('photo-1492684223066-81342ee5ff30'),
}

DATE_FORMATS = [
    '%Y-%m-%d',           # 2025-10-25
    '%B %d, %Y',          # October 25, 2025
    '%b %d, %Y',          # Nov 9, 2025
    '%d %B %Y',           # 25 October 2025
    '%d %b %Y',           # 25 Oct 2025
    '%m/%d/%Y',           # 10/25/2025
    '%d/%m/%Y',           # 25/10/2025
    '%a, %b %d, %Y',      # Mon, Nov 3, 2025
    '%A, %B %d, %Y',      # Saturday, October 25, 2025
    '%B %d',              # October 25 (current year)
    '%b %d',              # Nov 9 (current year)
    '%a, %B %d',          # Sun, October 26
    '%A, %B %d',          # Saturday, October 25
]

TIME_FORMATS = [
    '%H:%M',              # 08:00
    '%H:%M:%S',           # 19:30:00
    '%I:%M %p',           # 8:00 AM
    '%I:%M%p',            # 7:00PM
    '%I %p',              # 8 AM
    '%I%p',               # 7pm
]


def standardize_date(date_str: Optional[str], now: datetime) -> str:
    """
    Parse a loosely formatted date into YYYY-MM-DD.
    Falls back to the run's current date when nothing matches.
    """
    fallback = now.strftime('%Y-%m-%d')
    if not date_str or not str(date_str).strip():
        return fallback

    date_str = str(date_str).strip()

    # Format: "April 22, 2025 - May 1, 2026" - take start date
    if ' - ' in date_str:
        date_str = date_str.split(' - ')[0].strip()

    # ISO datetimes, with or without zone
    if re.match(r'^\d{4}-\d{2}-\d{2}[T ]', date_str):
        try:
            return datetime.fromisoformat(date_str.replace('Z', '+00:00')).strftime('%Y-%m-%d')
        except ValueError:
            date_str = date_str[:10]

    for fmt in DATE_FORMATS:
        try:
            parsed = datetime.strptime(date_str, fmt)
        except ValueError:
            continue
        # If no year specified, assume current year
        if '%Y' not in fmt:
            parsed = parsed.replace(year=now.year)
        return parsed.strftime('%Y-%m-%d')

    return fallback


def standardize_time(time_str: Optional[str]) -> str:
    """Convert assorted time strings to 24h HH:MM, defaulting to DEFAULT_TIME."""
    if not time_str or not str(time_str).strip():
        return DEFAULT_TIME

    clean_time_str = str(time_str).strip()

    # "8:00 PM | Doors open 7:00 PM"
    if '|' in clean_time_str:
        clean_time_str = clean_time_str.split('|')[0].strip()

    # Remove timezone suffix (e.g., "IST", "ET")
    clean_time_str = re.sub(r'\s+(IST|ET|PT|EST|PST|CST|MST|UTC|GMT)$', '', clean_time_str, flags=re.IGNORECASE)

    # Ranges like "2–4 pm" or "10:30 am - 5:30 pm": keep the start, borrow am/pm from the end
    for dash_char in ['–', '-']:
        if dash_char in clean_time_str:
            start_part, _, end_part = clean_time_str.partition(dash_char)
            start_part = start_part.strip()
            am_pm_match = re.search(r'\b(am|pm)\b', end_part, re.IGNORECASE)
            if am_pm_match and not re.search(r'(am|pm)', start_part, re.IGNORECASE):
                start_part = f"{start_part} {am_pm_match.group(1)}"
            clean_time_str = start_part
            break

    for fmt in TIME_FORMATS:
        try:
            return datetime.strptime(clean_time_str.upper(), fmt).strftime('%H:%M')
        except ValueError:
            continue

    return DEFAULT_TIME


def standardize_city(city: Optional[str]) -> str:
    if not city:
        return ''
    city = city.strip()
    return CITY_ALIASES.get(city.lower(), city)


def infer_state(city: str, state: Optional[str] = None) -> str:
    """Explicit state wins, then the city table, then UNKNOWN_STATE."""
    if state and state.strip():
        return state.strip()
    return CITY_STATES.get(city, UNKNOWN_STATE)


def standardize_price(price: Union[int, float, str, None]) -> float:
    """
    Coerce a price to a non-negative float.
    Strings keep only digits and dots ("₹1,500" -> 1500.0); anything unparsable is 0.
    """
    if isinstance(price, bool) or price is None:
        return 0.0
    if isinstance(price, (int, float)):
        return max(float(price), 0.0)
    cleaned = re.sub(r'[^\d.]', '', str(price))
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def categorize_event(category: Optional[str], title: Optional[str], description: Optional[str]) -> str:
    text = f"{category or ''} {title or ''} {description or ''}".lower()

    for bucket, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return bucket

    return DEFAULT_CATEGORY


def generate_tags(category: str, is_free: bool, explicit_tags: Optional[List[str]]) -> List[str]:
    candidates = [category]
    if is_free:
        candidates.append('free')
    for tag in explicit_tags or []:
        if tag and str(tag).strip():
            candidates.append(str(tag).strip().lower())

    tags = []
    for tag in candidates:
        if tag not in tags:
            tags.append(tag)
    return tags[:MAX_TAGS]


def default_image_for_category(category: Optional[str]) -> str:
    return DEFAULT_IMAGES.get((category or '').lower(), DEFAULT_IMAGES['default'])


def normalize(raw: RawEventRecord, source: SourceInfo, now: datetime) -> CanonicalEvent:
    """
    Turn one raw record into a scored CanonicalEvent.

    Defaults are filled for title, venue, time, image, price and coordinates;
    the names of defaulted fields travel with the event so scoring only
    rewards data the provider actually supplied.
    """
    defaulted = set()

    title = (raw.title or '').strip()
    if not title:
        title = DEFAULT_TITLE
        defaulted.add('title')

    description = (raw.description or '').strip()

    venue_name = (raw.venue or '').strip()
    if not venue_name:
        venue_name = DEFAULT_VENUE
        defaulted.add('venue_name')

    city = standardize_city(raw.city)
    category = categorize_event(raw.category, raw.title, raw.description)

    image_url = (raw.image_url or '').strip()
    if not image_url:
        image_url = default_image_for_category(category)
        defaulted.add('image_url')

    if raw.price is None:
        defaulted.add('price')
    price = standardize_price(raw.price)
    is_free = raw.is_free if raw.is_free is not None else price == 0

    latitude, longitude = raw.latitude, raw.longitude
    if latitude is None or longitude is None:
        latitude, longitude = CITY_COORDINATES.get(city, (None, None))
        defaulted.add('coordinates')

    event = CanonicalEvent(
        id=f"{source.id}_{raw.id}",
        title=title,
        description=description,
        detailed_description=description,
        date=standardize_date(raw.date, now),
        time=standardize_time(raw.time),
        venue_name=venue_name,
        venue_address=(raw.address or '').strip(),
        city=city,
        state=infer_state(city, raw.state),
        image_url=image_url,
        price=price,
        is_free=bool(is_free),
        category=category,
        organizer=(raw.organizer or '').strip() or source.name,
        tags=generate_tags(category, bool(is_free), raw.tags),
        source_id=source.id,
        source_name=source.name,
        source_url=raw.source_url or '',
        original_id=raw.id,
        last_updated=now,
        latitude=latitude,
        longitude=longitude,
        is_verified=source.verified,
        defaulted_fields=frozenset(defaulted),
    )
    event.aggregation_score = score_event(event)
    return event
