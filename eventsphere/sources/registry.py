"""
Known event sources and adapter construction.

Real API adapters are only built when their credential is configured;
otherwise the simulated twin for that provider is used.
"""

from typing import List, Optional, Iterable

from eventsphere.config import Config
from eventsphere.records import SourceInfo
from eventsphere.sources.base import SourceAdapter
from eventsphere.sources.ticketmaster import TicketmasterAdapter
from eventsphere.sources.predicthq import PredictHQAdapter
from eventsphere.sources.simulated import (
    SimulatedTicketmasterAdapter,
    SimulatedPredictHQAdapter,
    AllEventsAdapter,
    EventbriteTemplateAdapter,
    MeetupTemplateAdapter,
    BookMyShowTemplateAdapter,
    CuratedShowcaseAdapter,
)


SOURCE_DEFINITIONS = [
    SourceInfo('ticketmaster', 'Ticketmaster', 'https://app.ticketmaster.com/discovery/v2', rate_limit=2000,
               verified=True),
    SourceInfo('predicthq', 'PredictHQ', 'https://api.predicthq.com/v1', rate_limit=3000),
    SourceInfo('allevents', 'AllEvents.in', 'https://allevents.in', rate_limit=5000),
    SourceInfo('eventbrite', 'Eventbrite', 'https://www.eventbriteapi.com/v3', rate_limit=2000),
    SourceInfo('meetup', 'Meetup', 'https://api.meetup.com', rate_limit=3000),
    SourceInfo('bookmyshow', 'BookMyShow', 'https://in.bookmyshow.com', rate_limit=5000),
    SourceInfo('enhanced_mock', 'EventSphere Pro', 'https://eventsphere.app', rate_limit=1000),
]

_BY_ID = {info.id: info for info in SOURCE_DEFINITIONS}


def all_sources(enabled_ids: Optional[Iterable[str]] = None) -> List[SourceInfo]:
    """Every known source, with `enabled` set from enabled_ids (default: config)"""
    enabled_ids = set(Config.ENABLED_SOURCES if enabled_ids is None else enabled_ids)
    return [
        SourceInfo(info.id, info.name, info.base_url, info.id in enabled_ids, info.rate_limit, info.verified)
        for info in SOURCE_DEFINITIONS
    ]


def get_source_info(source_id: str) -> SourceInfo:
    try:
        return _BY_ID[source_id]
    except KeyError:
        raise ValueError(f"Unknown source '{source_id}'. Known sources: {', '.join(_BY_ID)}")


def enabled_sources(source_ids: Optional[Iterable[str]] = None) -> List[SourceInfo]:
    """Sources to run, in the order given (default: ENABLED_SOURCES)"""
    source_ids = Config.ENABLED_SOURCES if source_ids is None else source_ids
    seen = []
    for source_id in source_ids:
        if source_id not in seen:
            seen.append(source_id)
    return [get_source_info(source_id) for source_id in seen]


def credentials_configured() -> dict:
    return {
        'ticketmaster': bool(Config.TICKETMASTER_API_KEY),
        'predicthq': bool(Config.PREDICTHQ_ACCESS_TOKEN),
    }


def build_adapter(info: SourceInfo, **kwargs) -> SourceAdapter:
    """
    Adapter for one source. kwargs (clock, sleep) are passed through to the
    adapter constructor.
    """
    cities = Config.SCRAPE_CITIES

    if info.id == 'ticketmaster':
        if Config.TICKETMASTER_API_KEY:
            return TicketmasterAdapter(info, Config.TICKETMASTER_API_KEY, cities, **kwargs)
        return SimulatedTicketmasterAdapter(info, **kwargs)

    if info.id == 'predicthq':
        if Config.PREDICTHQ_ACCESS_TOKEN:
            return PredictHQAdapter(info, Config.PREDICTHQ_ACCESS_TOKEN, **kwargs)
        return SimulatedPredictHQAdapter(info, **kwargs)

    if info.id == 'allevents':
        return AllEventsAdapter(info, cities, **kwargs)
    if info.id == 'eventbrite':
        return EventbriteTemplateAdapter(info, cities, **kwargs)
    if info.id == 'meetup':
        return MeetupTemplateAdapter(info, cities, **kwargs)
    if info.id == 'bookmyshow':
        return BookMyShowTemplateAdapter(info, cities, **kwargs)
    if info.id == 'enhanced_mock':
        return CuratedShowcaseAdapter(info, **kwargs)

    raise ValueError(f"No adapter for source '{info.id}'")


def build_adapters(source_ids: Optional[Iterable[str]] = None, **kwargs) -> List[SourceAdapter]:
    return [build_adapter(info, **kwargs) for info in enabled_sources(source_ids)]
