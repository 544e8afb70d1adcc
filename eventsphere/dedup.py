"""
Merge engine: decides whether a canonical event is inserted, replaces an
existing row, or is dropped as a duplicate.

Matching runs in two passes. An exact id hit handles idempotent re-runs of
the same source; a fuzzy hit handles the same real event reported by two
providers under different ids. Either way the higher aggregation score wins
and ties keep what is already stored.
"""

import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from Levenshtein import ratio

from eventsphere.records import CanonicalEvent
from eventsphere.transforms.distances import within_radius
from eventsphere.config import Config
from eventsphere.logger import get_logger

logger = get_logger('dedup')


class MergeOutcome(Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    DUPLICATE = "duplicate"


TITLE_STOP_WORDS = {
    'the', 'a', 'an', 'and', 'or', 'in', 'on', 'at', 'to', 'for', 'of', 'with', 'by',
    'from', 'live', 'show', 'event', 'tickets', 'ticket', 'presents', 'presented',
    'featuring', 'feat', 'ft', '2024', '2025', '2026', '2027',
}


def normalize_title_for_matching(title: str) -> str:
    """
    Lowercase, drop punctuation, stop words and very short words.
    """
    if not title:
        return ""
    words = re.findall(r'\b\w+\b', title.lower())
    return ' '.join(word for word in words if word not in TITLE_STOP_WORDS and len(word) > 2)


def title_prefix(title: str, words: int = 3) -> str:
    return ' '.join(title.lower().split()[:words])


def venue_prefix(event: CanonicalEvent) -> Optional[str]:
    """First word of a provider-supplied venue; None when the venue was defaulted."""
    if 'venue_name' in event.defaulted_fields or not event.venue_name.strip():
        return None
    return event.venue_name.split()[0]


class FuzzyMatcher(ABC):
    """Finds a stored row describing the same real-world event, or None."""

    @abstractmethod
    def find_match(self, event: CanonicalEvent, store):
        pass


class PrefixMatcher(FuzzyMatcher):
    """
    Same date, title containing the candidate's first three words, and either
    the venue containing its first word or the same city.
    """

    def find_match(self, event, store):
        candidates = store.find_fuzzy_candidates(
            title_prefix(event.title),
            event.date,
            venue_prefix(event),
            event.city or None,
        )
        return candidates[0] if candidates else None


class SimilarityMatcher(FuzzyMatcher):
    """
    Levenshtein ratio over normalized titles on the same date, with the venue
    confirmed by city, venue prefix or coordinates within radius_miles.
    """

    def __init__(self, threshold: float = 0.85, radius_miles: float = 0.5):
        self.threshold = threshold
        self.radius_miles = radius_miles

    def _same_place(self, event, row) -> bool:
        if event.city and row.city == event.city:
            return True
        prefix = venue_prefix(event)
        if prefix and row.venue_name and prefix.lower() in row.venue_name.lower():
            return True
        if 'coordinates' in event.defaulted_fields:
            return False
        return within_radius(event.latitude, event.longitude, row.latitude, row.longitude, self.radius_miles)

    def find_match(self, event, store):
        title = normalize_title_for_matching(event.title)
        if not title:
            return None

        best, best_similarity = None, 0.0
        for row in store.find_events_on_date(event.date):
            other = normalize_title_for_matching(row.title)
            if not other:
                continue
            similarity = ratio(title, other)
            if similarity >= self.threshold and similarity > best_similarity and self._same_place(event, row):
                best, best_similarity = row, similarity

        if best is not None:
            logger.debug(f"Found duplicate: '{event.title}' ~ '{best.title}' (similarity: {best_similarity:.2f})")
        return best


def build_matcher(name: Optional[str] = None) -> FuzzyMatcher:
    name = name or Config.FUZZY_MATCHER
    if name == 'prefix':
        return PrefixMatcher()
    if name == 'similarity':
        return SimilarityMatcher(Config.SIMILARITY_THRESHOLD, Config.VENUE_RADIUS_MILES)
    raise ValueError(f"Unknown fuzzy matcher '{name}'")


def merge_event(event: CanonicalEvent, store, matcher: Optional[FuzzyMatcher] = None) -> MergeOutcome:
    """
    Insert, update or discard event against the store.

    A fuzzy-matched update overwrites the stored row's fields but keeps its id.
    """
    matcher = matcher or PrefixMatcher()

    with store.merge_lock:
        existing = store.get_event(event.id)
        if existing is None:
            existing = matcher.find_match(event, store)
            match_kind = 'Fuzzy'
        else:
            match_kind = 'Exact'

        if existing is None:
            store.insert_event(event)
            logger.debug(f"Added new event: {event.title}")
            return MergeOutcome.INSERTED

        if event.aggregation_score > (existing.aggregation_score or 0):
            store.update_event(existing.id, event)
            logger.debug(f"{match_kind} updated event: {event.title} (kept id {existing.id})")
            return MergeOutcome.UPDATED

        logger.debug(f"{match_kind} duplicate: {event.title}")
        return MergeOutcome.DUPLICATE
