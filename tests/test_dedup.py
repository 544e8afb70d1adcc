"""
Tests for the merge engine and fuzzy matchers
"""
from datetime import datetime

import pytest

from eventsphere.dedup import (
    merge_event,
    MergeOutcome,
    FuzzyMatcher,
    PrefixMatcher,
    SimilarityMatcher,
    build_matcher,
    normalize_title_for_matching,
    title_prefix,
)
from eventsphere.normalizer import normalize
from eventsphere.records import RawEventRecord, SourceInfo
from eventsphere.transforms.distances import haversine_miles, within_radius


NOW = datetime(2025, 6, 15, 10, 0, 0)
ALPHA = SourceInfo('alpha', 'Alpha', 'https://alpha.example.com')
BETA = SourceInfo('beta', 'Beta', 'https://beta.example.com')

LONG_DESCRIPTION = 'An evening of live jazz standards and new compositions from the city quartet.'


def make_event(source=ALPHA, **fields):
    data = {'id': 'e1', 'title': 'City Jazz Night', 'date': '2025-07-01', 'venue': 'Blue Note', 'city': 'Pune'}
    data.update(fields)
    return normalize(RawEventRecord.from_dict(data), source, NOW)


def test_title_helpers():
    assert title_prefix('City Jazz Night at the Park') == 'city jazz night'
    assert normalize_title_for_matching('The Weeknd - Live in Concert 2025!') == 'weeknd concert'


def test_new_event_is_inserted(store):
    assert merge_event(make_event(), store) is MergeOutcome.INSERTED
    assert store.count_events() == 1
    assert store.get_event('alpha_e1').title == 'City Jazz Night'


def test_exact_match_with_equal_score_is_duplicate(store):
    merge_event(make_event(), store)
    assert merge_event(make_event(), store) is MergeOutcome.DUPLICATE
    assert store.count_events() == 1


def test_exact_match_with_higher_score_updates_in_place(store):
    merge_event(make_event(), store)
    richer = make_event(description=LONG_DESCRIPTION)

    assert merge_event(richer, store) is MergeOutcome.UPDATED
    row = store.get_event('alpha_e1')
    assert row.description == LONG_DESCRIPTION
    assert row.aggregation_score == richer.aggregation_score
    assert store.count_events() == 1


def test_exact_match_with_lower_score_is_duplicate(store):
    merge_event(make_event(description=LONG_DESCRIPTION), store)
    assert merge_event(make_event(), store) is MergeOutcome.DUPLICATE
    assert store.get_event('alpha_e1').description == LONG_DESCRIPTION


def test_fuzzy_update_keeps_existing_row_id(store):
    merge_event(make_event(ALPHA, id='a-1', price=300), store)
    better = make_event(BETA, id='b-9', title='City Jazz Night Special', price=500,
                        description=LONG_DESCRIPTION, address='MG Road')

    assert merge_event(better, store) is MergeOutcome.UPDATED
    assert store.count_events() == 1
    assert store.get_event('beta_b-9') is None

    row = store.get_event('alpha_a-1')
    assert row.title == 'City Jazz Night Special'
    assert row.price == 500
    assert row.source_id == 'beta'
    assert row.original_id == 'b-9'


def test_fuzzy_match_with_lower_score_is_duplicate(store):
    merge_event(make_event(ALPHA, id='a-1', description=LONG_DESCRIPTION), store)
    assert merge_event(make_event(BETA, id='b-9'), store) is MergeOutcome.DUPLICATE
    assert store.get_event('alpha_a-1').source_id == 'alpha'


def test_fuzzy_match_requires_same_date(store):
    merge_event(make_event(ALPHA, id='a-1'), store)
    assert merge_event(make_event(BETA, id='b-9', date='2025-07-02'), store) is MergeOutcome.INSERTED
    assert store.count_events() == 2


def test_fuzzy_match_by_venue_in_another_city(store):
    merge_event(make_event(ALPHA, id='a-1', city='Mumbai'), store)
    other = make_event(BETA, id='b-9', city='Pune', venue='Blue Note Lounge', description=LONG_DESCRIPTION)
    assert merge_event(other, store) is MergeOutcome.UPDATED


def test_fuzzy_match_needs_venue_or_city(store):
    merge_event(make_event(ALPHA, id='a-1', city='Mumbai'), store)
    other = make_event(BETA, id='b-9', city='Pune', venue='Hard Rock Cafe')
    assert merge_event(other, store) is MergeOutcome.INSERTED


def test_fuzzy_title_match_ignores_case_and_like_wildcards(store):
    merge_event(make_event(ALPHA, id='a-1', title='CITY JAZZ NIGHT'), store)
    assert merge_event(make_event(BETA, id='b-9'), store) is MergeOutcome.DUPLICATE

    merge_event(make_event(ALPHA, id='a-2', title='100% Pure Fun', date='2025-08-01'), store)
    assert merge_event(make_event(BETA, id='b-2', title='100_ Pure Fun', date='2025-08-01'),
                       store) is MergeOutcome.INSERTED


def test_similarity_matcher_matches_reworded_titles(store):
    matcher = SimilarityMatcher(threshold=0.8)
    merge_event(make_event(ALPHA, id='a-1', title='The City Jazz Night'), store, matcher)
    better = make_event(BETA, id='b-9', title='City Jazz Night!', description=LONG_DESCRIPTION)

    assert merge_event(better, store, matcher) is MergeOutcome.UPDATED
    assert store.get_event('alpha_a-1').source_id == 'beta'


def test_similarity_matcher_uses_coordinates(store):
    matcher = SimilarityMatcher(threshold=0.8, radius_miles=0.5)
    merge_event(make_event(ALPHA, id='a-1', city='Mumbai', venue='NCPA',
                           latitude=18.9256, longitude=72.8242), store, matcher)

    nearby = make_event(BETA, id='b-9', city='Bombay South', venue='Jamshed Bhabha Theatre',
                        latitude=18.9260, longitude=72.8245, description=LONG_DESCRIPTION)
    assert merge_event(nearby, store, matcher) is MergeOutcome.UPDATED

    far = make_event(BETA, id='b-10', city='Thane', venue='Gadkari Rangayatan',
                     latitude=19.10, longitude=72.90, description=LONG_DESCRIPTION)
    assert merge_event(far, store, matcher) is MergeOutcome.INSERTED


def test_similarity_matcher_rejects_different_titles(store):
    matcher = SimilarityMatcher()
    merge_event(make_event(ALPHA, id='a-1'), store, matcher)
    assert merge_event(make_event(BETA, id='b-9', title='Pune Rock Festival'), store,
                       matcher) is MergeOutcome.INSERTED


def test_build_matcher():
    assert isinstance(build_matcher('prefix'), PrefixMatcher)
    assert isinstance(build_matcher('similarity'), SimilarityMatcher)
    with pytest.raises(ValueError):
        build_matcher('soundex')


def test_distance_helpers():
    mumbai_to_pune = haversine_miles(19.076, 72.8777, 18.5204, 73.8567)
    assert 70 < mumbai_to_pune < 80
    assert haversine_miles(19.076, 72.8777, 19.076, 72.8777) == 0
    assert within_radius(19.076, 72.8777, 19.0761, 72.8778, 0.5) is True
    assert within_radius(19.076, 72.8777, None, 72.8778, 0.5) is False


def test_fuzzy_matcher_is_abstract():
    with pytest.raises(TypeError):
        FuzzyMatcher()
