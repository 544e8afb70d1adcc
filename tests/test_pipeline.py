"""
End-to-end tests for the aggregation pipeline against an in-memory store
"""
import threading
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from eventsphere import pipeline as pipeline_module
from eventsphere.config import Config
from eventsphere.pipeline import AggregationPipeline, summarize
from eventsphere.records import SourceInfo, ScrapingResult
from eventsphere.sources import registry
from eventsphere.sources.base import SourceAdapter
from eventsphere.store import StoreUnavailableError


JAZZ_NIGHT = {'id': 'e1', 'title': 'City Jazz Night', 'date': '2025-07-01', 'venue': 'Blue Note',
              'city': 'Pune', 'price': '500'}


class ExplodingAdapter(SourceAdapter):
    def fetch_records(self):
        raise RuntimeError('parser crashed')


def make_pipeline(store, adapters, clock, sleeps=None):
    return AggregationPipeline(store, adapters, delay_seconds=2,
                               sleep=(sleeps.append if sleeps is not None else lambda _: None), clock=clock)


def test_single_record_end_to_end(store, source, make_adapter, clock):
    results = make_pipeline(store, [make_adapter(source, [JAZZ_NIGHT])], clock).run()

    assert len(results) == 1
    result = results[0]
    assert result.success is True
    assert (result.events_found, result.events_added, result.events_updated) == (1, 1, 0)

    row = store.get_event('source_e1')
    assert row.price == 500
    assert row.is_free is False
    assert row.time == '18:00'
    assert row.source_id == 'source'


def test_second_identical_run_adds_nothing(store, source, make_adapter, clock):
    make_pipeline(store, [make_adapter(source, [JAZZ_NIGHT])], clock).run()
    second = make_pipeline(store, [make_adapter(source, [JAZZ_NIGHT])], clock).run()[0]

    assert second.events_added == 0
    assert second.events_updated == 0
    assert second.events_duplicate == 1
    assert store.count_events() == 1


def test_generated_sources_are_idempotent(store, clock):
    adapters = registry.build_adapters(['allevents', 'enhanced_mock'], clock=clock)
    first = make_pipeline(store, adapters, clock).run()
    total = store.count_events()

    adapters = registry.build_adapters(['allevents', 'enhanced_mock'], clock=clock)
    second = make_pipeline(store, adapters, clock).run()

    assert sum(r.events_added for r in first) == total > 0
    assert sum(r.events_added + r.events_updated for r in second) == 0
    assert store.count_events() == total


def test_missing_credential_uses_simulated_data(store, clock, monkeypatch):
    monkeypatch.setattr(Config, 'PREDICTHQ_ACCESS_TOKEN', None)
    adapter = registry.build_adapter(registry.get_source_info('predicthq'), clock=clock)

    result = make_pipeline(store, [adapter], clock).run()[0]

    assert result.success is True
    assert result.errors
    assert result.events_found > 0
    assert store.count_events() == result.events_added


def test_failing_adapter_does_not_stop_the_run(store, source, make_adapter, clock):
    broken = ExplodingAdapter(SourceInfo('broken', 'Broken', ''), clock=clock)
    results = make_pipeline(store, [broken, make_adapter(source, [JAZZ_NIGHT])], clock).run()

    assert [r.success for r in results] == [False, True]
    assert results[0].events_found == 0
    assert results[0].errors == ['parser crashed']
    assert results[1].events_added == 1


def test_results_are_logged_and_registry_updated(store, source, make_adapter, clock):
    pipeline = make_pipeline(store, [make_adapter(source, [JAZZ_NIGHT])], clock)
    pipeline.initialize_sources([source])
    pipeline.run()

    logs = store.recent_logs()
    assert len(logs) == 1
    assert logs[0].source == 'source'
    assert logs[0].events_added == 1

    row = store.get_source('source')
    assert row.total_events == 1
    assert row.success_rate == 100.0
    assert row.last_scrape_time == clock()


def test_failed_source_sets_success_rate_to_zero(store, clock):
    broken = ExplodingAdapter(SourceInfo('broken', 'Broken', ''), clock=clock)
    make_pipeline(store, [broken], clock).run()
    assert store.get_source('broken').success_rate == 0.0


def test_delay_between_sources_only(store, source, make_adapter, clock):
    sleeps = []
    adapters = [make_adapter(SourceInfo(f's{i}', f'S{i}', ''), []) for i in range(3)]
    make_pipeline(store, adapters, clock, sleeps).run()
    assert sleeps == [2, 2]


def test_cancel_between_sources(store, source, make_adapter, clock):
    cancel = threading.Event()
    first = make_adapter(source, [JAZZ_NIGHT])
    original_fetch = first.fetch

    def fetch_then_cancel():
        result = original_fetch()
        cancel.set()
        return result

    first.fetch = fetch_then_cancel
    second = make_adapter(SourceInfo('other', 'Other', ''), [dict(JAZZ_NIGHT, id='e2')])

    results = make_pipeline(store, [first, second], clock).run(cancel_event=cancel)

    assert [r.source for r in results] == ['source']
    assert len(store.recent_logs()) == 1


def test_unreachable_store_fails_before_any_source(clock):
    store = MagicMock()
    store.require_connection.side_effect = StoreUnavailableError('Database connection failed')
    adapter = MagicMock()

    with pytest.raises(StoreUnavailableError):
        AggregationPipeline(store, [adapter], delay_seconds=0, clock=clock).run()

    adapter.fetch.assert_not_called()


def test_record_write_failure_is_reported_and_skipped(store, source, make_adapter, clock, monkeypatch):
    original_insert = store.insert_event

    def flaky_insert(event):
        if event.original_id == 'bad':
            raise OperationalError('INSERT', {}, Exception('disk I/O error'))
        original_insert(event)

    monkeypatch.setattr(store, 'insert_event', flaky_insert)
    items = [dict(JAZZ_NIGHT, id='bad', date='2025-08-01'), JAZZ_NIGHT]

    result = make_pipeline(store, [make_adapter(source, items)], clock).run()[0]

    assert result.success is True
    assert result.events_added == 1
    assert len(result.errors) == 1
    assert 'bad' in result.errors[0]


def test_record_processing_failure_is_reported_and_skipped(store, source, make_adapter, clock, monkeypatch):
    original_normalize = pipeline_module.normalize

    def fragile_normalize(raw, info, now):
        if raw.id == 'malformed':
            raise TypeError('unsupported date payload')
        return original_normalize(raw, info, now)

    monkeypatch.setattr(pipeline_module, 'normalize', fragile_normalize)
    items = [dict(JAZZ_NIGHT, id='malformed'), JAZZ_NIGHT]

    result = make_pipeline(store, [make_adapter(source, items)], clock).run()[0]

    assert result.success is True
    assert result.events_added == 1
    assert result.errors == ['Error processing event malformed: unsupported date payload']
    assert len(store.recent_logs()) == 1
    assert store.get_source('source').total_events == 1


def test_run_log_failure_is_not_raised(store, source, make_adapter, clock, monkeypatch):
    def broken_log(result):
        raise OperationalError('INSERT', {}, Exception('locked'))

    monkeypatch.setattr(store, 'log_result', broken_log)
    results = make_pipeline(store, [make_adapter(source, [JAZZ_NIGHT])], clock).run()

    assert results[0].events_added == 1
    assert store.get_source('source').total_events == 1


def test_summarize():
    results = [
        ScrapingResult(source='a', success=True, events_found=3, events_added=2, events_updated=1),
        ScrapingResult(source='b', success=False, errors=['x', 'y']),
    ]
    summary = summarize(results)

    assert summary['total_sources'] == 2
    assert summary['successful_sources'] == 1
    assert summary['total_events_found'] == 3
    assert summary['total_events_added'] == 2
    assert summary['total_events_updated'] == 1
    assert summary['total_errors'] == 2
    assert [s['source'] for s in summary['sources']] == ['a', 'b']
    assert set(summary['api_keys_configured']) == {'ticketmaster', 'predicthq'}
