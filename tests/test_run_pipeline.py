"""
Tests for the pipeline command line
"""
import json
from unittest.mock import patch

import pytest

from eventsphere import run_pipeline


@pytest.fixture
def patched_store(store):
    with patch.object(run_pipeline, 'EventStore', return_value=store):
        yield store


def test_list_sources(capsys):
    assert run_pipeline.main(['--list']) == 0
    out = capsys.readouterr().out
    assert 'ticketmaster' in out
    assert 'EventSphere Pro' in out


def test_unknown_source_is_rejected():
    with pytest.raises(SystemExit):
        run_pipeline.main(['--source', 'myspace'])


def test_run_writes_report(patched_store, tmp_path, capsys):
    code = run_pipeline.main(['--source', 'enhanced_mock', '--no-delay', '--output-dir', str(tmp_path)])

    assert code == 0
    reports = list(tmp_path.glob('pipeline_report_*.json'))
    assert len(reports) == 1

    report = json.loads(reports[0].read_text())
    assert report['overall_success'] is True
    assert report['summary']['total_events_added'] == 5
    assert report['results'][0]['source'] == 'enhanced_mock'
    assert patched_store.count_events() == 5
    assert 'AGGREGATION RUN SUMMARY' in capsys.readouterr().out


def test_run_fails_when_store_unreachable(patched_store, tmp_path):
    with patch.object(patched_store, 'ping', return_value=False):
        assert run_pipeline.main(['--no-delay', '--output-dir', str(tmp_path)]) == 1
    assert list(tmp_path.iterdir()) == []


def test_status(patched_store, tmp_path, capsys):
    run_pipeline.main(['--source', 'enhanced_mock', '--no-delay', '--output-dir', str(tmp_path)])
    capsys.readouterr()

    assert run_pipeline.main(['--status']) == 0
    out = capsys.readouterr().out
    assert 'Events in database: 5' in out
    assert 'enhanced_mock' in out


def test_cleanup(patched_store, capsys):
    assert run_pipeline.main(['--cleanup', '--days', '30']) == 0
    assert 'Deleted 0 events' in capsys.readouterr().out

    assert run_pipeline.main(['--cleanup', '--days', '0']) == 1
