"""
Shared fixtures: an in-memory SQLite EventStore and a fixed clock
"""
from datetime import datetime

import pytest
from sqlalchemy.orm import sessionmaker

from eventsphere.records import SourceInfo, RawEventRecord
from eventsphere.sources.base import SourceAdapter
from eventsphere.store import EventStore
from eventsphere.web.models import make_engine, create_tables, drop_tables


FIXED_NOW = datetime(2025, 6, 15, 10, 0, 0)


@pytest.fixture
def engine():
    engine = make_engine('sqlite://')
    create_tables(bind=engine)
    yield engine
    drop_tables(bind=engine)
    engine.dispose()


@pytest.fixture
def store(engine):
    return EventStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def source():
    return SourceInfo('source', 'Test Source', 'https://example.com', rate_limit=0)


class StaticAdapter(SourceAdapter):
    """Serves a fixed list of raw dicts"""

    def __init__(self, source, items, **kwargs):
        super().__init__(source, **kwargs)
        self.items = items

    def fetch_records(self):
        return [RawEventRecord.from_dict(item) for item in self.items]


@pytest.fixture
def make_adapter(clock):
    def _make(source, items):
        return StaticAdapter(source, items, clock=clock, sleep=lambda _: None)
    return _make
