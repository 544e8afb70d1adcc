"""
Database setup and connection tests
"""
from datetime import datetime

from sqlalchemy import inspect
from sqlalchemy.orm import sessionmaker

from eventsphere import database
from eventsphere.web.models import Event, EventSource, ScrapingLog, make_engine


def test_setup_creates_tables():
    engine = make_engine('sqlite://')
    assert database.setup_database(engine) is True
    assert set(inspect(engine).get_table_names()) >= {'events', 'event_sources', 'scraping_logs'}


def test_connection_probe():
    assert database.test_connection(make_engine('sqlite://')) is True
    assert database.test_connection(make_engine('sqlite:////nonexistent-dir/eventsphere.db')) is False


def test_reset_drops_data(engine):
    session = sessionmaker(bind=engine)()
    session.add(EventSource(id='allevents', name='AllEvents.in'))
    session.commit()
    session.close()

    assert database.reset_database(engine) is True

    session = sessionmaker(bind=engine)()
    assert session.query(EventSource).count() == 0
    session.close()


def test_model_round_trip(engine):
    """Insert and read back one row per table"""
    session = sessionmaker(bind=engine)()

    session.add(Event(
        id='ticketmaster_G5diZ9',
        title='Test Event',
        description='This is a test event for database testing',
        date='2025-11-01',
        time='19:00',
        venue_name='Test Venue',
        city='Mumbai',
        tags=['music', 'free'],
        source_id='ticketmaster',
        aggregation_score=55,
    ))
    session.add(ScrapingLog(source='ticketmaster', success=True, events_found=1, errors=['note'],
                            duration=120, timestamp=datetime(2025, 6, 15, 10, 0)))
    session.commit()

    event = session.get(Event, 'ticketmaster_G5diZ9')
    assert event.tags == ['music', 'free']
    assert event.price == 0.0
    assert event.is_free is False
    assert event.created_at is not None

    log = session.query(ScrapingLog).one()
    assert log.errors == ['note']
    assert log.events_added == 0
    session.close()
