"""
SQLAlchemy models for the EventSphere catalog
"""
from datetime import datetime
from sqlalchemy import create_engine, Column, Integer, String, Text, DateTime, Boolean, JSON, Float, Index
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from eventsphere.config import Config

Base = declarative_base()


class EventSource(Base):
    """Registry row for a third-party event provider"""
    __tablename__ = 'event_sources'

    id = Column(String(100), primary_key=True)  # ticketmaster, predicthq, allevents
    name = Column(String(200), nullable=False)
    base_url = Column(Text)
    enabled = Column(Boolean, default=True)
    rate_limit = Column(Integer, default=2000)  # ms between provider requests
    last_scrape_time = Column(DateTime)
    total_events = Column(Integer, default=0)
    success_rate = Column(Float, default=100.0)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    def __repr__(self):
        return f"<EventSource(id='{self.id}', enabled={self.enabled})>"


class Event(Base):
    """Normalized, scored and deduplicated event"""
    __tablename__ = 'events'
    __table_args__ = (
        Index('ix_events_date_city', 'date', 'city'),
    )

    id = Column(String(300), primary_key=True)  # {source_id}_{original_id}
    title = Column(Text, nullable=False)
    description = Column(Text)
    detailed_description = Column(Text)
    date = Column(String(10), nullable=False)  # YYYY-MM-DD
    time = Column(String(5), nullable=False)  # HH:MM
    venue_name = Column(String(200))
    venue_address = Column(Text)
    city = Column(String(100))
    state = Column(String(100))
    image_url = Column(Text)
    price = Column(Float, default=0.0)
    is_free = Column(Boolean, default=False)
    latitude = Column(Float)
    longitude = Column(Float)
    category = Column(String(50))
    organizer = Column(String(200))
    tags = Column(JSON)
    # Aggregation metadata; source_id is NULL for curated events
    source_id = Column(String(100))
    source_name = Column(String(200))
    source_url = Column(Text)
    original_id = Column(String(200))
    last_updated = Column(DateTime)
    is_verified = Column(Boolean, default=False)
    aggregation_score = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    def __repr__(self):
        return f"<Event(id='{self.id}', title='{self.title}', date='{self.date}')>"


class ScrapingLog(Base):
    """Append-only log of per-source pipeline results"""
    __tablename__ = 'scraping_logs'

    id = Column(Integer, primary_key=True)
    source = Column(String(100), nullable=False)
    success = Column(Boolean, nullable=False)
    events_found = Column(Integer, default=0)
    events_added = Column(Integer, default=0)
    events_updated = Column(Integer, default=0)
    errors = Column(JSON)
    duration = Column(Integer)  # ms
    timestamp = Column(DateTime, default=datetime.now, nullable=False)

    def __repr__(self):
        return f"<ScrapingLog(id={self.id}, source='{self.source}', success={self.success})>"


def make_engine(database_url):
    """Create an engine; in-memory SQLite shares one connection across sessions"""
    if database_url in ('sqlite://', 'sqlite:///:memory:'):
        return create_engine(
            database_url,
            echo=False,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )
    return create_engine(database_url, echo=False)


# Database engine and session setup
engine = make_engine(Config.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def create_tables(bind=None):
    """Create all tables"""
    Base.metadata.create_all(bind=bind or engine)


def drop_tables(bind=None):
    """Drop all tables"""
    Base.metadata.drop_all(bind=bind or engine)
