"""
Persistence handle for the aggregation pipeline.

EventStore wraps a SQLAlchemy session factory and exposes exactly the
operations the deduplicator, orchestrator and admin API need. Each call opens
its own session and commits or rolls back before returning.
"""

import threading
from datetime import datetime, date, timedelta
from typing import List, Dict, Optional, Any

from sqlalchemy import text, func, or_

from eventsphere.records import CanonicalEvent, ScrapingResult, SourceInfo
from eventsphere.web.models import Event, EventSource, ScrapingLog, SessionLocal
from eventsphere.logger import get_logger

logger = get_logger('store')


class StoreUnavailableError(RuntimeError):
    pass


def _like_pattern(fragment: str) -> str:
    escaped = fragment.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return f"%{escaped}%"


class EventStore:
    """Event catalog, source registry and run log behind one session factory."""

    def __init__(self, session_factory=None):
        self.session_factory = session_factory or SessionLocal
        # Held by the deduplicator around each match-then-write sequence
        self.merge_lock = threading.RLock()

    # ------------------------------------------------------------------
    # Connectivity
    # ------------------------------------------------------------------

    def ping(self) -> bool:
        """Lightweight connectivity probe"""
        session = self.session_factory()
        try:
            session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"Database connection failed: {e}")
            return False
        finally:
            session.close()

    def require_connection(self):
        if not self.ping():
            raise StoreUnavailableError("Database connection failed")

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def get_event(self, event_id: str) -> Optional[Event]:
        session = self.session_factory()
        try:
            return session.get(Event, event_id)
        finally:
            session.close()

    def find_fuzzy_candidates(self, title_prefix: str, event_date: str,
                              venue_prefix: Optional[str], city: Optional[str]) -> List[Event]:
        """
        Events on the same date whose title contains title_prefix
        (case-insensitive) and whose venue contains venue_prefix or whose
        city equals city. Oldest rows first.
        """
        session = self.session_factory()
        try:
            query = session.query(Event).filter(
                Event.date == event_date,
                Event.title.ilike(_like_pattern(title_prefix), escape='\\'),
            )

            location_filters = []
            if venue_prefix:
                location_filters.append(Event.venue_name.ilike(_like_pattern(venue_prefix), escape='\\'))
            if city:
                location_filters.append(Event.city == city)
            if not location_filters:
                return []
            query = query.filter(or_(*location_filters))

            return query.order_by(Event.created_at, Event.id).all()
        finally:
            session.close()

    def find_events_on_date(self, event_date: str) -> List[Event]:
        session = self.session_factory()
        try:
            return session.query(Event).filter(
                Event.date == event_date
            ).order_by(Event.created_at, Event.id).all()
        finally:
            session.close()

    def insert_event(self, event: CanonicalEvent):
        session = self.session_factory()
        try:
            session.add(Event(**event.to_row()))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def update_event(self, row_id: str, event: CanonicalEvent):
        """Overwrite every column of row_id with event's values, keeping row_id."""
        session = self.session_factory()
        try:
            row = session.get(Event, row_id)
            if row is None:
                raise LookupError(f"Event {row_id} not found")
            for column, value in event.to_row().items():
                if column != 'id':
                    setattr(row, column, value)
            row.updated_at = datetime.now()
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def count_events(self) -> int:
        session = self.session_factory()
        try:
            return session.query(Event).count()
        finally:
            session.close()

    def events_by_source(self) -> List[Dict[str, Any]]:
        session = self.session_factory()
        try:
            rows = session.query(Event.source_id, func.count(Event.id)).group_by(Event.source_id).all()
            return [{'source': source_id or 'curated', 'count': count} for source_id, count in rows]
        finally:
            session.close()

    def events_by_category(self) -> List[Dict[str, Any]]:
        session = self.session_factory()
        try:
            rows = session.query(Event.category, func.count(Event.id)).group_by(Event.category).all()
            return [{'category': category, 'count': count} for category, count in rows]
        finally:
            session.close()

    def unique_cities(self) -> List[str]:
        session = self.session_factory()
        try:
            return sorted(c for (c,) in session.query(Event.city).distinct().all() if c)
        finally:
            session.close()

    def unique_categories(self) -> List[str]:
        session = self.session_factory()
        try:
            return sorted(c for (c,) in session.query(Event.category).distinct().all() if c)
        finally:
            session.close()

    def purge_old_events(self, retention_days: int, today: Optional[date] = None) -> int:
        """
        Delete aggregated events dated before today - retention_days.
        Curated events (no source_id) are never purged.
        """
        today = today or datetime.now().date()
        cutoff = (today - timedelta(days=retention_days)).isoformat()
        session = self.session_factory()
        try:
            deleted = session.query(Event).filter(
                Event.date < cutoff,
                Event.source_id.isnot(None),
            ).delete(synchronize_session=False)
            session.commit()
            logger.info(f"Cleaned {deleted} events dated before {cutoff}")
            return deleted
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    # ------------------------------------------------------------------
    # Source registry
    # ------------------------------------------------------------------

    def upsert_source(self, info: SourceInfo):
        session = self.session_factory()
        try:
            row = session.get(EventSource, info.id)
            if row:
                row.name = info.name
                row.enabled = info.enabled
                row.rate_limit = info.rate_limit
                row.base_url = info.base_url
            else:
                session.add(EventSource(
                    id=info.id,
                    name=info.name,
                    base_url=info.base_url,
                    enabled=info.enabled,
                    rate_limit=info.rate_limit,
                    total_events=0,
                    success_rate=100.0,
                ))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def update_source_stats(self, source_id: str, success: bool, events_added: int,
                            scraped_at: Optional[datetime] = None):
        session = self.session_factory()
        try:
            row = session.get(EventSource, source_id)
            if row is None:
                logger.info(f"Creating missing source: {source_id}")
                row = EventSource(id=source_id, name=source_id, enabled=True, total_events=0)
                session.add(row)
            row.last_scrape_time = scraped_at or datetime.now()
            row.total_events = (row.total_events or 0) + events_added
            row.success_rate = 100.0 if success else 0.0
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_source(self, source_id: str) -> Optional[EventSource]:
        session = self.session_factory()
        try:
            return session.get(EventSource, source_id)
        finally:
            session.close()

    def list_sources(self) -> List[EventSource]:
        session = self.session_factory()
        try:
            return session.query(EventSource).order_by(EventSource.id).all()
        finally:
            session.close()

    # ------------------------------------------------------------------
    # Run log
    # ------------------------------------------------------------------

    def log_result(self, result: ScrapingResult):
        session = self.session_factory()
        try:
            session.add(ScrapingLog(
                source=result.source,
                success=result.success,
                events_found=result.events_found,
                events_added=result.events_added,
                events_updated=result.events_updated,
                errors=list(result.errors),
                duration=result.duration,
                timestamp=result.timestamp,
            ))
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def recent_logs(self, limit: int = 10) -> List[ScrapingLog]:
        session = self.session_factory()
        try:
            return session.query(ScrapingLog).order_by(
                ScrapingLog.timestamp.desc(), ScrapingLog.id.desc()
            ).limit(limit).all()
        finally:
            session.close()
