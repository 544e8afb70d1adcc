"""
Aggregation pipeline orchestration.

Runs each enabled source in order: fetch raw records, normalize and score
them, merge them into the store, then persist a run log row and update the
source registry. Sources run one at a time with a courtesy delay between
them.
"""

import threading
import time
from datetime import datetime
from typing import List, Dict, Any, Optional, Callable

from sqlalchemy.exc import SQLAlchemyError

from eventsphere.dedup import merge_event, MergeOutcome, FuzzyMatcher, build_matcher
from eventsphere.normalizer import normalize
from eventsphere.records import ScrapingResult, SourceInfo
from eventsphere.sources.base import SourceAdapter
from eventsphere.sources.registry import all_sources, credentials_configured
from eventsphere.config import Config
from eventsphere.logger import get_logger

logger = get_logger('pipeline')


class AggregationPipeline:
    """
    Sequential run over a list of source adapters against one EventStore.

    Args:
        store: EventStore the results are merged into
        adapters: Source adapters, run in list order
        matcher: Fuzzy matcher for the deduplicator (default from config)
        delay_seconds: Pause between sources (default SCRAPER_DELAY)
        sleep: Sleep function, injectable for tests
        clock: Returns the current datetime, injectable for tests
    """

    def __init__(self, store, adapters: List[SourceAdapter], matcher: Optional[FuzzyMatcher] = None,
                 delay_seconds: Optional[float] = None, sleep: Callable[[float], None] = time.sleep,
                 clock: Callable[[], datetime] = datetime.now):
        self.store = store
        self.adapters = adapters
        self.matcher = matcher or build_matcher()
        self.delay_seconds = Config.SCRAPER_DELAY if delay_seconds is None else delay_seconds
        self.sleep = sleep
        self.clock = clock

    def initialize_sources(self, sources: Optional[List[SourceInfo]] = None):
        """Upsert every known source into the registry. Failures are logged, not raised."""
        logger.info("Initializing event sources...")
        for info in sources if sources is not None else all_sources():
            try:
                self.store.upsert_source(info)
                logger.debug(f"Initialized source: {info.name}")
            except SQLAlchemyError as e:
                logger.error(f"Error initializing source {info.name}: {e}")

    def run(self, cancel_event: Optional[threading.Event] = None) -> List[ScrapingResult]:
        """
        Process every adapter in order and return one result per processed
        source. Raises StoreUnavailableError before touching any source when
        the store is unreachable. Setting cancel_event stops the run before
        the next source starts.
        """
        self.store.require_connection()

        logger.info(f"Starting aggregation run for sources: {', '.join(a.source.id for a in self.adapters)}")
        results = []

        for index, adapter in enumerate(self.adapters):
            if cancel_event is not None and cancel_event.is_set():
                logger.warning(f"Run cancelled after {len(results)} of {len(self.adapters)} sources")
                break

            results.append(self.process_source(adapter))

            if index < len(self.adapters) - 1 and self.delay_seconds > 0:
                self.sleep(self.delay_seconds)

        summary = summarize(results)
        logger.info(
            f"Aggregation run complete: {summary['successful_sources']}/{summary['total_sources']} sources, "
            f"{summary['total_events_added']} added, {summary['total_events_updated']} updated"
        )
        return results

    def process_source(self, adapter: SourceAdapter) -> ScrapingResult:
        source = adapter.source
        started = self.clock()
        logger.info(f"Processing: {source.name}")

        try:
            fetched = adapter.fetch()
            result = ScrapingResult(source=source.id, success=fetched.success,
                                    events_found=len(fetched.records), errors=list(fetched.errors))
            records = fetched.records
        except Exception as e:
            logger.error(f"Adapter for {source.name} raised unexpectedly: {e}")
            result = ScrapingResult(source=source.id, success=False, errors=[str(e)])
            records = []

        for raw in records:
            try:
                event = normalize(raw, source, self.clock())
                outcome = merge_event(event, self.store, self.matcher)
            except SQLAlchemyError as e:
                logger.error(f"Error saving event {raw.id} from {source.name}: {e}")
                result.errors.append(f"Error saving event {raw.id}: {e}")
                continue
            except Exception as e:
                logger.error(f"Error processing event {raw.id} from {source.name}: {e}")
                result.errors.append(f"Error processing event {raw.id}: {e}")
                continue

            if outcome is MergeOutcome.INSERTED:
                result.events_added += 1
            elif outcome is MergeOutcome.UPDATED:
                result.events_updated += 1
            else:
                result.events_duplicate += 1

        finished = self.clock()
        result.timestamp = finished
        result.duration = int((finished - started).total_seconds() * 1000)

        try:
            self.store.log_result(result)
        except SQLAlchemyError as e:
            logger.error(f"Error saving scraping log for {source.name}: {e}")

        try:
            self.store.update_source_stats(source.id, result.success, result.events_added, scraped_at=finished)
        except SQLAlchemyError as e:
            logger.error(f"Error updating source stats for {source.name}: {e}")

        logger.info(
            f"{source.name}: found {result.events_found}, added {result.events_added}, "
            f"updated {result.events_updated}, duplicates {result.events_duplicate}"
        )
        return result


def summarize(results: List[ScrapingResult]) -> Dict[str, Any]:
    """Totals over one run's results"""
    return {
        'total_sources': len(results),
        'successful_sources': sum(1 for r in results if r.success),
        'total_events_found': sum(r.events_found for r in results),
        'total_events_added': sum(r.events_added for r in results),
        'total_events_updated': sum(r.events_updated for r in results),
        'total_errors': sum(len(r.errors) for r in results),
        'sources': [
            {
                'source': r.source,
                'success': r.success,
                'events_found': r.events_found,
                'events_added': r.events_added,
                'events_updated': r.events_updated,
            }
            for r in results
        ],
        'api_keys_configured': credentials_configured(),
    }
