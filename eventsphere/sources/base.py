"""Abstract base class for event source adapters.

An adapter turns one provider into a list of RawEventRecord. Provider
failures (HTTP errors, bad payloads) never escape ``fetch()``: they come back
as an unsuccessful FetchResult carrying the error message, so one broken
provider cannot abort a pipeline run.
"""

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, date
from typing import List, Callable, Optional

from eventsphere.lib.http import SourceFetchError
from eventsphere.logger import get_logger
from eventsphere.records import RawEventRecord, SourceInfo


@dataclass
class FetchResult:
    records: List[RawEventRecord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    success: bool = True


class SourceAdapter(ABC):
    """Base class for all source adapters.

    Subclasses implement ``fetch_records()``. Non-fatal problems (one city
    failing, degraded mode) go into ``self.warnings`` and end up in the
    result's ``errors`` list while ``success`` stays True.
    """

    # Informational entry added to every result, e.g. for simulated fallbacks
    notice: Optional[str] = None

    def __init__(self, source: SourceInfo, clock: Optional[Callable[[], datetime]] = None,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.source = source
        self.clock = clock or datetime.now
        self.sleep = sleep
        self.warnings: List[str] = []
        self.logger = get_logger(f'sources.{source.id}')

    def today(self) -> date:
        return self.clock().date()

    @abstractmethod
    def fetch_records(self) -> List[RawEventRecord]:
        """Return every raw record the provider currently offers."""
        ...

    def fetch(self) -> FetchResult:
        self.warnings = [self.notice] if self.notice else []
        try:
            records = self.fetch_records()
        except (SourceFetchError, ValueError, KeyError, TypeError) as e:
            self.logger.error(f"Error scraping {self.source.name}: {e}")
            return FetchResult(records=[], errors=self.warnings + [str(e)], success=False)

        self.logger.info(f"Fetched {len(records)} raw events from {self.source.name}")
        return FetchResult(records=records, errors=list(self.warnings), success=True)

    def pause(self):
        """Courtesy delay between requests to the same provider"""
        if self.source.rate_limit:
            self.sleep(self.source.rate_limit / 1000.0)
