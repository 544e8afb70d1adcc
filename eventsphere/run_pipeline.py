#!/usr/bin/env python3
"""
Aggregation Pipeline Command Line

Runs the enabled event sources through normalization, scoring and
deduplication, then prints a console summary and writes a JSON report.

Usage:
    python -m eventsphere.run_pipeline                      # all enabled sources
    python -m eventsphere.run_pipeline --source allevents   # one source
    python -m eventsphere.run_pipeline --status             # registry and recent runs
    python -m eventsphere.run_pipeline --cleanup --days 30  # retention purge
"""

import argparse
import json
import sys
from dataclasses import dataclass, asdict, field
from datetime import datetime
from pathlib import Path
from typing import List, Dict, Any

from eventsphere.config import Config
from eventsphere.database import setup_database
from eventsphere.logger import get_logger
from eventsphere.pipeline import AggregationPipeline, summarize
from eventsphere.records import ScrapingResult
from eventsphere.sources.registry import SOURCE_DEFINITIONS, build_adapters, credentials_configured
from eventsphere.store import EventStore, StoreUnavailableError

logger = get_logger('run_pipeline')


@dataclass
class PipelineReport:
    """Complete pipeline execution report"""
    timestamp: str
    overall_success: bool
    total_duration: float
    results: List[Dict[str, Any]] = field(default_factory=list)
    summary: Dict[str, Any] = field(default_factory=dict)


def build_report(results: List[ScrapingResult], started: datetime) -> PipelineReport:
    return PipelineReport(
        timestamp=datetime.now().isoformat(),
        overall_success=all(r.success for r in results),
        total_duration=(datetime.now() - started).total_seconds(),
        results=[r.to_dict() for r in results],
        summary=summarize(results),
    )


def generate_reports(report: PipelineReport, output_dir: Path) -> Path:
    """
    Write the JSON report and print the console summary.

    Returns:
        Path of the JSON report
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')

    json_file = output_dir / f'pipeline_report_{timestamp}.json'
    with open(json_file, 'w') as f:
        json.dump(asdict(report), f, indent=2, default=str)

    logger.info(f"JSON report saved to: {json_file}")

    summary = report.summary
    print("\n" + "=" * 70)
    print("AGGREGATION RUN SUMMARY")
    print("=" * 70)
    print(f"Timestamp: {report.timestamp}")
    print(f"Overall Success: {'✓' if report.overall_success else '✗'}")
    print(f"Total Duration: {report.total_duration:.1f} seconds")
    print()

    print("Source Results:")
    for result in report.results:
        status = "✓" if result['success'] else "✗"
        print(f"  {status} {result['source']}:")
        print(f"    Events Found: {result['events_found']}")
        print(f"    Added: {result['events_added']}  Updated: {result['events_updated']}  "
              f"Duplicates: {result['events_duplicate']}")
        print(f"    Duration: {result['duration']}ms")
        for error in result['errors'][:3]:
            print(f"    Note: {error[:100]}")
        print()

    print("Summary:")
    print(f"  Successful Sources: {summary['successful_sources']}/{summary['total_sources']}")
    print(f"  Total Events Found: {summary['total_events_found']}")
    print(f"  Total Events Added: {summary['total_events_added']}")
    print(f"  Total Events Updated: {summary['total_events_updated']}")
    print(f"  API Keys Configured: {', '.join(k for k, v in summary['api_keys_configured'].items() if v) or 'none'}")
    print("=" * 70)
    print()

    return json_file


def print_sources():
    enabled = set(Config.ENABLED_SOURCES)
    keys = credentials_configured()
    print("\nKnown sources:")
    for info in SOURCE_DEFINITIONS:
        flags = []
        if info.id in enabled:
            flags.append('enabled')
        if info.id in keys:
            flags.append('live API' if keys[info.id] else 'simulated')
        print(f"  {info.id:<15} {info.name:<18} {', '.join(flags)}")
    print()


def print_status(store: EventStore):
    print(f"\nEvents in database: {store.count_events()}")

    print("\nEvents by source:")
    for row in store.events_by_source():
        print(f"  {row['source']:<15} {row['count']}")

    print("\nSource registry:")
    for source in store.list_sources():
        last = source.last_scrape_time.strftime('%Y-%m-%d %H:%M') if source.last_scrape_time else 'never'
        print(f"  {source.id:<15} total={source.total_events:<6} success={source.success_rate:.0f}%  last={last}")

    print("\nRecent runs:")
    for log in store.recent_logs(limit=10):
        status = "✓" if log.success else "✗"
        print(f"  {status} {log.timestamp:%Y-%m-%d %H:%M:%S} {log.source:<15} "
              f"found={log.events_found} added={log.events_added} updated={log.events_updated}")
    print()


def main(argv=None) -> int:
    """Main orchestration logic"""
    parser = argparse.ArgumentParser(description='Run the EventSphere aggregation pipeline')
    parser.add_argument('--source', action='append', dest='sources',
                        choices=[info.id for info in SOURCE_DEFINITIONS],
                        help='Run this source (repeatable, default: ENABLED_SOURCES)')
    parser.add_argument('--list', action='store_true',
                        help='List known sources and exit')
    parser.add_argument('--status', action='store_true',
                        help='Show registry and recent runs and exit')
    parser.add_argument('--cleanup', action='store_true',
                        help='Delete aggregated events older than the retention window and exit')
    parser.add_argument('--days', type=int, default=Config.RETENTION_DAYS,
                        help=f'Retention window for --cleanup (default: {Config.RETENTION_DAYS})')
    parser.add_argument('--no-delay', action='store_true',
                        help='Skip the delay between sources')
    parser.add_argument('--init-db', action='store_true',
                        help='Create database tables before running')
    parser.add_argument('--output-dir', default='data/output',
                        help='Directory for output reports')

    args = parser.parse_args(argv)

    if args.list:
        print_sources()
        return 0

    try:
        Config.validate()
    except ValueError as e:
        logger.error(str(e))
        return 1

    if args.init_db and not setup_database():
        return 1

    store = EventStore()

    if args.status:
        print_status(store)
        return 0

    if args.cleanup:
        if args.days < 1:
            logger.error("--days must be a positive integer")
            return 1
        deleted = store.purge_old_events(args.days)
        print(f"Deleted {deleted} events older than {args.days} days")
        return 0

    pipeline = AggregationPipeline(
        store,
        build_adapters(args.sources),
        delay_seconds=0 if args.no_delay else None,
    )

    started = datetime.now()
    try:
        store.require_connection()
        pipeline.initialize_sources()
        results = pipeline.run()
    except StoreUnavailableError as e:
        logger.error(f"Cannot run pipeline: {e}")
        return 1

    report = build_report(results, started)
    generate_reports(report, Path(args.output_dir))

    return 0 if report.overall_success else 1


if __name__ == '__main__':
    sys.exit(main())
