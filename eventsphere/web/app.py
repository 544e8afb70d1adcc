"""
Flask admin API for the EventSphere aggregation pipeline
"""
import threading
from datetime import datetime

from flask import Flask, request, jsonify
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError

from eventsphere.config import Config
from eventsphere.logger import get_logger
from eventsphere.pipeline import AggregationPipeline, summarize
from eventsphere.sources.registry import build_adapters, credentials_configured
from eventsphere.store import EventStore, StoreUnavailableError

logger = get_logger('flask_app')


def log_to_dict(log):
    return {
        'source': log.source,
        'success': log.success,
        'events_found': log.events_found,
        'events_added': log.events_added,
        'events_updated': log.events_updated,
        'errors': log.errors or [],
        'duration': log.duration,
        'timestamp': log.timestamp.isoformat() if log.timestamp else None,
    }


def source_to_dict(source):
    return {
        'id': source.id,
        'name': source.name,
        'base_url': source.base_url,
        'enabled': source.enabled,
        'rate_limit': source.rate_limit,
        'last_scrape_time': source.last_scrape_time.isoformat() if source.last_scrape_time else None,
        'total_events': source.total_events,
        'success_rate': source.success_rate,
    }


def create_app(store=None, adapter_factory=None, matcher=None, delay_seconds=None):
    """
    Build the admin API.

    Args:
        store: EventStore to operate on (default: configured database)
        adapter_factory: Zero-argument callable returning the adapters for a run
        matcher: Fuzzy matcher passed to the pipeline
        delay_seconds: Inter-source delay passed to the pipeline
    """
    app = Flask(__name__)
    app.config['SECRET_KEY'] = Config.SECRET_KEY

    # Enable CORS for API endpoints
    CORS(app, origins=['*'])

    store = store or EventStore()
    adapter_factory = adapter_factory or build_adapters
    run_lock = threading.Lock()

    @app.route('/api/admin/scrape-events', methods=['POST'])
    def trigger_scrape():
        """Run the aggregation pipeline once"""
        if not run_lock.acquire(blocking=False):
            return jsonify({'success': False, 'error': 'A scraping run is already in progress'}), 409

        try:
            logger.info("Starting integrated event scraping...")
            store.require_connection()

            pipeline = AggregationPipeline(store, adapter_factory(), matcher=matcher,
                                           delay_seconds=delay_seconds)
            pipeline.initialize_sources()
            results = pipeline.run()
            summary = summarize(results)

            logger.info(f"Event scraping completed: {summary['total_events_added']} added")
            return jsonify({
                'success': True,
                'message': 'Event scraping completed successfully',
                'summary': summary,
                'results': [r.to_dict() for r in results],
                'timestamp': datetime.now().isoformat(),
            })

        except StoreUnavailableError as e:
            logger.error(f"Error in event scraping: {e}")
            return jsonify({'success': False, 'error': str(e)}), 500
        except (SQLAlchemyError, ValueError) as e:
            logger.error(f"Error in event scraping: {e}")
            return jsonify({'success': False, 'error': str(e), 'error_type': type(e).__name__}), 500
        finally:
            run_lock.release()

    @app.route('/api/admin/scrape-events', methods=['GET'])
    def scrape_status():
        """Last-run metadata and catalog totals. Never starts a run."""
        try:
            recent = store.recent_logs(limit=10)
            status = {
                'last_run': recent[0].timestamp.isoformat() if recent else None,
                'is_running': run_lock.locked(),
                'total_events_in_database': store.count_events(),
                'events_by_source': store.events_by_source(),
                'events_by_category': store.events_by_category(),
                'cities': store.unique_cities(),
                'categories': store.unique_categories(),
                'recent_results': [log_to_dict(log) for log in recent[:5]],
                'sources': [source_to_dict(s) for s in store.list_sources()],
                'api_keys_configured': credentials_configured(),
            }
            return jsonify({'success': True, 'status': status})
        except SQLAlchemyError as e:
            logger.error(f"Error in scrape_status route: {e}")
            return jsonify({'success': False, 'error': str(e)}), 500

    @app.route('/api/admin/events/cleanup', methods=['POST'])
    def cleanup_events():
        """Delete aggregated events older than the retention window"""
        raw_days = request.args.get('days')
        try:
            days = Config.RETENTION_DAYS if raw_days is None else int(raw_days)
        except ValueError:
            days = None
        if days is None or days < 1:
            return jsonify({'success': False, 'error': 'days must be a positive integer'}), 400

        try:
            deleted = store.purge_old_events(days)
            return jsonify({'success': True, 'deleted': deleted, 'retention_days': days})
        except SQLAlchemyError as e:
            logger.error(f"Error in cleanup_events route: {e}")
            return jsonify({'success': False, 'error': str(e)}), 500

    @app.route('/api/health')
    def health_check():
        """Health check endpoint"""
        if store.ping():
            return jsonify({'status': 'healthy', 'timestamp': datetime.now().isoformat()})
        return jsonify({'status': 'unhealthy', 'error': 'Database connection failed'}), 500

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {error}")
        return jsonify({'error': 'Internal server error'}), 500

    return app


app = create_app()

# Run with: python run_app.py from the root directory
