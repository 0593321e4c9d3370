"""
GoJobs - Main Entry Point

Job board backend that keeps a cache of Golang job postings fresh and serves it over HTTP
"""
import sys
import json
import argparse
import logging

from gojobs.utils.logger import setup_logger
from gojobs.config.loader import ConfigLoader
from gojobs.exceptions import GoJobsError
from gojobs.models.config import AppConfig
from gojobs.services.job_cache import create_job_cache
from gojobs.services.job_fetcher import JobFetcher
from gojobs.services.cache_pusher import push_postings
from gojobs.utils.language_filter import LanguageFilter
from gojobs.utils.summary_generator import generate_summary
from gojobs.workers.scheduler_worker import ScheduledFetchWorker
from gojobs.workers.worker_manager import WorkerManager


def parse_arguments(argv=None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog="gojobs",
        description="GoJobs - Golang job board backend"
    )

    parser.add_argument(
        '--config',
        '-c',
        type=str,
        default=None,
        help='Path to configuration file (default: config.yaml if present)'
    )

    parser.add_argument(
        '--log-level',
        '-l',
        type=str,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Override log level from config file'
    )

    commands = parser.add_subparsers(dest='command', required=True)

    serve = commands.add_parser('serve', help='Run the HTTP API with the scheduled refresh')
    serve.add_argument('--host', type=str, help='Bind address (default from config)')
    serve.add_argument('--port', type=int, help='Port (default from config)')

    commands.add_parser('worker', help='Run the scheduled refresh without the HTTP API')

    fetch = commands.add_parser('fetch', help='Fetch jobs once and update the cache')
    fetch.add_argument('--force', action='store_true', help='Fetch even if the cache is fresh')

    commands.add_parser('clean-cache', help='Re-apply the language filter to the cached jobs')
    commands.add_parser('clear-cache', help='Remove the cached jobs')
    commands.add_parser('summary', help='Print job board statistics')

    push = commands.add_parser('push', help="Send the cached jobs to a remote server's cache")
    push.add_argument('--server', type=str, required=True, help='Base URL of the job board server')

    return parser.parse_args(argv)


def run_serve(config: AppConfig, args, logger: logging.Logger) -> int:
    import uvicorn
    from gojobs.api.app import create_app

    app = create_app(config)
    uvicorn.run(app, host=args.host or config.host, port=args.port or config.port, log_config=None)
    return 0


def run_worker(config: AppConfig, args, logger: logging.Logger) -> int:
    cache = create_job_cache(config)
    fetcher = JobFetcher(config.api, cache)
    fetcher.check_configuration()

    manager = WorkerManager()
    manager.register_worker(ScheduledFetchWorker(
        fetcher,
        times=config.scheduler.times,
        tz_name=config.timezone,
        run_on_start=config.scheduler.run_on_start,
    ))
    manager.run()
    fetcher.close()
    return 0


def run_fetch(config: AppConfig, args, logger: logging.Logger) -> int:
    cache = create_job_cache(config)
    fetcher = JobFetcher(config.api, cache)
    try:
        if not args.force and not cache.is_expired(cache.read()):
            logger.info("Cache is fresh, nothing to do (use --force to fetch anyway)")
            return 0
        result = fetcher.fetch_and_cache()
    finally:
        fetcher.close()

    print(json.dumps({
        "status": result.status,
        "cached": len(result.postings),
        "received": result.received,
        "removed": result.removed,
        "error": result.error,
    }, indent=2))
    return 0 if result.ok else 1


def run_clean_cache(config: AppConfig, args, logger: logging.Logger) -> int:
    cache = create_job_cache(config)
    snapshot = cache.read()
    if snapshot is None:
        logger.error("Cache not found. No jobs cached yet.")
        return 1

    logger.info(f"Found {len(snapshot.postings)} jobs in cache, filtering out non-English jobs...")
    kept = LanguageFilter().filter_postings(snapshot.postings)
    removed = len(snapshot.postings) - len(kept)

    if removed == 0:
        logger.info("No non-English jobs found in the cache. Nothing to remove.")
        return 0
    # Rewriting postings is not a fetch, so the snapshot keeps its age
    if not cache.write(kept, fetched_at=snapshot.fetched_at):
        return 1
    logger.info(f"Removed {removed} non-English jobs from cache. Cache now contains {len(kept)} jobs.")
    return 0


def run_clear_cache(config: AppConfig, args, logger: logging.Logger) -> int:
    cache = create_job_cache(config)
    cache.clear()
    return 0


def run_summary(config: AppConfig, args, logger: logging.Logger) -> int:
    snapshot = create_job_cache(config).read()
    summary = generate_summary(snapshot.postings if snapshot else [])
    print(json.dumps(summary.to_dict(), indent=2))
    return 0


def run_push(config: AppConfig, args, logger: logging.Logger) -> int:
    snapshot = create_job_cache(config).read()
    if snapshot is None:
        logger.error("Cache not found. Run 'gojobs fetch' first.")
        return 1
    push_postings(args.server, config.admin_secret, snapshot.postings)
    return 0


COMMANDS = {
    'serve': run_serve,
    'worker': run_worker,
    'fetch': run_fetch,
    'clean-cache': run_clean_cache,
    'clear-cache': run_clear_cache,
    'summary': run_summary,
    'push': run_push,
}


def main(argv=None):
    """Main entry point for the gojobs command"""
    args = parse_arguments(argv)

    logger = setup_logger("gojobs")

    try:
        config = ConfigLoader(args.config).load()

        log_level = args.log_level or config.log_level
        setup_logger("gojobs", log_level)
        logger.debug(f"Log level set to: {log_level}")

        return COMMANDS[args.command](config, args, logger)

    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    except GoJobsError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1

    except Exception as e:
        logger.error(f"Application error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
