"""Service container shared by the API routes and the background scheduler"""

import hmac
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from gojobs.exceptions import AuthorizationError
from gojobs.models.config import AppConfig
from gojobs.services.job_cache import JobCache, create_job_cache
from gojobs.services.job_fetcher import JobFetcher
from gojobs.workers.scheduler_worker import ScheduledFetchWorker
from gojobs.workers.worker_manager import WorkerManager

logger = logging.getLogger("gojobs.api.state")


@dataclass
class ServiceContainer:
    """Everything a request handler needs, owned by one application instance"""
    config: AppConfig
    cache: JobCache
    fetcher: JobFetcher
    manager: WorkerManager
    scheduler: Optional[ScheduledFetchWorker] = None
    owns_fetcher: bool = True

    def check_admin_secret(self, provided: Optional[str]) -> None:
        """
        Validate the shared secret of an administrative request

        Raises:
            AuthorizationError: If no admin secret is configured, or provided doesn't match
        """
        expected = self.config.admin_secret
        if not expected:
            logger.warning("Administrative request rejected: CACHE_SECRET is not configured")
            raise AuthorizationError("Administrative endpoints are disabled")
        if not provided or not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
            logger.warning("Administrative request rejected: invalid or missing secret")
            raise AuthorizationError("Invalid or missing secret")


def build_services(
    config: AppConfig,
    cache: Optional[JobCache] = None,
    fetcher: Optional[JobFetcher] = None
) -> ServiceContainer:
    """
    Wire cache, fetcher and scheduler together for one application

    Args:
        config: Application configuration
        cache: Cache to use (default: backend from configuration)
        fetcher: Fetcher to use (default: one built on the cache)

    Returns:
        ServiceContainer
    """
    owns_fetcher = fetcher is None
    if fetcher is not None:
        cache = fetcher.cache
    cache = cache or create_job_cache(config)
    fetcher = fetcher or JobFetcher(config.api, cache)

    manager = WorkerManager()
    scheduler = None
    if config.scheduler.enabled:
        scheduler = ScheduledFetchWorker(
            fetcher,
            times=config.scheduler.times,
            tz_name=config.timezone,
            run_on_start=config.scheduler.run_on_start,
        )
        manager.register_worker(scheduler)

    return ServiceContainer(
        config=config,
        cache=cache,
        fetcher=fetcher,
        manager=manager,
        scheduler=scheduler,
        owns_fetcher=owns_fetcher,
    )


def get_services(request: Request) -> ServiceContainer:
    """FastAPI dependency returning the application's services"""
    return request.app.state.services
