"""FastAPI application factory for the job board API"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gojobs import __version__
from gojobs.config.loader import ConfigLoader
from gojobs.exceptions import AuthorizationError, ConfigurationError
from gojobs.models.config import AppConfig
from gojobs.services.job_cache import JobCache
from gojobs.services.job_fetcher import JobFetcher
from gojobs.utils.logger import new_request_id, clear_request_id
from gojobs.api.state import build_services
from gojobs.api.routers import admin, health, jobs

logger = logging.getLogger("gojobs.api")


def create_app(
    config: Optional[AppConfig] = None,
    cache: Optional[JobCache] = None,
    fetcher: Optional[JobFetcher] = None,
    start_scheduler: bool = True
) -> FastAPI:
    """
    Build the job board API

    Args:
        config: Application configuration (default: config.yaml + environment)
        cache: Cache to serve from (default: backend from configuration)
        fetcher: Fetcher to refresh with (default: built from configuration)
        start_scheduler: Run the scheduled refresh while the app is up

    Returns:
        FastAPI application
    """
    config = config or ConfigLoader().load()
    services = build_services(config, cache=cache, fetcher=fetcher)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if start_scheduler and services.scheduler is not None:
            services.manager.start_all()
        try:
            yield
        finally:
            services.manager.stop_all()
            if services.owns_fetcher:
                services.fetcher.close()

    app = FastAPI(title="GoJobs API", version=__version__, lifespan=lifespan)
    app.state.services = services

    if config.api.origin:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=[config.api.origin],
            allow_methods=["GET", "POST"],
            allow_headers=["*"]
        )

    @app.middleware("http")
    async def add_request_context(request: Request, call_next):
        """Attach a correlation id to every request and log access lines."""
        new_request_id()
        start = time.time()
        try:
            response = await call_next(request)
            duration_ms = int((time.time() - start) * 1000)
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} in {duration_ms}ms"
            )
            return response
        finally:
            clear_request_id()

    @app.exception_handler(AuthorizationError)
    async def authorization_error(request: Request, exc: AuthorizationError):
        return JSONResponse(status_code=403, content={"error": "Unauthorized"})

    @app.exception_handler(ConfigurationError)
    async def configuration_error(request: Request, exc: ConfigurationError):
        logger.error(f"Configuration error: {exc}")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    app.include_router(jobs.router)
    app.include_router(admin.router)
    app.include_router(health.router)

    @app.get("/")
    async def root():
        return {"message": "GoJobs API. Use /api/jobs to browse Golang job postings."}

    return app
