"""Health endpoint reporting cache and scheduler state"""

from fastapi import APIRouter, Depends

from gojobs.api.state import ServiceContainer, get_services

router = APIRouter(prefix="/api")


@router.get("/health")
def health(services: ServiceContainer = Depends(get_services)):
    snapshot = services.cache.read()
    return {
        "status": "ok",
        "cache": {
            "backend": services.cache.backend_name,
            "jobs": len(snapshot.postings) if snapshot else 0,
            "last_fetched": snapshot.fetched_at.isoformat() if snapshot else None,
            "expired": services.cache.is_expired(snapshot),
        },
        "fetching": services.fetcher.is_fetching,
        "scheduler": services.manager.get_status(),
    }
