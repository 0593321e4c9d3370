"""Administrative endpoints guarded by the shared admin secret"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from gojobs.api.schemas import UpdateCacheRequest
from gojobs.api.state import ServiceContainer, get_services
from gojobs.models.job import JobPosting, unique_postings
from gojobs.services.job_fetcher import STATUS_IN_PROGRESS

logger = logging.getLogger("gojobs.api.admin")
router = APIRouter(prefix="/api")


@router.get("/run-scheduler")
def run_scheduler(secret: Optional[str] = None, services: ServiceContainer = Depends(get_services)):
    """Run the scheduled cache refresh now."""
    services.check_admin_secret(secret)

    logger.info("Manual trigger: running scheduled job to update cache")
    result = services.fetcher.fetch_and_cache()

    if result.status == STATUS_IN_PROGRESS:
        return JSONResponse(
            status_code=409,
            content={"success": False, "message": "A fetch is already in progress"}
        )
    if not result.ok:
        return JSONResponse(status_code=502, content={"success": False, "error": result.error})

    return {
        "success": True,
        "message": "Cache update job completed",
        "status": result.status,
        "count": len(result.postings),
        "removed": result.removed,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.post("/clear-cache")
def clear_cache(secret: Optional[str] = None, services: ServiceContainer = Depends(get_services)):
    services.check_admin_secret(secret)
    if services.cache.clear():
        return {"success": True, "message": "Cache cleared"}
    return {"success": True, "message": "No cache found to clear"}


@router.post("/update-cache")
def update_cache(body: UpdateCacheRequest, services: ServiceContainer = Depends(get_services)):
    """Replace the cache with postings fetched elsewhere."""
    services.check_admin_secret(body.secret)

    if not isinstance(body.jobs, list) or not all(isinstance(job, dict) for job in body.jobs):
        return JSONResponse(status_code=400, content={"error": "Invalid jobs data"})

    postings = unique_postings([JobPosting.from_dict(job) for job in body.jobs])
    if not services.cache.write(postings):
        return JSONResponse(status_code=500, content={"error": "Failed to update cache"})

    logger.info(f"Cache updated via API with {len(postings)} jobs")
    return {
        "success": True,
        "message": f"Cache updated with {len(postings)} jobs",
        "count": len(postings),
    }
