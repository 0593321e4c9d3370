"""Public listing endpoints: jobs, job detail, companies and stats"""

import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from gojobs.api.state import ServiceContainer, get_services
from gojobs.services.job_listing import filter_jobs, find_job, sort_newest, unique_values
from gojobs.utils.description_formatter import format_description
from gojobs.utils.summary_generator import generate_summary, summarize_companies

logger = logging.getLogger("gojobs.api.jobs")
router = APIRouter(prefix="/api")


@router.get("/jobs")
def list_jobs(
    job_type: Optional[str] = None,
    location: Optional[str] = None,
    view: str = Query("new", alias="filter", pattern="^(new|remote)$"),
    company: Optional[str] = None,
    q: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    services: ServiceContainer = Depends(get_services),
):
    """List cached postings, newest first. Fetches only when nothing is cached."""
    postings = services.fetcher.get_jobs()
    snapshot = services.cache.read()

    matching = sort_newest(filter_jobs(
        postings,
        job_type=job_type,
        location=location,
        remote_only=(view == "remote"),
        company=company,
        search=q,
    ))
    page = matching[:limit] if limit else matching

    return {
        "data": [posting.to_dict() for posting in page],
        "count": len(page),
        "total": len(matching),
        "last_fetched": snapshot.fetched_at.isoformat() if snapshot else None,
        "locations": unique_values(postings, "location"),
        "job_types": unique_values(postings, "job_type"),
    }


@router.get("/jobs/{job_id}")
def get_job(job_id: str, services: ServiceContainer = Depends(get_services)):
    posting = find_job(services.fetcher.get_jobs(), job_id)
    if posting is None:
        return JSONResponse(status_code=404, content={"error": "Job not found"})
    return {
        "data": posting.to_dict(),
        "description_blocks": [block.to_dict() for block in format_description(posting.description)],
    }


@router.get("/companies")
def list_companies(search: Optional[str] = None, services: ServiceContainer = Depends(get_services)):
    companies = summarize_companies(services.fetcher.get_jobs(), search=search)
    return {"data": [asdict(company) for company in companies], "count": len(companies)}


@router.get("/stats")
def board_stats(services: ServiceContainer = Depends(get_services)):
    return generate_summary(services.fetcher.get_jobs()).to_dict()
