"""Queries over the cached postings used by the listing and detail views"""

from datetime import datetime, timezone
from typing import List, Optional

from gojobs.models.job import JobPosting


def filter_jobs(
    postings: List[JobPosting],
    job_type: Optional[str] = None,
    location: Optional[str] = None,
    remote_only: bool = False,
    company: Optional[str] = None,
    search: Optional[str] = None
) -> List[JobPosting]:
    """
    Filter postings the way the listing page does

    Job type, location and company must match exactly; ``search`` is a
    case-insensitive substring of the title, company or description.
    Unset filters match everything.
    """
    needle = search.lower().strip() if search else ""

    def matches(posting: JobPosting) -> bool:
        if job_type and posting.job_type != job_type:
            return False
        if location and posting.location != location:
            return False
        if company and posting.company != company:
            return False
        if remote_only and not posting.is_remote:
            return False
        if needle:
            haystack = f"{posting.title} {posting.company} {posting.description}".lower()
            if needle not in haystack:
                return False
        return True

    return [posting for posting in postings if matches(posting)]


def _parse_date(value: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def posted_date(posting: JobPosting) -> Optional[datetime]:
    """When the posting was published, falling back to when it was collected"""
    return _parse_date(posting.posted_at) or _parse_date(posting.date_gotten)


def sort_newest(postings: List[JobPosting]) -> List[JobPosting]:
    """Order postings newest first; postings without a usable date go last"""
    oldest = datetime.min.replace(tzinfo=timezone.utc)
    return sorted(postings, key=lambda posting: posted_date(posting) or oldest, reverse=True)


def find_job(postings: List[JobPosting], job_id: str) -> Optional[JobPosting]:
    """Look a posting up by its public job id, then by its API id"""
    for posting in postings:
        if posting.job_id == job_id:
            return posting
    for posting in postings:
        if posting.id == job_id:
            return posting
    return None


def unique_values(postings: List[JobPosting], field_name: str) -> List[str]:
    """Sorted distinct non-empty values of a posting field (used for filter options)"""
    values = {getattr(posting, field_name) for posting in postings}
    return sorted(value for value in values if value)
