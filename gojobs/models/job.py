"""Job posting and cache snapshot data models"""

import json
import logging
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


logger = logging.getLogger("gojobs.models.job")


def _text(value: Any) -> str:
    """Coerce an optional field to a string, mapping None to empty"""
    if value is None:
        return ""
    return str(value)


def _tags(value: Any) -> List[str]:
    if not value or not isinstance(value, (list, tuple)):
        return []
    return [str(tag) for tag in value]


@dataclass
class RawJobData:
    """
    Companion payload attached to a posting by the jobs API

    The API ships it as a JSON string in ``raw_data``; it is parsed once when
    the posting is ingested and kept alongside the posting.
    """
    id: str = ""
    job_id: str = ""
    title: str = ""
    company: str = ""
    company_url: str = ""
    company_logo: str = ""
    description: str = ""
    location: str = ""
    job_type: str = ""
    posted_at: str = ""
    salary: str = ""
    source: str = ""
    url: str = ""
    is_remote: bool = False
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RawJobData':
        """Build from a decoded payload, ignoring unknown keys"""
        return cls(
            id=_text(data.get('id')),
            job_id=_text(data.get('job_id')),
            title=_text(data.get('title')),
            company=_text(data.get('company')),
            company_url=_text(data.get('company_url')),
            company_logo=_text(data.get('company_logo')),
            description=_text(data.get('description')),
            location=_text(data.get('location')),
            job_type=_text(data.get('job_type')),
            posted_at=_text(data.get('posted_at')),
            salary=_text(data.get('salary')),
            source=_text(data.get('source')),
            url=_text(data.get('url')),
            is_remote=bool(data.get('is_remote', False)),
            tags=_tags(data.get('tags')),
        )

    @classmethod
    def parse(cls, raw: str) -> Optional['RawJobData']:
        """
        Parse a serialized companion payload

        Args:
            raw: JSON text as shipped in a posting's ``raw_data`` field

        Returns:
            RawJobData, or None if the text is empty or not a JSON object
        """
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            return None
        if not isinstance(data, dict):
            return None
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class JobPosting:
    """
    A single job posting as served by the job board

    Attributes:
        id: Identifier assigned by the jobs API
        job_id: Identifier used in public job URLs (falls back to ``id``)
        title: Job title
        company: Company name
        company_url: Company website
        company_logo: URL of the company logo
        country: Country of the position
        state: State/region of the position
        description: Plain-text description
        url: Link to the original posting
        source: Board the posting was collected from
        is_remote: Whether the position is remote
        employment_type: Employment type as reported by the source
        posted_at: When the job was posted
        date_gotten: When the jobs API collected it
        exp_date: When the posting expires
        salary: Free-form salary text
        location: Display location
        job_type: Job type used for filtering (full-time, contract, ...)
        raw_data: Serialized companion payload as received
        tags: Free-form tags
        raw_data_parsed: ``raw_data`` parsed at ingestion, if it was valid
    """
    id: str = ""
    job_id: str = ""
    title: str = ""
    company: str = ""
    company_url: str = ""
    company_logo: str = ""
    country: str = ""
    state: str = ""
    description: str = ""
    url: str = ""
    source: str = ""
    is_remote: bool = False
    employment_type: str = ""
    posted_at: str = ""
    date_gotten: str = ""
    exp_date: str = ""
    salary: str = ""
    location: str = ""
    job_type: str = ""
    raw_data: str = ""
    tags: List[str] = field(default_factory=list)
    raw_data_parsed: Optional[RawJobData] = None

    def __str__(self) -> str:
        return f"{self.title} at {self.company} ({self.location})"

    @property
    def key(self) -> str:
        """Identifier that is unique within a cache snapshot"""
        return self.job_id or self.id

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'JobPosting':
        """
        Create a JobPosting from an API or cache dictionary

        Missing optional fields become empty strings. A ``raw_data_parsed``
        entry, when present, is trusted as-is; the serialized ``raw_data`` is
        only parsed here when the dictionary has no parsed form at all.

        Args:
            data: Dictionary in the jobs API shape

        Returns:
            JobPosting instance
        """
        raw_data = data.get('raw_data')
        if raw_data is not None and not isinstance(raw_data, str):
            raw_data = json.dumps(raw_data)

        if 'raw_data_parsed' in data:
            parsed_value = data.get('raw_data_parsed')
            parsed = RawJobData.from_dict(parsed_value) if isinstance(parsed_value, dict) else None
        else:
            parsed = RawJobData.parse(raw_data or "")

        return cls(
            id=_text(data.get('id')),
            job_id=_text(data.get('job_id')),
            title=_text(data.get('title')),
            company=_text(data.get('company')),
            company_url=_text(data.get('company_url')),
            company_logo=_text(data.get('company_logo')),
            country=_text(data.get('country')),
            state=_text(data.get('state')),
            description=_text(data.get('description')),
            url=_text(data.get('url')),
            source=_text(data.get('source')),
            is_remote=bool(data.get('is_remote', False)),
            employment_type=_text(data.get('employment_type')),
            posted_at=_text(data.get('posted_at')),
            date_gotten=_text(data.get('date_gotten')),
            exp_date=_text(data.get('exp_date')),
            salary=_text(data.get('salary')),
            location=_text(data.get('location')),
            job_type=_text(data.get('job_type')),
            raw_data=raw_data or "",
            tags=_tags(data.get('tags')),
            raw_data_parsed=parsed,
        )

    def to_dict(self) -> dict:
        """Convert posting to a JSON-serializable dictionary"""
        data = asdict(self)
        data['raw_data_parsed'] = self.raw_data_parsed.to_dict() if self.raw_data_parsed else None
        return data


def unique_postings(postings: List[JobPosting]) -> List[JobPosting]:
    """
    Drop postings whose key was already seen, keeping the first occurrence

    Postings without any identifier are always kept.
    """
    seen = set()
    unique = []
    for posting in postings:
        key = posting.key
        if key and key in seen:
            continue
        if key:
            seen.add(key)
        unique.append(posting)

    dropped = len(postings) - len(unique)
    if dropped:
        logger.warning(f"Dropped {dropped} posting(s) with duplicate identifiers")
    return unique


@dataclass
class CacheSnapshot:
    """
    The full list of cached postings and the time they were fetched

    A snapshot is always replaced as a whole.
    """
    postings: List[JobPosting]
    fetched_at: datetime

    @property
    def last_fetch_ms(self) -> int:
        return round(self.fetched_at.timestamp() * 1000)

    def age(self, now: Optional[datetime] = None):
        """Time elapsed since the snapshot was fetched"""
        now = now or datetime.now(timezone.utc)
        return now - self.fetched_at

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CacheSnapshot':
        """
        Build a snapshot from its durable representation

        Raises:
            ValueError: If the record is not a valid snapshot
        """
        if not isinstance(data, dict):
            raise ValueError("Cache record must be an object")
        jobs = data.get('jobs')
        if not isinstance(jobs, list):
            raise ValueError("Cache record has no job list")
        try:
            last_fetch = int(data['lastFetchTime'])
        except (KeyError, TypeError, ValueError):
            raise ValueError("Cache record has no valid lastFetchTime")

        postings = [JobPosting.from_dict(job) for job in jobs if isinstance(job, dict)]
        fetched_at = datetime.fromtimestamp(last_fetch / 1000, tz=timezone.utc)
        return cls(postings=postings, fetched_at=fetched_at)

    def to_dict(self) -> dict:
        return {
            'jobs': [posting.to_dict() for posting in self.postings],
            'lastFetchTime': self.last_fetch_ms,
        }
