"""Summary generator utility for job board statistics"""

import logging
import pandas as pd
from datetime import datetime
from typing import List, Optional
from dataclasses import dataclass, field, asdict

from gojobs.models.job import JobPosting


logger = logging.getLogger("gojobs.utils.summary_generator")


@dataclass
class CompanySummary:
    """A company in the company directory"""
    name: str
    logo: str
    job_count: int


@dataclass
class CountSummary:
    """Summary statistics for one value of a field (job type, location, tag)"""
    name: str
    count: int
    percentage: float


@dataclass
class BoardSummary:
    """Complete job board summary"""
    total_jobs: int
    remote_jobs: int = 0
    remote_percentage: float = 0.0
    job_types: List[CountSummary] = field(default_factory=list)
    locations: List[CountSummary] = field(default_factory=list)
    tags: List[CountSummary] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        data = asdict(self)
        data['generated_at'] = self.generated_at.isoformat()
        return data


def calculate_percentage(count: int, total: int, decimal_places: int = 2) -> float:
    """
    Calculate percentage with safe division

    Args:
        count: The count for the item
        total: The total count
        decimal_places: Number of decimal places to round to

    Returns:
        Percentage value rounded to specified decimal places
    """
    if total == 0:
        return 0.0
    return round((count / total) * 100, decimal_places)


def _first_non_empty(values: pd.Series) -> str:
    return next((value for value in values if value), "")


def summarize_companies(postings: List[JobPosting], search: Optional[str] = None) -> List[CompanySummary]:
    """
    Build the company directory from cached postings

    Companies are ordered by number of postings, most first; ties keep the
    order in which the companies first appear. Postings without a company
    name are skipped.

    Args:
        postings: Postings to aggregate
        search: Optional case-insensitive substring the company name must contain

    Returns:
        List of CompanySummary
    """
    rows = [
        {'company': posting.company, 'logo': posting.company_logo}
        for posting in postings
        if posting.company
    ]
    if not rows:
        return []

    df = pd.DataFrame(rows)
    if search:
        df = df[df['company'].str.lower().str.contains(search.lower(), regex=False)]
        if df.empty:
            return []

    grouped = (
        df.groupby('company', sort=False)
        .agg(job_count=('logo', 'size'), logo=('logo', _first_non_empty))
        .reset_index()
        .sort_values('job_count', ascending=False, kind='stable')
    )

    return [
        CompanySummary(name=row.company, logo=row.logo, job_count=int(row.job_count))
        for row in grouped.itertuples(index=False)
    ]


def _count_column(series: pd.Series, total: int) -> List[CountSummary]:
    series = series[series != ""]
    counts = series.value_counts(sort=True)
    return [
        CountSummary(name=str(name), count=int(count), percentage=calculate_percentage(int(count), total))
        for name, count in counts.items()
    ]


def generate_summary(postings: List[JobPosting]) -> BoardSummary:
    """
    Generate job board statistics

    Args:
        postings: Postings currently on the board

    Returns:
        BoardSummary with remote share and job type, location and tag breakdowns
    """
    total_jobs = len(postings)

    if total_jobs == 0:
        return BoardSummary(total_jobs=0)

    df = pd.DataFrame([
        {
            'job_type': posting.job_type,
            'location': posting.location,
            'is_remote': posting.is_remote,
            'tags': posting.tags,
        }
        for posting in postings
    ])

    remote_jobs = int(df['is_remote'].sum())
    tags = df['tags'].explode().dropna().astype(str)

    summary = BoardSummary(
        total_jobs=total_jobs,
        remote_jobs=remote_jobs,
        remote_percentage=calculate_percentage(remote_jobs, total_jobs),
        job_types=_count_column(df['job_type'], total_jobs),
        locations=_count_column(df['location'], total_jobs),
        tags=_count_column(tags, total_jobs),
    )

    logger.debug(
        f"Generated board summary: {summary.total_jobs} jobs, "
        f"{len(summary.job_types)} job types, {len(summary.locations)} locations"
    )
    return summary
