"""Data models for gojobs"""

from .config import AppConfig, ApiConfig, CacheConfig, SchedulerConfig, ScheduleConfig
from .job import JobPosting, RawJobData, CacheSnapshot

__all__ = [
    "AppConfig",
    "ApiConfig",
    "CacheConfig",
    "SchedulerConfig",
    "ScheduleConfig",
    "JobPosting",
    "RawJobData",
    "CacheSnapshot",
]
