"""Durable snapshot cache for job postings"""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import List, Optional

from filelock import FileLock, Timeout

from gojobs.models.config import AppConfig
from gojobs.models.job import CacheSnapshot, JobPosting, unique_postings
from gojobs.utils.redis_client import RedisClient


DEFAULT_MAX_AGE = timedelta(hours=13)


def utc_now() -> datetime:
    """Current UTC time truncated to the millisecond precision the cache stores"""
    millis = round(datetime.now(timezone.utc).timestamp() * 1000)
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def is_expired(
    snapshot: Optional[CacheSnapshot],
    max_age: timedelta = DEFAULT_MAX_AGE,
    force_refresh: bool = False,
    now: Optional[datetime] = None
) -> bool:
    """
    Decide whether a snapshot has to be refreshed

    Args:
        snapshot: Snapshot returned by JobCache.read(), or None
        max_age: Age after which a snapshot is stale
        force_refresh: Treat any snapshot as expired
        now: Reference time (defaults to the current UTC time)

    Returns:
        True if forced, if there is no snapshot, or if it is older than max_age
    """
    if force_refresh or snapshot is None:
        return True
    return snapshot.age(now) > max_age


class JobCache(ABC):
    """
    Holds the last fetched job list as a single snapshot

    Every write replaces the whole snapshot. Storage failures are logged and
    reported through return values; they are never raised to callers, who
    treat a missing snapshot as "no cache".
    """

    def __init__(self, max_age: timedelta = DEFAULT_MAX_AGE):
        self.max_age = max_age
        self.logger = logging.getLogger(f"gojobs.cache.{self.backend_name}")

    backend_name = "base"

    @abstractmethod
    def _load(self) -> Optional[str]:
        """Return the stored snapshot record, None if nothing is stored"""

    @abstractmethod
    def _store(self, payload: str) -> None:
        """Replace the stored snapshot record"""

    @abstractmethod
    def _remove(self) -> bool:
        """Remove the stored snapshot record; returns whether one existed"""

    def read(self) -> Optional[CacheSnapshot]:
        """
        Read the current snapshot

        Returns:
            CacheSnapshot, or None if nothing was ever written, the cache was
            cleared, or the stored record cannot be read
        """
        try:
            payload = self._load()
            if payload is None:
                return None
            snapshot = CacheSnapshot.from_dict(json.loads(payload))
        except Exception as e:
            self.logger.error(f"Error reading job cache: {e}")
            return None

        self.logger.debug(
            f"Cache snapshot: {len(snapshot.postings)} jobs, last fetch {snapshot.fetched_at.isoformat()}"
        )
        return snapshot

    def write(self, postings: List[JobPosting], fetched_at: Optional[datetime] = None) -> bool:
        """
        Replace the snapshot with postings and stamp it with the fetch time

        Args:
            postings: Postings to cache, in display order
            fetched_at: Fetch time to record; defaults to now. Pass the old
                snapshot's time when rewriting postings without refetching them

        Returns:
            True if the snapshot was persisted, False otherwise
        """
        if postings is None or not isinstance(postings, list):
            self.logger.error(f"Attempted to cache invalid jobs data: {type(postings).__name__}")
            return False

        snapshot = CacheSnapshot(postings=unique_postings(postings), fetched_at=fetched_at or utc_now())
        try:
            self._store(json.dumps(snapshot.to_dict(), ensure_ascii=False))
        except Exception as e:
            self.logger.error(f"Error writing job cache: {e}")
            return False

        self.logger.info(f"Cache updated with {len(snapshot.postings)} jobs at {snapshot.fetched_at.isoformat()}")
        return True

    def clear(self) -> bool:
        """
        Remove the snapshot entirely

        Returns:
            True if a snapshot was removed, False if there was none or removal failed
        """
        try:
            removed = self._remove()
        except Exception as e:
            self.logger.error(f"Error clearing job cache: {e}")
            return False

        if removed:
            self.logger.info("Job cache cleared")
        else:
            self.logger.info("No job cache found to clear")
        return removed

    def is_expired(
        self,
        snapshot: Optional[CacheSnapshot],
        force_refresh: bool = False,
        now: Optional[datetime] = None
    ) -> bool:
        """is_expired() with this cache's max age"""
        return is_expired(snapshot, self.max_age, force_refresh, now)


class FileJobCache(JobCache):
    """
    Snapshot cache stored as one JSON file

    Writers serialize on a lock file next to the cache and replace the file
    with an atomic rename, so readers see either the old or the new snapshot.
    """

    backend_name = "file"

    def __init__(self, path: str = ".job-cache.json", max_age: timedelta = DEFAULT_MAX_AGE, lock_timeout: int = 30):
        """
        Args:
            path: Cache file location
            max_age: Age after which the snapshot is stale
            lock_timeout: Seconds to wait for the writer lock
        """
        super().__init__(max_age)
        self.path = Path(path).resolve()
        self.lock_timeout = lock_timeout
        self._lock = FileLock(str(self.path) + ".lock", timeout=lock_timeout)

    def _load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding='utf-8')

    def _store(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self._lock:
                fd, tmp_name = tempfile.mkstemp(prefix=".job-cache-", suffix=".tmp", dir=str(self.path.parent))
                try:
                    with os.fdopen(fd, 'w', encoding='utf-8') as tmp:
                        tmp.write(payload)
                        tmp.flush()
                        os.fsync(tmp.fileno())
                    os.replace(tmp_name, self.path)
                except BaseException:
                    if os.path.exists(tmp_name):
                        os.unlink(tmp_name)
                    raise
        except Timeout:
            raise TimeoutError(
                f"Timeout waiting for cache lock on {self.path} (waited {self.lock_timeout}s). "
                f"Another process may be writing the cache."
            )

    def _remove(self) -> bool:
        with self._lock:
            if not self.path.exists():
                return False
            self.path.unlink()
            return True


class RedisJobCache(JobCache):
    """Snapshot cache stored under a single redis key"""

    backend_name = "redis"

    def __init__(self, client: RedisClient, key: str = "gojobs:snapshot", max_age: timedelta = DEFAULT_MAX_AGE):
        super().__init__(max_age)
        self.client = client
        self.key = key

    def _load(self) -> Optional[str]:
        return self.client.load(self.key)

    def _store(self, payload: str) -> None:
        self.client.store(self.key, payload)

    def _remove(self) -> bool:
        return self.client.delete(self.key)


def create_job_cache(config: AppConfig) -> JobCache:
    """
    Create the cache backend selected in the configuration

    A redis backend that cannot be reached falls back to the file backend so
    the board keeps serving.

    Args:
        config: Application configuration

    Returns:
        JobCache instance
    """
    logger = logging.getLogger("gojobs.cache")
    max_age = timedelta(hours=config.cache.max_age_hours)

    if config.cache.backend == "redis":
        try:
            client = RedisClient(host=config.redis_host, port=config.redis_port, db=config.redis_db)
            logger.info(f"Using redis job cache (key={config.cache.redis_key})")
            return RedisJobCache(client, key=config.cache.redis_key, max_age=max_age)
        except Exception as e:
            logger.error(f"Redis cache unavailable, falling back to file cache: {e}")

    logger.info(f"Using file job cache at {config.cache.path}")
    return FileJobCache(config.cache.path, max_age=max_age, lock_timeout=config.cache.lock_timeout)
