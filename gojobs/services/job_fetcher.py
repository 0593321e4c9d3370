"""Fetches job postings from the external jobs API and writes them through the cache"""

import hashlib
import hmac
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from gojobs.exceptions import ConfigurationError, ParseError, UpstreamError
from gojobs.models.config import ApiConfig
from gojobs.models.job import JobPosting, RawJobData
from gojobs.services.job_cache import JobCache
from gojobs.utils.language_filter import LanguageFilter


STATUS_UPDATED = "updated"
STATUS_UNCHANGED = "unchanged"
STATUS_IN_PROGRESS = "in_progress"
STATUS_FAILED = "failed"


def rfc3339_timestamp(now: Optional[datetime] = None) -> str:
    """Format a time as RFC3339 UTC with milliseconds, e.g. 2024-05-01T12:00:00.000Z"""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def sign_timestamp(secret: str, timestamp: str) -> str:
    """Hex HMAC-SHA256 of the timestamp keyed with the shared secret"""
    return hmac.new(secret.encode('utf-8'), timestamp.encode('utf-8'), hashlib.sha256).hexdigest()


@dataclass
class FetchResult:
    """
    Outcome of one fetch_and_cache() call

    Attributes:
        status: 'updated', 'unchanged' (no English postings returned, cache kept),
            'in_progress' (another fetch was running) or 'failed'
        postings: Postings now being served (fresh ones, or the cached ones on
            failure or when another fetch was running)
        received: Postings returned by the jobs API
        removed: Postings dropped by the language filter
        error: Failure description when status is 'failed'
    """
    status: str
    postings: List[JobPosting] = field(default_factory=list)
    received: int = 0
    removed: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status in (STATUS_UPDATED, STATUS_UNCHANGED)


class JobFetcher:
    """
    Pulls postings from the jobs API, filters them and writes them to the cache

    At most one fetch runs at a time per fetcher: a call made while another
    is in flight returns the cached postings without issuing a request.
    Upstream and parse failures never touch the existing snapshot.
    """

    def __init__(
        self,
        api_config: ApiConfig,
        cache: JobCache,
        language_filter: Optional[LanguageFilter] = None,
        client: Optional[httpx.Client] = None
    ):
        """
        Initialize job fetcher

        Args:
            api_config: External jobs API settings
            cache: Cache the fetched postings are written to
            language_filter: Filter for non-English postings (default LanguageFilter())
            client: HTTP client to use (default: one with the configured timeout)
        """
        self.logger = logging.getLogger("gojobs.service.fetcher")
        self.api_config = api_config
        self.cache = cache
        self.language_filter = language_filter or LanguageFilter()
        self.client = client or httpx.Client(timeout=api_config.timeout)
        self._fetch_lock = threading.Lock()
        self.last_result: Optional[FetchResult] = None

    @property
    def is_fetching(self) -> bool:
        """Whether a fetch is currently in flight"""
        return self._fetch_lock.locked()

    def close(self) -> None:
        self.client.close()

    def _cached_postings(self) -> List[JobPosting]:
        snapshot = self.cache.read()
        return snapshot.postings if snapshot else []

    def check_configuration(self) -> None:
        """
        Raises:
            ConfigurationError: If the API URL or key is not configured
        """
        if not self.api_config.url:
            raise ConfigurationError("API_URL is not configured on the server")
        if not self.api_config.key:
            raise ConfigurationError("API_KEY is not configured on the server")

    def build_headers(self, now: Optional[datetime] = None) -> Dict[str, str]:
        """
        Build signed request headers

        Args:
            now: Time to sign (defaults to the current time)

        Returns:
            Header dictionary for the jobs API request
        """
        timestamp = rfc3339_timestamp(now)
        headers = {
            'Accept': 'application/json',
            'Content-Type': 'application/json',
            'X-API-Key': self.api_config.key,
            'X-Timestamp': timestamp,
            'X-Signature': sign_timestamp(self.api_config.key, timestamp),
        }
        if self.api_config.origin:
            headers['Origin'] = self.api_config.origin
        return headers

    def request_postings(self) -> List[Any]:
        """
        Call the jobs API and return the raw posting list

        Returns:
            Entries of the response's ``data`` field, or an empty list when the
            field is missing or not a list

        Raises:
            UpstreamError: On transport failure or non-2xx status
            ParseError: If the body is not valid JSON
        """
        self.logger.info(f"Fetching jobs from: {self.api_config.url}")
        self.logger.debug(f"Origin header is {'set' if self.api_config.origin else 'not set'}")

        try:
            response = self.client.get(
                self.api_config.url,
                headers=self.build_headers(),
                timeout=self.api_config.timeout
            )
        except httpx.HTTPError as e:
            raise UpstreamError(f"Request to jobs API failed: {type(e).__name__}: {e}")

        if not response.is_success:
            body = response.text[:500]
            self.logger.error(f"API Error ({response.status_code}): {body}")
            if response.status_code == 401:
                self.logger.error(
                    "Authentication error: Check that your API key, timestamp, or HMAC signature is correct"
                )
            elif response.status_code == 403:
                self.logger.error("Authorization error: Check that your Origin header is allowed")
            raise UpstreamError(
                f"External API returned status {response.status_code}",
                status_code=response.status_code
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ParseError(f"Jobs API returned invalid JSON: {e}")

        data = payload.get('data') if isinstance(payload, dict) else None
        if not isinstance(data, list):
            self.logger.warning("Jobs API response has no posting list, treating it as empty")
            return []
        return data

    def normalize(self, raw_postings: List[Any]) -> List[JobPosting]:
        """
        Convert API entries into postings

        Ensures every posting has a tag list, parses the companion ``raw_data``
        payload once and backfills a missing company logo from it.

        Args:
            raw_postings: Entries from the API response

        Returns:
            List of JobPosting in API order
        """
        postings = []
        skipped = 0

        for entry in raw_postings:
            if not isinstance(entry, dict):
                skipped += 1
                continue

            posting = JobPosting.from_dict({key: value for key, value in entry.items() if key != 'raw_data_parsed'})
            parsed: Optional[RawJobData] = posting.raw_data_parsed
            if parsed and not posting.company_logo and parsed.company_logo:
                posting.company_logo = parsed.company_logo
            postings.append(posting)

        if skipped:
            self.logger.warning(f"Skipped {skipped} malformed entries in jobs API response")
        return postings

    def fetch_and_cache(self) -> FetchResult:
        """
        Fetch fresh postings and replace the cached snapshot

        Returns:
            FetchResult describing what happened

        Raises:
            ConfigurationError: If the API URL or key is missing
        """
        if not self._fetch_lock.acquire(blocking=False):
            self.logger.info("Fetch already in progress, returning cached jobs if available")
            return FetchResult(status=STATUS_IN_PROGRESS, postings=self._cached_postings())

        try:
            self.check_configuration()
            result = self._fetch()
        finally:
            self._fetch_lock.release()

        self.last_result = result
        return result

    def _fetch(self) -> FetchResult:
        try:
            raw_postings = self.request_postings()
        except UpstreamError as e:
            self.logger.error(f"Error fetching jobs from external API: {e}")
            return FetchResult(status=STATUS_FAILED, postings=self._cached_postings(), error=str(e))
        except ParseError as e:
            self.logger.warning(f"{e}, treating it as an empty response")
            raw_postings = []

        postings = self.normalize(raw_postings)
        kept = self.language_filter.filter_postings(postings)
        removed = len(postings) - len(kept)

        if not kept:
            existing = self.cache.read()
            if existing is not None:
                self.logger.info(
                    f"No English jobs left out of {len(postings)} returned from jobs API, keeping the current cache"
                )
                return FetchResult(
                    status=STATUS_UNCHANGED,
                    postings=existing.postings,
                    received=len(postings),
                    removed=removed
                )

        if not self.cache.write(kept):
            self.logger.error("Fetched jobs could not be written to the cache")
            return FetchResult(
                status=STATUS_FAILED,
                postings=kept,
                received=len(postings),
                removed=removed,
                error="Failed to write job cache"
            )

        self.logger.info(f"Fetched {len(kept)} fresh jobs ({removed} non-English removed)")
        return FetchResult(status=STATUS_UPDATED, postings=kept, received=len(postings), removed=removed)

    def get_jobs(self, force_refresh: bool = False) -> List[JobPosting]:
        """
        Return the postings to serve, fetching only when there is nothing cached

        A stale snapshot is still served unless a refresh is forced; the
        scheduler is responsible for keeping it current.

        Args:
            force_refresh: Fetch even if a snapshot exists

        Returns:
            List of JobPosting (empty if nothing is cached and the fetch fails)
        """
        snapshot = self.cache.read()

        if not self.cache.is_expired(snapshot, force_refresh):
            self.logger.debug("Using cached jobs (cache not expired)")
            return snapshot.postings

        if snapshot is not None and not force_refresh:
            self.logger.info("Using cached jobs (cache expired, waiting for scheduled refresh)")
            return snapshot.postings

        try:
            return self.fetch_and_cache().postings
        except ConfigurationError as e:
            self.logger.error(f"Cannot fetch jobs: {e}")
            return snapshot.postings if snapshot else []
