"""Scheduled refresh of the job cache at fixed times of day"""

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo

from gojobs.models.config import ScheduleConfig
from gojobs.services.job_fetcher import JobFetcher
from gojobs.workers.base_worker import BaseWorker


def compute_delay(now: datetime, schedule: ScheduleConfig) -> timedelta:
    """
    Time from now until the next occurrence of the scheduled time of day

    The candidate is today at ``hour:minute`` in now's timezone; if that is
    not strictly in the future it moves to the same time tomorrow. The result
    is always positive and at most one day (plus a DST shift).

    Args:
        now: Current time; aware datetimes are scheduled in their own timezone
        schedule: Daily run time

    Returns:
        Delay until the next run
    """
    candidate = now.replace(hour=schedule.hour, minute=schedule.minute, second=0, microsecond=0)
    if candidate <= now:
        candidate = candidate + timedelta(days=1)

    if now.tzinfo is None:
        return candidate - now
    # Same-tzinfo subtraction ignores UTC offsets, so compare in UTC
    return candidate.astimezone(timezone.utc) - now.astimezone(timezone.utc)


def next_run_delay(now: datetime, schedules: List[ScheduleConfig]) -> timedelta:
    """Delay until the soonest of several daily run times"""
    return min(compute_delay(now, schedule) for schedule in (schedules or [ScheduleConfig()]))


class ScheduledFetchWorker(BaseWorker):
    """
    Worker that refreshes the job cache at fixed times of day

    Each cycle runs one fetch and then re-arms for the next run time,
    whether the fetch succeeded or not.
    """

    def __init__(
        self,
        fetcher: JobFetcher,
        times: Optional[List[ScheduleConfig]] = None,
        tz_name: str = "Africa/Lagos",
        run_on_start: bool = False,
        name: str = "scheduler",
        clock: Optional[Callable[[], datetime]] = None
    ):
        """
        Initialize scheduled fetch worker

        Args:
            fetcher: Fetcher that refreshes the cache
            times: Daily run times (default 13:00)
            tz_name: IANA timezone the run times refer to
            run_on_start: Fetch once as soon as the worker starts
            name: Worker name
            clock: Returns the current time (for tests); defaults to now in tz_name
        """
        super().__init__(name, interval=0, run_immediately=run_on_start)
        self.fetcher = fetcher
        self.times = times or [ScheduleConfig()]
        self.tz = ZoneInfo(tz_name)
        self._clock = clock or (lambda: datetime.now(self.tz))
        self.next_run_at: Optional[datetime] = None

    def next_delay(self) -> float:
        now = self._clock()
        delay = next_run_delay(now, self.times)
        self.next_run_at = (now + delay).astimezone(self.tz)
        self.logger.info(f"Next scheduled job fetch at: {self.next_run_at.strftime('%Y-%m-%d %H:%M:%S %Z')}")
        return delay.total_seconds()

    def do_work(self) -> None:
        """Run one scheduled fetch"""
        self.logger.info(
            f"Executing scheduled job fetch at: {self._clock().astimezone(self.tz).strftime('%Y-%m-%d %H:%M:%S %Z')}"
        )
        result = self.fetcher.fetch_and_cache()
        if result.ok:
            self.logger.info(f"Scheduled fetch finished: {result.status}, {len(result.postings)} jobs cached")
        else:
            self.logger.warning(f"Scheduled fetch did not update the cache: {result.status} {result.error or ''}")
