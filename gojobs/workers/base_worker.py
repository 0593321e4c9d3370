"""Base worker class for gojobs background tasks"""

from abc import ABC, abstractmethod
from threading import Thread, Event
from typing import Optional
import logging


class BaseWorker(ABC):
    """
    Abstract base class for workers

    Workers run a background task on a daemon thread with lifecycle
    management. They run in the server process because they share the job
    cache and the fetcher's in-flight guard with the request handlers.
    """

    def __init__(self, name: str, interval: float = 60, run_immediately: bool = True):
        """
        Initialize base worker

        Args:
            name: Worker name for identification
            interval: Default time in seconds between work cycles
            run_immediately: Run the first cycle right after start instead of
                waiting for the first delay
        """
        self.name = name
        self.interval = interval
        self.run_immediately = run_immediately
        self.logger = logging.getLogger(f"gojobs.worker.{self.name}")
        self.cycles = 0

        self._thread: Optional[Thread] = None
        self._stop_event = Event()
        self._running = False

    @abstractmethod
    def do_work(self) -> None:
        """
        Implement the actual work to be done by the worker

        This method is called repeatedly, once per cycle
        """
        pass

    def next_delay(self) -> float:
        """Seconds to wait before the next cycle (fixed interval by default)"""
        return self.interval

    def start(self) -> None:
        """Start the worker on a background thread"""
        if self._running:
            self.logger.warning(f"Worker {self.name} is already running")
            return

        self.logger.info(f"Starting worker: {self.name}")
        self._stop_event.clear()
        self._running = True

        self._thread = Thread(target=self._run_loop, name=self.name, daemon=True)
        self._thread.start()

        self.logger.info(f"Worker {self.name} started successfully")

    def stop(self, timeout: float = 10) -> None:
        """
        Stop the worker gracefully

        A pending wait is interrupted immediately; a cycle that is already
        running is given ``timeout`` seconds to finish.

        Args:
            timeout: Maximum time to wait for worker to stop (seconds)
        """
        if not self._running:
            self.logger.warning(f"Worker {self.name} is not running")
            return

        self.logger.info(f"Stopping worker: {self.name}")
        self._stop_event.set()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)

            if self._thread.is_alive():
                self.logger.error(f"Worker {self.name} did not stop within timeout")
            else:
                self.logger.info(f"Worker {self.name} stopped successfully")

        self._running = False

    def is_running(self) -> bool:
        """Check if worker thread is currently running"""
        return self._running and self._thread is not None and self._thread.is_alive()

    def _run_cycle(self) -> None:
        self.cycles += 1
        try:
            self.logger.debug(f"Worker {self.name} executing work cycle #{self.cycles}")
            self.do_work()
        except Exception as e:
            self.logger.error(
                f"Error in worker {self.name}: {type(e).__name__}: {str(e)}",
                exc_info=True
            )

    def _run_loop(self) -> None:
        """
        Main worker loop (runs on the worker thread)

        Alternates do_work() and a wait of next_delay() seconds until stopped.
        Errors raised by do_work() are logged and never end the loop.
        """
        self.logger.debug(f"Worker {self.name} entering run loop")

        if self.run_immediately:
            self._run_cycle()

        while not self._stop_event.is_set():
            delay = max(self.next_delay(), 0)
            self.logger.debug(f"Worker {self.name} waiting {delay:.0f}s until next cycle")
            if self._stop_event.wait(timeout=delay):
                break
            self._run_cycle()

        self.logger.debug(f"Worker {self.name} exiting run loop")
