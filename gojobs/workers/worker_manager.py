"""Lifecycle of the background workers that keep the job cache fresh"""

import signal
import logging
from threading import Event
from typing import Dict, Iterable

from .base_worker import BaseWorker


class WorkerManager:
    """
    Owns the background workers of one process

    The API server drives start_all()/stop_all() from its lifespan and keeps
    signal handling to itself. The standalone ``gojobs worker`` command calls
    run(), which installs SIGINT/SIGTERM handlers and blocks until one of
    them fires.
    """

    def __init__(self):
        self.logger = logging.getLogger("gojobs.manager")
        self.workers: Dict[str, BaseWorker] = {}
        self._shutdown = Event()

    def register_worker(self, worker: BaseWorker) -> None:
        """
        Add a worker; a worker registered under the same name is replaced

        Args:
            worker: Worker to manage
        """
        if worker.name in self.workers:
            self.logger.warning(f"Replacing worker registered as {worker.name}")
        self.workers[worker.name] = worker
        self.logger.debug(f"Registered worker: {worker.name}")

    def register_workers(self, workers: Iterable[BaseWorker]) -> None:
        for worker in workers:
            self.register_worker(worker)

    def start_all(self) -> None:
        """Start every registered worker; a worker that fails to start is logged and skipped"""
        if not self.workers:
            self.logger.warning("No workers registered, nothing to start")
            return

        for worker in self.workers.values():
            try:
                worker.start()
            except Exception as e:
                self.logger.error(f"Could not start worker {worker.name}: {e}", exc_info=True)

        running = [worker.name for worker in self.workers.values() if worker.is_running()]
        self.logger.info(f"Workers running: {', '.join(running) or 'none'}")

    def stop_all(self, timeout: float = 10) -> None:
        """
        Stop the running workers

        Args:
            timeout: Seconds each worker gets to finish a cycle in progress
        """
        for worker in self.workers.values():
            if not worker.is_running():
                continue
            try:
                worker.stop(timeout=timeout)
            except Exception as e:
                self.logger.error(f"Could not stop worker {worker.name}: {e}", exc_info=True)

    def get_status(self) -> Dict[str, dict]:
        """
        Status of every worker, keyed by name

        Returns:
            Mapping of worker name to running flag, completed cycles and the
            next scheduled run (ISO 8601, None if not scheduled yet)
        """
        status = {}
        for name, worker in self.workers.items():
            next_run_at = getattr(worker, "next_run_at", None)
            status[name] = {
                "name": worker.name,
                "running": worker.is_running(),
                "cycles": worker.cycles,
                "next_run_at": next_run_at.isoformat() if next_run_at else None,
            }
        return status

    def log_status(self) -> None:
        for name, info in self.get_status().items():
            state = "RUNNING" if info["running"] else "STOPPED"
            self.logger.info(f"  {name:20s} | {state:10s} | Next run: {info['next_run_at'] or '-'}")

    def install_signal_handlers(self) -> None:
        """Request shutdown on SIGINT/SIGTERM (main thread only)"""
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

    def request_shutdown(self) -> None:
        self._shutdown.set()

    def wait_for_shutdown(self, poll: float = 0.5) -> None:
        """Block until request_shutdown() is called or a handled signal arrives"""
        self.logger.info("Scheduler running. Press Ctrl+C to stop.")
        try:
            # Short waits keep the main thread responsive to signals
            while not self._shutdown.wait(timeout=poll):
                pass
        except KeyboardInterrupt:
            self._shutdown.set()

    def _signal_handler(self, signum, frame) -> None:
        self.logger.info(f"Received signal: {signal.Signals(signum).name}")
        self._shutdown.set()

    def run(self) -> None:
        """Run the registered workers standalone until a shutdown signal"""
        self.install_signal_handlers()
        try:
            self.start_all()
            self.log_status()
            self.wait_for_shutdown()
        except Exception as e:
            self.logger.error(f"Fatal error in worker manager: {e}", exc_info=True)
        finally:
            self.logger.info("Shutting down workers...")
            self.stop_all()
            self.logger.info("Shutdown complete")
