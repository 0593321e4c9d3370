"""Worker modules for gojobs"""

from .base_worker import BaseWorker
from .scheduler_worker import ScheduledFetchWorker, compute_delay, next_run_delay
from .worker_manager import WorkerManager

__all__ = ["BaseWorker", "ScheduledFetchWorker", "WorkerManager", "compute_delay", "next_run_delay"]
