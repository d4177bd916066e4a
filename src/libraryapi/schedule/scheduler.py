"""Periodic scheduler for the overdue notification job."""

import logging
import threading
from typing import Optional, Protocol

from .job import JobRun

logger = logging.getLogger(__name__)


class Job(Protocol):
    def run(self) -> JobRun: ...


class PeriodicScheduler:
    """Run a job once per interval on a background thread.

    Ticks never overlap: a tick requested while another is running is
    skipped, not queued. Stopping lets an in-flight tick finish.
    """

    def __init__(self, job: Job, interval: float, name: str = "overdue-scheduler"):
        """Initialize scheduler.

        Args:
            job: Job to run each tick
            interval: Seconds between ticks
            name: Background thread name
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive: {interval}")
        self.job = job
        self.interval = interval
        self.name = name

        self._busy = threading.Lock()
        self._state_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

        self.last_run: Optional[JobRun] = None
        self.runs = 0
        self.skipped = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the timer thread. Does nothing if already running."""
        with self._state_lock:
            if self.running:
                if not self._stop.is_set():
                    return
                # Still finishing a tick after stop(wait=False)
                self._thread.join()
            self._stop.clear()
            self._thread = threading.Thread(target=self._run_loop, name=self.name, daemon=True)
            self._thread.start()
        logger.info("Scheduler started, interval %ss", self.interval)

    def stop(self, wait: bool = True, timeout: Optional[float] = None) -> None:
        """Stop the timer.

        Args:
            wait: Block until the thread exits, letting an in-flight tick finish
            timeout: Maximum seconds to wait
        """
        self._stop.set()
        with self._state_lock:
            thread = self._thread
        if wait and thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("Scheduler stopped")

    def trigger(self) -> Optional[JobRun]:
        """Run one tick now on the calling thread.

        Returns:
            The JobRun, or None if a tick was already running
        """
        if not self._busy.acquire(blocking=False):
            self.skipped += 1
            logger.info("Previous run still in progress, skipping tick")
            return None
        try:
            run = self.job.run()
            self.last_run = run
            self.runs += 1
            return run
        finally:
            self._busy.release()

    def _run_loop(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.trigger()
            except Exception:
                logger.exception("Scheduled run failed")
