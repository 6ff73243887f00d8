import asyncio
import logging
from typing import Callable, Coroutine, List

from .config import Config

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Runs health cycles (or any async job) on a fixed interval using asyncio.
    A failing run is logged and the job is tried again on the next interval.
    """

    def __init__(self):
        self.tasks: List[asyncio.Task] = []
        logger.info("AsyncScheduler initialized.")

    async def _run_periodically(self, interval_seconds: int, job_func: Callable[[], Coroutine]):
        """Internal loop to run a job periodically."""
        try:
            while True:
                try:
                    await job_func()
                except Exception as e:
                    logger.error(f"Error in scheduled job '{job_func.__name__}': {e}", exc_info=True)

                await asyncio.sleep(interval_seconds)
        except asyncio.CancelledError:
            logger.info(f"Job '{job_func.__name__}' cancelled.")
            raise

    def add_job(self, job_func: Callable[[], Coroutine], interval_seconds: int):
        """
        Adds a new async job to the schedule. The first run starts immediately.
        """
        if interval_seconds <= 0:
            raise ValueError(f"Interval must be positive, got {interval_seconds} second(s).")
        task = asyncio.create_task(self._run_periodically(interval_seconds, job_func))
        self.tasks.append(task)
        logger.info(f"Scheduled job '{job_func.__name__}' to run every {interval_seconds} second(s).")

    def add_job_from_string(self, job_func: Callable[[], Coroutine], interval_str: str):
        """
        Adds a job based on a duration string like '30s', '1m' or '1h'.
        """
        self.add_job(job_func, Config.parse_interval(interval_str))

    async def stop(self):
        """Cancels all scheduled tasks."""
        logger.info("Stopping scheduler...")
        for task in self.tasks:
            task.cancel()
        if self.tasks:
            await asyncio.gather(*self.tasks, return_exceptions=True)
        self.tasks.clear()
