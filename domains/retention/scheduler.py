"""
Retention scheduler.

Runs a sweep once when started and then on a fixed interval for as long
as the process lives. The periodic loop is an asyncio task, so stopping
the scheduler is just cancelling that task.
"""

import asyncio
from typing import Optional

from loguru import logger

from app.models.schemas import SweepReport

from .sweeper import RetentionSweeper

DEFAULT_INTERVAL = 24 * 60 * 60  # seconds


class RetentionScheduler:
    """Startup sweep plus a periodic re-run."""

    def __init__(self, sweeper: RetentionSweeper, interval: float = DEFAULT_INTERVAL):
        self.sweeper = sweeper
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def run_once(self) -> Optional[SweepReport]:
        """Run one sweep, logging anything it raises."""
        try:
            return self.sweeper.sweep()
        except Exception as e:
            logger.error(f"Retention sweep failed: {e}")
            return None

    def start(self) -> None:
        """Sweep now, then schedule the periodic loop on the running loop."""
        if self.running:
            return

        self.run_once()
        self._task = asyncio.get_running_loop().create_task(self._loop())
        logger.success(
            f"Cleanup scheduler started (checking every {self.interval / 3600:g} hours)"
        )

    def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        self._task = None
        logger.info("Cleanup scheduler stopped")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.run_once()
