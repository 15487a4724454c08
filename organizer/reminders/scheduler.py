"""Periodic reminder loop using pure asyncio.

Each pass is awaited to completion before the next wait begins, so two
passes can never overlap.
"""

import asyncio
from typing import Awaitable, Callable, Iterable

import structlog

from organizer.models.records import Task
from organizer.reminders.service import ReminderService


logger = structlog.get_logger(__name__)

TaskSource = Callable[[], Awaitable[Iterable[Task]]]


class ReminderScheduler:
    """Sends the incomplete-task reminder every ``interval_seconds``."""

    def __init__(
        self,
        service: ReminderService,
        task_source: TaskSource,
        interval_seconds: float = 3600,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._service = service
        self._task_source = task_source
        self._interval = interval_seconds
        self.passes = 0

    async def start(self, shutdown_event: asyncio.Event) -> None:
        """Run reminder passes until shutdown_event is set."""
        logger.info("reminder_scheduler_started", interval_seconds=self._interval)

        while not shutdown_event.is_set():
            try:
                await asyncio.wait_for(shutdown_event.wait(), timeout=self._interval)
                break  # shutdown requested
            except asyncio.TimeoutError:
                pass  # interval elapsed

            await self.run_once()

        logger.info("reminder_scheduler_stopped", passes=self.passes)

    async def run_once(self) -> bool:
        """One reminder pass. Failures are logged, never raised."""
        self.passes += 1
        try:
            tasks = await self._task_source()
            return await self._service.send(tasks)
        except Exception as e:
            logger.error("reminder_pass_failed", error=str(e))
            return False
