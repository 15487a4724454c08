"""
Reminder Service

Keeps the latest incomplete-task summary for the view layer and pushes it
to a notification channel on demand.

DESIGN DECISION: The channel is an interface. This module only produces
the count and the text; how it reaches the user is the channel's concern.
The only channel shipped writes the payload to the structured log.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

import structlog

from organizer.audit import AuditLogger
from organizer.models.records import ReminderSummary, Task
from organizer.reminders.deriver import DEFAULT_HEADER, incomplete, summarize


class NotificationChannel(ABC):
    """Delivery target for reminder summaries."""

    name: str = "channel"

    @abstractmethod
    async def deliver(self, summary: ReminderSummary) -> bool:
        """
        Deliver one reminder.

        Returns:
            True if the channel accepted the payload
        """
        pass


class LogNotificationChannel(NotificationChannel):
    """Writes reminders to the structured log."""

    name = "log"

    def __init__(self):
        self._logger = structlog.get_logger("organizer.reminders")
        self.delivered: list[ReminderSummary] = []

    async def deliver(self, summary: ReminderSummary) -> bool:
        self._logger.info(
            "task_reminder",
            count=summary.count,
            message=summary.message,
        )
        self.delivered.append(summary)
        return True


class ReminderService:
    """
    Recomputes the reminder after task changes and on the timer.

    ``refresh`` is synchronous and cheap; task managers call it after
    every committed mutation. ``send`` additionally delivers the summary.
    """

    def __init__(
        self,
        channel: Optional[NotificationChannel] = None,
        header: str = DEFAULT_HEADER,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._channel = channel or LogNotificationChannel()
        self._header = header
        self._audit_logger = audit_logger
        self._latest = ReminderSummary(count=0)

    @property
    def channel(self) -> NotificationChannel:
        return self._channel

    @property
    def latest(self) -> ReminderSummary:
        """The summary from the most recent refresh or send."""
        return self._latest

    def refresh(self, tasks: Iterable[Task]) -> ReminderSummary:
        self._latest = summarize(incomplete(tasks), header=self._header)
        return self._latest

    async def send(self, tasks: Iterable[Task]) -> bool:
        """
        Recompute and deliver the reminder.

        Nothing is delivered when every task is complete.

        Returns:
            True if a reminder was delivered
        """
        summary = self.refresh(tasks)
        if not summary.has_reminders:
            return False

        try:
            delivered = await self._channel.deliver(summary)
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_reminder_failed(self._channel.name, str(e))
            raise

        if self._audit_logger:
            if delivered:
                await self._audit_logger.log_reminder_sent(summary.count, self._channel.name)
            else:
                await self._audit_logger.log_reminder_failed(
                    self._channel.name, "Channel rejected the reminder"
                )
        return delivered
