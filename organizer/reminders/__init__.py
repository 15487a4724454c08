"""Incomplete-task reminders."""

from organizer.reminders.deriver import DEFAULT_HEADER, incomplete, summarize
from organizer.reminders.scheduler import ReminderScheduler
from organizer.reminders.service import (
    LogNotificationChannel,
    NotificationChannel,
    ReminderService,
)

__all__ = [
    "DEFAULT_HEADER",
    "LogNotificationChannel",
    "NotificationChannel",
    "ReminderScheduler",
    "ReminderService",
    "incomplete",
    "summarize",
]
