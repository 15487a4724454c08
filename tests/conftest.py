"""Shared fixtures: every test gets its own store, context and app."""

import pytest

from organizer.audit import AuditLogger
from organizer.managers import AppContext
from organizer.orchestrator import OrganizerApp
from organizer.reminders import LogNotificationChannel, ReminderService
from organizer.services.storage import InMemoryRecordStore


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def context(store):
    return AppContext(store, audit_logger=AuditLogger())


@pytest.fixture
def channel():
    return LogNotificationChannel()


@pytest.fixture
def app(context, channel):
    reminders = ReminderService(channel=channel)
    return OrganizerApp(context, reminders, reminder_interval_seconds=0.05)
