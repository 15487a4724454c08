"""
Main Orchestrator for Personal Organizer

This module ties together all the components:
store → context → audit logger → managers → reminder service

DESIGN DECISION: Components are built here and nowhere else. Managers
never reach for a global; they get the context they work on.
"""

from typing import Optional

import structlog

from organizer.audit import AuditLogger
from organizer.config import Settings, StorageSettings, get_settings
from organizer.managers import (
    AppContext,
    NoteManager,
    TaskManager,
    TraderManager,
    TransactionManager,
)
from organizer.models.records import CollectionKey, Task
from organizer.reminders import (
    NotificationChannel,
    ReminderScheduler,
    ReminderService,
)
from organizer.services.storage import (
    InMemoryRecordStore,
    JsonFileRecordStore,
    JsonlAuditStorage,
    RecordStoreInterface,
)


logger = structlog.get_logger(__name__)


class OrganizerApp:
    """
    One fully wired organizer.

    Build with ``create_app_components`` and call ``await app.load()``
    before use.
    """

    def __init__(
        self,
        context: AppContext,
        reminders: ReminderService,
        reminder_interval_seconds: float = 3600,
    ):
        self.context = context
        self.reminders = reminders
        self.reminder_interval_seconds = reminder_interval_seconds
        self.tasks = TaskManager(context, reminders=reminders)
        self.notes = NoteManager(context)
        self.transactions = TransactionManager(context)
        self.traders = TraderManager(context)

    @property
    def store(self) -> RecordStoreInterface:
        return self.context.store

    @property
    def audit_logger(self) -> Optional[AuditLogger]:
        return self.context.audit_logger

    async def load(self) -> None:
        """Load every collection and compute the initial reminder."""
        await self.context.load_all()
        self.reminders.refresh(self.tasks.list())

    async def reload_tasks(self) -> list[Task]:
        """Re-read tasks from storage (picks up edits from other processes)."""
        tasks = await self.context.load(CollectionKey.TASKS)
        self.reminders.refresh(tasks)
        return tasks

    async def send_reminder(self) -> bool:
        """
        Deliver the reminder for the loaded tasks right away.

        Channel failures are logged, never raised; check
        ``reminders.latest.has_reminders`` to tell "nothing pending" from
        "delivery failed" when this returns False.
        """
        return await self.create_scheduler(reload=False).run_once()

    def create_scheduler(self, reload: bool = True) -> ReminderScheduler:
        """
        Build the periodic reminder loop for this app.

        With ``reload`` each pass re-reads tasks from storage first.
        """
        async def task_source() -> list[Task]:
            if reload:
                return await self.reload_tasks()
            return self.tasks.list()

        return ReminderScheduler(
            service=self.reminders,
            task_source=task_source,
            interval_seconds=self.reminder_interval_seconds,
        )


def create_store(storage_settings: StorageSettings) -> RecordStoreInterface:
    """Build the record store selected by settings."""
    if storage_settings.backend == "memory":
        return InMemoryRecordStore(quota_bytes=storage_settings.quota_bytes)
    return JsonFileRecordStore(storage_settings.data_dir)


def create_app_components(
    settings: Optional[Settings] = None,
    store: Optional[RecordStoreInterface] = None,
    channel: Optional[NotificationChannel] = None,
) -> OrganizerApp:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to build from (defaults to get_settings()).
        store: Record store to use instead of the configured one.
        channel: Notification channel for reminders (log channel if None).

    Returns:
        An OrganizerApp whose collections are not loaded yet.
    """
    settings = settings or get_settings()

    audit_path = settings.audit.log_path
    audit_logger = AuditLogger(JsonlAuditStorage(audit_path) if audit_path else None)

    if store is None:
        store = create_store(settings.storage)

    reminder_settings = settings.reminders
    reminders = ReminderService(
        channel=channel,
        header=reminder_settings.header,
        audit_logger=audit_logger,
    )

    context = AppContext(store, audit_logger=audit_logger)
    logger.debug("app_components_created", store=type(store).__name__)

    return OrganizerApp(
        context=context,
        reminders=reminders,
        reminder_interval_seconds=reminder_settings.interval_seconds,
    )
