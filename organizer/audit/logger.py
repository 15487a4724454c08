"""
Audit Logger

DESIGN DECISION: Every mutation and every failed operation is logged.
This provides:
1. Complete traceability of edits
2. Debugging capability when a save is rejected
3. Visibility into collections that were silently recovered

The audit logger:
- Never raises (a broken audit file must not break record editing)
- Logs locally through structlog first, then persists if storage is set
"""

from typing import Optional
from uuid import UUID

import structlog

from organizer.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from organizer.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("organizer.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_record_created(
        self,
        collection: str,
        record_id: UUID,
        label: str,
    ) -> None:
        await self.log(AuditEventBuilder.record_created(collection, record_id, label))

    async def log_record_updated(
        self,
        collection: str,
        record_id: UUID,
        changed_fields: list[str],
    ) -> None:
        await self.log(AuditEventBuilder.record_updated(collection, record_id, changed_fields))

    async def log_record_deleted(
        self,
        collection: str,
        record_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.record_deleted(collection, record_id))

    async def log_validation_failed(
        self,
        collection: str,
        operation: str,
        issues: list[dict],
        record_id: Optional[UUID] = None,
    ) -> None:
        """Log a rejected add/update."""
        await self.log(
            AuditEventBuilder.validation_failed(
                collection=collection,
                operation=operation,
                issues=issues,
                record_id=record_id,
            )
        )

    async def log_record_not_found(
        self,
        collection: str,
        operation: str,
        record_id: object,
    ) -> None:
        await self.log(
            AuditEventBuilder.record_not_found(collection, operation, str(record_id))
        )

    async def log_save_failed(
        self,
        collection: str,
        operation: str,
        record_id: Optional[UUID] = None,
    ) -> None:
        """Log a persistence failure whose change was discarded."""
        await self.log(AuditEventBuilder.save_failed(collection, operation, record_id))

    async def log_collection_cleared(
        self,
        collection: str,
        record_count: int,
    ) -> None:
        await self.log(AuditEventBuilder.collection_cleared(collection, record_count))

    async def log_collection_loaded(
        self,
        collection: str,
        record_count: int,
    ) -> None:
        await self.log(AuditEventBuilder.collection_loaded(collection, record_count))

    async def log_collection_corrupt(
        self,
        collection: str,
        error_message: str,
    ) -> None:
        """Log a collection that could not be read and was reset to empty."""
        await self.log(AuditEventBuilder.collection_corrupt(collection, error_message))

    async def log_reminder_sent(
        self,
        count: int,
        channel: str,
    ) -> None:
        await self.log(AuditEventBuilder.reminder_sent(count, channel))

    async def log_reminder_failed(
        self,
        channel: str,
        error_message: str,
    ) -> None:
        await self.log(AuditEventBuilder.reminder_failed(channel, error_message))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        await self.log(
            AuditEventBuilder.system_error(
                error_type=error_type,
                error_message=error_message,
                details=details,
            )
        )
