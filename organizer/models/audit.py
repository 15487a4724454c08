"""
Audit Models for Personal Organizer

Every mutation and every failure in the record engine is logged for
audit purposes. This provides:
1. Complete traceability of all edits
2. Debugging information when a save fails
3. A record of silently recovered corrupt collections

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from organizer.models.records import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Record mutations
    RECORD_CREATED = "record_created"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    COLLECTION_CLEARED = "collection_cleared"

    # Rejected operations
    VALIDATION_FAILED = "validation_failed"
    RECORD_NOT_FOUND = "record_not_found"

    # Persistence
    SAVE_FAILED = "save_failed"
    COLLECTION_LOADED = "collection_loaded"
    COLLECTION_CORRUPT = "collection_corrupt"

    # Reminders
    REMINDER_SENT = "reminder_sent"
    REMINDER_FAILED = "reminder_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - which collection and record is this about?
    collection: Optional[str] = Field(
        default=None,
        description="Collection key (e.g., 'tasks', 'traders')"
    )
    record_id: Optional[UUID] = Field(
        default=None,
        description="ID of the record this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "collection": self.collection,
            "record_id": str(self.record_id) if self.record_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_created("tasks", task.id, "Buy milk")
        event = AuditEventBuilder.save_failed("traders", "create")
    """

    @staticmethod
    def record_created(
        collection: str,
        record_id: UUID,
        label: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_CREATED,
            collection=collection,
            record_id=record_id,
            description=f"Record added to {collection}: {label[:200]}",
            is_user_action=True,
        )

    @staticmethod
    def record_updated(
        collection: str,
        record_id: UUID,
        changed_fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            collection=collection,
            record_id=record_id,
            description=f"Record updated in {collection}",
            details={
                "changed_fields": changed_fields,
            },
            is_user_action=True,
        )

    @staticmethod
    def record_deleted(
        collection: str,
        record_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            collection=collection,
            record_id=record_id,
            description=f"Record deleted from {collection}",
            is_user_action=True,
        )

    @staticmethod
    def validation_failed(
        collection: str,
        operation: str,
        issues: list[dict],
        record_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            collection=collection,
            record_id=record_id,
            description=f"Validation failed on {operation} with {len(issues)} issues",
            details={
                "operation": operation,
                "issues": issues,
            },
            is_user_action=True,
        )

    @staticmethod
    def record_not_found(
        collection: str,
        operation: str,
        record_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            collection=collection,
            description=f"No record {record_id[:64]} in {collection} to {operation}",
            details={
                "operation": operation,
                "requested_id": record_id,
            },
            is_user_action=True,
        )

    @staticmethod
    def save_failed(
        collection: str,
        operation: str,
        record_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            collection=collection,
            record_id=record_id,
            description=f"Could not persist {collection} after {operation}; change discarded",
            details={
                "operation": operation,
            },
        )

    @staticmethod
    def collection_cleared(
        collection: str,
        record_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_CLEARED,
            severity=AuditSeverity.WARNING,
            collection=collection,
            description=f"Cleared {record_count} records from {collection}",
            details={
                "record_count": record_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def collection_loaded(
        collection: str,
        record_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_LOADED,
            severity=AuditSeverity.DEBUG,
            collection=collection,
            description=f"Loaded {record_count} records from {collection}",
            details={
                "record_count": record_count,
            },
        )

    @staticmethod
    def collection_corrupt(
        collection: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_CORRUPT,
            severity=AuditSeverity.WARNING,
            collection=collection,
            description=f"Stored {collection} could not be read; starting empty",
            error_message=error_message,
        )

    @staticmethod
    def reminder_sent(
        count: int,
        channel: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMINDER_SENT,
            collection="tasks",
            description=f"Reminder for {count} incomplete tasks sent via {channel}",
            details={
                "count": count,
                "channel": channel,
            },
        )

    @staticmethod
    def reminder_failed(
        channel: str,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REMINDER_FAILED,
            severity=AuditSeverity.ERROR,
            collection="tasks",
            description=f"Reminder delivery via {channel} failed",
            error_message=error_message,
            details={
                "channel": channel,
            },
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
        )
