"""
Data Models Package

This package contains all Pydantic models used in the Personal Organizer.
Every record read from or written to storage must conform to these schemas.
"""

from organizer.models.records import (
    AnyRecord,
    CollectionKey,
    Note,
    Record,
    RECORD_TYPES,
    ReminderSummary,
    Task,
    Trader,
    Transaction,
    TransactionTotals,
    ValidationIssue,
    first_issue,
    utc_now,
)
from organizer.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "AnyRecord",
    "CollectionKey",
    "Note",
    "Record",
    "RECORD_TYPES",
    "ReminderSummary",
    "Task",
    "Trader",
    "Transaction",
    "TransactionTotals",
    "ValidationIssue",
    "first_issue",
    "utc_now",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
