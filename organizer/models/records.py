"""
Record Models for Personal Organizer

These models define the strict schemas for the four record collections.
They are designed to:
1. Check the field set of every record at construction time
2. Serialize to exactly the on-disk JSON shape (camelCase ``createdAt``)
3. Round-trip losslessly through the record store

DESIGN DECISION: Identity is a UUID4, not a timestamp. Two records
created within the same millisecond must never share an id.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


# Field limits shared by the models and the validators
TASK_TEXT_MAX = 200
NOTE_TEXT_MAX = 1000
OPERATION_MAX = 100
CONTACT_FIELD_MAX = 100
TRADER_NAME_MAX = 50


# Alias so the Transaction.date field does not shadow the type
CalendarDate = date


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class CollectionKey(str, Enum):
    """
    The four fixed storage keys.

    Each collection is stored and loaded independently under its key.
    """
    TASKS = "tasks"
    NOTES = "notes"
    TRANSACTIONS = "transactions"
    TRADERS = "traders"


# =============================================================================
# BASE RECORD
# =============================================================================

class Record(BaseModel):
    """
    Common identity and creation timestamp for every record.

    ``id`` and ``created_at`` are assigned once by the owning manager and
    carried over unchanged on every edit.
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        populate_by_name=True,
        frozen=True,
        extra="forbid",
    )

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique record ID"
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        alias="createdAt",
        description="When the record was created (UTC)"
    )

    def to_storage(self) -> dict:
        """Serialize to the JSON-compatible dict written by the record store."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# ENTITIES
# =============================================================================

class Task(Record):
    """A to-do item. New tasks always start incomplete."""

    text: str = Field(
        ...,
        min_length=1,
        max_length=TASK_TEXT_MAX,
        description="Task text"
    )
    completed: bool = Field(
        default=False,
        description="Has the task been done?"
    )


class Note(Record):
    """A free-form note."""

    text: str = Field(
        ...,
        min_length=1,
        max_length=NOTE_TEXT_MAX,
        description="Note text"
    )


class Transaction(Record):
    """
    A single financial operation.

    ``pay`` and ``receive`` are floats so they stay JSON numbers on disk.
    The optional contact fields default to an empty string, never None.
    """

    date: CalendarDate = Field(
        ...,
        description="Date of the operation"
    )
    operation: str = Field(
        ...,
        min_length=1,
        max_length=OPERATION_MAX,
        description="What the operation was"
    )
    pay: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        description="Amount paid out"
    )
    receive: float = Field(
        default=0.0,
        ge=0,
        allow_inf_nan=False,
        description="Amount received"
    )
    call: str = Field(default="", max_length=CONTACT_FIELD_MAX)
    contact: str = Field(default="", max_length=CONTACT_FIELD_MAX)
    other: str = Field(default="", max_length=CONTACT_FIELD_MAX)


class Trader(Record):
    """A trader and the balance held with them."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=TRADER_NAME_MAX,
        description="Trader name"
    )
    amount: float = Field(
        ...,
        ge=0,
        allow_inf_nan=False,
        description="Balance with this trader"
    )


AnyRecord = Union[Task, Note, Transaction, Trader]

RECORD_TYPES: dict[CollectionKey, type[Record]] = {
    CollectionKey.TASKS: Task,
    CollectionKey.NOTES: Note,
    CollectionKey.TRANSACTIONS: Transaction,
    CollectionKey.TRADERS: Trader,
}


# =============================================================================
# DERIVED VIEWS
# =============================================================================

class TransactionTotals(BaseModel):
    """Column totals for the transactions table."""

    pay: float = 0.0
    receive: float = 0.0

    @property
    def net(self) -> float:
        """Received minus paid."""
        return self.receive - self.pay


class ReminderSummary(BaseModel):
    """
    The reminder payload pushed to the notification channel.

    ``message`` is empty when there is nothing to remind about.
    """

    count: int = Field(ge=0)
    lines: list[str] = Field(default_factory=list)
    message: str = ""
    generated_at: datetime = Field(default_factory=utc_now)

    @property
    def has_reminders(self) -> bool:
        return self.count > 0


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found on a candidate field."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_length', 'out_of_range')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


def first_issue(issues: list[ValidationIssue]) -> Optional[ValidationIssue]:
    """Return the first error-level issue, in field order."""
    for issue in issues:
        if issue.severity == "error":
            return issue
    return None
