"""
Error taxonomy for the record engine.

None of these are fatal. Every one of them leaves the collections exactly
as they were before the failed operation, so the caller can report the
message and carry on.

A corrupt stored collection is not an error: it is recovered to an empty
collection and only logged.
"""

from typing import Optional
from uuid import UUID

from organizer.models.records import ValidationIssue, first_issue


class OrganizerError(Exception):
    """Base exception for record operations."""
    pass


class RecordValidationError(OrganizerError):
    """
    One or more candidate fields failed their constraints.

    ``issues`` holds every failing field in form order;
    ``issue`` is the first one, the field that should regain focus.
    """

    def __init__(self, collection: str, issues: list[ValidationIssue]):
        self.collection = collection
        self.issues = issues
        self.issue: Optional[ValidationIssue] = first_issue(issues)
        message = self.issue.message if self.issue else "Invalid input"
        super().__init__(message)

    @property
    def field(self) -> Optional[str]:
        return self.issue.field if self.issue else None


class RecordNotFoundError(OrganizerError):
    """Update, remove or lookup referenced an id not in the collection."""

    def __init__(self, collection: str, record_id: object):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"No record {record_id} in {collection}")


class PersistenceError(OrganizerError):
    """
    The record store could not durably save a collection.

    The attempted mutation has already been discarded from memory.
    """

    def __init__(self, collection: str, record_id: Optional[UUID] = None):
        self.collection = collection
        self.record_id = record_id
        super().__init__(
            f"Could not save {collection}. Storage may be full; the change was not applied."
        )
