"""
Abstract Storage Interfaces

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap the JSON files for another key-value backend later
2. Use in-memory storage for testing
3. Keep the record managers decoupled from storage

The record store is deliberately dumb: it maps one of the four collection
keys to a JSON array of objects. It knows nothing about record types.
Hydrating those objects into models is the managers' job.
"""

from abc import ABC, abstractmethod
from typing import Sequence
from uuid import UUID

from organizer.models.audit import AuditEvent
from organizer.models.records import CollectionKey


class RecordStoreInterface(ABC):
    """
    Abstract interface for collection storage.

    Any storage implementation must honour two rules:
    - ``load`` never raises; absent or corrupt data loads as ``[]``
    - ``save`` never raises; failure is reported by returning False
    """

    @abstractmethod
    async def load(self, key: CollectionKey) -> list[dict]:
        """
        Load the stored collection for ``key``.

        Returns:
            The stored records as plain dicts, in stored order.
            An empty list if nothing is stored or the data is unreadable.
        """
        pass

    @abstractmethod
    async def save(self, key: CollectionKey, records: Sequence[dict]) -> bool:
        """
        Replace the stored collection for ``key`` with ``records``.

        Each collection is written atomically. There is no transaction
        across keys.

        Returns:
            True if the whole collection was durably stored
        """
        pass

    @abstractmethod
    async def clear(self, key: CollectionKey) -> bool:
        """
        Remove the stored collection for ``key``.

        Returns:
            True if nothing is stored under ``key`` afterwards
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_record(
        self,
        record_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific record, oldest first.
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Raised by storage backends that cannot be set up at all."""
    pass
