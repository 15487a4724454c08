"""
Application Context

DESIGN DECISION: The four collections live in one explicitly constructed
context object that is handed to every manager. There is no module-level
state: two contexts over two stores never see each other's records.

The context owns:
- the record store
- the in-memory collections, one list per key
- one asyncio.Lock per collection, so every mutation of a collection
  is serialized even when callers await concurrently
"""

import asyncio
from typing import Optional

import structlog
from pydantic import ValidationError

from organizer.audit import AuditLogger
from organizer.models.records import RECORD_TYPES, CollectionKey, Record
from organizer.services.storage import RecordStoreInterface


logger = structlog.get_logger(__name__)


class AppContext:
    """Shared state for the record managers."""

    def __init__(
        self,
        store: RecordStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self.store = store
        self.audit_logger = audit_logger
        self.collections: dict[CollectionKey, list[Record]] = {
            key: [] for key in CollectionKey
        }
        self._locks = {key: asyncio.Lock() for key in CollectionKey}

    def lock(self, key: CollectionKey) -> asyncio.Lock:
        """The exclusive-access guard for one collection."""
        return self._locks[CollectionKey(key)]

    async def load(self, key: CollectionKey) -> list[Record]:
        """
        (Re)load one collection from the store.

        Stored data that does not fit the record model, or that repeats an
        id, is treated like unparseable data: the collection starts empty.
        """
        key = CollectionKey(key)
        model = RECORD_TYPES[key]

        async with self.lock(key):
            raw = await self.store.load(key)
            try:
                records = [model.model_validate(item) for item in raw]
                ids = [record.id for record in records]
                if len(set(ids)) != len(ids):
                    raise ValueError("duplicate record ids")
            except (ValidationError, ValueError) as e:
                logger.warning("collection_reset", collection=key.value, error=str(e))
                if self.audit_logger:
                    await self.audit_logger.log_collection_corrupt(key.value, str(e))
                records = []
            else:
                if self.audit_logger:
                    await self.audit_logger.log_collection_loaded(key.value, len(records))

            self.collections[key] = records
            return list(records)

    async def load_all(self) -> None:
        """Load all four collections, each independently."""
        for key in CollectionKey:
            await self.load(key)
