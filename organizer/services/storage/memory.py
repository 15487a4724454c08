"""
In-Memory Storage Implementation

Behaves like browser local storage: each collection is kept as a serialized
JSON string, and an optional byte quota caps the total size across all keys.
A save that would exceed the quota fails and leaves the old value in place.

Used for tests and for ephemeral sessions where nothing should touch disk.
"""

from typing import Optional, Sequence

import structlog

from organizer.models.records import CollectionKey
from organizer.services.storage.codec import (
    CorruptCollectionError,
    decode_collection,
    encode_collection,
)
from organizer.services.storage.interface import RecordStoreInterface


logger = structlog.get_logger(__name__)


class InMemoryRecordStore(RecordStoreInterface):
    """Record store backed by a dict of JSON strings."""

    def __init__(self, quota_bytes: Optional[int] = None):
        self._quota_bytes = quota_bytes
        self._data: dict[str, str] = {}

    @property
    def used_bytes(self) -> int:
        """Total serialized size currently stored."""
        return sum(len(raw.encode("utf-8")) for raw in self._data.values())

    def get_raw(self, key: CollectionKey) -> Optional[str]:
        """The serialized text stored under ``key``, if any."""
        return self._data.get(CollectionKey(key).value)

    def set_raw(self, key: CollectionKey, raw: str) -> None:
        """Store text verbatim, bypassing encoding and the quota."""
        self._data[CollectionKey(key).value] = raw

    async def load(self, key: CollectionKey) -> list[dict]:
        key = CollectionKey(key)
        raw = self._data.get(key.value)
        if raw is None:
            return []

        try:
            return decode_collection(raw)
        except CorruptCollectionError as e:
            logger.warning("collection_corrupt", collection=key.value, error=str(e))
            return []

    async def save(self, key: CollectionKey, records: Sequence[dict]) -> bool:
        key = CollectionKey(key)
        try:
            payload = encode_collection(records)
        except (TypeError, ValueError) as e:
            logger.error("collection_not_serializable", collection=key.value, error=str(e))
            return False

        if self._quota_bytes is not None:
            current = self._data.get(key.value, "")
            projected = (
                self.used_bytes
                - len(current.encode("utf-8"))
                + len(payload.encode("utf-8"))
            )
            if projected > self._quota_bytes:
                logger.error(
                    "storage_quota_exceeded",
                    collection=key.value,
                    projected_bytes=projected,
                    quota_bytes=self._quota_bytes,
                )
                return False

        self._data[key.value] = payload
        return True

    async def clear(self, key: CollectionKey) -> bool:
        self._data.pop(CollectionKey(key).value, None)
        return True
