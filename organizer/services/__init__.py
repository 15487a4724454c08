"""Services package."""

from organizer.services.storage import (
    AuditStorageInterface,
    InMemoryRecordStore,
    JsonFileRecordStore,
    JsonlAuditStorage,
    RecordStoreInterface,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "JsonlAuditStorage",
    "RecordStoreInterface",
    "StorageError",
]
