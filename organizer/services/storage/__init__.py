"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
JSON files are the default backend; the in-memory store mirrors browser
local storage (including its quota) for tests and throwaway sessions.
"""

from organizer.services.storage.interface import (
    AuditStorageInterface,
    RecordStoreInterface,
    StorageError,
)
from organizer.services.storage.codec import (
    CorruptCollectionError,
    decode_collection,
    encode_collection,
)
from organizer.services.storage.json_file import (
    JsonFileRecordStore,
    JsonlAuditStorage,
)
from organizer.services.storage.memory import InMemoryRecordStore

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "RecordStoreInterface",
    # Exceptions
    "CorruptCollectionError",
    "StorageError",
    # Codec
    "decode_collection",
    "encode_collection",
    # Implementations
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "JsonlAuditStorage",
]
