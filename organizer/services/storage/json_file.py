"""
JSON File Storage Implementation

DESIGN DECISION: Plain JSON files are the default backend because:
1. The data is small and personal
2. Users can read and back up their data with any editor
3. No database setup required

Layout: one ``<key>.json`` file per collection inside ``data_dir``.

Each save writes the whole collection to a temporary file in the same
directory and then ``os.replace``s it over the old file, so a crash mid-write
leaves either the old or the new collection on disk, never half of one.

TRADEOFFS:
- No transaction across collections (each key is saved on its own)
- Whole-collection rewrites (fine for personal-scale data)
"""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Sequence

import structlog
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from organizer.models.audit import AuditEvent
from organizer.models.records import CollectionKey
from organizer.services.storage.codec import (
    CorruptCollectionError,
    decode_collection,
    encode_collection,
)
from organizer.services.storage.interface import (
    AuditStorageInterface,
    RecordStoreInterface,
    StorageError,
)


logger = structlog.get_logger(__name__)


class JsonFileRecordStore(RecordStoreInterface):
    """
    File-backed record store.

    The data directory is created lazily on the first save.
    File I/O and write retries run in a worker thread, off the event loop.
    """

    def __init__(self, data_dir: Path):
        self._data_dir = Path(data_dir)
        if self._data_dir.exists() and not self._data_dir.is_dir():
            raise StorageError(f"Data path is not a directory: {self._data_dir}")

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def path_for(self, key: CollectionKey) -> Path:
        """File holding the collection for ``key``."""
        return self._data_dir / f"{CollectionKey(key).value}.json"

    async def load(self, key: CollectionKey) -> list[dict]:
        key = CollectionKey(key)
        path = self.path_for(key)
        if not path.exists():
            return []

        try:
            raw = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("collection_unreadable", collection=key.value, error=str(e))
            return []

        if not raw.strip():
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

        try:
            await asyncio.to_thread(self._write_atomic, self.path_for(key), payload)
        except OSError as e:
            logger.error(
                "collection_save_failed",
                collection=key.value,
                path=str(self.path_for(key)),
                error=str(e),
            )
            return False

        logger.debug("collection_saved", collection=key.value, record_count=len(records))
        return True

    async def clear(self, key: CollectionKey) -> bool:
        key = CollectionKey(key)
        try:
            await asyncio.to_thread(self.path_for(key).unlink, missing_ok=True)
        except OSError as e:
            logger.error("collection_clear_failed", collection=key.value, error=str(e))
            return False
        return True

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.05, max=0.5),
        retry=retry_if_exception_type(OSError),
        reraise=True,
    )
    def _write_atomic(self, path: Path, payload: str) -> None:
        """Write ``payload`` to a sibling temp file, then swap it into place."""
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.stem}-",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


class JsonlAuditStorage(AuditStorageInterface):
    """
    Append-only audit trail in a JSON-lines file.

    One ``AuditEvent`` per line. Unreadable lines are skipped on read.
    """

    def __init__(self, log_path: Path):
        self._log_path = Path(log_path)

    @property
    def log_path(self) -> Path:
        return self._log_path

    async def append_event(self, event: AuditEvent) -> bool:
        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        with self._log_path.open("a", encoding="utf-8") as fh:
            fh.write(event.model_dump_json() + "\n")
        return True

    def _read_events(self) -> list[AuditEvent]:
        if not self._log_path.exists():
            return []

        events = []
        with self._log_path.open(encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line:
                    continue
                try:
                    events.append(AuditEvent.model_validate_json(line))
                except ValueError:
                    logger.warning("audit_line_unreadable", path=str(self._log_path))
        return events

    async def get_events_by_record(self, record_id) -> list[AuditEvent]:
        wanted = str(record_id)
        return [e for e in self._read_events() if e.record_id and str(e.record_id) == wanted]

    async def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = self._read_events()
        events.reverse()
        return events[:limit]
