"""Note Manager."""

from typing import Any, Mapping, Optional

from organizer.managers.base import RecordManager
from organizer.models.records import CollectionKey, Note, ValidationIssue
from organizer.validation import validate_note


class NoteManager(RecordManager[Note]):
    """CRUD over the note collection."""

    collection = CollectionKey.NOTES
    record_type = Note

    def _validate(self, candidate: Mapping[str, Any]) -> list[ValidationIssue]:
        return validate_note(candidate)

    def _clean(
        self,
        candidate: Mapping[str, Any],
        existing: Optional[Note] = None,
    ) -> dict[str, Any]:
        return {"text": str(candidate["text"]).strip()}

    def _label(self, record: Note) -> str:
        return record.text[:50]
