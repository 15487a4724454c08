"""
Record Manager Base

Every collection is managed the same way:

1. Validate the candidate fields (nothing is touched on failure)
2. Build the new record, keeping id and createdAt on edits
3. Build the next collection as a NEW list
4. Persist the whole collection
5. Only if the store confirms, swap the new list into the context

Because step 5 happens after step 4, a failed save leaves memory exactly
as it was, and memory and storage never diverge.

Steps 2-5 run under the collection's lock.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar, Generic, Mapping, Optional, TypeVar
from uuid import UUID

from pydantic import ValidationError

from organizer.errors import (
    PersistenceError,
    RecordNotFoundError,
    RecordValidationError,
)
from organizer.managers.context import AppContext
from organizer.models.records import CollectionKey, Record, ValidationIssue


R = TypeVar("R", bound=Record)


def _issues_from_pydantic(error: ValidationError) -> list[ValidationIssue]:
    """Translate a model construction failure into field issues."""
    issues = []
    for item in error.errors():
        loc = item.get("loc") or ("record",)
        issues.append(ValidationIssue(
            field=str(loc[0]),
            issue_type=item.get("type", "invalid"),
            message=item.get("msg", "Invalid value"),
        ))
    return issues


def coerce_id(record_id: Any) -> Optional[UUID]:
    """Accept a UUID or its string form; anything else matches nothing."""
    if isinstance(record_id, UUID):
        return record_id
    try:
        return UUID(str(record_id))
    except ValueError:
        return None


class RecordManager(ABC, Generic[R]):
    """
    CRUD over one collection of the shared context.

    Subclasses set ``collection`` and ``record_type`` and implement
    ``_validate`` (form-order rule set) and ``_clean`` (candidate to
    model fields).
    """

    collection: ClassVar[CollectionKey]
    record_type: ClassVar[type[Record]]

    def __init__(self, context: AppContext):
        self._context = context

    # -------------------------------------------------------------------------
    # Subclass hooks
    # -------------------------------------------------------------------------

    @abstractmethod
    def _validate(self, candidate: Mapping[str, Any]) -> list[ValidationIssue]:
        """Return every failing field, in form order."""

    @abstractmethod
    def _clean(
        self,
        candidate: Mapping[str, Any],
        existing: Optional[R] = None,
    ) -> dict[str, Any]:
        """Turn validated candidate fields into model field values."""

    def _label(self, record: R) -> str:
        """Short text used in audit descriptions."""
        return str(record.id)

    def _after_change(self) -> None:
        """Called after every committed mutation."""

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def _records(self) -> list[R]:
        return self._context.collections[self.collection]

    def list(self) -> list[R]:
        """The collection in insertion order (a copy)."""
        return list(self._records)

    def count(self) -> int:
        return len(self._records)

    def _index_of(self, record_id: Any) -> int:
        wanted = coerce_id(record_id)
        if wanted is None:
            return -1
        for index, record in enumerate(self._records):
            if record.id == wanted:
                return index
        return -1

    def get(self, record_id: Any) -> R:
        index = self._index_of(record_id)
        if index < 0:
            raise RecordNotFoundError(self.collection.value, record_id)
        return self._records[index]

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def add(self, candidate: Mapping[str, Any]) -> R:
        """
        Validate and append a new record.

        Raises:
            RecordValidationError: a field failed; nothing was changed
            PersistenceError: the store refused the save; nothing was changed
        """
        await self._check(candidate, "create")

        async with self._context.lock(self.collection):
            record = self._build(self._clean(candidate))
            await self._commit([*self._records, record], "create", record.id)

        if self._context.audit_logger:
            await self._context.audit_logger.log_record_created(
                self.collection.value, record.id, self._label(record)
            )
        self._after_change()
        return record

    async def update(self, record_id: Any, candidate: Mapping[str, Any]) -> R:
        """
        Replace a record's mutable fields, keeping its id, createdAt and position.

        Raises:
            RecordNotFoundError: no record has this id
            RecordValidationError: a field failed; nothing was changed
            PersistenceError: the store refused the save; nothing was changed
        """
        async with self._context.lock(self.collection):
            index = await self._require(record_id, "update")
            existing = self._records[index]
            await self._check(candidate, "update", existing.id)

            record = self._build(self._clean(candidate, existing), base=existing)
            updated = list(self._records)
            updated[index] = record
            await self._commit(updated, "update", record.id)

        if self._context.audit_logger:
            await self._context.audit_logger.log_record_updated(
                self.collection.value, record.id, self._changed_fields(existing, record)
            )
        self._after_change()
        return record

    async def remove(self, record_id: Any) -> R:
        """
        Delete a record. Returns the removed record.

        Raises:
            RecordNotFoundError: no record has this id
            PersistenceError: the store refused the save; nothing was changed
        """
        async with self._context.lock(self.collection):
            index = await self._require(record_id, "delete")
            removed = self._records[index]
            updated = [r for i, r in enumerate(self._records) if i != index]
            await self._commit(updated, "delete", removed.id)

        if self._context.audit_logger:
            await self._context.audit_logger.log_record_deleted(
                self.collection.value, removed.id
            )
        self._after_change()
        return removed

    async def clear(self) -> int:
        """
        Drop every record in the collection. Returns how many were dropped.

        Raises:
            PersistenceError: the store refused; nothing was changed
        """
        async with self._context.lock(self.collection):
            dropped = len(self._records)
            if not await self._context.store.clear(self.collection):
                if self._context.audit_logger:
                    await self._context.audit_logger.log_save_failed(
                        self.collection.value, "clear"
                    )
                raise PersistenceError(self.collection.value)
            self._context.collections[self.collection] = []

        if self._context.audit_logger:
            await self._context.audit_logger.log_collection_cleared(
                self.collection.value, dropped
            )
        self._after_change()
        return dropped

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _check(
        self,
        candidate: Mapping[str, Any],
        operation: str,
        record_id: Optional[UUID] = None,
    ) -> None:
        issues = self._validate(candidate)
        if issues:
            await self._reject(issues, operation, record_id)

    async def _reject(
        self,
        issues: list[ValidationIssue],
        operation: str,
        record_id: Optional[UUID] = None,
    ) -> None:
        if self._context.audit_logger:
            await self._context.audit_logger.log_validation_failed(
                collection=self.collection.value,
                operation=operation,
                issues=[issue.model_dump() for issue in issues],
                record_id=record_id,
            )
        raise RecordValidationError(self.collection.value, issues)

    async def _require(self, record_id: Any, operation: str) -> int:
        index = self._index_of(record_id)
        if index < 0:
            if self._context.audit_logger:
                await self._context.audit_logger.log_record_not_found(
                    self.collection.value, operation, record_id
                )
            raise RecordNotFoundError(self.collection.value, record_id)
        return index

    def _build(self, fields: dict[str, Any], base: Optional[R] = None) -> R:
        data = dict(fields)
        if base is not None:
            data["id"] = base.id
            data["created_at"] = base.created_at
        try:
            return self.record_type.model_validate(data)
        except ValidationError as e:
            raise RecordValidationError(self.collection.value, _issues_from_pydantic(e))

    async def _commit(self, updated: list[R], operation: str, record_id: UUID) -> None:
        saved = await self._context.store.save(
            self.collection, [record.to_storage() for record in updated]
        )
        if not saved:
            if self._context.audit_logger:
                await self._context.audit_logger.log_save_failed(
                    self.collection.value, operation, record_id
                )
            raise PersistenceError(self.collection.value, record_id)
        self._context.collections[self.collection] = updated

    def _changed_fields(self, before: R, after: R) -> list[str]:
        old = before.model_dump()
        new = after.model_dump()
        return [name for name in new if old.get(name) != new[name]]
