"""
Task Manager

Tasks add two things to the common CRUD flow:
- ``toggle`` flips a task between done and not done
- every committed change refreshes the incomplete-task reminder
"""

from typing import Any, Mapping, Optional

from organizer.managers.base import RecordManager
from organizer.managers.context import AppContext
from organizer.models.records import CollectionKey, Task, ValidationIssue
from organizer.reminders import ReminderService, incomplete
from organizer.validation import validate_task


class TaskManager(RecordManager[Task]):
    """CRUD over the task collection."""

    collection = CollectionKey.TASKS
    record_type = Task

    def __init__(
        self,
        context: AppContext,
        reminders: Optional[ReminderService] = None,
    ):
        super().__init__(context)
        self._reminders = reminders

    def _validate(self, candidate: Mapping[str, Any]) -> list[ValidationIssue]:
        return validate_task(candidate)

    def _clean(
        self,
        candidate: Mapping[str, Any],
        existing: Optional[Task] = None,
    ) -> dict[str, Any]:
        # New tasks always start incomplete; edits keep the current state
        # unless the caller sets it explicitly.
        completed: Any = False
        if existing is not None:
            completed = candidate.get("completed", existing.completed)
        return {
            "text": str(candidate["text"]).strip(),
            "completed": completed,
        }

    def _label(self, record: Task) -> str:
        return record.text

    def _after_change(self) -> None:
        if self._reminders:
            self._reminders.refresh(self._records)

    def incomplete(self) -> list[Task]:
        return incomplete(self._records)

    async def toggle(self, record_id: Any) -> Task:
        """
        Flip a task's ``completed`` flag.

        Raises:
            RecordNotFoundError: no task has this id
            PersistenceError: the store refused the save; nothing was changed
        """
        async with self._context.lock(self.collection):
            index = await self._require(record_id, "toggle")
            existing = self._records[index]
            record = self._build(
                {"text": existing.text, "completed": not existing.completed},
                base=existing,
            )
            updated = list(self._records)
            updated[index] = record
            await self._commit(updated, "toggle", record.id)

        if self._context.audit_logger:
            await self._context.audit_logger.log_record_updated(
                self.collection.value, record.id, ["completed"]
            )
        self._after_change()
        return record
