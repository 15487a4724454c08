"""
Flow tests for the record managers.

Every test runs against an in-memory store, so a failing save can be
produced with a small quota instead of a mocked store.
"""

import asyncio

import pytest
from datetime import date
from uuid import uuid4

from organizer.audit import AuditLogger
from organizer.errors import (
    OrganizerError,
    PersistenceError,
    RecordNotFoundError,
    RecordValidationError,
)
from organizer.managers import (
    AppContext,
    NoteManager,
    TaskManager,
    TraderManager,
    TransactionManager,
    coerce_id,
)
from organizer.models import CollectionKey, Task
from organizer.orchestrator import OrganizerApp
from organizer.reminders import ReminderService
from organizer.services.storage import InMemoryRecordStore, JsonlAuditStorage


class TestAddAndList:
    """Tests for creating records."""

    @pytest.mark.asyncio
    async def test_add_task_persists_and_lists(self, app, store):
        """Adding a task stores it and lists it, incomplete."""
        task = await app.tasks.add({"text": "Buy milk"})

        assert task.text == "Buy milk"
        assert task.completed is False
        assert app.tasks.list() == [task]
        assert await store.load(CollectionKey.TASKS) == [task.to_storage()]

    @pytest.mark.asyncio
    async def test_new_task_ignores_completed_flag(self, app):
        task = await app.tasks.add({"text": "Buy milk", "completed": True})
        assert task.completed is False

    @pytest.mark.asyncio
    async def test_add_keeps_insertion_order(self, app):
        for text in ("A", "B", "C"):
            await app.notes.add({"text": text})
        assert [n.text for n in app.notes.list()] == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_add_transaction_cleans_fields(self, app):
        tx = await app.transactions.add({
            "date": "2024-05-01",
            "operation": "  Rent  ",
            "pay": "500",
            "receive": "",
            "contact": " Sara ",
        })
        assert tx.date == date(2024, 5, 1)
        assert tx.operation == "Rent"
        assert tx.pay == 500.0
        assert tx.receive == 0.0
        assert tx.contact == "Sara"
        assert tx.call == ""

    @pytest.mark.asyncio
    async def test_add_trader(self, app):
        trader = await app.traders.add({"name": "Ali", "amount": "250.5"})
        assert trader.amount == 250.5
        assert app.traders.count() == 1

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, app):
        first = await app.notes.add({"text": "one"})
        second = await app.notes.add({"text": "one"})
        assert first.id != second.id


class TestValidationRejects:
    """A rejected candidate never touches memory or storage."""

    @pytest.mark.asyncio
    async def test_negative_pay_rejected(self, app, store):
        with pytest.raises(RecordValidationError) as exc_info:
            await app.transactions.add({
                "date": "2024-05-01",
                "operation": "Rent",
                "pay": "-5",
            })

        assert exc_info.value.field == "pay"
        assert str(exc_info.value) == "Pay must be at least 0"
        assert app.transactions.list() == []
        assert store.get_raw(CollectionKey.TRANSACTIONS) is None

    @pytest.mark.asyncio
    async def test_first_failing_field_is_reported(self, app):
        with pytest.raises(RecordValidationError) as exc_info:
            await app.transactions.add({"date": "", "operation": "", "pay": "x"})

        error = exc_info.value
        assert error.field == "date"
        assert [i.field for i in error.issues] == ["date", "operation", "pay"]

    @pytest.mark.asyncio
    async def test_blank_task_rejected(self, app):
        with pytest.raises(RecordValidationError):
            await app.tasks.add({"text": "   "})
        assert app.tasks.count() == 0

    @pytest.mark.asyncio
    async def test_trader_name_too_long(self, app):
        with pytest.raises(RecordValidationError) as exc_info:
            await app.traders.add({"name": "x" * 51, "amount": 1})
        assert exc_info.value.issue.issue_type == "invalid_length"

    @pytest.mark.asyncio
    async def test_invalid_update_leaves_record(self, app):
        trader = await app.traders.add({"name": "Ali", "amount": 10})
        with pytest.raises(RecordValidationError):
            await app.traders.update(trader.id, {"name": "Ali", "amount": -1})
        assert app.traders.get(trader.id) == trader

    def test_errors_share_a_base(self):
        assert issubclass(RecordValidationError, OrganizerError)
        assert issubclass(RecordNotFoundError, OrganizerError)
        assert issubclass(PersistenceError, OrganizerError)


class TestUpdate:
    """Tests for editing records."""

    @pytest.mark.asyncio
    async def test_update_keeps_id_created_at_and_position(self, app):
        first = await app.notes.add({"text": "first"})
        second = await app.notes.add({"text": "second"})

        edited = await app.notes.update(first.id, {"text": "first, edited"})

        assert edited.id == first.id
        assert edited.created_at == first.created_at
        assert [n.id for n in app.notes.list()] == [first.id, second.id]
        assert app.notes.get(first.id).text == "first, edited"

    @pytest.mark.asyncio
    async def test_update_accepts_string_id(self, app):
        note = await app.notes.add({"text": "hello"})
        edited = await app.notes.update(str(note.id), {"text": "hi"})
        assert edited.id == note.id

    @pytest.mark.asyncio
    async def test_task_edit_keeps_completion(self, app):
        task = await app.tasks.add({"text": "Buy milk"})
        await app.tasks.toggle(task.id)

        edited = await app.tasks.update(task.id, {"text": "Buy oat milk"})
        assert edited.completed is True

    @pytest.mark.asyncio
    async def test_task_edit_can_set_completion(self, app):
        task = await app.tasks.add({"text": "Buy milk"})
        edited = await app.tasks.update(task.id, {"text": "Buy milk", "completed": "false"})
        assert edited.completed is False

    @pytest.mark.asyncio
    async def test_update_unknown_id(self, app):
        with pytest.raises(RecordNotFoundError):
            await app.notes.update(uuid4(), {"text": "nope"})


class TestRemove:
    """Tests for deleting records."""

    @pytest.mark.asyncio
    async def test_remove_returns_record(self, app, store):
        task = await app.tasks.add({"text": "Buy milk"})
        removed = await app.tasks.remove(task.id)

        assert removed == task
        assert app.tasks.list() == []
        assert await store.load(CollectionKey.TASKS) == []

    @pytest.mark.asyncio
    async def test_remove_unknown_id_leaves_collection(self, app):
        task = await app.tasks.add({"text": "Buy milk"})

        with pytest.raises(RecordNotFoundError):
            await app.tasks.remove(uuid4())
        with pytest.raises(RecordNotFoundError):
            await app.tasks.remove("not-a-uuid")

        assert app.tasks.list() == [task]

    @pytest.mark.asyncio
    async def test_clear_empties_collection(self, app, store):
        await app.tasks.add({"text": "A"})
        await app.tasks.add({"text": "B"})
        await app.notes.add({"text": "kept"})

        assert await app.tasks.clear() == 2
        assert app.tasks.list() == []
        assert store.get_raw(CollectionKey.TASKS) is None
        assert app.notes.count() == 1
        assert app.reminders.latest.count == 0

    @pytest.mark.asyncio
    async def test_remove_overlong_id_is_not_found(self, tmp_path, store):
        """An arbitrarily long id still reports not-found and is audited."""
        audit_path = tmp_path / "audit.jsonl"
        context = AppContext(store, audit_logger=AuditLogger(JsonlAuditStorage(audit_path)))
        tasks = TaskManager(context)
        await tasks.add({"text": "Buy milk"})
        bogus = "x" * 600

        with pytest.raises(RecordNotFoundError):
            await tasks.remove(bogus)
        with pytest.raises(RecordNotFoundError):
            await tasks.toggle(bogus)

        assert tasks.count() == 1
        events = await JsonlAuditStorage(audit_path).get_recent_events(limit=1)
        assert events[0].details["requested_id"] == bogus
        assert len(events[0].description) <= 500

    def test_get_unknown_id(self, app):
        with pytest.raises(RecordNotFoundError):
            app.traders.get(uuid4())

    def test_coerce_id(self):
        record_id = uuid4()
        assert coerce_id(record_id) == record_id
        assert coerce_id(str(record_id)) == record_id
        assert coerce_id("garbage") is None
        assert coerce_id(None) is None


class TestPersistenceFailure:
    """A refused save discards the change from memory."""

    @pytest.fixture
    def store(self):
        return InMemoryRecordStore(quota_bytes=400)

    @pytest.mark.asyncio
    async def test_add_rolled_back(self, app, store):
        first = await app.notes.add({"text": "short"})
        before = store.get_raw(CollectionKey.NOTES)

        with pytest.raises(PersistenceError):
            await app.notes.add({"text": "x" * 900})

        assert app.notes.list() == [first]
        assert store.get_raw(CollectionKey.NOTES) == before

    @pytest.mark.asyncio
    async def test_update_rolled_back(self, app):
        note = await app.notes.add({"text": "short"})

        with pytest.raises(PersistenceError):
            await app.notes.update(note.id, {"text": "y" * 900})

        assert app.notes.get(note.id).text == "short"

    @pytest.mark.asyncio
    async def test_failed_save_is_audited(self, tmp_path):
        audit_path = tmp_path / "audit.jsonl"
        context = AppContext(
            InMemoryRecordStore(quota_bytes=10),
            audit_logger=AuditLogger(JsonlAuditStorage(audit_path)),
        )
        notes = NoteManager(context)

        with pytest.raises(PersistenceError):
            await notes.add({"text": "too big for the quota"})

        assert "save_failed" in audit_path.read_text(encoding="utf-8")


class RefusingStore(InMemoryRecordStore):
    """Accepts writes until ``refuse`` is set, then rejects every save and clear."""

    def __init__(self):
        super().__init__()
        self.refuse = False

    async def save(self, key, records):
        if self.refuse:
            return False
        return await super().save(key, records)

    async def clear(self, key):
        if self.refuse:
            return False
        return await super().clear(key)


class TestRefusedMutations:
    """Remove, toggle and clear leave memory and the reminder untouched when storage refuses."""

    @pytest.fixture
    def store(self):
        return RefusingStore()

    @pytest.fixture
    async def seeded(self, app, store):
        tasks = [await app.tasks.add({"text": text}) for text in ("A", "B")]
        store.refuse = True
        return tasks

    @pytest.mark.asyncio
    async def test_remove_rolled_back(self, app, store, seeded):
        before = store.get_raw(CollectionKey.TASKS)
        latest = app.reminders.latest

        with pytest.raises(PersistenceError):
            await app.tasks.remove(seeded[0].id)

        assert app.tasks.list() == seeded
        assert app.reminders.latest is latest
        assert store.get_raw(CollectionKey.TASKS) == before

    @pytest.mark.asyncio
    async def test_toggle_rolled_back(self, app, seeded):
        latest = app.reminders.latest

        with pytest.raises(PersistenceError):
            await app.tasks.toggle(seeded[1].id)

        assert app.tasks.list() == seeded
        assert app.tasks.get(seeded[1].id).completed is False
        assert app.reminders.latest is latest
        assert app.reminders.latest.count == 2

    @pytest.mark.asyncio
    async def test_clear_rolled_back(self, app, store, seeded):
        latest = app.reminders.latest

        with pytest.raises(PersistenceError):
            await app.tasks.clear()

        assert app.tasks.list() == seeded
        assert app.reminders.latest is latest
        assert len(await store.load(CollectionKey.TASKS)) == 2


class TestTasks:
    """Task-specific operations."""

    @pytest.mark.asyncio
    async def test_toggle_flips_and_persists(self, app, store):
        task = await app.tasks.add({"text": "Buy milk"})

        done = await app.tasks.toggle(task.id)
        assert done.completed is True
        assert (await store.load(CollectionKey.TASKS))[0]["completed"] is True

        undone = await app.tasks.toggle(task.id)
        assert undone.completed is False
        assert undone.created_at == task.created_at

    @pytest.mark.asyncio
    async def test_toggle_unknown_id(self, app):
        with pytest.raises(RecordNotFoundError):
            await app.tasks.toggle(uuid4())

    @pytest.mark.asyncio
    async def test_incomplete(self, app):
        a = await app.tasks.add({"text": "A"})
        b = await app.tasks.add({"text": "B"})
        c = await app.tasks.add({"text": "C"})
        await app.tasks.toggle(b.id)

        assert [t.id for t in app.tasks.incomplete()] == [a.id, c.id]

    @pytest.mark.asyncio
    async def test_changes_refresh_reminder(self, app):
        task = await app.tasks.add({"text": "Buy milk"})
        assert app.reminders.latest.count == 1

        await app.tasks.toggle(task.id)
        assert app.reminders.latest.count == 0

    @pytest.mark.asyncio
    async def test_manager_without_reminders(self, context):
        tasks = TaskManager(context)
        await tasks.add({"text": "Buy milk"})
        assert tasks.count() == 1


class TestTotals:
    """Derived sums."""

    @pytest.mark.asyncio
    async def test_transaction_totals(self, app):
        await app.transactions.add({"date": "2024-01-01", "operation": "Sale", "receive": 100})
        await app.transactions.add({"date": "2024-01-02", "operation": "Rent", "pay": 30})

        totals = app.transactions.totals()
        assert totals.pay == 30
        assert totals.receive == 100
        assert totals.net == 70

    @pytest.mark.asyncio
    async def test_trader_total(self, app):
        await app.traders.add({"name": "Ali", "amount": 10})
        await app.traders.add({"name": "Sara", "amount": 2.5})
        assert app.traders.total_amount() == 12.5

    def test_empty_totals(self, app):
        assert app.transactions.totals().net == 0
        assert app.traders.total_amount() == 0


class TestConcurrency:
    """Concurrent mutations of one collection are serialized."""

    @pytest.mark.asyncio
    async def test_concurrent_adds_all_kept(self, app, store):
        await asyncio.gather(*(app.notes.add({"text": f"note {n}"}) for n in range(20)))

        assert app.notes.count() == 20
        assert len(await store.load(CollectionKey.NOTES)) == 20

    @pytest.mark.asyncio
    async def test_concurrent_mixed_operations(self, app):
        keep = await app.traders.add({"name": "Keep", "amount": 1})
        drop = await app.traders.add({"name": "Drop", "amount": 1})

        await asyncio.gather(
            app.traders.remove(drop.id),
            app.traders.update(keep.id, {"name": "Kept", "amount": 2}),
            app.traders.add({"name": "New", "amount": 3}),
        )

        names = sorted(t.name for t in app.traders.list())
        assert names == ["Kept", "New"]


class TestContextLoad:
    """Loading collections from the store."""

    @pytest.mark.asyncio
    async def test_load_restores_records(self, store):
        first = AppContext(store)
        notes = NoteManager(first)
        note = await notes.add({"text": "persisted"})

        second = AppContext(store)
        await second.load_all()
        assert NoteManager(second).list() == [note]

    @pytest.mark.asyncio
    async def test_contexts_are_isolated(self):
        one = TraderManager(AppContext(InMemoryRecordStore()))
        two = TraderManager(AppContext(InMemoryRecordStore()))
        await one.add({"name": "Ali", "amount": 1})
        assert two.list() == []

    @pytest.mark.asyncio
    async def test_corrupt_json_starts_empty(self, store):
        store.set_raw(CollectionKey.TASKS, "not json at all")
        context = AppContext(store)
        assert await context.load(CollectionKey.TASKS) == []

    @pytest.mark.asyncio
    async def test_invalid_records_start_empty(self, store, tmp_path):
        store.set_raw(CollectionKey.TRADERS, '[{"name": "Ali", "amount": -1}]')
        audit_path = tmp_path / "audit.jsonl"
        context = AppContext(store, audit_logger=AuditLogger(JsonlAuditStorage(audit_path)))

        assert await context.load(CollectionKey.TRADERS) == []
        assert "collection_corrupt" in audit_path.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_duplicate_ids_start_empty(self, store):
        task = Task(text="twice").to_storage()
        await store.save(CollectionKey.TASKS, [task, task])
        context = AppContext(store)
        assert await context.load(CollectionKey.TASKS) == []

    @pytest.mark.asyncio
    async def test_one_corrupt_collection_does_not_affect_others(self, store):
        await TransactionManager(AppContext(store)).add(
            {"date": "2024-01-01", "operation": "Sale"}
        )
        store.set_raw(CollectionKey.NOTES, "[[[")

        context = AppContext(store)
        await context.load_all()
        assert len(context.collections[CollectionKey.TRANSACTIONS]) == 1
        assert context.collections[CollectionKey.NOTES] == []

    @pytest.mark.asyncio
    async def test_app_load_computes_reminder(self, store):
        seed = TaskManager(AppContext(store))
        await seed.add({"text": "A"})
        await seed.add({"text": "B"})

        reminders = ReminderService()
        app = OrganizerApp(AppContext(store), reminders)
        await app.load()
        assert reminders.latest.count == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
