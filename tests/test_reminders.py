"""Tests for the incomplete-task reminder: derivation, delivery and the loop."""

import asyncio

import pytest

from organizer.audit import AuditLogger
from organizer.managers import AppContext, TaskManager
from organizer.models import ReminderSummary, Task
from organizer.reminders import (
    DEFAULT_HEADER,
    LogNotificationChannel,
    NotificationChannel,
    ReminderScheduler,
    ReminderService,
    incomplete,
    summarize,
)
from organizer.services.storage import JsonlAuditStorage


def make_tasks(*pairs):
    return [Task(text=text, completed=done) for text, done in pairs]


class RejectingChannel(NotificationChannel):
    name = "rejecting"

    async def deliver(self, summary: ReminderSummary) -> bool:
        return False


class BrokenChannel(NotificationChannel):
    name = "broken"

    async def deliver(self, summary: ReminderSummary) -> bool:
        raise ConnectionError("channel down")


class TestDeriver:
    def test_incomplete_keeps_order(self):
        tasks = make_tasks(("A", False), ("B", True), ("C", False))
        assert [t.text for t in incomplete(tasks)] == ["A", "C"]

    def test_summarize_format(self):
        summary = summarize(make_tasks(("A", False), ("C", False)))

        assert summary.count == 2
        assert summary.lines == ["• A", "• C"]
        assert summary.message == (
            "Reminder: you have 2 incomplete task(s):\n• A\n• C"
        )

    def test_summarize_nothing_pending(self):
        summary = summarize([])
        assert summary.count == 0
        assert summary.message == ""
        assert summary.has_reminders is False

    def test_custom_header(self):
        summary = summarize(make_tasks(("A", False)), header="{count} open")
        assert summary.message.splitlines()[0] == "1 open"

    def test_default_header_has_count_slot(self):
        assert "{count}" in DEFAULT_HEADER


class TestReminderService:
    """Tests for refresh and delivery."""

    def test_refresh_updates_latest(self):
        service = ReminderService()
        assert service.latest.count == 0

        service.refresh(make_tasks(("A", False), ("B", False)))
        assert service.latest.count == 2

    @pytest.mark.asyncio
    async def test_send_delivers_to_channel(self):
        channel = LogNotificationChannel()
        service = ReminderService(channel=channel)

        sent = await service.send(make_tasks(("A", False), ("B", True)))

        assert sent is True
        assert len(channel.delivered) == 1
        assert channel.delivered[0].lines == ["• A"]

    @pytest.mark.asyncio
    async def test_send_skips_when_all_done(self):
        channel = LogNotificationChannel()
        service = ReminderService(channel=channel)

        assert await service.send(make_tasks(("A", True))) is False
        assert channel.delivered == []

    @pytest.mark.asyncio
    async def test_rejected_delivery_audited(self, tmp_path):
        audit_path = tmp_path / "audit.jsonl"
        service = ReminderService(
            channel=RejectingChannel(),
            audit_logger=AuditLogger(JsonlAuditStorage(audit_path)),
        )

        assert await service.send(make_tasks(("A", False))) is False
        assert "reminder_failed" in audit_path.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_channel_exception_propagates(self, tmp_path):
        audit_path = tmp_path / "audit.jsonl"
        service = ReminderService(
            channel=BrokenChannel(),
            audit_logger=AuditLogger(JsonlAuditStorage(audit_path)),
        )

        with pytest.raises(ConnectionError):
            await service.send(make_tasks(("A", False)))
        assert "channel down" in audit_path.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_sent_reminder_audited(self, tmp_path):
        audit_path = tmp_path / "audit.jsonl"
        service = ReminderService(audit_logger=AuditLogger(JsonlAuditStorage(audit_path)))

        await service.send(make_tasks(("A", False)))
        assert "reminder_sent" in audit_path.read_text(encoding="utf-8")


class TestReminderScheduler:
    """Tests for the periodic loop."""

    def test_interval_must_be_positive(self):
        async def source():
            return []

        with pytest.raises(ValueError):
            ReminderScheduler(ReminderService(), source, interval_seconds=0)

    @pytest.mark.asyncio
    async def test_run_once(self):
        channel = LogNotificationChannel()

        async def source():
            return make_tasks(("A", False))

        scheduler = ReminderScheduler(ReminderService(channel=channel), source)
        assert await scheduler.run_once() is True
        assert scheduler.passes == 1
        assert channel.delivered[0].count == 1

    @pytest.mark.asyncio
    async def test_run_once_swallows_failures(self):
        async def source():
            raise RuntimeError("store unavailable")

        scheduler = ReminderScheduler(ReminderService(), source)
        assert await scheduler.run_once() is False

    @pytest.mark.asyncio
    async def test_start_runs_until_shutdown(self):
        channel = LogNotificationChannel()

        async def source():
            return make_tasks(("A", False))

        scheduler = ReminderScheduler(
            ReminderService(channel=channel), source, interval_seconds=0.02
        )
        shutdown = asyncio.Event()
        loop_task = asyncio.create_task(scheduler.start(shutdown))

        await asyncio.sleep(0.15)
        shutdown.set()
        await asyncio.wait_for(loop_task, timeout=1)

        assert scheduler.passes >= 2
        assert len(channel.delivered) == scheduler.passes

    @pytest.mark.asyncio
    async def test_start_stops_before_first_pass(self):
        async def source():
            return make_tasks(("A", False))

        scheduler = ReminderScheduler(ReminderService(), source, interval_seconds=60)
        shutdown = asyncio.Event()
        shutdown.set()

        await asyncio.wait_for(scheduler.start(shutdown), timeout=1)
        assert scheduler.passes == 0

    @pytest.mark.asyncio
    async def test_app_scheduler_reloads_tasks(self, app, store):
        """Each pass re-reads tasks saved by another context."""
        await TaskManager(AppContext(store)).add({"text": "From elsewhere"})

        scheduler = app.create_scheduler(reload=True)
        assert await scheduler.run_once() is True
        assert app.tasks.count() == 1
        assert app.reminders.latest.lines == ["• From elsewhere"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
