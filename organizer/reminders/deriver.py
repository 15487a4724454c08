"""Derive the incomplete-task reminder from a task collection."""

from typing import Iterable

from organizer.models.records import ReminderSummary, Task


DEFAULT_HEADER = "Reminder: you have {count} incomplete task(s):"
BULLET = "•"


def incomplete(tasks: Iterable[Task]) -> list[Task]:
    """Tasks not yet completed, in their original order."""
    return [task for task in tasks if not task.completed]


def summarize(
    incomplete_tasks: Iterable[Task],
    header: str = DEFAULT_HEADER,
) -> ReminderSummary:
    """
    Build the reminder payload: a count plus a bullet line per task.

    The message is the header followed by the newline-joined bullets, or
    empty when nothing is pending.
    """
    tasks = list(incomplete_tasks)
    lines = [f"{BULLET} {task.text}" for task in tasks]

    message = ""
    if tasks:
        message = "\n".join([header.format(count=len(tasks)), *lines])

    return ReminderSummary(count=len(tasks), lines=lines, message=message)
