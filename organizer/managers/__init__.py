"""Record managers package."""

from organizer.managers.base import RecordManager, coerce_id
from organizer.managers.context import AppContext
from organizer.managers.notes import NoteManager
from organizer.managers.tasks import TaskManager
from organizer.managers.traders import TraderManager
from organizer.managers.transactions import TransactionManager

__all__ = [
    "AppContext",
    "NoteManager",
    "RecordManager",
    "TaskManager",
    "TraderManager",
    "TransactionManager",
    "coerce_id",
]
