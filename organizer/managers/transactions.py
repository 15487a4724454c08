"""
Transaction Manager

Empty ``pay``/``receive`` mean zero. Empty ``call``/``contact``/``other``
are stored as empty strings.
"""

from typing import Any, Mapping, Optional

from organizer.managers.base import RecordManager
from organizer.models.records import (
    CollectionKey,
    Transaction,
    TransactionTotals,
    ValidationIssue,
)
from organizer.validation import parse_date, parse_number, validate_transaction


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


class TransactionManager(RecordManager[Transaction]):
    """CRUD over the transaction collection."""

    collection = CollectionKey.TRANSACTIONS
    record_type = Transaction

    def _validate(self, candidate: Mapping[str, Any]) -> list[ValidationIssue]:
        return validate_transaction(candidate)

    def _clean(
        self,
        candidate: Mapping[str, Any],
        existing: Optional[Transaction] = None,
    ) -> dict[str, Any]:
        pay = parse_number(candidate.get("pay"))
        receive = parse_number(candidate.get("receive"))
        return {
            "date": parse_date(candidate.get("date")),
            "operation": _text(candidate.get("operation")),
            "pay": pay if pay is not None else 0.0,
            "receive": receive if receive is not None else 0.0,
            "call": _text(candidate.get("call")),
            "contact": _text(candidate.get("contact")),
            "other": _text(candidate.get("other")),
        }

    def _label(self, record: Transaction) -> str:
        return f"{record.date.isoformat()} {record.operation}"

    def totals(self) -> TransactionTotals:
        """Sum of the pay and receive columns."""
        return TransactionTotals(
            pay=sum(t.pay for t in self._records),
            receive=sum(t.receive for t in self._records),
        )
