"""Trader Manager."""

from typing import Any, Mapping, Optional

from organizer.managers.base import RecordManager
from organizer.models.records import CollectionKey, Trader, ValidationIssue
from organizer.validation import parse_number, validate_trader


class TraderManager(RecordManager[Trader]):
    """CRUD over the trader collection."""

    collection = CollectionKey.TRADERS
    record_type = Trader

    def _validate(self, candidate: Mapping[str, Any]) -> list[ValidationIssue]:
        return validate_trader(candidate)

    def _clean(
        self,
        candidate: Mapping[str, Any],
        existing: Optional[Trader] = None,
    ) -> dict[str, Any]:
        return {
            "name": str(candidate["name"]).strip(),
            "amount": parse_number(candidate.get("amount")),
        }

    def _label(self, record: Trader) -> str:
        return record.name

    def total_amount(self) -> float:
        """Sum of all trader balances."""
        return sum(trader.amount for trader in self._records)
