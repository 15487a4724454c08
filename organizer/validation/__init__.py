"""Validation package."""

from organizer.validation.validator import (
    parse_date,
    parse_number,
    validate_date,
    validate_length,
    validate_note,
    validate_number,
    validate_task,
    validate_trader,
    validate_transaction,
)

__all__ = [
    "parse_date",
    "parse_number",
    "validate_date",
    "validate_length",
    "validate_note",
    "validate_number",
    "validate_task",
    "validate_trader",
    "validate_transaction",
]
